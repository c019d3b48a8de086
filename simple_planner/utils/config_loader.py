"""
Configuration Management
Planner configuration loading and validation.
Supports YAML, JSON, and environment variable overrides.
"""

import os
import yaml
import json
import logging
from typing import Dict, List, Optional, Any
from pathlib import Path
from dataclasses import dataclass, field, asdict
import copy


def _default_planner() -> Dict[str, Any]:
    return {
        'robot_radius': 0.3,
        'frame_id': 'map',
    }


def _default_inflation() -> Dict[str, Any]:
    return {
        'method': 'wavefront',
        'treat_unknown_as_obstacle': False,
    }


def _default_search() -> Dict[str, Any]:
    return {
        'strategy': 'astar',
        'heuristics': {'heuristic_type': 'euclidean'},
        'relax': {
            'max_iterations': 2500,
            'unreached_threshold': 300000.0,
            'stop_when_stable': True,
        },
    }


def _default_map() -> Dict[str, Any]:
    return {
        'poll_interval': 1.0,
        'wait_timeout': None,
    }


@dataclass
class PlannerConfig:
    """Complete planner configuration."""

    planner: Dict[str, Any] = field(default_factory=_default_planner)
    inflation: Dict[str, Any] = field(default_factory=_default_inflation)
    search: Dict[str, Any] = field(default_factory=_default_search)
    map: Dict[str, Any] = field(default_factory=_default_map)

    # System settings
    logging: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


SECTIONS = ('planner', 'inflation', 'search', 'map', 'logging')


class ConfigManager:
    """
    Configuration loader.
    Merges file values over defaults, then applies environment overrides.
    """

    def __init__(self, config_dir: str = "config"):
        self.config_dir = Path(config_dir)
        self.logger = logging.getLogger(__name__)

        self._config_cache: Dict[str, PlannerConfig] = {}

        self.default_configs = {
            "main": self.config_dir / "planner_config.yaml",
        }

        # SIMPLE_PLANNER_SEARCH__STRATEGY=dijkstra sets search.strategy
        self.env_prefix = "SIMPLE_PLANNER_"
        self.env_separator = "__"

        self.logger.debug(f"Config Manager initialized: {config_dir}")

    def load_config(self, config_name: str = "main") -> PlannerConfig:
        """
        Load configuration by name with environment overrides.

        Args:
            config_name: Configuration name to load

        Returns:
            Loaded planner configuration (defaults if the file is missing)
        """
        if config_name in self._config_cache:
            return self._config_cache[config_name]

        config_path = self.default_configs.get(
            config_name, self.config_dir / f"{config_name}_config.yaml"
        )

        if not config_path.exists():
            self.logger.warning(f"Config file not found: {config_path}")
            config_data = {}
        else:
            config_data = self._load_config_file(config_path)

        planner_config = self.build_config(config_data)
        self._config_cache[config_name] = planner_config

        self.logger.info(f"Configuration loaded: {config_name}")
        return planner_config

    def load_file(self, config_path: str) -> PlannerConfig:
        """Load one explicit configuration file."""
        return self.build_config(self._load_config_file(Path(config_path)))

    def build_config(self, config_data: Dict[str, Any]) -> PlannerConfig:
        """Merge raw data over defaults and apply environment overrides."""
        config_data = config_data or {}

        unknown = set(config_data) - set(SECTIONS)
        if unknown:
            self.logger.warning(f"Ignoring unknown config sections: {sorted(unknown)}")

        merged = self._merge_configs(PlannerConfig().to_dict(),
                                     {k: v for k, v in config_data.items() if k in SECTIONS})
        merged = self._apply_env_overrides(merged)

        return PlannerConfig(**{k: merged.get(k) or {} for k in SECTIONS})

    def _load_config_file(self, config_path: Path) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file."""
        with open(config_path, "r") as f:
            if config_path.suffix.lower() in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            elif config_path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                raise ValueError(f"Unsupported config format: {config_path.suffix}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")
        return data

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides."""
        overrides = {}

        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                config_key = key[len(self.env_prefix):].lower()
                config_path = config_key.split(self.env_separator)

                parsed_value = self._parse_env_value(value)

                self._set_nested_value(overrides, config_path, parsed_value)

        if overrides:
            config_data = self._merge_configs(config_data, overrides)
            self.logger.info(f"Applied {len(overrides)} environment overrides")

        return config_data

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value to appropriate type."""
        if value.lower() in ["true", "false"]:
            return value.lower() == "true"

        if value.lower() in ["none", "null"]:
            return None

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        # Try JSON for complex types
        try:
            return json.loads(value)
        except (json.JSONDecodeError, ValueError):
            pass

        return value

    def _set_nested_value(self, config: Dict[str, Any], path: List[str], value: Any):
        """Set value in nested dictionary."""
        current = config
        for key in path[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        current[path[-1]] = value

    def _merge_configs(
        self, base_config: Dict[str, Any], override_config: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries."""
        result = copy.deepcopy(base_config)

        for key, value in override_config.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def save_config(self, config: PlannerConfig, output_path: str):
        """Save configuration to file."""
        output_path = Path(output_path)
        config_dict = config.to_dict()

        with open(output_path, "w") as f:
            if output_path.suffix.lower() in [".yaml", ".yml"]:
                yaml.dump(config_dict, f, default_flow_style=False, indent=2)
            else:
                json.dump(config_dict, f, indent=2)

        self.logger.info(f"Configuration saved to {output_path}")


# Convenience functions
def load_config(config_path: Optional[str] = None) -> PlannerConfig:
    """Load planner configuration from a file, or defaults when none is given."""
    manager = ConfigManager()

    if config_path:
        custom_path = Path(config_path)
        if custom_path.exists():
            return manager.load_file(str(custom_path))
        manager.logger.warning(f"Config file not found: {custom_path}, using defaults")
        return manager.build_config({})

    return manager.load_config("main")


def validate_config(config: PlannerConfig) -> Dict[str, List[str]]:
    """
    Validate planner configuration.

    Returns:
        Dictionary of validation errors by section
    """
    errors = {}

    planner_errors = []
    robot_radius = config.planner.get("robot_radius", 0)
    if not isinstance(robot_radius, (int, float)) or robot_radius < 0:
        planner_errors.append("robot_radius must be a non-negative number")
    if planner_errors:
        errors["planner"] = planner_errors

    inflation_errors = []
    if config.inflation.get("method", "wavefront") not in ("wavefront", "dilation"):
        inflation_errors.append("method must be 'wavefront' or 'dilation'")
    if inflation_errors:
        errors["inflation"] = inflation_errors

    search_errors = []
    valid_strategies = ("wavefront", "dijkstra", "astar", "exhaustive_relax")
    if config.search.get("strategy", "astar") not in valid_strategies:
        search_errors.append(f"strategy must be one of {', '.join(valid_strategies)}")
    if config.search.get("connectivity", 4) not in (4, 8):
        search_errors.append("connectivity must be 4 or 8")
    weight = config.search.get("heuristics", {}).get("weight", 1.0)
    if not isinstance(weight, (int, float)) or not 0.0 <= weight <= 1.0:
        search_errors.append("heuristics.weight must be between 0 and 1")
    max_iterations = config.search.get("relax", {}).get("max_iterations", 2500)
    if max_iterations is not None and (not isinstance(max_iterations, int) or max_iterations < 1):
        search_errors.append("relax.max_iterations must be a positive integer or null")
    if search_errors:
        errors["search"] = search_errors

    map_errors = []
    poll_interval = config.map.get("poll_interval", 1.0)
    if not isinstance(poll_interval, (int, float)) or poll_interval <= 0:
        map_errors.append("poll_interval must be positive")
    if map_errors:
        errors["map"] = map_errors

    return errors
