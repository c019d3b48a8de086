from simple_planner.utils.config_loader import ConfigManager, PlannerConfig, load_config, validate_config
from simple_planner.utils.coordinate_utils import Pose2D, GoalRequest
from simple_planner.utils.logger import setup_logging, get_logger

__all__ = [
    'ConfigManager', 'PlannerConfig', 'load_config', 'validate_config',
    'Pose2D', 'GoalRequest', 'setup_logging', 'get_logger'
]
