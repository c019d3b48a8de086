#!/usr/bin/env python3
"""
Path Planning Utility
Plans one path over a map file and writes the result as JSON.
"""

import os
import sys
import argparse
import json
import logging
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from simple_planner.bridges.map_bridge import FileMapProvider
from simple_planner.planning.integration.planner_manager import PlannerManager
from simple_planner.utils.config_loader import load_config, validate_config
from simple_planner.utils.coordinate_utils import Pose2D
from simple_planner.utils.logger import setup_logging


def main():
    parser = argparse.ArgumentParser(description='Plan a path over an occupancy grid map')
    parser.add_argument('--map', type=str, required=True,
                        help='Map description file (YAML or JSON)')
    parser.add_argument('--start', type=float, nargs='+', required=True,
                        help='Start pose: X Y [YAW]')
    parser.add_argument('--goal', type=float, nargs='+', required=True,
                        help='Goal pose: X Y [YAW]')
    parser.add_argument('--strategy', type=str,
                        choices=['wavefront', 'dijkstra', 'astar', 'exhaustive_relax'],
                        help='Search strategy (overrides config)')
    parser.add_argument('--config', type=str, default=None,
                        help='Configuration file path')
    parser.add_argument('--output', type=str, default=None,
                        help='Output JSON file (default: stdout)')

    args = parser.parse_args()

    for name in ('start', 'goal'):
        if len(getattr(args, name)) not in (2, 3):
            parser.error(f"--{name} expects X Y [YAW]")

    config = load_config(args.config)
    if args.strategy:
        config.search['strategy'] = args.strategy

    setup_logging(config.logging)
    logger = logging.getLogger(__name__)

    errors = validate_config(config)
    if errors:
        for section, messages in errors.items():
            for message in messages:
                logger.error(f"Invalid config [{section}]: {message}")
        sys.exit(2)

    manager = PlannerManager(config.to_dict(), FileMapProvider(args.map), wait_for_map=False)
    if not manager.map_provider.is_available():
        logger.error(f"Map file not found: {args.map}")
        sys.exit(2)

    manager.on_pose(Pose2D(*args.start))
    result = manager.on_goal(Pose2D(*args.goal))

    output = {
        'success': result.success,
        'status': result.status.value,
        'strategy': config.search['strategy'],
        'frame_id': result.path.frame_id,
        'stamp': result.path.stamp,
        'goal_to_start': [list(p) for p in result.path.points],
        'start_to_goal': [list(p) for p in result.path.start_to_goal()],
        'goal_cost': result.outcome.goal_cost if result.outcome and result.success else None,
        'nodes_expanded': result.outcome.nodes_expanded if result.outcome else 0,
        'timings': result.timings,
    }

    if args.output:
        output_file = Path(args.output)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(output_file, 'w') as f:
            json.dump(output, f, indent=2)
        logger.info(f"Result written to {output_file}")
    else:
        print(json.dumps(output, indent=2))

    sys.exit(0 if result.success else 1)


if __name__ == "__main__":
    main()
