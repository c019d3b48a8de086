#!/usr/bin/env python3
"""
Search Strategy Benchmark
Times every search strategy on the same random occupancy grid.
"""

import os
import sys
import argparse
import json
import logging
from typing import Dict, Any

import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from simple_planner.planning.global_planner.inflation import ObstacleInflator
from simple_planner.planning.global_planner.occupancy_grid import (
    OccupancyGrid, MapIndex, FREE_VALUE, OBSTACLE_VALUE
)
from simple_planner.planning.global_planner.search_engine import PathSearchEngine, SearchStrategyType
from simple_planner.planning.global_planner.search_grid import SearchNodeGrid
from simple_planner.utils.logger import setup_logging


def build_random_grid(width: int, height: int, density: float, seed: int) -> OccupancyGrid:
    rng = np.random.default_rng(seed)
    data = np.where(rng.random((height, width)) < density, OBSTACLE_VALUE, FREE_VALUE)
    # Keep the corners used as start and goal free
    data[0, 0] = FREE_VALUE
    data[height - 1, width - 1] = FREE_VALUE
    return OccupancyGrid(width, height, 1.0, (0.0, 0.0), data)


def run_benchmark(grid: OccupancyGrid, runs: int, relax_iterations: Any) -> Dict[str, Any]:
    logger = logging.getLogger(__name__)

    start = MapIndex(0, 0)
    goal = MapIndex(grid.width - 1, grid.height - 1)
    nodes = SearchNodeGrid(grid.width, grid.height)

    results = {}
    for strategy in SearchStrategyType:
        config = {'strategy': strategy.value, 'relax': {'max_iterations': relax_iterations}}
        if strategy != SearchStrategyType.EXHAUSTIVE_RELAX:
            config['connectivity'] = 4
        engine = PathSearchEngine(config)

        times = []
        outcome = None
        for _ in range(runs):
            outcome = engine.search(grid, nodes, start, goal)
            times.append(outcome.search_time)

        results[strategy.value] = {
            'success': outcome.success,
            'goal_cost': outcome.goal_cost if outcome.success else None,
            'nodes_expanded': outcome.nodes_expanded,
            'mean_time': float(np.mean(times)),
            'min_time': float(np.min(times)),
        }
        logger.info(f"{strategy.value}: {results[strategy.value]['mean_time']:.4f}s mean")

    nodes.release()
    return results


def main():
    parser = argparse.ArgumentParser(description='Benchmark grid search strategies')
    parser.add_argument('--width', type=int, default=100, help='Grid width in cells')
    parser.add_argument('--height', type=int, default=100, help='Grid height in cells')
    parser.add_argument('--density', type=float, default=0.2, help='Obstacle density (0-1)')
    parser.add_argument('--inflation', type=int, default=0, help='Inflation radius in cells')
    parser.add_argument('--runs', type=int, default=3, help='Runs per strategy')
    parser.add_argument('--relax-iterations', type=int, default=None,
                        help='Pass cap for exhaustive_relax (default: width*height-1)')
    parser.add_argument('--seed', type=int, default=42, help='Random seed')
    parser.add_argument('--output', type=str, default=None, help='Output JSON file')

    args = parser.parse_args()

    setup_logging({'level': 'INFO'})

    grid = build_random_grid(args.width, args.height, args.density, args.seed)
    if args.inflation > 0:
        grid = ObstacleInflator().inflate(grid, args.inflation)

    results = run_benchmark(grid, args.runs, args.relax_iterations)

    print("\nSEARCH STRATEGY BENCHMARK")
    print("=" * 60)
    print(f"Grid: {args.width}x{args.height}, density {args.density}, inflation {args.inflation}")
    for name, result in results.items():
        cost = f"{result['goal_cost']:.0f}" if result['success'] else "unreachable"
        print(f"{name:18}: {result['mean_time']:8.4f}s  cost {cost:>11}  "
              f"expanded {result['nodes_expanded']}")

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(results, f, indent=2)


if __name__ == "__main__":
    main()
