"""Integration tests for planning sessions and the planner manager"""

import json
from unittest.mock import MagicMock

import numpy as np
import pytest

from simple_planner.bridges.map_bridge import StaticMapProvider, CallableMapProvider, FileMapProvider
from simple_planner.planning.global_planner.occupancy_grid import (
    OccupancyGrid, FREE_VALUE, OBSTACLE_VALUE
)
from simple_planner.planning.global_planner.search_engine import PlanningStatus
from simple_planner.planning.integration.planner_manager import PlannerManager
from simple_planner.planning.integration.planning_session import PlanningSession, SessionState
from simple_planner.utils.config_loader import PlannerConfig
from simple_planner.utils.coordinate_utils import Pose2D, GoalRequest


@pytest.fixture
def config():
    planner_config = PlannerConfig()
    planner_config.planner['robot_radius'] = 0.0
    return planner_config.to_dict()


@pytest.fixture
def obstacle_map():
    """20x20 map at 0.1 resolution with a single obstacle cell at (10, 10)."""
    data = np.full((20, 20), FREE_VALUE)
    data[10, 10] = OBSTACLE_VALUE
    return OccupancyGrid(20, 20, 0.1, (0.0, 0.0), data)


class TestPlanningSession:
    """Integration tests for PlanningSession"""

    def test_successful_session(self, config, free_grid_5x5):
        inflated_grids = []
        paths = []
        session = PlanningSession(config, StaticMapProvider(free_grid_5x5),
                                  on_inflated_grid=inflated_grids.append, on_path=paths.append)

        result = session.run(Pose2D(0.5, 0.5), Pose2D(4.5, 4.5), "map")

        assert result.success
        assert result.status == PlanningStatus.SUCCESS
        assert result.state == SessionState.DONE
        assert session.state == SessionState.DONE
        assert len(inflated_grids) == 1
        assert paths == [result.path]
        assert len(result.path) == 8
        assert result.path.points[0] == (4.0, 4.0)
        assert set(result.timings) == {'map_fetch', 'inflation', 'search'}

    def test_path_uses_goal_frame(self, config, free_grid_5x5):
        session = PlanningSession(config, StaticMapProvider(free_grid_5x5))

        result = session.run(Pose2D(0, 0), Pose2D(2, 0), "odom")

        assert result.path.frame_id == "odom"

    def test_robot_radius_inflates_map(self, config, obstacle_map):
        config['planner']['robot_radius'] = 0.2
        session = PlanningSession(config, StaticMapProvider(obstacle_map))

        result = session.run(Pose2D(0.05, 1.05), Pose2D(1.95, 1.05))

        inflated = result.inflated_grid
        assert inflated.obstacle_mask().sum() == 25
        assert not obstacle_map.is_obstacle(12, 12)
        assert inflated.is_obstacle(12, 12)
        assert result.success
        for i, j in result.path.grid_path:
            assert not inflated.is_obstacle(i, j)

    def test_map_unavailable(self, config):
        paths = []
        provider = CallableMapProvider(MagicMock(side_effect=TimeoutError("no reply")))
        session = PlanningSession(config, provider, on_path=paths.append)

        result = session.run(Pose2D(0, 0), Pose2D(1, 1))

        assert not result.success
        assert result.status == PlanningStatus.MAP_UNAVAILABLE
        assert result.state == SessionState.FAILED
        assert result.inflated_grid is None
        assert paths == []

    @pytest.mark.parametrize("response", [
        {'width': 3},
        {'width': 2, 'height': 2, 'resolution': 1.0, 'origin': [0, 0], 'data': None},
    ])
    def test_malformed_map_response(self, config, response):
        paths = []
        session = PlanningSession(config, CallableMapProvider(lambda: response), on_path=paths.append)

        result = session.run(Pose2D(0, 0), Pose2D(1, 1))

        assert result.status == PlanningStatus.MAP_UNAVAILABLE
        assert result.state == SessionState.FAILED
        assert paths == []

    def test_null_data_map_file(self, config, tmp_path):
        map_file = tmp_path / "map.json"
        map_file.write_text(json.dumps({
            'width': 2, 'height': 2, 'resolution': 1.0, 'origin': [0, 0], 'data': None
        }))
        session = PlanningSession(config, FileMapProvider(map_file))

        result = session.run(Pose2D(0, 0), Pose2D(1, 1))

        assert result.status == PlanningStatus.MAP_UNAVAILABLE

    def test_start_blocked(self, config, obstacle_map, caplog):
        paths = []
        session = PlanningSession(config, StaticMapProvider(obstacle_map), on_path=paths.append)

        result = session.run(Pose2D(1.05, 1.05), Pose2D(0.05, 0.05))

        assert result.status == PlanningStatus.START_BLOCKED
        assert result.state == SessionState.FAILED
        assert paths == []
        assert "Start is in obstacle!" in caplog.text

    def test_goal_unreachable(self, config, enclosed_goal_grid, caplog):
        paths = []
        inflated_grids = []
        session = PlanningSession(config, StaticMapProvider(enclosed_goal_grid),
                                  on_inflated_grid=inflated_grids.append, on_path=paths.append)

        result = session.run(Pose2D(0, 0), Pose2D(4.5, 4.5))

        assert result.status == PlanningStatus.GOAL_UNREACHABLE
        assert result.path.empty
        assert paths == []
        assert len(inflated_grids) == 1
        assert "Path not found!" in caplog.text

    def test_out_of_bounds(self, config, free_grid_5x5):
        session = PlanningSession(config, StaticMapProvider(free_grid_5x5))

        result = session.run(Pose2D(0, 0), Pose2D(7.0, 1.0))

        assert result.status == PlanningStatus.OUT_OF_BOUNDS
        assert result.state == SessionState.FAILED
        assert result.outcome is None

    def test_start_equals_goal(self, config, free_grid_5x5):
        paths = []
        session = PlanningSession(config, StaticMapProvider(free_grid_5x5), on_path=paths.append)

        result = session.run(Pose2D(2.2, 2.2), Pose2D(2.7, 2.9))

        assert result.success
        assert result.state == SessionState.DONE
        assert result.path.empty
        assert paths == []

    def test_node_grid_released(self, config, free_grid_5x5):
        session = PlanningSession(config, StaticMapProvider(free_grid_5x5))

        session.run(Pose2D(0, 0), Pose2D(3, 3))

        assert session.nodes.released

    def test_session_is_single_use(self, config, free_grid_5x5):
        session = PlanningSession(config, StaticMapProvider(free_grid_5x5))
        session.run(Pose2D(0, 0), Pose2D(3, 3))

        with pytest.raises(RuntimeError):
            session.run(Pose2D(0, 0), Pose2D(3, 3))

    @pytest.mark.parametrize("strategy", ["wavefront", "dijkstra", "astar", "exhaustive_relax"])
    def test_every_strategy(self, config, wall_grid, strategy):
        config['search']['strategy'] = strategy
        session = PlanningSession(config, StaticMapProvider(wall_grid))

        result = session.run(Pose2D(0, 0), Pose2D(9, 0))

        assert result.success
        assert result.outcome.strategy.value == strategy


class TestPlannerManager:
    """Integration tests for PlannerManager"""

    def test_waits_for_map_at_startup(self, config, free_grid_5x5):
        provider = StaticMapProvider()
        sleep = MagicMock(side_effect=lambda _: setattr(provider, 'grid', free_grid_5x5))

        manager = PlannerManager(config, provider, wait_for_map=False)
        assert manager.wait_for_map_provider(sleep=sleep)

        sleep.assert_called_once_with(1.0)
        assert manager.get_statistics()['map_connected']

    def test_goal_publishes_to_callbacks(self, config, free_grid_5x5):
        manager = PlannerManager(config, StaticMapProvider(free_grid_5x5))
        path_callback = MagicMock()
        grid_callback = MagicMock()
        manager.add_path_callback(path_callback)
        manager.add_inflated_grid_callback(grid_callback)

        manager.on_pose(Pose2D(0.0, 0.0))
        result = manager.on_goal(GoalRequest(Pose2D(4.0, 4.0), frame_id="map"))

        assert result.success
        path_callback.assert_called_once_with(result.path)
        grid_callback.assert_called_once()

    def test_latest_pose_is_start(self, config, free_grid_5x5):
        manager = PlannerManager(config, StaticMapProvider(free_grid_5x5))

        manager.on_pose(Pose2D(0.0, 0.0))
        manager.on_pose(Pose2D(3.0, 4.0))
        result = manager.on_goal(Pose2D(4.0, 4.0))

        assert result.path.points == [(4.0, 4.0)]

    def test_malformed_map_is_not_fatal(self, config):
        manager = PlannerManager(config, CallableMapProvider(lambda: {'width': 3}))

        result = manager.on_goal(Pose2D(1, 1))

        assert result.status == PlanningStatus.MAP_UNAVAILABLE
        assert manager.get_statistics()['failures']['map_unavailable'] == 1

    def test_failure_does_not_affect_next_goal(self, config, enclosed_goal_grid):
        manager = PlannerManager(config, StaticMapProvider(enclosed_goal_grid))
        path_callback = MagicMock()
        manager.add_path_callback(path_callback)

        failed = manager.on_goal(Pose2D(4.0, 4.0))
        succeeded = manager.on_goal(Pose2D(6.0, 6.0))

        assert failed.status == PlanningStatus.GOAL_UNREACHABLE
        assert succeeded.success
        path_callback.assert_called_once_with(succeeded.path)

    def test_statistics_and_reset(self, config, enclosed_goal_grid):
        manager = PlannerManager(config, StaticMapProvider(enclosed_goal_grid))
        manager.on_goal(Pose2D(4.0, 4.0))
        manager.on_goal(Pose2D(6.0, 6.0))

        stats = manager.get_statistics()
        assert stats['goals_received'] == 2
        assert stats['paths_published'] == 1
        assert stats['failures']['goal_unreachable'] == 1
        assert stats['last_status'] == 'success'

        manager.reset()

        stats = manager.get_statistics()
        assert stats['goals_received'] == 0
        assert stats['failures']['goal_unreachable'] == 0
        assert stats['last_status'] is None

    def test_invalid_poll_interval(self, config):
        config['map']['poll_interval'] = 0

        with pytest.raises(ValueError):
            PlannerManager(config, StaticMapProvider(), wait_for_map=False)
