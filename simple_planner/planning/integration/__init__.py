"""
Planning Integration Module
Runs planning sessions in response to pose and goal events.
"""

from simple_planner.planning.integration.planning_session import (
    PlanningSession, SessionState, SessionResult
)
from simple_planner.planning.integration.planner_manager import PlannerManager

__all__ = ['PlanningSession', 'SessionState', 'SessionResult', 'PlannerManager']
