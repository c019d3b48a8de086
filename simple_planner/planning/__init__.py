"""
Planning module.
global_planner holds the grid model, inflation and search strategies;
integration runs them per goal request.
"""
