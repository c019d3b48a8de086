"""Unit tests for grid heuristics"""

import math

import pytest

from simple_planner.planning.global_planner.heuristics import GridHeuristics


class TestGridHeuristics:

    def test_default_is_euclidean(self):
        heuristics = GridHeuristics()

        assert heuristics.heuristic_type == "euclidean"
        assert heuristics.compute_heuristic((0, 0), (3, 4)) == pytest.approx(5.0)

    @pytest.mark.parametrize("heuristic_type,expected", [
        ("euclidean", math.sqrt(13)),
        ("manhattan", 5.0),
        ("chebyshev", 3.0),
    ])
    def test_distances(self, heuristic_type, expected):
        heuristics = GridHeuristics({"heuristic_type": heuristic_type})

        assert heuristics.compute_heuristic((1, 1), (4, 3)) == pytest.approx(expected)

    def test_weight_below_one(self):
        heuristics = GridHeuristics({"heuristic_type": "manhattan", "weight": 0.5})

        assert heuristics.compute_heuristic((0, 0), (1, 1)) == pytest.approx(1.0)

    @pytest.mark.parametrize("weight", [1.5, 3.0, -0.1])
    def test_weight_outside_unit_range_rejected(self, weight):
        with pytest.raises(ValueError):
            GridHeuristics({"heuristic_type": "manhattan", "weight": weight})

    def test_unknown_type_falls_back(self):
        heuristics = GridHeuristics({"heuristic_type": "octile"})

        assert heuristics.heuristic_type == "euclidean"

    @pytest.mark.parametrize("heuristic_type", ["euclidean", "manhattan"])
    def test_eight_connected_forces_chebyshev(self, heuristic_type):
        heuristics = GridHeuristics({"heuristic_type": heuristic_type}, connectivity=8)

        assert heuristics.heuristic_type == "chebyshev"
        assert heuristics.compute_heuristic((0, 0), (4, 4)) == pytest.approx(4.0)
