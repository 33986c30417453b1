"""Unit tests for ridematch/algorithms/fitness.py."""

from __future__ import annotations

import math

import pytest

from ridematch.algorithms.fitness import evaluate
from ridematch.config import FitnessConfig
from ridematch.models.geo import Coordinate, haversine_distance
from ridematch.models.passenger import Passenger
from ridematch.models.solution import Solution
from ridematch.models.vehicle import Vehicle

DESTINATION = Coordinate(0.0, 0.03)


def _scenario() -> tuple[list[Passenger], list[Vehicle]]:
    passengers = [
        Passenger(1, "Ann", Coordinate(0.0, 0.01)),
        Passenger(2, "Ben", Coordinate(0.0, 0.02)),
    ]
    vehicles = [Vehicle(1, 4, Coordinate(0.0, 0.0))]
    return passengers, vehicles


class TestEvaluate:
    def test_formula_all_assigned(self) -> None:
        passengers, vehicles = _scenario()
        sol = Solution.empty(vehicles)
        sol.vehicles[0].assigned_passengers.extend(passengers)

        score = evaluate(sol, passengers, vehicles, DESTINATION)

        distance = haversine_distance(Coordinate(0, 0), DESTINATION)
        expected = 10000 / (1 + distance) - 10 * (4 - 2)
        assert score == pytest.approx(expected)
        assert sol.score == score

    def test_sets_vehicle_metrics(self) -> None:
        passengers, vehicles = _scenario()
        sol = Solution.empty(vehicles)
        sol.vehicles[0].assigned_passengers.extend(passengers)
        evaluate(sol, passengers, vehicles, DESTINATION)

        vehicle = sol.vehicles[0]
        assert vehicle.total_distance == pytest.approx(
            haversine_distance(Coordinate(0, 0), DESTINATION)
        )
        assert vehicle.total_time == pytest.approx(vehicle.total_distance / 30 * 60)

    def test_empty_vehicle_gets_bonus_and_zero_metrics(self) -> None:
        passengers, _ = _scenario()
        vehicles = [Vehicle(1, 4, Coordinate(0, 0)), Vehicle(2, 2, Coordinate(1, 1))]
        sol = Solution.empty(vehicles)
        sol.vehicles[0].assigned_passengers.extend(passengers)
        sol.vehicles[1].total_distance = 99.0

        score = evaluate(sol, passengers, vehicles, DESTINATION)

        distance = haversine_distance(Coordinate(0, 0), DESTINATION)
        expected = 10000 / (1 + distance) - 10 * (6 - 2) + 50 * 1
        assert score == pytest.approx(expected)
        assert sol.vehicles[1].total_distance == 0.0

    def test_unassigned_penalty(self) -> None:
        passengers, vehicles = _scenario()
        sol = Solution.empty(vehicles)
        sol.vehicles[0].assigned_passengers.append(passengers[0])

        score = evaluate(sol, passengers, vehicles, DESTINATION)

        distance = haversine_distance(Coordinate(0, 0), passengers[0].location)
        distance += haversine_distance(passengers[0].location, DESTINATION)
        expected = 10000 / (1 + distance) - 10 * 3 - 1000
        assert score == pytest.approx(expected)

    def test_empty_solution_is_finite(self) -> None:
        passengers, vehicles = _scenario()
        sol = Solution.empty(vehicles)
        score = evaluate(sol, passengers, vehicles, DESTINATION)
        assert math.isfinite(score)
        assert score == pytest.approx(10000 - 40 + 50 - 2000)

    def test_no_vehicles(self) -> None:
        passengers, _ = _scenario()
        sol = Solution([])
        assert evaluate(sol, passengers, [], DESTINATION) == pytest.approx(10000 - 2000)

    def test_idempotent(self) -> None:
        passengers, vehicles = _scenario()
        sol = Solution.empty(vehicles)
        sol.vehicles[0].assigned_passengers.extend(reversed(passengers))
        first = evaluate(sol, passengers, vehicles, DESTINATION)
        second = evaluate(sol, passengers, vehicles, DESTINATION)
        assert first == second

    def test_order_changes_distance_term(self) -> None:
        passengers, vehicles = _scenario()
        forward = Solution.empty(vehicles)
        forward.vehicles[0].assigned_passengers.extend(passengers)
        backward = Solution.empty(vehicles)
        backward.vehicles[0].assigned_passengers.extend(reversed(passengers))
        assert evaluate(forward, passengers, vehicles, DESTINATION) > evaluate(
            backward, passengers, vehicles, DESTINATION
        )

    def test_custom_weights(self) -> None:
        passengers, vehicles = _scenario()
        sol = Solution.empty(vehicles)
        config = FitnessConfig(
            distance_reward=0.0,
            unused_capacity_penalty=1.0,
            unused_vehicle_bonus=0.0,
            unassigned_penalty=5.0,
        )
        assert evaluate(sol, passengers, vehicles, DESTINATION, config) == pytest.approx(
            -4 - 10
        )


class TestSingleSeatTwoPassengers:
    """One seat, two riders: each missing rider costs exactly 1000 points."""

    @pytest.mark.parametrize(
        "far_lng",
        [0.001, 0.5, 20.0],
    )
    def test_penalty_is_exact_regardless_of_distance(self, far_lng: float) -> None:
        passengers = [
            Passenger(1, "Ann", Coordinate(0.0, 0.01)),
            Passenger(2, "Ben", Coordinate(0.0, far_lng)),
        ]
        vehicles = [Vehicle(1, 1, Coordinate(0.0, 0.0))]
        for served in passengers:
            sol = Solution.empty(vehicles)
            sol.vehicles[0].assigned_passengers.append(served)
            with_missing = evaluate(sol, passengers, vehicles, DESTINATION)
            without_missing = evaluate(sol, [served], vehicles, DESTINATION)
            assert with_missing == pytest.approx(without_missing - 1000)

    def test_serving_one_never_beats_unpenalised_score(self) -> None:
        passengers = [
            Passenger(1, "Ann", Coordinate(0.0, 0.01)),
            Passenger(2, "Ben", Coordinate(0.0, 0.02)),
        ]
        vehicles = [Vehicle(1, 1, Coordinate(0.0, 0.0))]
        sol = Solution.empty(vehicles)
        sol.vehicles[0].assigned_passengers.append(passengers[0])
        score = evaluate(sol, passengers, vehicles, DESTINATION)
        # The distance reward is capped at 10000, so the penalty is always felt.
        assert score < 10000 - 1000 + 1e-9
