"""Unit tests for ridematch/scheduling.py."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest

from ridematch.models.geo import Coordinate, haversine_distance, travel_time
from ridematch.models.passenger import Passenger
from ridematch.models.route_details import RouteDetails, StopDetail
from ridematch.models.solution import Solution
from ridematch.models.vehicle import Vehicle
from ridematch.scheduling import (
    compute_route_metrics,
    format_minutes,
    parse_target_time,
    route_query_date,
    schedule_backward_from_target,
    schedule_solution,
)

DESTINATION = Coordinate(0.0, 0.03)
SERVICE_DAY = date(2024, 5, 6)


def _scenario_solution() -> Solution:
    """One vehicle at the origin carrying two riders towards the destination."""
    vehicle = Vehicle(1, 4, Coordinate(0.0, 0.0))
    sol = Solution([vehicle, Vehicle(2, 2, Coordinate(1.0, 1.0))])
    vehicle.assigned_passengers.extend([
        Passenger(1, "Ann", Coordinate(0.0, 0.01)),
        Passenger(2, "Ben", Coordinate(0.0, 0.02)),
    ])
    return sol


class TestComputeRouteMetrics:
    def test_only_used_vehicles(self) -> None:
        metrics = compute_route_metrics(_scenario_solution(), DESTINATION)
        assert list(metrics) == [1]

    def test_stops_and_cumulative_values(self) -> None:
        details = compute_route_metrics(_scenario_solution(), DESTINATION)[1]
        leg = haversine_distance(Coordinate(0, 0), Coordinate(0, 0.01))

        assert [s.stop_number for s in details.stops] == [1, 2, 3]
        assert [s.passenger_id for s in details.stops] == [1, 2, None]
        assert details.stops[-1].passenger_name == "Destination"
        assert details.stops[-1].is_destination
        for i, stop in enumerate(details.stops, start=1):
            assert stop.distance_from_previous == pytest.approx(leg)
            assert stop.time_from_previous == pytest.approx(travel_time(leg))
            assert stop.cumulative_distance == pytest.approx(i * leg)
            assert stop.cumulative_time == pytest.approx(i * travel_time(leg))
        assert details.total_distance == pytest.approx(3 * leg)
        assert details.total_time == pytest.approx(details.stops[-1].cumulative_time)
        assert details.source == "estimate"

    def test_matches_vehicle_route_distance(self) -> None:
        sol = _scenario_solution()
        details = compute_route_metrics(sol, DESTINATION)[1]
        assert details.total_distance == pytest.approx(
            sol.vehicles[0].route_distance(DESTINATION)
        )

    def test_is_pure(self) -> None:
        sol = _scenario_solution()
        compute_route_metrics(sol, DESTINATION)
        assert sol.vehicles[0].total_distance == 0.0
        assert sol.vehicles[0].departure_time is None

    def test_custom_speed(self) -> None:
        slow = compute_route_metrics(_scenario_solution(), DESTINATION, 15.0)[1]
        fast = compute_route_metrics(_scenario_solution(), DESTINATION, 30.0)[1]
        assert slow.total_time == pytest.approx(2 * fast.total_time)


class TestParseTargetTime:
    def test_with_seconds(self) -> None:
        assert parse_target_time("07:45:30") == time(7, 45, 30)

    def test_without_seconds(self) -> None:
        assert parse_target_time("09:05") == time(9, 5)

    def test_passes_time_through(self) -> None:
        assert parse_target_time(time(6, 0)) == time(6, 0)

    @pytest.mark.parametrize("value", ["not a time", "25:00:00", "", None])
    def test_falls_back_to_eight(
        self, value: str | None, capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert parse_target_time(value) == time(8, 0)
        assert "[schedule]" in capsys.readouterr().err


class TestScheduleBackwardFromTarget:
    def test_single_vehicle_scenario(self) -> None:
        sol = _scenario_solution()
        vehicle = sol.vehicles[0]
        details = compute_route_metrics(sol, DESTINATION)[1]

        schedule = schedule_backward_from_target(
            vehicle, details, "08:00:00", SERVICE_DAY
        )

        arrival = datetime(2024, 5, 6, 8, 0)
        assert schedule.arrival == arrival
        assert schedule.departure < arrival
        drift = schedule.departure + timedelta(minutes=details.total_time) - arrival
        assert abs(drift) < timedelta(milliseconds=1)
        # About 3.34 km at 30 km/h, so 6 min 40 s before eight.
        assert vehicle.departure_time == "07:53"
        assert schedule.departure_label == "07:53"

    def test_pickups_follow_cumulative_time(self) -> None:
        sol = _scenario_solution()
        vehicle = sol.vehicles[0]
        details = compute_route_metrics(sol, DESTINATION)[1]

        schedule = schedule_backward_from_target(vehicle, details, "08:00", SERVICE_DAY)

        for passenger in vehicle.assigned_passengers:
            stop = details.stop_for(passenger.passenger_id)
            expected = schedule.departure + timedelta(minutes=stop.cumulative_time)
            assert schedule.pickups[passenger.passenger_id] == expected
            assert passenger.estimated_pickup_time == expected.strftime("%H:%M")
        assert schedule.pickup_label(1) == vehicle.assigned_passengers[0].estimated_pickup_time

    def test_uses_refined_totals(self) -> None:
        vehicle = Vehicle(1, 2, Coordinate(0, 0))
        vehicle.assigned_passengers.append(Passenger(5, "Eve", Coordinate(0, 0.01)))
        details = RouteDetails(
            vehicle_id=1,
            stops=[
                StopDetail(1, 5, "Eve", 2.0, 10.0, 2.0, 10.0),
                StopDetail(2, None, "Destination", 3.0, 20.0, 5.0, 30.0),
            ],
            total_distance=5.0,
            total_time=30.0,
            source="directions",
        )
        schedule = schedule_backward_from_target(vehicle, details, "09:00:00", SERVICE_DAY)
        assert vehicle.departure_time == "08:30"
        assert schedule.pickup_label(5) == "08:40"

    def test_passenger_without_stop_gets_no_time(self) -> None:
        vehicle = Vehicle(1, 2, Coordinate(0, 0))
        vehicle.assigned_passengers.append(Passenger(5, "Eve", Coordinate(0, 0.01)))
        details = RouteDetails(vehicle_id=1, total_time=12.0)
        schedule = schedule_backward_from_target(vehicle, details, "09:00:00", SERVICE_DAY)
        assert schedule.pickups == {}
        assert schedule.pickup_label(5) is None
        assert vehicle.assigned_passengers[0].estimated_pickup_time is None
        assert vehicle.departure_time == "08:48"

    def test_bad_target_defaults_to_eight(self) -> None:
        vehicle = Vehicle(1, 2, Coordinate(0, 0))
        details = RouteDetails(vehicle_id=1, total_time=15.0)
        schedule = schedule_backward_from_target(vehicle, details, "oops", SERVICE_DAY)
        assert schedule.arrival == datetime(2024, 5, 6, 8, 0)
        assert vehicle.departure_time == "07:45"

    def test_departure_can_cross_midnight(self) -> None:
        vehicle = Vehicle(1, 2, Coordinate(0, 0))
        details = RouteDetails(vehicle_id=1, total_time=30.0)
        schedule = schedule_backward_from_target(vehicle, details, "00:10:00", SERVICE_DAY)
        assert schedule.departure == datetime(2024, 5, 5, 23, 40)
        assert vehicle.departure_time == "23:40"


class TestScheduleSolution:
    def test_shared_deadline_longer_routes_leave_earlier(self) -> None:
        near = Vehicle(1, 2, Coordinate(0.0, 0.02))
        far = Vehicle(2, 2, Coordinate(0.0, -0.2))
        near.assigned_passengers.append(Passenger(1, "Ann", Coordinate(0.0, 0.025)))
        far.assigned_passengers.append(Passenger(2, "Ben", Coordinate(0.0, -0.1)))
        sol = Solution([near, far, Vehicle(3, 1, Coordinate(0, 0))])

        metrics = compute_route_metrics(sol, DESTINATION)
        schedules = schedule_solution(sol, metrics, "08:00:00", SERVICE_DAY)

        assert set(schedules) == {1, 2}
        assert schedules[2].departure < schedules[1].departure
        assert schedules[1].arrival == schedules[2].arrival
        assert sol.vehicles[2].departure_time is None

    def test_skips_vehicles_without_details(self) -> None:
        sol = _scenario_solution()
        assert schedule_solution(sol, {}, "08:00:00", SERVICE_DAY) == {}


class TestRouteQueryDate:
    def test_today_when_deadline_ahead(self) -> None:
        now = datetime(2024, 5, 6, 6, 30)
        assert route_query_date("08:00:00", now) == date(2024, 5, 6)

    def test_tomorrow_when_deadline_passed(self) -> None:
        now = datetime(2024, 5, 6, 9, 0)
        assert route_query_date("08:00:00", now) == date(2024, 5, 7)

    def test_tomorrow_at_exact_deadline(self) -> None:
        now = datetime(2024, 12, 31, 8, 0)
        assert route_query_date(time(8, 0), now) == date(2025, 1, 1)


class TestFormatMinutes:
    @pytest.mark.parametrize(
        "minutes,expected",
        [(0.0, "0:00"), (2.5, "2:30"), (6.6717, "6:40"), (75.0, "75:00")],
    )
    def test_format(self, minutes: float, expected: str) -> None:
        assert format_minutes(minutes) == expected
