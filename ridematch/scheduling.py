"""Route metrics and backward deadline scheduling.

Every vehicle works back from the same arrival deadline. It departs
``total_time`` minutes before the deadline, and each passenger is picked up
``cumulative_time`` minutes after that departure.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta

from ridematch.config import AVERAGE_SPEED_KMH, DEFAULT_TARGET_TIME
from ridematch.models.geo import Coordinate, haversine_distance, travel_time
from ridematch.models.route_details import DESTINATION_NAME, RouteDetails, StopDetail
from ridematch.models.solution import Solution
from ridematch.models.vehicle import Vehicle

_TIME_FORMATS = ("%H:%M:%S", "%H:%M")
_OUTPUT_FORMAT = "%H:%M"


@dataclass
class VehicleSchedule:
    """Departure and pickup times of one vehicle.

    Attributes:
        vehicle_id: Vehicle the schedule belongs to.
        departure: When the vehicle must leave its start.
        arrival: The shared arrival deadline.
        pickups: Pickup time per passenger id. Passengers without a stop
            detail are absent.
    """

    vehicle_id: int
    departure: datetime
    arrival: datetime
    pickups: dict[int, datetime] = field(default_factory=dict)

    @property
    def departure_label(self) -> str:
        return self.departure.strftime(_OUTPUT_FORMAT)

    def pickup_label(self, passenger_id: int) -> str | None:
        pickup = self.pickups.get(passenger_id)
        return pickup.strftime(_OUTPUT_FORMAT) if pickup is not None else None


# ------------------------------------------------------------------
# Route metrics
# ------------------------------------------------------------------


def vehicle_route_details(
    vehicle: Vehicle,
    destination: Coordinate,
    average_speed_kmh: float = AVERAGE_SPEED_KMH,
) -> RouteDetails:
    """Replay one vehicle's route and record every leg.

    Args:
        vehicle: Vehicle whose pickups are walked in order.
        destination: Final stop of the route.
        average_speed_kmh: Speed used for leg times.

    Returns:
        One StopDetail per passenger followed by the destination stop. A
        vehicle without passengers yields an empty breakdown.
    """
    details = RouteDetails(vehicle_id=vehicle.vehicle_id)
    if not vehicle.assigned_passengers:
        return details

    targets: list[tuple[int | None, str, Coordinate]] = [
        (p.passenger_id, p.name, p.location) for p in vehicle.assigned_passengers
    ]
    targets.append((None, DESTINATION_NAME, destination))

    previous = vehicle.start
    cumulative_distance = 0.0
    cumulative_time = 0.0
    for number, (passenger_id, name, location) in enumerate(targets, start=1):
        leg = haversine_distance(previous, location)
        leg_time = travel_time(leg, average_speed_kmh)
        cumulative_distance += leg
        cumulative_time += leg_time
        details.stops.append(
            StopDetail(
                stop_number=number,
                passenger_id=passenger_id,
                passenger_name=name,
                distance_from_previous=leg,
                time_from_previous=leg_time,
                cumulative_distance=cumulative_distance,
                cumulative_time=cumulative_time,
            )
        )
        previous = location

    details.total_distance = cumulative_distance
    details.total_time = cumulative_time
    return details


def compute_route_metrics(
    solution: Solution,
    destination: Coordinate,
    average_speed_kmh: float = AVERAGE_SPEED_KMH,
) -> dict[int, RouteDetails]:
    """Stop-by-stop breakdown for every used vehicle, keyed by vehicle id.

    Pure: the solution is not modified.
    """
    return {
        vehicle.vehicle_id: vehicle_route_details(
            vehicle, destination, average_speed_kmh
        )
        for vehicle in solution.used_vehicles()
    }


# ------------------------------------------------------------------
# Time handling
# ------------------------------------------------------------------


def parse_target_time(value: str | time | None) -> time:
    """Parse an ``HH:MM:SS`` or ``HH:MM`` deadline.

    Unparsable or missing values fall back to 08:00 with a warning on stderr.
    """
    if isinstance(value, time):
        return value
    if value:
        for fmt in _TIME_FORMATS:
            try:
                return datetime.strptime(value.strip(), fmt).time()
            except ValueError:
                continue
    print(
        f"[schedule] invalid target time {value!r}, using {DEFAULT_TARGET_TIME}",
        file=sys.stderr,
    )
    return datetime.strptime(DEFAULT_TARGET_TIME, _TIME_FORMATS[0]).time()


def route_query_date(target_arrival: str | time, now: datetime | None = None) -> date:
    """Date a schedule targets: today if the deadline is still ahead, else tomorrow."""
    now = now or datetime.now()
    deadline = parse_target_time(target_arrival)
    if now.time() < deadline:
        return now.date()
    return now.date() + timedelta(days=1)


def format_minutes(minutes: float) -> str:
    """Render decimal minutes as ``M:SS``, e.g. ``2.5`` -> ``"2:30"``."""
    total_seconds = round(minutes * 60)
    return f"{total_seconds // 60}:{total_seconds % 60:02d}"


# ------------------------------------------------------------------
# Backward scheduling
# ------------------------------------------------------------------


def schedule_backward_from_target(
    vehicle: Vehicle,
    route_details: RouteDetails,
    target_arrival: str | time | None,
    service_date: date | None = None,
) -> VehicleSchedule:
    """Derive departure and pickup times from the arrival deadline.

    ``departure = arrival - total_time`` and, for every assigned passenger,
    ``pickup = departure + cumulative_time`` of its stop. The ``HH:MM``
    labels are written onto ``vehicle.departure_time`` and each passenger's
    ``estimated_pickup_time``.

    Args:
        vehicle: Vehicle to schedule. Updated in place.
        route_details: Stop breakdown for the vehicle, estimated or refined.
        target_arrival: Deadline at the destination. Falls back to 08:00.
        service_date: Day the trip happens. Defaults to today.

    Returns:
        The full-precision schedule.
    """
    deadline = parse_target_time(target_arrival)
    arrival = datetime.combine(service_date or date.today(), deadline)
    departure = arrival - timedelta(minutes=route_details.total_time)

    schedule = VehicleSchedule(
        vehicle_id=vehicle.vehicle_id,
        departure=departure,
        arrival=arrival,
    )
    vehicle.departure_time = schedule.departure_label

    for passenger in vehicle.assigned_passengers:
        stop = route_details.stop_for(passenger.passenger_id)
        if stop is None:
            continue
        pickup = departure + timedelta(minutes=stop.cumulative_time)
        schedule.pickups[passenger.passenger_id] = pickup
        passenger.estimated_pickup_time = pickup.strftime(_OUTPUT_FORMAT)

    return schedule


def schedule_solution(
    solution: Solution,
    route_details: dict[int, RouteDetails],
    target_arrival: str | time | None,
    service_date: date | None = None,
) -> dict[int, VehicleSchedule]:
    """Schedule every used vehicle that has a route breakdown.

    Returns:
        Schedules keyed by vehicle id.
    """
    deadline = parse_target_time(target_arrival)
    schedules: dict[int, VehicleSchedule] = {}
    for vehicle in solution.used_vehicles():
        details = route_details.get(vehicle.vehicle_id)
        if details is None:
            continue
        schedules[vehicle.vehicle_id] = schedule_backward_from_target(
            vehicle, details, deadline, service_date
        )
    return schedules
