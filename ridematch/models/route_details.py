"""Per-vehicle route breakdown used for reporting and scheduling."""

from __future__ import annotations

from dataclasses import dataclass, field

#: Name given to the final stop of every route.
DESTINATION_NAME: str = "Destination"


@dataclass
class StopDetail:
    """One leg of a route, ending at a passenger pickup or the destination.

    Attributes:
        stop_number: 1-based position along the route.
        passenger_id: Passenger picked up here, ``None`` for the destination.
        passenger_name: Passenger name, or ``"Destination"``.
        distance_from_previous: Leg length in km.
        time_from_previous: Leg duration in minutes.
        cumulative_distance: Distance from the vehicle start in km.
        cumulative_time: Time from the vehicle start in minutes.
    """

    stop_number: int
    passenger_id: int | None
    passenger_name: str
    distance_from_previous: float
    time_from_previous: float
    cumulative_distance: float
    cumulative_time: float

    @property
    def is_destination(self) -> bool:
        return self.passenger_id is None


@dataclass
class RouteDetails:
    """Stop-by-stop breakdown of one vehicle's route.

    Attributes:
        vehicle_id: Vehicle the route belongs to.
        stops: Pickups in visiting order followed by the destination stop.
        total_distance: Route length in km.
        total_time: Route duration in minutes.
        source: ``"estimate"`` for straight-line values, ``"directions"``
            when a road-network service supplied them.
    """

    vehicle_id: int
    stops: list[StopDetail] = field(default_factory=list)
    total_distance: float = 0.0
    total_time: float = 0.0
    source: str = "estimate"

    def stop_for(self, passenger_id: int) -> StopDetail | None:
        for stop in self.stops:
            if stop.passenger_id == passenger_id:
                return stop
        return None
