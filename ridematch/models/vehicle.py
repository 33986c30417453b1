"""Vehicle data model."""

from __future__ import annotations

import copy

from ridematch.models.geo import Coordinate, route_distance
from ridematch.models.passenger import Passenger


class Vehicle:
    """A capacity-limited vehicle and the passengers it picks up, in order.

    Attributes:
        vehicle_id: Unique vehicle identifier.
        capacity: Number of passenger seats (at least 1).
        start: Coordinate the vehicle leaves from.
        start_address: Optional human-readable start address.
        driver_name: Optional driver display name.
        assigned_passengers: Visiting order of the passengers on board.
        total_distance: Route length in km, refreshed on evaluation.
        total_time: Route duration in minutes, refreshed on evaluation.
        departure_time: ``HH:MM`` departure written by the scheduler.
    """

    def __init__(
        self,
        vehicle_id: int,
        capacity: int,
        start: Coordinate,
        start_address: str | None = None,
        driver_name: str | None = None,
    ) -> None:
        """Initialise an empty vehicle.

        Raises:
            ValueError: If ``capacity`` is below 1.
        """
        if capacity < 1:
            raise ValueError(f"Vehicle {vehicle_id} must have capacity >= 1.")
        self.vehicle_id = vehicle_id
        self.capacity = capacity
        self.start = start
        self.start_address = start_address
        self.driver_name = driver_name
        self.assigned_passengers: list[Passenger] = []
        self.total_distance: float = 0.0
        self.total_time: float = 0.0
        self.departure_time: str | None = None

    # ------------------------------------------------------------------
    # Load helpers
    # ------------------------------------------------------------------

    @property
    def load(self) -> int:
        return len(self.assigned_passengers)

    @property
    def free_seats(self) -> int:
        """Seats still available. Negative when the vehicle is overloaded."""
        return self.capacity - self.load

    def has_room(self) -> bool:
        return self.load < self.capacity

    def is_overloaded(self) -> bool:
        return self.load > self.capacity

    # ------------------------------------------------------------------
    # Copies and geometry
    # ------------------------------------------------------------------

    def shell(self) -> Vehicle:
        """Return a copy with the same identity and no passengers."""
        return Vehicle(
            vehicle_id=self.vehicle_id,
            capacity=self.capacity,
            start=self.start,
            start_address=self.start_address,
            driver_name=self.driver_name,
        )

    def clone(self) -> Vehicle:
        """Return an independent copy including copies of its passengers."""
        twin = self.shell()
        twin.assigned_passengers = [copy.copy(p) for p in self.assigned_passengers]
        twin.total_distance = self.total_distance
        twin.total_time = self.total_time
        twin.departure_time = self.departure_time
        return twin

    def route_points(self, destination: Coordinate) -> list[Coordinate]:
        """Start, every pickup in order, then ``destination``."""
        return (
            [self.start]
            + [p.location for p in self.assigned_passengers]
            + [destination]
        )

    def route_distance(self, destination: Coordinate) -> float:
        """Length of the full route in km, ``0.0`` when nobody is on board."""
        if not self.assigned_passengers:
            return 0.0
        return route_distance(self.route_points(destination))

    def __repr__(self) -> str:
        ids = [p.passenger_id for p in self.assigned_passengers]
        return (
            f"Vehicle(id={self.vehicle_id}, capacity={self.capacity}, "
            f"passengers={ids})"
        )
