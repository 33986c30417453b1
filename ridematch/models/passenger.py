"""Passenger data model."""

from __future__ import annotations

from ridematch.models.geo import Coordinate


class Passenger:
    """A rider waiting to be picked up.

    Attributes:
        passenger_id: Unique passenger identifier.
        name: Display name.
        location: Pickup coordinate.
        address: Optional human-readable pickup address.
        estimated_pickup_time: ``HH:MM`` pickup time, written by the scheduler
            onto the copies held by the chosen solution.
    """

    def __init__(
        self,
        passenger_id: int,
        name: str,
        location: Coordinate,
        address: str | None = None,
    ) -> None:
        self.passenger_id = passenger_id
        self.name = name
        self.location = location
        self.address = address
        self.estimated_pickup_time: str | None = None

    def __repr__(self) -> str:
        return (
            f"Passenger(id={self.passenger_id}, name={self.name!r}, "
            f"location=({self.location}))"
        )
