"""Solution container for the ride-sharing problem."""

from __future__ import annotations

from collections import Counter

from ridematch.models.passenger import Passenger
from ridematch.models.vehicle import Vehicle


class Solution:
    """One candidate assignment of passengers to vehicles.

    The solution owns its vehicles by value, so members of a population can
    be modified without affecting each other or the caller's input.

    Attributes:
        vehicles: Vehicles of this solution, in fleet order.
        score: Fitness value. Only meaningful right after evaluation.
    """

    def __init__(self, vehicles: list[Vehicle]) -> None:
        self.vehicles: list[Vehicle] = vehicles
        self.score: float = 0.0

    @classmethod
    def empty(cls, vehicles: list[Vehicle]) -> Solution:
        """Build a solution holding an empty shell of every vehicle."""
        return cls([v.shell() for v in vehicles])

    def clone(self) -> Solution:
        """Return a copy that shares no mutable state with this solution."""
        twin = Solution([v.clone() for v in self.vehicles])
        twin.score = self.score
        return twin

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def assigned_ids(self) -> set[int]:
        return {
            p.passenger_id for v in self.vehicles for p in v.assigned_passengers
        }

    @property
    def assigned_count(self) -> int:
        return sum(v.load for v in self.vehicles)

    def used_vehicles(self) -> list[Vehicle]:
        return [v for v in self.vehicles if v.assigned_passengers]

    @property
    def total_distance(self) -> float:
        """Distance over used vehicles as of the last evaluation."""
        return sum(v.total_distance for v in self.used_vehicles())

    @property
    def total_time(self) -> float:
        return sum(v.total_time for v in self.used_vehicles())

    def vehicle_by_id(self, vehicle_id: int) -> Vehicle | None:
        for vehicle in self.vehicles:
            if vehicle.vehicle_id == vehicle_id:
                return vehicle
        return None

    def least_loaded(self, with_room: bool = False) -> Vehicle | None:
        """Return the vehicle with the fewest passengers (first on ties).

        Args:
            with_room: Only consider vehicles below capacity.

        Returns:
            The chosen vehicle, or ``None`` if there is no candidate.
        """
        candidates = [
            v for v in self.vehicles if not with_room or v.has_room()
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda v: v.load)

    # ------------------------------------------------------------------
    # Feasibility
    # ------------------------------------------------------------------

    def validate_feasibility(self, passengers: list[Passenger]) -> list[str]:
        """Check this solution against the hard constraints.

        Args:
            passengers: The full passenger list of the instance.

        Returns:
            List of human-readable violation messages. Empty if feasible.
        """
        violations: list[str] = []

        counts = Counter(
            p.passenger_id for v in self.vehicles for p in v.assigned_passengers
        )
        for passenger_id, count in sorted(counts.items()):
            if count > 1:
                violations.append(
                    f"Passenger {passenger_id} is assigned {count} times."
                )

        known = {p.passenger_id for p in passengers}
        for passenger in passengers:
            if passenger.passenger_id not in counts:
                violations.append(
                    f"Passenger {passenger.passenger_id} is not assigned to "
                    "any vehicle."
                )
        for passenger_id in sorted(set(counts) - known):
            violations.append(f"Passenger {passenger_id} is not in the instance.")

        for vehicle in self.vehicles:
            if vehicle.is_overloaded():
                violations.append(
                    f"Vehicle {vehicle.vehicle_id} carries {vehicle.load} "
                    f"passengers but has capacity {vehicle.capacity}."
                )

        return violations

    def __repr__(self) -> str:
        return f"Solution(score={self.score:.4f}, vehicles={self.vehicles})"
