"""2-opt local search for improving a single vehicle's pickup order.

A 2-opt move reverses a contiguous run of pickups, replacing two legs of the
route with two shorter ones. The vehicle start and the destination stay
fixed at both ends of the path.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ridematch.models.geo import haversine_distance

if TYPE_CHECKING:
    from ridematch.models.geo import Coordinate
    from ridematch.models.vehicle import Vehicle

_EPSILON = 1e-9


def two_opt_route(vehicle: Vehicle, destination: Coordinate) -> bool:
    """Apply 2-opt improvement to one vehicle's pickup order.

    Scans every pair of pickup positions. Whenever reversing the run between
    them shortens the route the reversal is applied, and scanning continues
    until a full pass finds no improving move.

    Args:
        vehicle: The vehicle to improve. ``assigned_passengers`` is reordered
            in place; distance and time are left for the next evaluation.
        destination: Fixed end point of the route.

    Returns:
        ``True`` if at least one improving reversal was applied.
    """
    passengers = vehicle.assigned_passengers
    if len(passengers) < 2:
        return False

    improved = False
    changed = True

    while changed:
        changed = False
        n = len(passengers)

        for i in range(n - 1):
            for j in range(i + 1, n):
                before = vehicle.start if i == 0 else passengers[i - 1].location
                after = destination if j == n - 1 else passengers[j + 1].location

                current = haversine_distance(
                    before, passengers[i].location
                ) + haversine_distance(passengers[j].location, after)
                candidate = haversine_distance(
                    before, passengers[j].location
                ) + haversine_distance(passengers[i].location, after)

                if candidate < current - _EPSILON:
                    passengers[i : j + 1] = passengers[i : j + 1][::-1]
                    changed = True
                    improved = True

    return improved
