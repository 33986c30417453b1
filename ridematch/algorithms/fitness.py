"""Scoring of candidate solutions.

The score rewards short total distance, full vehicles, idle vehicles and
complete assignment. Higher is better.
"""

from __future__ import annotations

from ridematch.config import FitnessConfig
from ridematch.models.geo import Coordinate, travel_time
from ridematch.models.passenger import Passenger
from ridematch.models.solution import Solution
from ridematch.models.vehicle import Vehicle


def update_vehicle_metrics(
    vehicle: Vehicle,
    destination: Coordinate,
    average_speed_kmh: float,
) -> None:
    """Refresh ``total_distance`` and ``total_time`` of one vehicle in place.

    An empty vehicle is reset to zero.
    """
    if not vehicle.assigned_passengers:
        vehicle.total_distance = 0.0
        vehicle.total_time = 0.0
        return
    vehicle.total_distance = vehicle.route_distance(destination)
    vehicle.total_time = travel_time(vehicle.total_distance, average_speed_kmh)


def evaluate(
    solution: Solution,
    passengers: list[Passenger],
    vehicles: list[Vehicle],
    destination: Coordinate,
    config: FitnessConfig | None = None,
) -> float:
    """Score ``solution`` and store the result on it.

    ``score = reward / (1 + distance) - capacity_penalty * unused_seats
    + vehicle_bonus * unused_vehicles - unassigned_penalty * unassigned``.

    Args:
        solution: Solution to evaluate. Vehicle metrics are updated in place.
        passengers: Full passenger list of the instance.
        vehicles: Fleet of the instance. Only its size and total capacity are
            read.
        destination: Shared arrival point.
        config: Scoring weights. Defaults to ``FitnessConfig()``.

    Returns:
        The computed score. Always finite.
    """
    config = config or FitnessConfig()

    total_distance = 0.0
    assigned = 0
    used = 0
    for vehicle in solution.vehicles:
        update_vehicle_metrics(vehicle, destination, config.average_speed_kmh)
        if vehicle.assigned_passengers:
            total_distance += vehicle.total_distance
            assigned += vehicle.load
            used += 1

    total_capacity = sum(v.capacity for v in vehicles)

    score = config.distance_reward / (1.0 + total_distance)
    score -= config.unused_capacity_penalty * (total_capacity - assigned)
    score += config.unused_vehicle_bonus * (len(vehicles) - used)
    if assigned < len(passengers):
        score -= config.unassigned_penalty * (len(passengers) - assigned)

    solution.score = score
    return score
