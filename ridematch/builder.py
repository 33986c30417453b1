"""Solution construction helpers for the ride-sharing solver.

Provides the factory functions that build the initial population: a random
shuffle-and-fill construction, plus two deterministic heuristic seeds
(greedy by distance, and even distribution).
"""

from __future__ import annotations

import copy
import random

from ridematch.algorithms.fitness import evaluate
from ridematch.config import FitnessConfig
from ridematch.models.geo import Coordinate, haversine_distance
from ridematch.models.passenger import Passenger
from ridematch.models.solution import Solution
from ridematch.models.vehicle import Vehicle


def _overflow(solution: Solution, passenger: Passenger) -> None:
    """Place ``passenger`` on the least-loaded vehicle, ignoring capacity."""
    target = solution.least_loaded()
    if target is not None:
        target.assigned_passengers.append(passenger)


def _closest_with_room(
    solution: Solution, passenger: Passenger,
) -> Vehicle | None:
    candidates = [v for v in solution.vehicles if v.has_room()]
    if not candidates:
        return None
    return min(
        candidates,
        key=lambda v: haversine_distance(v.start, passenger.location),
    )


def build_random_solution(
    passengers: list[Passenger],
    vehicles: list[Vehicle],
    rng: random.Random,
) -> Solution:
    """Shuffle the passengers and fill the fleet in order.

    Each vehicle takes the next passengers of the shuffled list up to its
    capacity. Passengers left over once every vehicle is full go, one at a
    time, to whichever vehicle currently carries the fewest.

    Args:
        passengers: Passengers to place (copied, never mutated).
        vehicles: Fleet template (copied as empty shells).
        rng: Random source used for the shuffle.

    Returns:
        An unevaluated Solution.
    """
    solution = Solution.empty(vehicles)
    pool = [copy.copy(p) for p in passengers]
    rng.shuffle(pool)

    cursor = 0
    for vehicle in solution.vehicles:
        take = pool[cursor : cursor + vehicle.capacity]
        vehicle.assigned_passengers.extend(take)
        cursor += len(take)

    for passenger in pool[cursor:]:
        _overflow(solution, passenger)
    return solution


def build_greedy_solution(
    passengers: list[Passenger],
    vehicles: list[Vehicle],
    destination: Coordinate,
) -> Solution:
    """Assign far-away passengers first, each to the closest free vehicle.

    Passengers are visited in decreasing distance from the destination and
    placed on the vehicle with free seats whose start is nearest to them.
    When no vehicle has room the least-loaded one takes the passenger.
    """
    solution = Solution.empty(vehicles)
    ordered = sorted(
        (copy.copy(p) for p in passengers),
        key=lambda p: haversine_distance(p.location, destination),
        reverse=True,
    )
    for passenger in ordered:
        target = _closest_with_room(solution, passenger)
        if target is None:
            _overflow(solution, passenger)
        else:
            target.assigned_passengers.append(passenger)
    return solution


def build_even_solution(
    passengers: list[Passenger],
    vehicles: list[Vehicle],
) -> Solution:
    """Spread passengers evenly over the fleet.

    Every vehicle first takes its nearest remaining passengers up to a common
    target load of ``min(P // V, total_capacity // V, min_capacity)``. The
    rest go to the closest vehicle with room, then to the least-loaded one.
    """
    solution = Solution.empty(vehicles)
    pool = [copy.copy(p) for p in passengers]
    if not solution.vehicles:
        return solution

    fleet_size = len(solution.vehicles)
    total_capacity = sum(v.capacity for v in solution.vehicles)
    target_load = min(
        len(pool) // fleet_size,
        total_capacity // fleet_size,
        min(v.capacity for v in solution.vehicles),
    )

    for vehicle in solution.vehicles:
        pool.sort(key=lambda p: haversine_distance(vehicle.start, p.location))
        vehicle.assigned_passengers.extend(pool[:target_load])
        del pool[:target_load]

    for passenger in pool:
        target = _closest_with_room(solution, passenger)
        if target is None:
            _overflow(solution, passenger)
        else:
            target.assigned_passengers.append(passenger)
    return solution


def initialize_population(
    passengers: list[Passenger],
    vehicles: list[Vehicle],
    population_size: int,
    destination: Coordinate,
    rng: random.Random | None = None,
    fitness: FitnessConfig | None = None,
    heuristic_seeding: bool = False,
) -> list[Solution]:
    """Build and evaluate the initial population.

    Args:
        passengers: Passengers of the instance.
        vehicles: Fleet of the instance.
        population_size: Number of solutions to create.
        destination: Shared arrival point, needed for evaluation.
        rng: Random source. A fresh unseeded ``random.Random`` when omitted.
        fitness: Scoring weights.
        heuristic_seeding: Make the first two individuals the greedy and
            even-distribution constructions instead of random ones.

    Returns:
        ``population_size`` evaluated solutions.

    Raises:
        ValueError: If ``population_size`` is below 1.
    """
    if population_size < 1:
        raise ValueError("population_size must be at least 1.")
    rng = rng or random.Random()

    seeds: list[Solution] = []
    if heuristic_seeding:
        seeds = [
            build_greedy_solution(passengers, vehicles, destination),
            build_even_solution(passengers, vehicles),
        ][:population_size]

    population = list(seeds)
    while len(population) < population_size:
        population.append(build_random_solution(passengers, vehicles, rng))

    for solution in population:
        evaluate(solution, passengers, vehicles, destination, fitness)
    return population
