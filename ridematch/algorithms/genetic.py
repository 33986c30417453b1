"""Genetic algorithm for the ride-sharing assignment problem.

Individuals are partitioned assignments: every vehicle holds an ordered list
of passengers. Each generation keeps the best individual unchanged, then
breeds the rest of the population with tournament selection, slot-wise
crossover and a small set of mutation operators.
"""

from __future__ import annotations

import copy
import random
import sys
from collections.abc import Callable
from enum import StrEnum

from ridematch.algorithms.fitness import evaluate
from ridematch.algorithms.two_opt import two_opt_route
from ridematch.builder import initialize_population
from ridematch.config import GeneticConfig
from ridematch.models.geo import Coordinate
from ridematch.models.passenger import Passenger
from ridematch.models.solution import Solution
from ridematch.models.vehicle import Vehicle


class MutationKind(StrEnum):
    """Mutation operators available to the solver."""

    SWAP = "swap"
    REORDER = "reorder"
    MOVE = "move"
    TWO_OPT = "two_opt"
    REBALANCE = "rebalance"


class RideSharingGenetic:
    """Genetic optimiser assigning passengers to vehicles.

    Every random draw (shuffles, tournament samples, mutation choices) goes
    through ``rng`` so a seeded generator reproduces a run exactly.

    Attributes:
        passengers: Passengers of the instance. Never mutated.
        vehicles: Fleet of the instance. Never mutated.
        destination: Shared arrival point.
        config: Hyperparameter configuration.
        rng: Random source.
        population: Current population, kept after ``solve`` for warm starts.
        history: Best score after initialisation and after each generation.
        verbose: Print a summary line when ``solve`` finishes.
    """

    def __init__(
        self,
        passengers: list[Passenger],
        vehicles: list[Vehicle],
        destination: Coordinate,
        config: GeneticConfig | None = None,
        rng: random.Random | None = None,
        verbose: bool = False,
    ) -> None:
        """Initialise the optimiser.

        Args:
            passengers: Passengers to assign.
            vehicles: Available fleet.
            destination: Shared arrival point.
            config: Algorithm hyperparameters. Defaults to ``GeneticConfig()``.
            rng: Random source. A fresh unseeded ``random.Random`` when
                omitted.
            verbose: Print progress to stdout.
        """
        self.passengers = passengers
        self.vehicles = vehicles
        self.destination = destination
        self.config: GeneticConfig = config or GeneticConfig()
        self.rng = rng or random.Random()
        self.verbose = verbose
        self.population: list[Solution] = []
        self.history: list[float] = []
        self._operators = [MutationKind(op) for op in self.config.mutation_operators]

    @property
    def capacity_shortfall(self) -> int:
        """Passengers that cannot be seated within capacity, or 0."""
        return max(0, len(self.passengers) - sum(v.capacity for v in self.vehicles))

    # ------------------------------------------------------------------
    # Selection and crossover
    # ------------------------------------------------------------------

    def _evaluate(self, solution: Solution) -> float:
        return evaluate(
            solution,
            self.passengers,
            self.vehicles,
            self.destination,
            self.config.fitness,
        )

    def _tournament(self, population: list[Solution]) -> Solution:
        """Pick the best of a random sample drawn with replacement.

        The sample size is ``min(tournament_size, len(population))``. On equal
        scores the first sampled individual wins.
        """
        size = min(self.config.tournament_size, len(population))
        best = population[self.rng.randrange(len(population))]
        for _ in range(size - 1):
            candidate = population[self.rng.randrange(len(population))]
            if candidate.score > best.score:
                best = candidate
        return best

    def _crossover(self, parent_1: Solution, parent_2: Solution) -> Solution:
        """Combine two parents slot by slot.

        The first ``n // 2`` vehicle slots inherit from ``parent_1`` and the
        rest from ``parent_2``. Passengers already claimed are skipped, and a
        slot stops taking passengers at capacity. Unclaimed passengers then
        go to the least-loaded vehicle with room, or to the least-loaded
        vehicle overall when the fleet is full.

        Returns:
            A new, unevaluated child.
        """
        child = Solution.empty(self.vehicles)
        half = len(child.vehicles) // 2
        claimed: set[int] = set()

        for index, vehicle in enumerate(child.vehicles):
            parent = parent_1 if index < half else parent_2
            for passenger in parent.vehicles[index].assigned_passengers:
                if not vehicle.has_room():
                    break
                if passenger.passenger_id in claimed:
                    continue
                vehicle.assigned_passengers.append(copy.copy(passenger))
                claimed.add(passenger.passenger_id)

        for passenger in self.passengers:
            if passenger.passenger_id in claimed:
                continue
            target = child.least_loaded(with_room=True) or child.least_loaded()
            if target is None:
                break
            target.assigned_passengers.append(copy.copy(passenger))
            claimed.add(passenger.passenger_id)

        return child

    # ------------------------------------------------------------------
    # Mutation operators
    # ------------------------------------------------------------------

    def _swap(self, solution: Solution) -> None:
        """Exchange one random passenger between two occupied vehicles."""
        occupied = solution.used_vehicles()
        if len(occupied) < 2:
            return
        vehicle_1, vehicle_2 = self.rng.sample(occupied, 2)
        i = self.rng.randrange(vehicle_1.load)
        j = self.rng.randrange(vehicle_2.load)
        passengers_1 = vehicle_1.assigned_passengers
        passengers_2 = vehicle_2.assigned_passengers
        passengers_1[i], passengers_2[j] = passengers_2[j], passengers_1[i]

    def _reorder(self, solution: Solution) -> None:
        """Shuffle the pickup order of one vehicle with two or more riders."""
        candidates = [v for v in solution.vehicles if v.load >= 2]
        if not candidates:
            return
        vehicle = self.rng.choice(candidates)
        self.rng.shuffle(vehicle.assigned_passengers)

    def _move(self, solution: Solution) -> None:
        """Move one random passenger to a different random vehicle.

        Capacity of the receiving vehicle is not checked.
        """
        occupied = solution.used_vehicles()
        if not occupied or len(solution.vehicles) < 2:
            return
        source = self.rng.choice(occupied)
        passenger = source.assigned_passengers.pop(
            self.rng.randrange(source.load)
        )
        others = [v for v in solution.vehicles if v is not source]
        self.rng.choice(others).assigned_passengers.append(passenger)

    def _two_opt(self, solution: Solution) -> None:
        """Untangle the pickup order of one random vehicle with 2-opt."""
        candidates = [v for v in solution.vehicles if v.load >= 2]
        if not candidates:
            return
        two_opt_route(self.rng.choice(candidates), self.destination)

    def _rebalance(self, solution: Solution) -> None:
        """Move excess riders of overloaded vehicles onto vehicles with room."""
        for vehicle in solution.vehicles:
            while vehicle.is_overloaded():
                target = solution.least_loaded(with_room=True)
                if target is None:
                    return
                passenger = vehicle.assigned_passengers.pop(
                    self.rng.randrange(vehicle.load)
                )
                target.assigned_passengers.append(passenger)

    def _mutate(self, solution: Solution) -> MutationKind | None:
        """Apply one operator with probability ``mutation_rate``.

        Returns:
            The operator applied, or ``None`` when the child was left as is.
        """
        if self.rng.random() >= self.config.mutation_rate:
            return None
        kind = self.rng.choice(self._operators)
        operators: dict[MutationKind, Callable[[Solution], None]] = {
            MutationKind.SWAP: self._swap,
            MutationKind.REORDER: self._reorder,
            MutationKind.MOVE: self._move,
            MutationKind.TWO_OPT: self._two_opt,
            MutationKind.REBALANCE: self._rebalance,
        }
        operators[kind](solution)
        return kind

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def best(self) -> Solution:
        """Return the highest-scoring member of the current population.

        Raises:
            ValueError: If no population exists yet.
        """
        if not self.population:
            raise ValueError("The population is empty; call solve() first.")
        return max(self.population, key=lambda s: s.score)

    def latest_population(self) -> list[Solution]:
        """Return the population of the last run, for seeding a later one."""
        return self.population

    def next_generation(self, population: list[Solution]) -> list[Solution]:
        """Breed one generation from ``population``.

        The first member is a copy of the current best; the remaining
        ``population_size - 1`` are evaluated offspring.
        """
        elite = max(population, key=lambda s: s.score).clone()
        offspring = [elite]
        while len(offspring) < self.config.population_size:
            parent_1 = self._tournament(population)
            parent_2 = self._tournament(population)
            child = self._crossover(parent_1, parent_2)
            self._mutate(child)
            self._evaluate(child)
            offspring.append(child)
        return offspring

    def solve(
        self,
        generations: int | None = None,
        seed_population: list[Solution] | None = None,
        should_stop: Callable[[], bool] | None = None,
    ) -> Solution:
        """Run the genetic search.

        Args:
            generations: Number of generations. Defaults to
                ``config.generations``.
            seed_population: Previous population to continue from. A fresh
                population is built when omitted or empty.
            should_stop: Checked before each generation; the run ends early
                when it returns ``True``.

        Returns:
            A copy of the best solution of the final population.

        Raises:
            ValueError: If ``generations`` is negative.
        """
        generations = self.config.generations if generations is None else generations
        if generations < 0:
            raise ValueError("generations must not be negative.")

        if self.capacity_shortfall:
            print(
                f"[ga] warning: {len(self.passengers)} passengers exceed total "
                f"capacity by {self.capacity_shortfall}; some vehicles will "
                "be overloaded.",
                file=sys.stderr,
            )

        if seed_population:
            self.population = list(seed_population)
        else:
            self.population = initialize_population(
                self.passengers,
                self.vehicles,
                self.config.population_size,
                self.destination,
                rng=self.rng,
                fitness=self.config.fitness,
                heuristic_seeding=self.config.heuristic_seeding,
            )

        best_score = self.best().score
        self.history = [best_score]
        stagnant = 0
        patience = self.config.max_stagnant_generations

        for _ in range(generations):
            if should_stop is not None and should_stop():
                break
            self.population = self.next_generation(self.population)
            current = self.best().score
            self.history.append(current)

            if current > best_score:
                best_score = current
                stagnant = 0
            else:
                stagnant += 1
            if patience is not None and stagnant >= patience:
                break

        best = self.best()
        if self.verbose:
            print(
                f"  Genetic search complete. Best score: {best.score:.4f} "
                f"after {len(self.history) - 1} generation(s)."
            )
        return best.clone()
