"""End-to-end ride planning: solve, measure, refine, schedule, store."""

from __future__ import annotations

import random
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, time

from ridematch.algorithms.genetic import RideSharingGenetic
from ridematch.config import GeneticConfig
from ridematch.io.adapters import plan_to_record
from ridematch.io.directions import RouteRefiner, refine_route_details
from ridematch.io.schedule_store import ScheduleStore
from ridematch.models.geo import Coordinate
from ridematch.models.passenger import Passenger
from ridematch.models.route_details import RouteDetails
from ridematch.models.solution import Solution
from ridematch.models.vehicle import Vehicle
from ridematch.scheduling import (
    VehicleSchedule,
    compute_route_metrics,
    parse_target_time,
    route_query_date,
    schedule_solution,
)
from ridematch.validation import SolutionReport, build_report


@dataclass
class RidePlan:
    """Everything produced by one planning run.

    Attributes:
        solution: Chosen solution, with departure and pickup labels written.
        passengers: Passengers of the instance.
        route_details: Route breakdown per used vehicle (estimated or
            refined).
        schedules: Full-precision schedule per used vehicle.
        report: Validation summary of the solution.
        target_time: Parsed arrival deadline.
        target_date: Day the plan is for; key of the schedule store.
        destination_name: Destination display name.
        population: Final population of the search, for warm starts.
        history: Best score per generation.
    """

    solution: Solution
    passengers: list[Passenger]
    route_details: dict[int, RouteDetails]
    schedules: dict[int, VehicleSchedule]
    report: SolutionReport
    target_time: time
    target_date: date
    destination_name: str = "Destination"
    population: list[Solution] = field(default_factory=list)
    history: list[float] = field(default_factory=list)


def plan_rides(
    passengers: list[Passenger],
    vehicles: list[Vehicle],
    destination: Coordinate,
    target_time: str | time | None,
    config: GeneticConfig | None = None,
    rng: random.Random | None = None,
    refiner: RouteRefiner | None = None,
    store: ScheduleStore | None = None,
    service_date: date | None = None,
    destination_name: str = "Destination",
    seed_population: list[Solution] | None = None,
    should_stop: Callable[[], bool] | None = None,
    now: datetime | None = None,
    verbose: bool = False,
) -> RidePlan | None:
    """Plan one day of shared rides.

    Runs the genetic search, measures the winning routes, optionally refines
    them on the road network, schedules every vehicle backwards from the
    deadline and optionally stores the result.

    Args:
        passengers: Riders to pick up.
        vehicles: Available fleet.
        destination: Shared arrival point.
        target_time: Arrival deadline; 08:00 when unparsable.
        config: Search hyperparameters.
        rng: Random source for the search.
        refiner: Road-network measurer. Estimates are used when omitted.
        store: Where to save the finished schedule.
        service_date: Day of the trip. Defaults to today when the deadline is
            still ahead, else tomorrow.
        destination_name: Display name stored with the schedule.
        seed_population: Population of an earlier run to continue from.
        should_stop: Cooperative cancellation check between generations.
        now: Current time, used to pick the default service date.
        verbose: Print solver progress.

    Returns:
        The plan, or ``None`` when there is nothing to schedule.
    """
    if not passengers or not vehicles:
        print(
            f"[planner] nothing to schedule: {len(passengers)} passenger(s), "
            f"{len(vehicles)} vehicle(s)",
            file=sys.stderr,
        )
        return None

    config = config or GeneticConfig()
    deadline = parse_target_time(target_time)
    target_date = service_date or route_query_date(deadline, now)

    solver = RideSharingGenetic(
        passengers, vehicles, destination, config=config, rng=rng, verbose=verbose
    )
    solution = solver.solve(seed_population=seed_population, should_stop=should_stop)

    route_details = compute_route_metrics(
        solution, destination, config.fitness.average_speed_kmh
    )
    if refiner is not None:
        route_details = refine_route_details(
            solution,
            route_details,
            destination,
            refiner,
            arrival=datetime.combine(target_date, deadline),
        )
        # Reported totals follow the measurements the schedule is built from.
        for vehicle in solution.used_vehicles():
            details = route_details.get(vehicle.vehicle_id)
            if details is not None:
                vehicle.total_distance = details.total_distance
                vehicle.total_time = details.total_time

    schedules = schedule_solution(solution, route_details, deadline, target_date)

    plan = RidePlan(
        solution=solution,
        passengers=passengers,
        route_details=route_details,
        schedules=schedules,
        report=build_report(solution, passengers),
        target_time=deadline,
        target_date=target_date,
        destination_name=destination_name,
        population=solver.latest_population(),
        history=list(solver.history),
    )
    if store is not None:
        store.save(plan_to_record(plan))
    return plan
