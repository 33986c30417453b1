"""Entry point for the ride-sharing planner.

Reads a JSON planning instance, assigns passengers to vehicles with the
genetic solver, and prints the departure and pickup schedule.

Usage::

    uv run python main.py
    uv run python main.py --instance data/sample_instance.json \\
                          --population 200 --generations 150 --seed 7 \\
                          --store schedules --no-plot
"""

from __future__ import annotations

import argparse
import random
from pathlib import Path

from ridematch.config import DIRECTIONS_API_KEY_ENV, GeneticConfig, MUTATION_OPERATORS
from ridematch.io.data_loader import load_instance
from ridematch.io.directions import DirectionsClient, DirectionsError
from ridematch.io.schedule_store import JsonScheduleStore
from ridematch.planner import RidePlan, plan_rides
from ridematch.scheduling import format_minutes
from ridematch.validation import format_report
from ridematch.visualization import plot_routes

_DEFAULT_INSTANCE = Path("data/sample_instance.json")


def print_plan(plan: RidePlan) -> None:
    """Print the schedule of a plan as a table, followed by its summary.

    Args:
        plan: The plan to display.
    """
    from rich.console import Console
    from rich.table import Table

    console = Console()
    table = Table(
        title=(
            f"Schedule for {plan.target_date.isoformat()}, arriving at "
            f"{plan.destination_name} by {plan.target_time.strftime('%H:%M')}"
        ),
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Vehicle", style="bold")
    table.add_column("Departs", justify="center")
    table.add_column("Stop", justify="right")
    table.add_column("Passenger")
    table.add_column("Pickup", justify="center")
    table.add_column("Leg", justify="right")
    table.add_column("Source", justify="center")

    for vehicle in plan.solution.used_vehicles():
        details = plan.route_details[vehicle.vehicle_id]
        label = f"{vehicle.vehicle_id}"
        if vehicle.driver_name:
            label += f" ({vehicle.driver_name})"
        for stop in details.stops:
            if stop.is_destination:
                pickup = plan.target_time.strftime("%H:%M")
            else:
                passenger = next(
                    p for p in vehicle.assigned_passengers
                    if p.passenger_id == stop.passenger_id
                )
                pickup = passenger.estimated_pickup_time or "-"
            table.add_row(
                label if stop.stop_number == 1 else "",
                vehicle.departure_time if stop.stop_number == 1 else "",
                str(stop.stop_number),
                stop.passenger_name,
                pickup,
                f"{stop.distance_from_previous:.2f} km / "
                f"{format_minutes(stop.time_from_previous)}",
                details.source if stop.stop_number == 1 else "",
            )
        table.add_section()

    console.print(table)
    for line in format_report(plan.report):
        style = "yellow" if line.startswith(("Could not", "Capacity", "Passenger(s)")) else None
        console.print(line, style=style)


def main() -> None:
    """Parse CLI arguments and run the planner."""
    parser = argparse.ArgumentParser(
        description="Ride-sharing planner: genetic assignment with deadline scheduling"
    )
    parser.add_argument(
        "--instance",
        type=Path,
        default=_DEFAULT_INSTANCE,
        help="Path to the JSON planning instance.",
    )
    parser.add_argument(
        "--population",
        type=int,
        default=GeneticConfig.population_size,
        help=f"Population size (default: {GeneticConfig.population_size}).",
    )
    parser.add_argument(
        "--generations",
        type=int,
        default=GeneticConfig.generations,
        help=f"Number of generations (default: {GeneticConfig.generations}).",
    )
    parser.add_argument(
        "--target-time",
        default=None,
        help="Arrival deadline HH:MM[:SS]; overrides the instance file.",
    )
    parser.add_argument(
        "--operators",
        nargs="+",
        choices=MUTATION_OPERATORS,
        default=None,
        help="Mutation operators to enable (default: swap reorder move).",
    )
    parser.add_argument(
        "--patience",
        type=int,
        default=None,
        help="Stop after this many generations without improvement.",
    )
    parser.add_argument(
        "--heuristic-seeding",
        action="store_true",
        help="Seed the population with greedy and even-distribution solutions.",
    )
    parser.add_argument(
        "--directions",
        action="store_true",
        help=f"Refine routes with Google Directions (needs {DIRECTIONS_API_KEY_ENV}).",
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="Directory in which to save the schedule as JSON.",
    )
    parser.add_argument(
        "--plot",
        type=Path,
        default=Path("routes.png"),
        help="Output path of the route plot (default: routes.png).",
    )
    parser.add_argument(
        "--no-plot",
        action="store_true",
        help="Skip rendering the route visualisation.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible runs.",
    )
    args = parser.parse_args()

    rng = random.Random(args.seed)
    if args.seed is not None:
        print(f"Random seed: {args.seed}")

    print(f"Loading instance from: {args.instance}")
    instance = load_instance(args.instance)
    print(
        f"  {len(instance.passengers)} passengers, "
        f"{len(instance.vehicles)} vehicles loaded."
    )

    kwargs = {}
    if args.operators:
        kwargs["mutation_operators"] = tuple(args.operators)
    config = GeneticConfig(
        population_size=args.population,
        generations=args.generations,
        max_stagnant_generations=args.patience,
        heuristic_seeding=args.heuristic_seeding,
        **kwargs,
    )

    refiner = None
    if args.directions:
        try:
            refiner = DirectionsClient()
        except DirectionsError as exc:
            print(f"  Directions disabled: {exc}")

    store = JsonScheduleStore(args.store) if args.store else None

    print(
        f"Running genetic search "
        f"({config.generations} generations, population={config.population_size})..."
    )
    plan = plan_rides(
        instance.passengers,
        instance.vehicles,
        instance.destination,
        args.target_time or instance.target_time,
        config=config,
        rng=rng,
        refiner=refiner,
        store=store,
        destination_name=instance.destination_name,
        verbose=True,
    )
    if plan is None:
        print("Nothing to schedule.")
        return

    print_plan(plan)

    if store is not None:
        print(f"Schedule saved to: {store.path_for(plan.target_date)}")

    if args.seed is not None:
        print(f"(Seed used: {args.seed})")

    if not args.no_plot:
        plot_routes(
            plan.solution,
            instance.destination,
            instance.passengers,
            output_path=args.plot,
        )


if __name__ == "__main__":
    main()
