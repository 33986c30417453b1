"""Validation summary for a finished ride-sharing solution.

Collects the reportable conditions of a solution (unassigned passengers,
overloaded vehicles, duplicate assignments) together with the route totals
shown to the user.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from ridematch.models.passenger import Passenger
from ridematch.models.solution import Solution


@dataclass
class SolutionReport:
    """Outcome of validating one solution.

    Attributes:
        passed: True when no violations were detected.
        violations: Human-readable description of each violation.
        passenger_count: Passengers in the instance.
        served_count: Distinct instance passengers placed in some vehicle.
        used_vehicles: Vehicles carrying at least one passenger.
        overloaded_vehicles: Ids of vehicles above capacity.
        duplicate_passengers: Ids of passengers assigned more than once.
        total_distance: Sum of route distances in km.
        total_time: Sum of route durations in minutes.
        score: Fraction of passengers served, in [0.0, 1.0].
    """

    passed: bool
    violations: list[str] = field(default_factory=list)
    passenger_count: int = 0
    served_count: int = 0
    used_vehicles: int = 0
    overloaded_vehicles: list[int] = field(default_factory=list)
    duplicate_passengers: list[int] = field(default_factory=list)
    total_distance: float = 0.0
    total_time: float = 0.0
    score: float = 1.0

    @property
    def unassigned_count(self) -> int:
        return self.passenger_count - self.served_count

    @property
    def average_time_per_vehicle(self) -> float:
        if not self.used_vehicles:
            return 0.0
        return self.total_time / self.used_vehicles


def build_report(solution: Solution, passengers: list[Passenger]) -> SolutionReport:
    """Validate ``solution`` against the passenger list of its instance.

    Distances and times are read from the vehicles, so the solution should
    have been evaluated first.
    """
    counts = Counter(
        p.passenger_id for v in solution.vehicles for p in v.assigned_passengers
    )
    known = {p.passenger_id for p in passengers}
    served = len(known & set(counts))
    violations = solution.validate_feasibility(passengers)

    return SolutionReport(
        passed=not violations,
        violations=violations,
        passenger_count=len(passengers),
        served_count=served,
        used_vehicles=len(solution.used_vehicles()),
        overloaded_vehicles=[
            v.vehicle_id for v in solution.vehicles if v.is_overloaded()
        ],
        duplicate_passengers=sorted(pid for pid, n in counts.items() if n > 1),
        total_distance=solution.total_distance,
        total_time=solution.total_time,
        score=served / len(passengers) if passengers else 1.0,
    )


def format_report(report: SolutionReport) -> list[str]:
    """Render a report as summary lines for console output."""
    lines = [
        f"Assigned passengers: {report.served_count}/{report.passenger_count}",
        f"Vehicles used: {report.used_vehicles}",
        f"Total distance: {report.total_distance:.2f} km",
        f"Total time: {report.total_time:.1f} min",
        f"Average time per vehicle: {report.average_time_per_vehicle:.1f} min",
    ]
    if report.unassigned_count:
        lines.append(
            f"Could not assign {report.unassigned_count} of "
            f"{report.passenger_count} passengers."
        )
    if report.overloaded_vehicles:
        ids = ", ".join(str(i) for i in report.overloaded_vehicles)
        lines.append(f"Capacity exceeded in vehicle(s): {ids}")
    if report.duplicate_passengers:
        ids = ", ".join(str(i) for i in report.duplicate_passengers)
        lines.append(f"Passenger(s) assigned more than once: {ids}")
    return lines
