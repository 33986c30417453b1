"""Visualisation utilities for ride-sharing plans."""

from pathlib import Path

import matplotlib.pyplot as plt

from ridematch.models.geo import Coordinate
from ridematch.models.passenger import Passenger
from ridematch.models.solution import Solution


def plot_routes(
    solution: Solution,
    destination: Coordinate,
    passengers: list[Passenger] | None = None,
    output_path: str | Path = "routes.png",
    show: bool = True,
) -> None:
    """Render vehicle starts, pickups and routes on a longitude/latitude map.

    Creates a two-panel figure: the map with one coloured route per used
    vehicle on the left, and a legend panel on the right. Passengers listed
    in ``passengers`` but not carried by any vehicle are drawn as crosses.

    Args:
        solution: The solution to draw.
        destination: Shared arrival point.
        passengers: Full passenger list, used to mark unassigned riders.
        output_path: Filesystem path for the saved PNG image.
        show: Whether to call ``plt.show()`` after saving.
    """
    fig = plt.figure(figsize=(12, 7))
    grid = fig.add_gridspec(1, 2, width_ratios=[4, 1])

    ax = fig.add_subplot(grid[0])

    ax.scatter(
        [v.start.longitude for v in solution.vehicles],
        [v.start.latitude for v in solution.vehicles],
        c="red", marker="s", label="Vehicle starts", zorder=3,
    )
    ax.scatter(
        [destination.longitude], [destination.latitude],
        c="black", marker="*", s=200, label="Destination", zorder=4,
    )

    used = solution.used_vehicles()
    cmap = plt.get_cmap("tab20", max(len(used), 1))
    for i, vehicle in enumerate(used):
        points = vehicle.route_points(destination)
        ax.plot(
            [p.longitude for p in points],
            [p.latitude for p in points],
            color=cmap(i),
            marker="o",
            label=f"Vehicle {vehicle.vehicle_id} ({vehicle.load}/{vehicle.capacity})",
        )

    if passengers:
        assigned = solution.assigned_ids()
        missing = [p for p in passengers if p.passenger_id not in assigned]
        if missing:
            ax.scatter(
                [p.location.longitude for p in missing],
                [p.location.latitude for p in missing],
                c="grey", marker="x", label="Unassigned", zorder=3,
            )

    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")

    legend_ax = fig.add_subplot(grid[1])
    legend_ax.axis("off")
    handles, labels = ax.get_legend_handles_labels()
    legend_ax.legend(handles, labels, loc="center")

    fig.suptitle("Vehicle Routes to the Destination", fontsize=14)
    fig.tight_layout()
    fig.savefig(output_path, bbox_inches="tight")

    if show:
        plt.show()
    plt.close(fig)
