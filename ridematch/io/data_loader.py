"""I/O utilities for reading planning instances.

Instance files are JSON documents shaped like
:class:`ridematch.io.schemas.InstanceFile`::

    {
        "destination": {"name": str, "latitude": float, "longitude": float,
                        "target_time": "HH:MM:SS"},
        "passengers": [{"id": int, "name": str, "latitude": float,
                        "longitude": float, "address": str | null}],
        "vehicles": [{"id": int, "capacity": int, "latitude": float,
                      "longitude": float, "driver_name": str | null}]
    }
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ridematch.io.schemas import InstanceFile
from ridematch.models.geo import Coordinate
from ridematch.models.passenger import Passenger
from ridematch.models.vehicle import Vehicle


@dataclass
class Instance:
    """Domain objects built from an instance file.

    Attributes:
        name: Instance name (file stem).
        destination: Shared arrival point.
        destination_name: Display name of the destination.
        target_time: Arrival deadline string, parsed later by the scheduler.
        passengers: Riders to pick up.
        vehicles: Available fleet.
    """

    name: str
    destination: Coordinate
    destination_name: str
    target_time: str
    passengers: list[Passenger]
    vehicles: list[Vehicle]


def instance_from_schema(data: InstanceFile, name: str = "instance") -> Instance:
    """Convert a validated instance file into domain objects."""
    return Instance(
        name=name,
        destination=Coordinate(data.destination.latitude, data.destination.longitude),
        destination_name=data.destination.name,
        target_time=data.destination.target_time,
        passengers=[
            Passenger(
                passenger_id=p.id,
                name=p.name,
                location=Coordinate(p.latitude, p.longitude),
                address=p.address,
            )
            for p in data.passengers
        ],
        vehicles=[
            Vehicle(
                vehicle_id=v.id,
                capacity=v.capacity,
                start=Coordinate(v.latitude, v.longitude),
                start_address=v.address,
                driver_name=v.driver_name,
            )
            for v in data.vehicles
        ],
    )


def load_instance(path: str | Path) -> Instance:
    """Load and validate a JSON instance file.

    Args:
        path: Path to the instance file.

    Returns:
        The instance as domain objects.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        pydantic.ValidationError: If the file content is malformed.
    """
    path = Path(path)
    with open(path) as fh:
        data = InstanceFile.model_validate_json(fh.read())
    return instance_from_schema(data, name=path.stem)
