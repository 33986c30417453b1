"""Pydantic v2 schemas for instance files and stored schedules.

These models are the serialisable boundary of the planner, decoupled from
the ``ridematch.models`` domain classes used by the optimiser.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator


class Location(BaseModel):
    """A latitude/longitude pair in decimal degrees."""

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class PassengerInput(Location):
    """A passenger entry of an instance file."""

    id: int
    name: str
    address: str | None = None


class VehicleInput(Location):
    """A vehicle entry of an instance file.

    Attributes:
        capacity: Passenger seats. Must be at least 1.
    """

    id: int
    capacity: int = Field(ge=1)
    address: str | None = None
    driver_name: str | None = None


class DestinationInput(Location):
    """The shared destination and its arrival deadline.

    Attributes:
        target_time: Arrival deadline as ``HH:MM:SS``. Left as a string so a
            malformed value reaches the scheduler, which falls back to 08:00.
    """

    name: str = "Destination"
    address: str | None = None
    target_time: str = "08:00:00"


class InstanceFile(BaseModel):
    """A complete planning instance.

    Attributes:
        destination: Where every vehicle must arrive.
        passengers: Riders to pick up.
        vehicles: Available fleet.
    """

    destination: DestinationInput
    passengers: list[PassengerInput] = Field(default_factory=list)
    vehicles: list[VehicleInput] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_ids(self) -> InstanceFile:
        """Reject repeated passenger or vehicle identifiers."""
        for label, ids in (
            ("passenger", [p.id for p in self.passengers]),
            ("vehicle", [v.id for v in self.vehicles]),
        ):
            repeated = sorted({i for i in ids if ids.count(i) > 1})
            if repeated:
                raise ValueError(f"Duplicate {label} id(s): {repeated}")
        return self


class PickupRecord(BaseModel):
    """One scheduled pickup."""

    passenger_id: int
    name: str
    stop_number: int
    pickup_time: str | None = None
    address: str | None = None


class VehicleScheduleRecord(BaseModel):
    """The stored plan of one vehicle.

    Attributes:
        vehicle_id: Vehicle identifier.
        driver_name: Driver display name, when known.
        departure_time: ``HH:MM`` departure from the vehicle start.
        total_distance: Route length in km.
        total_time: Route duration in minutes.
        route_source: ``"estimate"`` or ``"directions"``.
        pickups: Pickups in visiting order.
    """

    vehicle_id: int
    driver_name: str | None = None
    departure_time: str | None = None
    total_distance: float
    total_time: float
    route_source: str = "estimate"
    pickups: list[PickupRecord]

    @field_validator("pickups")
    @classmethod
    def at_least_one_pickup(cls, v: list[PickupRecord]) -> list[PickupRecord]:
        """Only vehicles that carry someone are stored."""
        if len(v) < 1:
            raise ValueError("pickups must contain at least one passenger.")
        return v


class ScheduleRecord(BaseModel):
    """A finished plan as handed to the schedule store.

    Attributes:
        target_date: Day the schedule is for. Key of the store.
        target_time: Arrival deadline as ``HH:MM``.
        destination: Destination display name.
        score: Fitness of the chosen solution.
        vehicles: Plans of the vehicles in use.
        unassigned_passenger_ids: Passengers left without a vehicle.
        created_at: When the record was produced.
    """

    target_date: date
    target_time: str
    destination: str
    score: float
    vehicles: list[VehicleScheduleRecord] = Field(default_factory=list)
    unassigned_passenger_ids: list[int] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
