"""Adapters between planner results and the stored schedule schema."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ridematch.io.schemas import PickupRecord, ScheduleRecord, VehicleScheduleRecord

if TYPE_CHECKING:
    from ridematch.planner import RidePlan


def plan_to_record(plan: RidePlan) -> ScheduleRecord:
    """Convert a finished plan to a :class:`ScheduleRecord`.

    Only vehicles carrying passengers are included. Pickups follow each
    vehicle's visiting order and carry the stop number of their route
    breakdown.

    Args:
        plan: A plan returned by :func:`ridematch.planner.plan_rides`.

    Returns:
        The record, keyed by ``plan.target_date``.
    """
    vehicles: list[VehicleScheduleRecord] = []
    for vehicle in plan.solution.used_vehicles():
        details = plan.route_details.get(vehicle.vehicle_id)
        pickups = []
        for position, passenger in enumerate(vehicle.assigned_passengers, start=1):
            stop = details.stop_for(passenger.passenger_id) if details else None
            pickups.append(
                PickupRecord(
                    passenger_id=passenger.passenger_id,
                    name=passenger.name,
                    stop_number=stop.stop_number if stop else position,
                    pickup_time=passenger.estimated_pickup_time,
                    address=passenger.address,
                )
            )
        vehicles.append(
            VehicleScheduleRecord(
                vehicle_id=vehicle.vehicle_id,
                driver_name=vehicle.driver_name,
                departure_time=vehicle.departure_time,
                total_distance=round(
                    details.total_distance if details else vehicle.total_distance, 6
                ),
                total_time=round(
                    details.total_time if details else vehicle.total_time, 6
                ),
                route_source=details.source if details else "estimate",
                pickups=pickups,
            )
        )

    assigned = plan.solution.assigned_ids()
    return ScheduleRecord(
        target_date=plan.target_date,
        target_time=plan.target_time.strftime("%H:%M"),
        destination=plan.destination_name,
        score=round(plan.solution.score, 6),
        vehicles=vehicles,
        unassigned_passenger_ids=sorted(
            p.passenger_id for p in plan.passengers if p.passenger_id not in assigned
        ),
    )


def record_to_json(record: ScheduleRecord, indent: int = 2) -> str:
    """Serialise a record to a JSON string."""
    return record.model_dump_json(indent=indent)
