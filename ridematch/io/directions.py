"""Road-network refinement of route estimates via the Google Directions API.

The optimiser works with straight-line distances. After a solution is chosen,
each used vehicle's route can be re-measured on the road network; any failure
keeps the straight-line estimate so scheduling always succeeds.
"""

from __future__ import annotations

import os
import sys
from datetime import datetime
from typing import Protocol

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ridematch.config import DIRECTIONS_API_KEY_ENV
from ridematch.models.geo import Coordinate
from ridematch.models.route_details import DESTINATION_NAME, RouteDetails, StopDetail
from ridematch.models.solution import Solution
from ridematch.models.vehicle import Vehicle

DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"


class DirectionsError(Exception):
    """The directions service returned no usable route."""


class RouteRefiner(Protocol):
    """Anything able to measure a vehicle's route on the road network."""

    def route_details(
        self,
        vehicle: Vehicle,
        destination: Coordinate,
        arrival: datetime | None = None,
    ) -> RouteDetails: ...


class DirectionsClient:
    """Thin client for the Google Directions web service.

    Waypoints are sent in the vehicle's visiting order and are never
    re-optimised by the service.

    Attributes:
        api_key: Google Maps API key.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        api_key: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialise the client.

        Args:
            api_key: API key. Read from ``GOOGLE_MAPS_API_KEY`` when omitted.
            session: HTTP session, injectable for tests.
            timeout: Request timeout in seconds.

        Raises:
            DirectionsError: If no API key is available.
        """
        self.api_key = api_key or os.environ.get(DIRECTIONS_API_KEY_ENV, "").strip()
        if not self.api_key:
            raise DirectionsError(
                f"No API key given and {DIRECTIONS_API_KEY_ENV} is not set."
            )
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # HTTP call (with tenacity retry for transient errors)
    # ------------------------------------------------------------------

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception_type((
            requests.ConnectionError,
            requests.Timeout,
        )),
        before_sleep=lambda rs: print(
            f"  [retry] Attempt {rs.attempt_number} failed "
            f"({rs.outcome.exception().__class__.__name__}), "  # type: ignore[union-attr]
            f"retrying in {rs.next_action.sleep:.1f}s...",  # type: ignore[union-attr]
            file=sys.stderr,
        ),
        reraise=True,
    )
    def _fetch(self, params: dict[str, str]) -> dict:
        response = self.session.get(DIRECTIONS_URL, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def build_params(
        self,
        vehicle: Vehicle,
        destination: Coordinate,
        arrival: datetime | None = None,
    ) -> dict[str, str]:
        """Query parameters for one vehicle's route."""
        params = {
            "origin": str(vehicle.start),
            "destination": str(destination),
            "key": self.api_key,
        }
        if vehicle.assigned_passengers:
            params["waypoints"] = "|".join(
                str(p.location) for p in vehicle.assigned_passengers
            )
        if arrival is not None:
            params["arrival_time"] = str(int(arrival.timestamp()))
        return params

    def route_details(
        self,
        vehicle: Vehicle,
        destination: Coordinate,
        arrival: datetime | None = None,
    ) -> RouteDetails:
        """Measure a vehicle's route on the road network.

        Args:
            vehicle: Vehicle whose start, pickups and destination are routed.
            destination: Final stop.
            arrival: Desired arrival, used for traffic-aware durations.

        Returns:
            Route breakdown with ``source="directions"``.

        Raises:
            DirectionsError: If the service status is not ``OK`` or the legs
                do not match the stops or lack a distance or duration.
            requests.RequestException: On HTTP failure after retries.
        """
        payload = self._fetch(self.build_params(vehicle, destination, arrival))
        status = payload.get("status", "UNKNOWN")
        if status != "OK" or not payload.get("routes"):
            message = payload.get("error_message", "")
            raise DirectionsError(f"Directions request failed: {status} {message}".strip())

        legs = payload["routes"][0].get("legs", [])
        names: list[tuple[int | None, str]] = [
            (p.passenger_id, p.name) for p in vehicle.assigned_passengers
        ]
        names.append((None, DESTINATION_NAME))
        if len(legs) != len(names):
            raise DirectionsError(
                f"Expected {len(names)} legs for vehicle {vehicle.vehicle_id}, "
                f"got {len(legs)}."
            )

        details = RouteDetails(vehicle_id=vehicle.vehicle_id, source="directions")
        cumulative_distance = 0.0
        cumulative_time = 0.0
        for number, ((passenger_id, name), leg) in enumerate(zip(names, legs), start=1):
            distance = _leg_value(leg, "distance", vehicle) / 1000.0
            duration = _leg_value(leg, "duration", vehicle) / 60.0
            cumulative_distance += distance
            cumulative_time += duration
            details.stops.append(
                StopDetail(
                    stop_number=number,
                    passenger_id=passenger_id,
                    passenger_name=name,
                    distance_from_previous=distance,
                    time_from_previous=duration,
                    cumulative_distance=cumulative_distance,
                    cumulative_time=cumulative_time,
                )
            )
        details.total_distance = cumulative_distance
        details.total_time = cumulative_time
        return details


def _leg_value(leg: object, field: str, vehicle: Vehicle) -> float:
    """Numeric ``value`` of a leg's ``distance`` or ``duration`` entry."""
    entry = leg.get(field) if isinstance(leg, dict) else None
    value = entry.get("value") if isinstance(entry, dict) else None
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise DirectionsError(
            f"Malformed leg for vehicle {vehicle.vehicle_id}: missing {field}."
        )
    return float(value)


def refine_route_details(
    solution: Solution,
    estimates: dict[int, RouteDetails],
    destination: Coordinate,
    refiner: RouteRefiner,
    arrival: datetime | None = None,
) -> dict[int, RouteDetails]:
    """Replace estimates with road-network values where the service allows.

    Any failure of the refiner, whatever its type, is reported on stderr
    and leaves that vehicle's estimate in place.

    Returns:
        A new mapping; ``estimates`` itself is not modified.
    """
    refined = dict(estimates)
    for vehicle in solution.used_vehicles():
        if vehicle.vehicle_id not in estimates:
            continue
        try:
            refined[vehicle.vehicle_id] = refiner.route_details(
                vehicle, destination, arrival
            )
        except Exception as exc:
            print(
                f"[directions] vehicle {vehicle.vehicle_id}: {exc}; "
                "keeping straight-line estimate",
                file=sys.stderr,
            )
    return refined
