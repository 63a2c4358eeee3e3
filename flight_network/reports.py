"""Plain-text rendering of network queries and reservation records."""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from tabulate import tabulate

from .graph import Flight
from .models import Reservation

_TABLE_FORMAT = "github"


def _cell(value: Optional[object]) -> object:
    return "-" if value is None else value


def _table(rows: Sequence[Sequence[object]], headers: Sequence[str]) -> str:
    return tabulate(rows, headers=headers, tablefmt=_TABLE_FORMAT)


def _section(title: str, body: str) -> str:
    return f"{title}\n{body}" if body else title


def render_cities(cities: Iterable[str]) -> str:
    names = list(cities)
    body = "\n".join(names)
    return _section("List of all cities serviced by the airline:", body)


def render_departures(city: str, flights: Iterable[Flight]) -> str:
    rows = [[f.number, f.departure_time, f.destination] for f in flights]
    return _section(
        f"List of flight departures for {city}:",
        _table(rows, ["Flight No", "Departure Time", "Arrival City"]) if rows else "",
    )


def render_arrivals(city: str, flights: Iterable[Flight]) -> str:
    rows = [[f.number, f.arrival_time, f.origin] for f in flights]
    return _section(
        f"List of flight arrivals for {city}:",
        _table(rows, ["Flight No", "Arrival Time", "Departure City"]) if rows else "",
    )


def render_reachable(city: str, cities: Iterable[str]) -> str:
    return _section(f"Cities reachable from {city}:", "\n".join(cities))


def render_shortest_path(origin: str, destination: str, path: Optional[Sequence[str]]) -> str:
    if path is None:
        return f"No path found between {origin} and {destination}."
    return f"Shortest path from {origin} to {destination}:\n{' -> '.join(path)}"


def render_route(origin: str, destination: str, legs: Optional[Sequence[Flight]]) -> str:
    if legs is None:
        return f"No connecting route found between {origin} and {destination}."
    if not legs:
        return f"{origin} and {destination} are the same city; no flights needed."
    rows = [flight.as_row() for flight in legs]
    return _section(
        f"Route from {origin} to {destination}:",
        _table(rows, ["Flight No", "From", "To", "Departs", "Arrives"]),
    )


def render_confirmation(reservation_no: int) -> str:
    return f"Reservation successful. Reservation No: {reservation_no}"


def render_capacity_exceeded() -> str:
    return "No available reservation slots."


def render_not_found(passenger_name: str) -> str:
    return f"Passenger '{passenger_name}' not found or has no reservations."


def render_cancelled(passenger_name: str) -> str:
    return f"Reservation deleted for passenger {passenger_name}"


def render_schedule(reservation: Reservation) -> str:
    rows: List[List[object]] = [
        ["Reservation No", reservation.reservation_no],
        ["Passenger Name", reservation.passenger_name],
        ["Departure City", reservation.origin],
        ["Arrival City", reservation.destination],
        ["Flight No", _cell(reservation.flight_no)],
        ["Departure Time", _cell(reservation.departure_time)],
        ["Arrival Time", _cell(reservation.arrival_time)],
    ]
    return tabulate(rows, tablefmt="plain")


def render_manifest(flight_no: int, reservations: Iterable[Reservation]) -> str:
    rows = [
        [r.reservation_no, r.passenger_name, r.origin, r.destination] for r in reservations
    ]
    return _section(
        f"List of passengers for Flight No {flight_no}:",
        _table(rows, ["Reservation No", "Passenger Name", "Departure City", "Arrival City"])
        if rows
        else "",
    )
