"""Sample networks and reservations for tests and demos."""
from __future__ import annotations

import random
from typing import Dict, List, Sequence, Tuple

from .graph import Flight, FlightGraph
from .reservations import CapacityExceededError, ReservationStore

SAMPLE_CITIES: Sequence[str] = ("Karachi", "Lahore", "Islamabad")

SAMPLE_FLIGHTS: Sequence[Tuple[int, str, str, int, int]] = (
    (1, "Karachi", "Islamabad", 830, 950),
    (2, "Karachi", "Lahore", 930, 1130),
    (3, "Lahore", "Islamabad", 1200, 1400),
    (4, "Islamabad", "Karachi", 1400, 1600),
    (5, "Lahore", "Karachi", 1100, 1230),
    (6, "Islamabad", "Lahore", 1500, 1630),
)

CITY_POOL: Sequence[str] = (
    "Karachi",
    "Lahore",
    "Islamabad",
    "Peshawar",
    "Quetta",
    "Multan",
    "Faisalabad",
    "Sialkot",
    "Gwadar",
    "Skardu",
    "Gilgit",
    "Hyderabad",
)
FIRST_NAMES = ("Ava", "Noah", "Liam", "Mia", "Lucas", "Emma", "Ethan", "Isabella")
LAST_NAMES = ("Johnson", "Williams", "Smith", "Brown", "Garcia", "Lee")


def build_sample_graph() -> FlightGraph:
    """The six-flight demo network with its three registered cities."""

    return FlightGraph.from_records(SAMPLE_FLIGHTS, cities=SAMPLE_CITIES)


def _random_time(rng: random.Random, earliest_hour: int = 5, latest_hour: int = 21) -> int:
    return rng.randint(earliest_hour, latest_hour) * 100 + rng.choice((0, 15, 30, 45))


def generate_network(*, cities: int = 8, flights: int = 20, seed: int = 42) -> FlightGraph:
    """Build a deterministic pseudo-random network.

    Flight numbers run from 1 and times are HHMM integers; every flight
    lands one to three hours after it leaves.
    """

    if cities < 2 or cities > len(CITY_POOL):
        raise ValueError(f"cities must be between 2 and {len(CITY_POOL)}")

    rng = random.Random(seed)
    names = list(CITY_POOL[:cities])
    records: List[Flight] = []
    for number in range(1, flights + 1):
        origin, destination = rng.sample(names, 2)
        departure = _random_time(rng)
        arrival = departure + rng.randint(1, 3) * 100
        records.append(Flight(number, origin, destination, departure, arrival))
    return FlightGraph(records, names)


def populate_reservations(
    store: ReservationStore,
    graph: FlightGraph,
    *,
    reservations: int = 50,
    seed: int = 42,
) -> Dict[str, int]:
    """Book random passengers on random legs of ``graph``.

    Legs are drawn from the flights' endpoints, so some bookings land on a
    city pair with no direct flight and stay unbound. Stops early once the
    store is full.
    """

    rng = random.Random(seed)
    endpoints = graph.city_options()
    created = 0
    unbound = 0
    if len(endpoints) < 2:
        return {"requested": reservations, "created": 0, "unbound": 0}
    for _ in range(reservations):
        origin, destination = rng.sample(endpoints, 2)
        try:
            store.make_reservation(
                rng.choice(FIRST_NAMES),
                rng.choice(LAST_NAMES),
                origin,
                destination,
                graph,
            )
        except CapacityExceededError:
            break
        created += 1
        if graph.find_flight(origin, destination) is None:
            unbound += 1
    return {"requested": reservations, "created": created, "unbound": unbound}
