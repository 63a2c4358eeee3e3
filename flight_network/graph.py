"""In-memory flight network: cities, flights and the queries over them."""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from . import config

logger = logging.getLogger(__name__)


class CityRegistryFullError(RuntimeError):
    """Raised when registering a city would exceed the registry capacity."""


@dataclass(frozen=True)
class Flight:
    """A scheduled, directed flight between two cities.

    Times are plain integers (``830`` for 08:30 in the sample data) and are
    only ever compared with each other.
    """

    number: int
    origin: str
    destination: str
    departure_time: int
    arrival_time: int

    def as_row(self) -> List[object]:
        return [self.number, self.origin, self.destination, self.departure_time, self.arrival_time]


FlightRecord = Union[Flight, Sequence[object], Mapping[str, object]]


def _coerce_flight(record: FlightRecord) -> Flight:
    if isinstance(record, Flight):
        return record
    if isinstance(record, Mapping):
        return Flight(
            number=int(record["number"]),
            origin=str(record["origin"]),
            destination=str(record["destination"]),
            departure_time=int(record["departure_time"]),
            arrival_time=int(record["arrival_time"]),
        )
    number, origin, destination, departure, arrival = record
    return Flight(int(number), str(origin), str(destination), int(departure), int(arrival))


class CityRegistry:
    """Ordered set of city names served by the airline, capped at ``capacity``."""

    def __init__(self, cities: Iterable[str] = (), *, capacity: Optional[int] = None) -> None:
        self.capacity = config.MAX_CITIES if capacity is None else capacity
        self._names: List[str] = []
        for name in cities:
            self.register(name)

    def register(self, name: str) -> None:
        if name in self._names:
            return
        if len(self._names) >= self.capacity:
            raise CityRegistryFullError(
                f"Cannot register '{name}': registry holds {self.capacity} cities already."
            )
        self._names.append(name)

    def names(self) -> List[str]:
        return list(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._names))

    def __len__(self) -> int:
        return len(self._names)


class FlightGraph:
    """Directed multigraph of cities connected by flights.

    The flight list and the city registry are loaded independently and are
    never reconciled: a registered city may have no flights and a flight may
    touch a city that was never registered. Routing queries only look at the
    flights, :meth:`list_cities` only at the registry.
    """

    def __init__(
        self,
        flights: Iterable[FlightRecord] = (),
        cities: Union[CityRegistry, Iterable[str], None] = None,
    ) -> None:
        self._flights: Tuple[Flight, ...] = tuple(_coerce_flight(record) for record in flights)
        if isinstance(cities, CityRegistry):
            self._registry = cities
        else:
            self._registry = CityRegistry(cities or ())

        self._outgoing: Dict[str, List[int]] = {}
        self._incoming: Dict[str, List[int]] = {}
        for index, flight in enumerate(self._flights):
            self._outgoing.setdefault(flight.origin, []).append(index)
            self._incoming.setdefault(flight.destination, []).append(index)

    @classmethod
    def from_records(
        cls,
        records: Iterable[FlightRecord],
        *,
        cities: Union[CityRegistry, Iterable[str], None] = None,
    ) -> "FlightGraph":
        """Bulk-load a graph from tuples ``(number, origin, destination, dep, arr)`` or mappings."""

        return cls(records, cities)

    @property
    def flights(self) -> Tuple[Flight, ...]:
        return self._flights

    @property
    def registry(self) -> CityRegistry:
        return self._registry

    def __len__(self) -> int:
        return len(self._flights)

    def _departing(self, city: str) -> List[Flight]:
        return [self._flights[index] for index in self._outgoing.get(city, ())]

    def _arriving(self, city: str) -> List[Flight]:
        return [self._flights[index] for index in self._incoming.get(city, ())]

    def list_cities(self) -> List[str]:
        """Return the registered cities in registration order."""

        return self._registry.names()

    def city_options(self) -> List[str]:
        """Return every city that appears as a flight endpoint, sorted."""

        names = {flight.origin for flight in self._flights}
        names.update(flight.destination for flight in self._flights)
        return sorted(names)

    def departures_from(self, city: str) -> List[Flight]:
        """Flights leaving ``city`` ordered by departure time, load order on ties."""

        return sorted(self._departing(city), key=lambda flight: flight.departure_time)

    def arrivals_to(self, city: str) -> List[Flight]:
        """Flights landing in ``city`` ordered by arrival time, load order on ties."""

        return sorted(self._arriving(city), key=lambda flight: flight.arrival_time)

    def reachable_from(self, city: str) -> List[str]:
        """Distinct cities one hop away from ``city``, sorted."""

        return sorted({flight.destination for flight in self._departing(city)})

    def find_flight(self, origin: str, destination: str) -> Optional[Flight]:
        """Return the first loaded flight flying exactly ``origin`` to ``destination``."""

        for flight in self._departing(origin):
            if flight.destination == destination:
                return flight
        return None

    def flights_numbered(self, flight_no: int) -> List[Flight]:
        return [flight for flight in self._flights if flight.number == flight_no]

    def shortest_path(self, origin: str, destination: str) -> Optional[List[str]]:
        """Return the fewest-hops list of cities from ``origin`` to ``destination``.

        Breadth-first search relaxing each city's outgoing flights in load
        order; the first time a city is reached fixes its predecessor. Returns
        ``None`` when ``destination`` cannot be reached.
        """

        if origin == destination:
            return [origin]

        parents: Dict[str, Optional[str]] = {origin: None}
        queue = deque([origin])
        while queue:
            current = queue.popleft()
            for flight in self._departing(current):
                next_city = flight.destination
                if next_city in parents:
                    continue
                parents[next_city] = current
                if next_city == destination:
                    path = self._unwind(parents, destination)
                    logger.debug("Shortest path %s -> %s: %s", origin, destination, path)
                    return path
                queue.append(next_city)

        logger.debug("No path from %s to %s", origin, destination)
        return None

    @staticmethod
    def _unwind(parents: Mapping[str, Optional[str]], destination: str) -> List[str]:
        path: List[str] = []
        current: Optional[str] = destination
        while current is not None:
            path.append(current)
            current = parents[current]
        path.reverse()
        return path

    def find_route(self, origin: str, destination: str) -> Optional[List[Flight]]:
        """Resolve the shortest path into flights that can actually be connected.

        For every hop the flight with the earliest arrival among those leaving
        no earlier than the previous leg lands is chosen. Returns ``None`` when
        there is no path or some hop has no catchable flight.
        """

        path = self.shortest_path(origin, destination)
        if path is None:
            return None

        legs: List[Flight] = []
        ready_at: Optional[int] = None
        for leg_origin, leg_destination in zip(path, path[1:]):
            candidates = [
                flight
                for flight in self._departing(leg_origin)
                if flight.destination == leg_destination
                and (ready_at is None or flight.departure_time >= ready_at)
            ]
            if not candidates:
                logger.debug(
                    "No connecting flight %s -> %s after %s", leg_origin, leg_destination, ready_at
                )
                return None
            chosen = min(candidates, key=lambda flight: flight.arrival_time)
            legs.append(chosen)
            ready_at = chosen.arrival_time
        return legs
