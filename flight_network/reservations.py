"""Reservation book bound to a flight network."""
from __future__ import annotations

import logging
import threading
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from . import config
from .database import ensure_schema, init_db, session_scope
from .graph import FlightGraph
from .models import Reservation, ReservationCounter

logger = logging.getLogger(__name__)

_COUNTER_ID = 1


class ReservationError(RuntimeError):
    """Base class for reservation book failures."""


class NotFoundError(ReservationError):
    """Raised when no reservation matches the requested passenger."""

    def __init__(self, passenger_name: str) -> None:
        super().__init__(f"No reservation found for passenger '{passenger_name}'.")
        self.passenger_name = passenger_name


class CapacityExceededError(ReservationError):
    """Raised when the reservation book already holds its maximum."""

    def __init__(self, capacity: int) -> None:
        super().__init__(f"Reservation book is full ({capacity} reservations).")
        self.capacity = capacity


def full_name(first_name: str, last_name: str) -> str:
    return f"{first_name} {last_name}"


class ReservationStore:
    """Ordered, capacity-bounded set of reservations.

    Reservation numbers come from a counter that only moves forward, so a
    number freed by :meth:`cancel` is never handed out again. Listing order is
    reservation-number order, which is also insertion order; a cancelled
    record simply drops out of it.

    Name lookups are exact and case-sensitive: ``"john doe"`` and
    ``"John Doe"`` are different passengers.

    A caller-supplied session factory must be built with
    ``expire_on_commit=False`` since records are returned after their session
    closes, as :func:`create_session_factory` does.
    """

    def __init__(
        self,
        session_factory: Optional[sessionmaker[Session]] = None,
        *,
        max_reservations: Optional[int] = None,
    ) -> None:
        if session_factory is None:
            session_factory = init_db()
        else:
            ensure_schema(session_factory)
        self._session_factory = session_factory
        self.capacity = config.MAX_RESERVATIONS if max_reservations is None else max_reservations
        # Guards number allocation and removal.
        self._lock = threading.Lock()
        with session_scope(self._session_factory) as session:
            self._counter(session)

    @property
    def last_reservation_no(self) -> int:
        with session_scope(self._session_factory) as session:
            return self._counter(session).last_number

    @staticmethod
    def _counter(session: Session) -> ReservationCounter:
        counter = session.get(ReservationCounter, _COUNTER_ID)
        if counter is None:
            # Databases written before the counter existed resume from their rows.
            highest = session.scalar(select(func.max(Reservation.reservation_no))) or 0
            counter = ReservationCounter(id=_COUNTER_ID, last_number=highest)
            session.add(counter)
            session.flush()
        return counter

    def __len__(self) -> int:
        with session_scope(self._session_factory) as session:
            return self._count(session)

    @property
    def is_full(self) -> bool:
        return len(self) >= self.capacity

    @staticmethod
    def _count(session: Session) -> int:
        return session.scalar(select(func.count()).select_from(Reservation)) or 0

    @staticmethod
    def _first_for(session: Session, passenger_name: str) -> Optional[Reservation]:
        stmt = (
            select(Reservation)
            .where(Reservation.passenger_name == passenger_name)
            .order_by(Reservation.reservation_no)
            .limit(1)
        )
        return session.scalars(stmt).first()

    def make_reservation(
        self,
        first_name: str,
        last_name: str,
        origin: str,
        destination: str,
        graph: FlightGraph,
    ) -> int:
        """Book ``first_name last_name`` from ``origin`` to ``destination``.

        The first flight loaded for that exact leg is attached. When none
        exists the reservation is still recorded, with its flight fields left
        unset. Returns the new reservation number.
        """

        with self._lock:
            with session_scope(self._session_factory) as session:
                if self._count(session) >= self.capacity:
                    logger.warning(
                        "Refusing reservation for %s %s: book is full", first_name, last_name
                    )
                    raise CapacityExceededError(self.capacity)

                counter = self._counter(session)
                counter.last_number += 1
                number = counter.last_number
                passenger_name = full_name(first_name, last_name)
                flight = graph.find_flight(origin, destination)
                reservation = Reservation(
                    reservation_no=number,
                    first_name=first_name,
                    last_name=last_name,
                    passenger_name=passenger_name,
                    origin=origin,
                    destination=destination,
                )
                if flight is not None:
                    reservation.flight_no = flight.number
                    reservation.departure_time = flight.departure_time
                    reservation.arrival_time = flight.arrival_time
                else:
                    logger.warning(
                        "Reservation %d has no direct flight %s -> %s", number, origin, destination
                    )
                session.add(reservation)

        logger.info("Reservation %d created for %s", number, passenger_name)
        return number

    def schedule_for(self, passenger_name: str) -> Reservation:
        """Return the earliest reservation held by ``passenger_name``."""

        with session_scope(self._session_factory) as session:
            reservation = self._first_for(session, passenger_name)
        if reservation is None:
            raise NotFoundError(passenger_name)
        return reservation

    def cancel(self, passenger_name: str) -> Reservation:
        """Remove the earliest reservation held by ``passenger_name`` and return it."""

        with self._lock:
            with session_scope(self._session_factory) as session:
                reservation = self._first_for(session, passenger_name)
                if reservation is None:
                    raise NotFoundError(passenger_name)
                session.delete(reservation)
        logger.info("Reservation %d cancelled for %s", reservation.reservation_no, passenger_name)
        return reservation

    def manifest_for(self, flight_no: int, graph: FlightGraph) -> List[Reservation]:
        """Reservations on flight ``flight_no`` sorted by passenger name.

        A reservation only counts when its leg still matches a flight in
        ``graph`` carrying that number.
        """

        legs = {(flight.origin, flight.destination) for flight in graph.flights_numbered(flight_no)}
        if not legs:
            return []
        with session_scope(self._session_factory) as session:
            candidates = session.scalars(
                select(Reservation)
                .where(Reservation.flight_no == flight_no)
                .order_by(Reservation.reservation_no)
            ).all()
        passengers = [r for r in candidates if (r.origin, r.destination) in legs]
        return sorted(passengers, key=lambda r: r.passenger_name)

    def reservations(self) -> List[Reservation]:
        with session_scope(self._session_factory) as session:
            return list(session.scalars(select(Reservation).order_by(Reservation.reservation_no)))
