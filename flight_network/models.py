"""SQLAlchemy models for the reservation book."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class Reservation(Base):
    """A passenger booked between two cities, bound to at most one flight.

    ``reservation_no`` is handed out by :class:`ReservationStore` and doubles as
    the insertion order. The flight columns stay ``NULL`` when no direct flight
    served the requested leg at booking time.
    """

    __tablename__ = "reservations"

    reservation_no: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    passenger_name: Mapped[str] = mapped_column(String(101), nullable=False, index=True)
    origin: Mapped[str] = mapped_column(String(60), nullable=False)
    destination: Mapped[str] = mapped_column(String(60), nullable=False)
    flight_no: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    departure_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    arrival_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    @property
    def is_bound(self) -> bool:
        return self.flight_no is not None

    def __repr__(self) -> str:
        return (
            f"Reservation(no={self.reservation_no}, passenger={self.passenger_name!r}, "
            f"{self.origin}->{self.destination}, flight={self.flight_no})"
        )


class ReservationCounter(Base):
    """Single-row high-water mark of issued reservation numbers.

    Outlives cancellations, so a store reopened on the same database keeps
    counting from the last number ever issued rather than the last one still
    booked.
    """

    __tablename__ = "reservation_counter"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    last_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
