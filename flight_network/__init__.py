"""Flight network queries and a bounded reservation book."""
from .config import configure_logging
from .database import create_session_factory, init_db
from .dataset import build_sample_graph, generate_network, populate_reservations
from .graph import CityRegistry, CityRegistryFullError, Flight, FlightGraph
from .models import Reservation
from .reservations import (
    CapacityExceededError,
    NotFoundError,
    ReservationError,
    ReservationStore,
)

__all__ = [
    "configure_logging",
    "create_session_factory",
    "init_db",
    "build_sample_graph",
    "generate_network",
    "populate_reservations",
    "CityRegistry",
    "CityRegistryFullError",
    "Flight",
    "FlightGraph",
    "Reservation",
    "CapacityExceededError",
    "NotFoundError",
    "ReservationError",
    "ReservationStore",
]
