from __future__ import annotations

import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from sqlalchemy.orm import sessionmaker

from flight_network.database import create_session_factory, init_db
from flight_network.graph import FlightGraph
from flight_network.reservations import (
    CapacityExceededError,
    NotFoundError,
    ReservationError,
    ReservationStore,
)


def make_abc_graph() -> FlightGraph:
    return FlightGraph.from_records(
        [
            (1, "A", "B", 830, 950),
            (2, "A", "C", 930, 1130),
            (3, "B", "C", 1200, 1400),
        ],
        cities=["A", "B", "C"],
    )


def make_file_session_factory():
    db_file = Path(tempfile.mkstemp(prefix="flight-network-test", suffix=".db")[1])
    return init_db(f"sqlite+pysqlite:///{db_file}")


def test_reservation_scenario_end_to_end():
    graph = make_abc_graph()
    store = ReservationStore()

    number = store.make_reservation("John", "Doe", "A", "C", graph)
    assert number == 1

    reservation = store.schedule_for("John Doe")
    assert reservation.reservation_no == 1
    assert reservation.flight_no == 2
    assert reservation.departure_time == 930
    assert reservation.arrival_time == 1130

    manifest = store.manifest_for(2, graph)
    assert [r.passenger_name for r in manifest] == ["John Doe"]

    cancelled = store.cancel("John Doe")
    assert cancelled.reservation_no == 1
    assert len(store) == 0
    with pytest.raises(NotFoundError):
        store.schedule_for("John Doe")


def test_reservation_without_direct_flight_is_still_recorded():
    graph = make_abc_graph()
    store = ReservationStore()

    number = store.make_reservation("Jane", "Roe", "C", "A", graph)

    reservation = store.schedule_for("Jane Roe")
    assert reservation.reservation_no == number
    assert reservation.flight_no is None
    assert reservation.departure_time is None
    assert reservation.arrival_time is None
    assert not reservation.is_bound
    assert (reservation.origin, reservation.destination) == ("C", "A")


def test_reservation_numbers_never_reused_after_cancel():
    graph = make_abc_graph()
    store = ReservationStore()

    first = store.make_reservation("Ann", "Lee", "A", "B", graph)
    second = store.make_reservation("Bob", "Lee", "A", "B", graph)
    store.cancel("Bob Lee")
    third = store.make_reservation("Cid", "Lee", "A", "B", graph)

    assert first < second < third
    assert third == 3
    assert store.last_reservation_no == 3


def test_cancel_compacts_and_keeps_order():
    graph = make_abc_graph()
    store = ReservationStore()
    for first in ("Ann", "Bob", "Cid", "Dee"):
        store.make_reservation(first, "Smith", "A", "B", graph)

    store.cancel("Bob Smith")

    remaining = store.reservations()
    assert [r.passenger_name for r in remaining] == ["Ann Smith", "Cid Smith", "Dee Smith"]
    assert [r.reservation_no for r in remaining] == [1, 3, 4]
    assert len(store) == 3


def test_schedule_and_cancel_use_first_match_only():
    graph = make_abc_graph()
    store = ReservationStore()
    store.make_reservation("Sam", "Hill", "A", "B", graph)
    store.make_reservation("Sam", "Hill", "B", "C", graph)

    assert store.schedule_for("Sam Hill").flight_no == 1
    store.cancel("Sam Hill")
    assert store.schedule_for("Sam Hill").flight_no == 3
    store.cancel("Sam Hill")
    with pytest.raises(NotFoundError):
        store.cancel("Sam Hill")


def test_name_matching_is_exact():
    graph = make_abc_graph()
    store = ReservationStore()
    store.make_reservation("John", "Doe", "A", "B", graph)

    for variant in ("john doe", "John  Doe", " John Doe", "John"):
        with pytest.raises(NotFoundError) as excinfo:
            store.schedule_for(variant)
        assert excinfo.value.passenger_name == variant
    assert len(store) == 1


def test_manifest_sorted_by_name_and_filtered_by_leg():
    graph = make_abc_graph()
    store = ReservationStore()
    store.make_reservation("Zoe", "Adams", "A", "C", graph)
    store.make_reservation("Amy", "Zane", "A", "C", graph)
    store.make_reservation("Max", "Moe", "A", "B", graph)

    manifest = store.manifest_for(2, graph)
    assert [r.passenger_name for r in manifest] == ["Amy Zane", "Zoe Adams"]
    assert store.manifest_for(99, graph) == []


def test_manifest_skips_records_stale_against_graph():
    booking_graph = make_abc_graph()
    store = ReservationStore()
    store.make_reservation("Ann", "Lee", "A", "C", booking_graph)

    renumbered = FlightGraph([(2, "B", "C", 1200, 1400)])
    assert store.manifest_for(2, renumbered) == []
    assert len(store.manifest_for(2, booking_graph)) == 1


def test_capacity_exceeded_leaves_store_unchanged():
    graph = make_abc_graph()
    store = ReservationStore()
    for index in range(100):
        store.make_reservation(f"Passenger{index}", "Test", "A", "B", graph)

    assert store.is_full
    with pytest.raises(CapacityExceededError) as excinfo:
        store.make_reservation("One", "More", "A", "B", graph)

    assert isinstance(excinfo.value, ReservationError)
    assert excinfo.value.capacity == 100
    assert len(store) == 100
    assert store.last_reservation_no == 100
    with pytest.raises(NotFoundError):
        store.schedule_for("One More")


def test_capacity_frees_up_after_cancel():
    graph = make_abc_graph()
    store = ReservationStore(max_reservations=2)
    store.make_reservation("Ann", "Lee", "A", "B", graph)
    store.make_reservation("Bob", "Lee", "A", "B", graph)
    with pytest.raises(CapacityExceededError):
        store.make_reservation("Cid", "Lee", "A", "B", graph)

    store.cancel("Ann Lee")
    assert store.make_reservation("Cid", "Lee", "A", "B", graph) == 3


def test_capacity_defaults_to_configured_maximum(monkeypatch):
    from flight_network import config

    monkeypatch.setattr(config, "MAX_RESERVATIONS", 1)
    graph = make_abc_graph()
    store = ReservationStore()
    store.make_reservation("Ann", "Lee", "A", "B", graph)
    with pytest.raises(CapacityExceededError):
        store.make_reservation("Bob", "Lee", "A", "B", graph)


def test_store_on_file_database_resumes_numbering():
    session_factory = make_file_session_factory()
    graph = make_abc_graph()
    store = ReservationStore(session_factory)
    store.make_reservation("Ann", "Lee", "A", "B", graph)
    store.make_reservation("Bob", "Lee", "A", "B", graph)

    reopened = ReservationStore(session_factory)
    assert len(reopened) == 2
    assert reopened.make_reservation("Cid", "Lee", "A", "B", graph) == 3


def test_supplied_session_factory_gets_schema():
    _, session_factory = create_session_factory("sqlite+pysqlite:///:memory:")
    store = ReservationStore(session_factory)
    assert store.reservations() == []


def test_concurrent_reservations_respect_capacity():
    graph = make_abc_graph()
    store = ReservationStore(make_file_session_factory(), max_reservations=4)

    def attempt(index: int):
        try:
            return store.make_reservation(f"User{index}", "Concurrent", "A", "B", graph)
        except CapacityExceededError:
            return None

    with ThreadPoolExecutor(max_workers=6) as pool:
        results = list(pool.map(attempt, range(6)))

    numbers = sorted(number for number in results if number is not None)
    assert numbers == [1, 2, 3, 4]
    assert len(store) == 4


def test_failed_cancel_leaves_store_unchanged():
    graph = make_abc_graph()
    store = ReservationStore()
    for first in ("Ann", "Bob", "Cid"):
        store.make_reservation(first, "Smith", "A", "B", graph)
    before = [(r.reservation_no, r.passenger_name) for r in store.reservations()]

    with pytest.raises(NotFoundError):
        store.cancel("Dee Smith")

    assert len(store) == 3
    assert [(r.reservation_no, r.passenger_name) for r in store.reservations()] == before
    assert store.last_reservation_no == 3


def test_reopened_store_does_not_reuse_cancelled_highest_number():
    session_factory = make_file_session_factory()
    graph = make_abc_graph()
    store = ReservationStore(session_factory)
    store.make_reservation("Ann", "Lee", "A", "B", graph)
    store.make_reservation("Bob", "Lee", "A", "B", graph)
    store.cancel("Bob Lee")

    reopened = ReservationStore(session_factory)
    assert reopened.last_reservation_no == 2
    assert reopened.make_reservation("Cid", "Lee", "A", "B", graph) == 3


def test_stores_sharing_a_database_share_the_counter():
    session_factory = make_file_session_factory()
    graph = make_abc_graph()
    first = ReservationStore(session_factory)
    second = ReservationStore(session_factory)

    assert first.make_reservation("Ann", "Lee", "A", "B", graph) == 1
    assert second.make_reservation("Bob", "Lee", "A", "B", graph) == 2
    assert first.make_reservation("Cid", "Lee", "A", "B", graph) == 3


def test_unbound_session_factory_is_rejected():
    with pytest.raises(ValueError, match="not bound"):
        ReservationStore(sessionmaker(expire_on_commit=False))
