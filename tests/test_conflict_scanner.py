import threading
from datetime import date, timedelta

import pytest

from agents.conflict_scanner import ConflictScannerAgent
from communication.message import MessageType
from communication.message_bus import MessageBus
from config import SchedulingConfig
from models.conflicts import ConflictType
from repository import InMemoryRotaStore

MONDAY = date(2025, 1, 6)
SUNDAY = MONDAY + timedelta(days=6)


@pytest.fixture
def scanner(bus, store):
    agent = ConflictScannerAgent(bus, store)
    yield agent
    agent.shutdown()


def test_clean_rota(scanner, store, make_shift):
    store.add_shifts([
        make_shift("08:00", "16:00", assigned=["u1"]),
        make_shift("16:00", "23:00", assigned=["u2"]),
    ])

    report = scanner.execute(home_ids=["H1"], start_date=MONDAY, end_date=SUNDAY)

    assert report.is_clean
    assert report.assignments_checked == 2
    assert scanner.scans_completed == 1
    assert scanner.last_report is report


def test_time_off_approved_after_assignment(scanner, store, make_shift, make_time_off):
    store.add_shifts([make_shift("08:00", "16:00", assigned=["u1"])])
    store.add_time_off(make_time_off("u1", MONDAY - timedelta(days=2), MONDAY))

    report = scanner.execute(home_ids=["H1"], start_date=MONDAY, end_date=SUNDAY)

    (finding,) = report.findings
    assert finding.user_id == "u1"
    assert finding.conflict_type == ConflictType.TIME_OFF


def test_imported_overlap_is_reported_from_both_sides(scanner, store, make_shift):
    night = make_shift("22:00", "06:00", assigned=["u1"])
    early = make_shift("05:00", "12:00", shift_date=MONDAY + timedelta(days=1), assigned=["u1"])
    store.add_shifts([night, early])

    report = scanner.execute(home_ids=["H1"], start_date=MONDAY, end_date=SUNDAY)

    assert len(report.by_type(ConflictType.OVERLAPPING_SHIFT)) == 2
    assert {f.shift.id for f in report.findings} == {night.id, early.id}


def test_excessive_daily_hours(bus, store, make_shift):
    store.add_shifts([
        make_shift("06:00", "14:00", assigned=["u2"]),
        make_shift("14:00", "20:00", assigned=["u2"]),
    ])
    scanner = ConflictScannerAgent(bus, store, SchedulingConfig(daily_hour_limit=12))
    try:
        report = scanner.execute(home_ids=["H1"], start_date=MONDAY, end_date=MONDAY)
    finally:
        scanner.shutdown()

    assert len(report.by_type(ConflictType.MAX_HOURS_EXCEEDED)) == 2
    assert report.for_user("u2") == report.findings


def test_inactive_shifts_and_other_homes_are_skipped(scanner, store, make_shift, make_time_off):
    store.add_time_off(make_time_off("u1", MONDAY))
    store.add_shifts([
        make_shift("08:00", "16:00", assigned=["u1"], is_active=False),
        make_shift("08:00", "16:00", home_id="H2", assigned=["u1"]),
    ])

    report = scanner.execute(home_ids=["H1"], start_date=MONDAY, end_date=SUNDAY)

    assert report.is_clean
    assert report.assignments_checked == 0


def test_notifications(scanner, bus, store, make_shift, make_time_off):
    store.add_shifts([make_shift("08:00", "16:00", assigned=["u1"])])
    store.add_time_off(make_time_off("u1", MONDAY))

    scanner.execute(home_ids=["H1"], start_date=MONDAY, end_date=MONDAY)
    scanner.execute(home_ids=["H1"], start_date=MONDAY, end_date=MONDAY, notify=False)

    assert len(bus.get_history(sender="ConflictScanner", msg_type=MessageType.CONFLICT)) == 1
    (complete,) = bus.get_history(msg_type=MessageType.SCAN_COMPLETE)
    assert complete.receiver == "Coordinator"
    assert complete.content["time_off"] == 1


def test_default_window():
    scanner_config = SchedulingConfig(scan_days_back=3, scan_days_ahead=10)
    scanner = ConflictScannerAgent(MessageBus(verbose=False), InMemoryRotaStore(), scanner_config)
    assert scanner.default_window(MONDAY) == (MONDAY - timedelta(days=3),
                                              MONDAY + timedelta(days=10))
    scanner.shutdown()


def test_periodic_scan_runs_until_stopped(scanner, store, make_shift, monkeypatch):
    scanned = threading.Event()
    original = scanner.execute

    def execute(**kwargs):
        report = original(start_date=MONDAY, end_date=SUNDAY, **kwargs)
        scanned.set()
        return report

    monkeypatch.setattr(scanner, "execute", execute)
    store.add_shifts([make_shift("08:00", "16:00", assigned=["u1"])])

    scanner.start_periodic(["H1"], interval=60)
    assert scanned.wait(5)
    assert scanner.is_running

    scanner.stop_periodic()

    assert not scanner.is_running
    assert scanner.scans_completed >= 1
    assert scanner.last_report.assignments_checked == 1


def test_start_periodic_twice_keeps_one_thread(scanner):
    scanner.start_periodic([], interval=60)
    first = scanner._thread
    scanner.start_periodic([], interval=60)

    assert scanner._thread is first
    scanner.stop_periodic()
