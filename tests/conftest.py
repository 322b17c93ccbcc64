from datetime import date

import pytest

from agents.coordinator import RotaCoordinatorAgent
from communication.message_bus import MessageBus
from models.home import Home
from models.shift import Shift, StaffAssignment
from models.staff import Role, StaffMember, TimeOffRequest, TimeOffStatus
from repository import InMemoryRotaStore

# A Monday
WEEK_START = date(2025, 1, 6)


@pytest.fixture
def make_shift():
    def _make(start, end, shift_date=WEEK_START, home_id="H1", service_id="care",
              assigned=(), **kwargs):
        return Shift.create(
            home_id=home_id,
            service_id=service_id,
            shift_date=shift_date,
            start_time=start,
            end_time=end,
            assigned_staff=[StaffAssignment(user_id=u) for u in assigned],
            **kwargs,
        )
    return _make


@pytest.fixture
def make_time_off():
    def _make(user_id, start_date, end_date=None, status=TimeOffStatus.APPROVED, id="to-1"):
        return TimeOffRequest(
            id=id,
            user_id=user_id,
            start_date=start_date,
            end_date=end_date or start_date,
            status=status,
        )
    return _make


@pytest.fixture
def bus():
    return MessageBus(verbose=False)


@pytest.fixture
def store():
    store = InMemoryRotaStore()
    store.add_home(Home(id="H1", name="Oak House", city="Leeds"))
    store.add_home(Home(id="H2", name="Elm Lodge", city="York"))
    store.add_staff(StaffMember(id="u1", name="Alice Reid", role=Role.SUPPORT_WORKER, home_ids={"H1"}))
    store.add_staff(StaffMember(id="u2", name="Bilal Khan", role=Role.SUPPORT_WORKER, home_ids={"H1"}))
    store.add_staff(StaffMember(id="u3", name="Chen Wu", role=Role.SENIOR_STAFF, home_ids={"H1"}))
    store.add_staff(StaffMember(id="u4", name="Dara Quinn", role=Role.SUPPORT_WORKER, home_ids={"H2"}))
    store.add_staff(StaffMember(id="m1", name="Maya Patel", role=Role.HOME_MANAGER, home_ids={"H1"}))
    return store


@pytest.fixture
def coordinator(bus, store):
    agent = RotaCoordinatorAgent(bus, store)
    yield agent
    agent.shutdown()
