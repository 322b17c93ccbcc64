import pytest

from models.staff import Caller, Role
from scheduling.visibility import RULES, filter_shifts

STAFF_HOMES = {"u1": {"H1"}, "u2": {"H1"}, "u4": {"H2"}}


@pytest.fixture
def shifts(make_shift):
    return [
        make_shift("08:00", "16:00", assigned=["u1"]),
        make_shift("16:00", "00:00", assigned=["u4"], home_id="H2"),
        make_shift("00:00", "08:00"),
        make_shift("08:00", "20:00", assigned=["u2", "u4"]),
    ]


def test_every_role_has_a_rule():
    assert set(RULES) == set(Role)


@pytest.mark.parametrize("role", [Role.ADMIN, Role.HOME_MANAGER, "admin", "home_manager"])
def test_managers_see_everything(shifts, role):
    caller = Caller(user_id="m1", role=role, home_ids=frozenset({"H1"}))
    assert filter_shifts(shifts, caller, STAFF_HOMES) == shifts


def test_support_worker_sees_only_own_shifts(shifts):
    caller = Caller(user_id="u1", role=Role.SUPPORT_WORKER, home_ids=frozenset({"H1"}))
    assert filter_shifts(shifts, caller, STAFF_HOMES) == [shifts[0]]


def test_senior_staff_sees_shifts_of_colleagues_in_their_homes(shifts):
    caller = Caller(user_id="u3", role="senior_staff", home_ids=frozenset({"H1"}))
    visible = filter_shifts(shifts, caller, STAFF_HOMES)

    # Unassigned shifts and shifts staffed only from other homes are hidden
    assert visible == [shifts[0], shifts[3]]


def test_senior_staff_without_staff_homes_sees_nothing(shifts):
    caller = Caller(user_id="u3", role=Role.SENIOR_STAFF, home_ids=frozenset({"H1"}))
    assert filter_shifts(shifts, caller) == []


@pytest.mark.parametrize("role", ["auditor", "", None])
def test_unknown_role_sees_nothing(shifts, role):
    caller = Caller(user_id="x", role=role, home_ids=frozenset({"H1"}))
    assert filter_shifts(shifts, caller, STAFF_HOMES) == []


def test_filter_does_not_modify_input(shifts):
    before = list(shifts)
    filter_shifts(shifts, Caller(user_id="u1", role=Role.SUPPORT_WORKER), STAFF_HOMES)
    assert shifts == before
