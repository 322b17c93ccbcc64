"""
Role-based shift visibility.

Each role maps to one rule in a dispatch table that must cover every Role;
an unrecognised role sees nothing.
"""
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Set

from models.shift import Shift
from models.staff import Caller, Role

# staff user id -> home ids they belong to
StaffHomes = Mapping[str, Set[str]]

VisibilityRule = Callable[[Shift, Caller, StaffHomes], bool]


def _sees_all(shift: Shift, caller: Caller, staff_homes: StaffHomes) -> bool:
    return True


def _shares_home_with_assignee(shift: Shift, caller: Caller, staff_homes: StaffHomes) -> bool:
    caller_homes = set(caller.home_ids)
    return any(
        caller_homes & set(staff_homes.get(user_id, ()))
        for user_id in shift.assigned_user_ids
    )


def _self_assigned(shift: Shift, caller: Caller, staff_homes: StaffHomes) -> bool:
    return shift.is_assigned(caller.user_id)


RULES: Dict[Role, VisibilityRule] = {
    Role.ADMIN: _sees_all,
    Role.HOME_MANAGER: _sees_all,
    Role.SENIOR_STAFF: _shares_home_with_assignee,
    Role.SUPPORT_WORKER: _self_assigned,
}

_missing = set(Role) - set(RULES)
if _missing:
    raise RuntimeError(f"No visibility rule for roles: {sorted(r.value for r in _missing)}")


def filter_shifts(shifts: Sequence[Shift], caller: Caller,
                  staff_homes: Optional[StaffHomes] = None) -> List[Shift]:
    """
    Narrow a shift collection to what the caller may see.

    Args:
        shifts: Shifts to filter
        caller: The requesting identity
        staff_homes: Home membership of assigned staff, needed for
            senior staff

    Returns:
        The visible shifts, in input order
    """
    role = Role.from_string(caller.role)
    rule = RULES.get(role)
    if rule is None:
        return []
    homes = staff_homes or {}
    return [s for s in shifts if rule(s, caller, homes)]
