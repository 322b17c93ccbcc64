"""
Care home and service models.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Set


class ServiceCategory(Enum):
    PERSONAL_CARE = "personal_care"
    MEDICAL = "medical"
    DOMESTIC = "domestic"
    SOCIAL = "social"
    SPECIALIST = "specialist"


@dataclass
class Home:
    """
    A care home site.

    Attributes:
        id: Home identifier
        name: Home name
        city: Location city
        capacity: Number of residents
        is_active: Whether the home is operating
    """
    id: str
    name: str
    city: str = ""
    capacity: int = 0
    is_active: bool = True

    def __str__(self) -> str:
        return f"{self.name} ({self.city})" if self.city else self.name


@dataclass
class Service:
    """
    A service delivered at one or more homes.

    Attributes:
        id: Service identifier
        name: Service name
        home_ids: Homes offering this service
        category: Service category
        is_24_hour: Whether the service runs around the clock
    """
    id: str
    name: str
    home_ids: Set[str] = field(default_factory=set)
    category: ServiceCategory = ServiceCategory.PERSONAL_CARE
    is_24_hour: bool = False

    def offered_at(self, home_id: str) -> bool:
        return home_id in self.home_ids
