"""Vehicle entity, identified by its plate within the owner's records."""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .tyre import Tyre

VEHICLE_TYPES = ("car", "truck", "motorcycle")
DEFAULT_VEHICLE_TYPE = VEHICLE_TYPES[0]


@dataclass
class Vehicle:
    """A user's vehicle and its tyre record."""

    plate: str
    current_mileage: str = ""
    type: str = DEFAULT_VEHICLE_TYPE
    tyres: Tyre = field(default_factory=Tyre)

    @classmethod
    def blank(cls, day: Optional[date] = None) -> "Vehicle":
        """Creation form defaults."""
        return cls(plate="", tyres=Tyre.blank(day))
