"""Tyre value object embedded in a vehicle record."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

TYRE_TYPES = ("Winter Tyres", "Summer Tyres", "All Season Tyres")
DEFAULT_TYRE_TYPE = TYRE_TYPES[0]


def format_date_changed(day: Optional[date] = None) -> str:
    """Format a date the way the creation form shows it (e.g. '1/1/2024')."""
    day = day or date.today()
    return f"{day.month}/{day.day}/{day.year}"


@dataclass
class Tyre:
    """The single tyre record attached to a vehicle."""

    width: str = ""
    aspect_ratio: str = ""
    rim_diameter: str = ""
    brand: str = ""
    type: str = DEFAULT_TYRE_TYPE
    date_changed: str = ""
    max_mileage: str = ""
    vehicle_mileage_when_changed: str = ""
    notes: str = ""

    @property
    def size(self) -> str:
        """Size triple for display, e.g. '205/55R16'."""
        return f"{self.width}/{self.aspect_ratio}R{self.rim_diameter}"

    @property
    def has_notes(self) -> bool:
        return bool(self.notes)

    @classmethod
    def blank(cls, day: Optional[date] = None) -> "Tyre":
        """Form defaults: empty fields, winter tyres, changed today."""
        return cls(type=DEFAULT_TYRE_TYPE, date_changed=format_date_changed(day))
