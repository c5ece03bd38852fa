"""Mapping between stored record bodies and Vehicle/Tyre objects.

Stored bodies use camelCase keys and hold everything except the plate,
which is the document key:

    currentMileage: '10000'
    type: car
    tyres:
      brand: Michelin
      type: Summer Tyres
      width: '205'
      ...
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml
from jsonschema import Draft7Validator

from .errors import RecordError
from .tyre import Tyre
from .vehicle import Vehicle

SCHEMA_PATH = Path(__file__).parent / "schema.yaml"

# Tyre attribute -> stored key
TYRE_FIELDS = {
    "width": "width",
    "aspect_ratio": "aspectRatio",
    "rim_diameter": "rimDiameter",
    "brand": "brand",
    "type": "type",
    "date_changed": "dateChanged",
    "max_mileage": "maxMileage",
    "vehicle_mileage_when_changed": "vehicleMileageWhenChanged",
    "notes": "notes",
}


@lru_cache()
def load_schema() -> Dict[str, Any]:
    """Load the vehicle record JSON schema from schema.yaml."""
    with open(SCHEMA_PATH) as f:
        return yaml.safe_load(f)


def record_errors(body: Any) -> list:
    """Return human-readable schema violations for a record body."""
    validator = Draft7Validator(load_schema())
    errors = []
    found = sorted(validator.iter_errors(body), key=lambda e: [str(p) for p in e.path])
    for error in found:
        location = ".".join(str(p) for p in error.path)
        errors.append(f"{location}: {error.message}" if location else error.message)
    return errors


def _text(value: Any) -> str:
    """Coerce a stored scalar to the string form the model uses."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_tyre(body: Any) -> Tyre:
    """Build a Tyre from its stored mapping; missing fields become ''."""
    body = body or {}
    return Tyre(**{attr: _text(body.get(key)) for attr, key in TYRE_FIELDS.items()})


def parse_vehicle(plate: str, body: Any) -> Vehicle:
    """
    Build a Vehicle from a document key and its stored body.

    Raises RecordError when the body does not match the record schema.
    Unknown keys are ignored.
    """
    errors = record_errors(body)
    if errors:
        raise RecordError(f"Vehicle record '{plate}' is malformed: {'; '.join(errors)}")
    return Vehicle(
        plate=plate,
        current_mileage=_text(body.get("currentMileage")),
        type=_text(body.get("type")),
        tyres=parse_tyre(body.get("tyres")),
    )


def tyre_to_record(tyre: Tyre) -> Dict[str, str]:
    """Serialize a Tyre to the stored dict format (camelCase keys)."""
    return {key: getattr(tyre, attr) for attr, key in TYRE_FIELDS.items()}


def vehicle_to_record(vehicle: Vehicle) -> Dict[str, Any]:
    """Serialize a Vehicle to its stored body; the plate is the key, not a field."""
    return {
        "currentMileage": vehicle.current_mileage,
        "type": vehicle.type,
        "tyres": tyre_to_record(vehicle.tyres),
    }
