"""User-scoped vehicle records: users/{userId}/vehicles/{plate}."""

import logging
from typing import List, Optional

from .errors import RecordError
from .records import parse_vehicle, vehicle_to_record
from .store import DocumentStore, check_segment
from .vehicle import Vehicle

logger = logging.getLogger(__name__)


def collection_path(user_id: str) -> str:
    return f"users/{check_segment(user_id)}/vehicles"


def document_path(user_id: str, plate: str) -> str:
    return f"{collection_path(user_id)}/{check_segment(plate)}"


def normalize_plate(plate: str) -> str:
    """Plates are keys; surrounding whitespace is never part of one."""
    return check_segment((plate or "").strip())


def list_vehicles(store: DocumentStore, user_id: str) -> List[Vehicle]:
    """
    All vehicles owned by a user, in store order.

    Records that do not parse are skipped with a warning rather than
    failing the whole listing.
    """
    vehicles = []
    for plate, body in store.list(collection_path(user_id)):
        try:
            vehicles.append(parse_vehicle(plate, body))
        except RecordError as e:
            logger.warning("Skipping vehicle %s for user %s: %s", plate, user_id, e)
    return vehicles


def get_vehicle(store: DocumentStore, user_id: str, plate: str) -> Optional[Vehicle]:
    """One vehicle by plate, or None. Raises RecordError for a malformed record."""
    body = store.get(document_path(user_id, plate))
    if body is None:
        return None
    return parse_vehicle(plate, body)


def create_vehicle(store: DocumentStore, user_id: str, vehicle: Vehicle) -> Vehicle:
    """
    Write a vehicle under its plate.

    An existing record with the same plate is replaced (last write wins).
    """
    store.set(document_path(user_id, vehicle.plate), vehicle_to_record(vehicle))
    return vehicle
