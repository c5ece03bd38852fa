"""
Vehicle and tyre record tracking.

This package provides:
- Tyre, Vehicle: the record data model
- records: mapping between stored record bodies and model objects
- DocumentStore: YAML-file document store addressed by path
- vehicles: user-scoped list/get/create of vehicle records
- guard: route gating on session-credential presence
- IdentityProvider, AuthContext: accounts, credentials and the current user
- VehicleListView, VehicleDetailView: view state machines
"""

from .errors import (
    AutoBuddyError,
    StoreError,
    InvalidKeyError,
    RecordError,
    AuthError,
    AuthNotReady,
)
from .tyre import Tyre, TYRE_TYPES, format_date_changed
from .vehicle import Vehicle, VEHICLE_TYPES
from .records import load_schema, parse_vehicle, vehicle_to_record
from .store import DocumentStore
from .vehicles import list_vehicles, get_vehicle, create_vehicle
from .guard import GuardDecision, decide
from .auth import User, IdentityProvider, AuthContext
from .view_state import ViewState
from .views import VehicleListView, VehicleDetailView, detail_path

__all__ = [
    "AutoBuddyError",
    "StoreError",
    "InvalidKeyError",
    "RecordError",
    "AuthError",
    "AuthNotReady",
    "Tyre",
    "TYRE_TYPES",
    "format_date_changed",
    "Vehicle",
    "VEHICLE_TYPES",
    "load_schema",
    "parse_vehicle",
    "vehicle_to_record",
    "DocumentStore",
    "list_vehicles",
    "get_vehicle",
    "create_vehicle",
    "GuardDecision",
    "decide",
    "User",
    "IdentityProvider",
    "AuthContext",
    "ViewState",
    "VehicleListView",
    "VehicleDetailView",
    "detail_path",
]
