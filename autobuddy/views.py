"""Vehicle list and detail views, independent of the web framework.

Views report problems through a ``notify(message, category)`` callable
(the web app passes Flask's ``flash``) and never raise store errors to
their caller.
"""

import logging
from datetime import date
from typing import Callable, List, Mapping, Optional
from urllib.parse import quote

from .auth import User
from .errors import InvalidKeyError, RecordError, StoreError
from .store import DocumentStore
from .tyre import Tyre
from .vehicle import Vehicle
from .vehicles import create_vehicle, get_vehicle, list_vehicles, normalize_plate
from .view_state import ViewState

logger = logging.getLogger(__name__)

Notify = Callable[[str, str], None]

LIST_PATH = "/dashboard/vehicles"

# Form field name -> label, for fields the creation form requires
REQUIRED_FIELDS = {
    "plate": "Plate Number",
    "currentMileage": "Current Mileage",
    "tyreBrand": "Brand",
    "width": "Width",
    "aspectRatio": "Aspect Ratio",
    "rimDiameter": "Rim Diameter",
    "maxMileage": "Max Mileage",
}


def _ignore(message: str, category: str) -> None:
    pass


def detail_path(plate: str) -> str:
    """Navigation path of a vehicle's detail page."""
    return f"{LIST_PATH}/{quote(plate, safe='')}"


def vehicle_from_form(form: Mapping[str, str], today: Optional[date] = None) -> Vehicle:
    """Build a Vehicle from submitted creation-form fields, keeping values as typed."""
    defaults = Vehicle.blank(today)

    def value(name: str, default: str = "") -> str:
        raw = form.get(name)
        return default if raw is None else raw

    return Vehicle(
        plate=value("plate"),
        current_mileage=value("currentMileage"),
        type=value("type", defaults.type),
        tyres=Tyre(
            width=value("width"),
            aspect_ratio=value("aspectRatio"),
            rim_diameter=value("rimDiameter"),
            brand=value("tyreBrand"),
            type=value("tyreType", defaults.tyres.type),
            date_changed=value("dateChanged", defaults.tyres.date_changed),
            max_mileage=value("maxMileage"),
            vehicle_mileage_when_changed=value("vehicleMileageWhenChanged"),
            notes=value("notes"),
        ),
    )


def missing_fields(form: Mapping[str, str]) -> List[str]:
    """Labels of required form fields that were left blank."""
    return [
        label
        for name, label in REQUIRED_FIELDS.items()
        if not (form.get(name) or "").strip()
    ]


class VehicleListView:
    """The user's vehicle table plus the 'add vehicle' dialog."""

    def __init__(self, store: DocumentStore, user: Optional[User], notify: Notify = _ignore):
        self.store = store
        self.user = user
        self.notify = notify
        self.state = ViewState.INITIALIZING
        self.vehicles: List[Vehicle] = []
        self.form = Vehicle.blank()
        self.dialog_open = False

    def load(self) -> ViewState:
        """Fetch the user's vehicles. Without a user nothing is fetched."""
        self.state = ViewState.LOADING
        if self.user is None:
            self.state = ViewState.READY
            return self.state
        try:
            self.vehicles = list_vehicles(self.store, self.user.uid)
        except (StoreError, InvalidKeyError):
            logger.exception("Error fetching vehicles for %s", self.user.uid)
            self.notify("Failed to fetch vehicles", "error")
            self.state = ViewState.ERROR
            return self.state
        self.state = ViewState.READY
        return self.state

    def open_dialog(self) -> None:
        self.dialog_open = True

    def close_dialog(self) -> None:
        self.dialog_open = False

    def reset_form(self) -> None:
        self.form = Vehicle.blank()

    def create(self, form: Mapping[str, str]) -> bool:
        """
        Submit the creation form. Returns True when the vehicle was written.

        On failure the dialog stays open with the submitted values.
        """
        if self.user is None:
            return False
        self.form = vehicle_from_form(form)
        self.dialog_open = True

        missing = missing_fields(form)
        if missing:
            self.notify(f"Please fill in: {', '.join(missing)}", "error")
            return False

        try:
            self.form.plate = normalize_plate(self.form.plate)
            vehicle = create_vehicle(self.store, self.user.uid, self.form)
        except (StoreError, InvalidKeyError):
            logger.exception("Error adding vehicle for %s", self.user.uid)
            self.notify("Failed to add vehicle. Please try again.", "error")
            return False

        self._refresh_after_create(vehicle)
        self.reset_form()
        self.close_dialog()
        self.notify("Vehicle added successfully!", "success")
        return True

    def _refresh_after_create(self, vehicle: Vehicle) -> None:
        try:
            self.vehicles = list_vehicles(self.store, self.user.uid)
        except StoreError:
            logger.warning("Re-fetch after create failed; updating list locally")
            self.vehicles = [v for v in self.vehicles if v.plate != vehicle.plate]
            self.vehicles.append(vehicle)

    def detail_path(self, plate: str) -> str:
        return detail_path(plate)


class VehicleDetailView:
    """Read-only page for one vehicle."""

    def __init__(self, store: DocumentStore, user: Optional[User], notify: Notify = _ignore):
        self.store = store
        self.user = user
        self.notify = notify
        self.state = ViewState.INITIALIZING
        self.vehicle: Optional[Vehicle] = None

    def load(self, plate: Optional[str]) -> ViewState:
        self.state = ViewState.LOADING
        if self.user is None:
            self.notify("You must be signed in to view vehicles", "error")
            self.state = ViewState.ERROR
            return self.state
        if not plate:
            self.notify("No vehicle selected", "error")
            self.state = ViewState.ERROR
            return self.state

        try:
            self.vehicle = get_vehicle(self.store, self.user.uid, plate)
        except InvalidKeyError:
            self.vehicle = None
        except (StoreError, RecordError):
            logger.exception("Error fetching vehicle %s for %s", plate, self.user.uid)
            self.notify("Failed to fetch vehicle details", "error")
            self.state = ViewState.ERROR
            return self.state

        if self.vehicle is None:
            self.notify("Vehicle not found", "error")
            self.state = ViewState.NOT_FOUND
        else:
            self.state = ViewState.READY
        return self.state
