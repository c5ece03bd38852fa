#!/usr/bin/env python3
"""Tests for user-scoped vehicle records."""

import pytest

from autobuddy import (
    DocumentStore,
    InvalidKeyError,
    RecordError,
    Tyre,
    Vehicle,
    create_vehicle,
    get_vehicle,
    list_vehicles,
)
from autobuddy.vehicles import document_path, normalize_plate


@pytest.fixture
def store(tmp_path):
    return DocumentStore(tmp_path)


def make_vehicle(plate="ABC123", brand="Michelin", mileage="10000"):
    return Vehicle(
        plate=plate,
        current_mileage=mileage,
        type="car",
        tyres=Tyre(
            brand=brand,
            type="Summer Tyres",
            width="205",
            aspect_ratio="55",
            rim_diameter="16",
            max_mileage="60000",
            vehicle_mileage_when_changed="5000",
            date_changed="1/1/2024",
            notes="",
        ),
    )


class TestPaths:
    """Tests for record path helpers."""

    def test_document_path(self):
        assert document_path("u1", "ABC123") == "users/u1/vehicles/ABC123"

    def test_normalize_plate_strips_whitespace(self):
        assert normalize_plate("  ABC123 ") == "ABC123"

    def test_normalize_plate_rejects_blank(self):
        with pytest.raises(InvalidKeyError):
            normalize_plate("   ")


class TestVehicleRecords:
    """Tests for list/get/create."""

    def test_create_then_get(self, store):
        vehicle = make_vehicle()
        create_vehicle(store, "u1", vehicle)
        assert get_vehicle(store, "u1", "ABC123") == vehicle

    def test_get_missing_is_none(self, store):
        assert get_vehicle(store, "u1", "NOPE") is None

    def test_list_returns_created_vehicle(self, store):
        vehicle = make_vehicle()
        create_vehicle(store, "u1", vehicle)
        assert list_vehicles(store, "u1") == [vehicle]

    def test_list_never_crosses_users(self, store):
        """Listing one user's vehicles never returns another user's."""
        create_vehicle(store, "u1", make_vehicle("ABC123"))
        create_vehicle(store, "u2", make_vehicle("XYZ789"))
        create_vehicle(store, "u2", make_vehicle("ABC123", brand="Pirelli"))
        u1 = list_vehicles(store, "u1")
        assert [v.plate for v in u1] == ["ABC123"]
        assert u1[0].tyres.brand == "Michelin"
        assert get_vehicle(store, "u1", "XYZ789") is None

    def test_same_plate_overwrites(self, store):
        """Creating a vehicle with an existing plate replaces the record."""
        create_vehicle(store, "u1", make_vehicle(brand="Michelin", mileage="10000"))
        replacement = make_vehicle(brand="Pirelli", mileage="12000")
        create_vehicle(store, "u1", replacement)
        assert list_vehicles(store, "u1") == [replacement]
        assert store.get("users/u1/vehicles/ABC123")["tyres"]["brand"] == "Pirelli"

    def test_malformed_record_skipped_in_list(self, store):
        create_vehicle(store, "u1", make_vehicle("GOOD1"))
        store.set("users/u1/vehicles/BAD1", {"tyres": "not a tyre"})
        assert [v.plate for v in list_vehicles(store, "u1")] == ["GOOD1"]

    def test_malformed_record_raises_on_get(self, store):
        store.set("users/u1/vehicles/BAD1", {"tyres": "not a tyre"})
        with pytest.raises(RecordError):
            get_vehicle(store, "u1", "BAD1")

    def test_plate_with_slash_rejected(self, store):
        with pytest.raises(InvalidKeyError):
            create_vehicle(store, "u1", make_vehicle("AB/12"))
