#!/usr/bin/env python3
"""Tests for Vehicle class."""

from datetime import date

from autobuddy import Vehicle, Tyre, VEHICLE_TYPES


class TestVehicle:
    """Tests for Vehicle class."""

    def test_always_has_one_tyre(self):
        """A vehicle without explicit tyres still has an (empty) tyre record."""
        vehicle = Vehicle(plate="ABC123")
        assert isinstance(vehicle.tyres, Tyre)
        assert vehicle.tyres.brand == ""

    def test_tyres_not_shared_between_instances(self):
        first = Vehicle(plate="A")
        second = Vehicle(plate="B")
        first.tyres.brand = "Michelin"
        assert second.tyres.brand == ""

    def test_blank_form_defaults(self):
        vehicle = Vehicle.blank(date(2024, 1, 1))
        assert vehicle.plate == ""
        assert vehicle.type == "car"
        assert vehicle.tyres.date_changed == "1/1/2024"

    def test_vehicle_types(self):
        assert VEHICLE_TYPES == ("car", "truck", "motorcycle")

    def test_equality_by_value(self):
        assert Vehicle("X1", "100", "car", Tyre(brand="B")) == Vehicle(
            "X1", "100", "car", Tyre(brand="B")
        )
