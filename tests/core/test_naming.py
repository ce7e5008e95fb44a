"""Tests for repokit.naming."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from repokit.naming import NamingStrategy, to_snake_case
from tests._support.entities import Device, DeviceLog, Reading


class TestToSnakeCase:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("Device", "device"),
            ("DeviceLog", "device_log"),
            ("HTTPEndpoint", "http_endpoint"),
            ("lastTime", "last_time"),
            ("last_time", "last_time"),
            ("Sensor2Reading", "sensor2_reading"),
        ],
    )
    def test_conversion(self, name: str, expected: str):
        assert to_snake_case(name) == expected


class TestNamingStrategy:
    def test_default_folds_to_snake_case(self):
        naming = NamingStrategy()
        assert naming.table_name(DeviceLog) == "device_log"
        assert naming.column_name("deviceId") == "device_id"

    def test_preserve_case(self):
        naming = NamingStrategy(preserve_case=True)
        assert naming.table_name(DeviceLog) == "DeviceLog"
        assert naming.column_name("deviceId") == "deviceId"

    def test_tablename_attribute_wins(self):
        assert NamingStrategy().table_name(Reading) == "sensor_readings"
        assert NamingStrategy(preserve_case=True).table_name(Reading) == "sensor_readings"

    def test_table_names_are_singular(self):
        assert NamingStrategy().table_name(Device) == "device"

    def test_empty_tablename_is_ignored(self):
        @dataclass
        class Alarm:
            __tablename__ = ""

        assert NamingStrategy().table_name(Alarm) == "alarm"

    def test_strategies_are_hashable_values(self):
        assert NamingStrategy() == NamingStrategy(preserve_case=False)
        assert len({NamingStrategy(), NamingStrategy(True)}) == 2
