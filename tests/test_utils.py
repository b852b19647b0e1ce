"""Tests for unit conversion, JSON decoding and location correlation."""
import pytest

from eseries_exporter.errors import DecodeError
from eseries_exporter.schema.models import (AnalysedDriveStatistics, HardwareInventory, InventoryRecord,
                                            PhysicalLocation, StorageSystem, Tray, safe_float)
from eseries_exporter.utils import (build_tray_map, decode_json, mb_to_bytes, ms_to_seconds, percent_to_ratio,
                                    resolve_location, us_to_seconds)


class TestConversions:

    @pytest.mark.parametrize("value", [0.0, 1.0, 1.5, 0.25, 1234.5678, 17357.11013434037])
    def test_ms_to_seconds_is_exact_division(self, value):
        assert ms_to_seconds(value) == value / 1000

    def test_us_to_seconds(self):
        assert us_to_seconds(123456789) == 123.456789
        assert us_to_seconds(1000000) == 1.0

    def test_percent_to_ratio(self):
        assert percent_to_ratio(45.0) == 0.45
        assert percent_to_ratio(100) == 1.0
        assert percent_to_ratio(0) == 0.0

    def test_mb_to_bytes(self):
        assert mb_to_bytes(1) == 1048576
        assert mb_to_bytes(2.5) == 2.5 * 1024 ** 2


class TestDecodeJson:

    def test_valid(self):
        assert decode_json(b'{"a": 1}') == {"a": 1}

    def test_malformed_raises_decode_error(self):
        with pytest.raises(DecodeError, match="/some/path"):
            decode_json(b"not json", "/some/path")

    def test_wrong_shape_raises_decode_error(self):
        with pytest.raises(DecodeError):
            AnalysedDriveStatistics.list_from_api_response({"diskId": "x"})
        with pytest.raises(DecodeError):
            StorageSystem.from_api_response([])

    def test_non_numeric_value_raises_decode_error(self):
        with pytest.raises(DecodeError):
            safe_float("fast")

    def test_null_counter_defaults_to_zero(self):
        stats = AnalysedDriveStatistics.from_api_response({"diskId": "d1", "readResponseTime": None})
        assert stats.id == "d1"
        assert stats.readResponseTime == 0.0


class TestCorrelation:

    def test_tray_map(self):
        trays = [Tray(trayRef="ref0", trayId=0), Tray(trayRef="ref99", trayId=99)]
        assert build_tray_map(trays) == {"ref0": "0", "ref99": "99"}

    def test_resolve_location(self):
        record = InventoryRecord(id="d1", status="optimal",
                                 physicalLocation=PhysicalLocation(trayRef="ref0", slot=53))
        assert resolve_location(record, {"ref0": "0"}) == ("0", "53")

    def test_unknown_tray_ref_leaves_tray_empty(self):
        record = InventoryRecord(id="d1", physicalLocation=PhysicalLocation(trayRef="missing", slot=4))
        assert resolve_location(record, {"ref0": "0"}) == ("", "4")

    def test_inventory_missing_sections_are_empty(self):
        inventory = HardwareInventory.from_api_response({"drives": None})
        assert inventory.drives == []
        assert inventory.trays == []

    def test_inventory_keeps_raw_fields(self):
        inventory = HardwareInventory.from_api_response(
            {"drives": [{"id": "d1", "status": "optimal", "serialNumber": "S1"}]})
        assert inventory.drives[0].get_raw("serialNumber") == "S1"

    def test_numeric_string_slot(self):
        location = PhysicalLocation.from_dict({"trayRef": "ref0", "slot": "53"})
        assert location.slot == 53

    def test_missing_slot_defaults_to_zero(self):
        assert PhysicalLocation.from_dict({"trayRef": "ref0"}).slot == 0

    @pytest.mark.parametrize("slot", ["left", [1], {"n": 1}])
    def test_bad_slot_raises_decode_error(self, slot):
        with pytest.raises(DecodeError, match="slot"):
            PhysicalLocation.from_dict({"trayRef": "ref0", "slot": slot})

    @pytest.mark.parametrize("tray_id", ["abc", [0]])
    def test_bad_tray_id_raises_decode_error(self, tray_id):
        with pytest.raises(DecodeError, match="trayId"):
            HardwareInventory.from_api_response({"trays": [{"trayRef": "ref0", "trayId": tray_id}]})

    def test_statistics_records_keep_only_declared_fields(self):
        stats = AnalysedDriveStatistics.from_api_response({"diskId": "d1", "observedTime": "now"})
        assert not hasattr(stats, "_raw_data")
