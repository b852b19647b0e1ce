# -----------------------------------------------------------------------------
# Copyright (c) 2025 E-Series Perf Analyzer (scaleoutSean@Github and (pre v3.1.0) NetApp, Inc)
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Drive status collector.

Reads the hardware inventory and reports every drive's status, one-hot
encoded and labelled with the tray and slot the drive sits in.
"""

from eseries_exporter.collectors.collector import ESeriesCollector, MetricDescriptor, add_status_samples, build_fq_name
from eseries_exporter.connection import api_path
from eseries_exporter.errors import EmptyResultError
from eseries_exporter.schema.models import HardwareInventory
from eseries_exporter.utils import build_tray_map, decode_json, resolve_location

DRIVE_STATUSES = (
    "optimal",
    "failed",
    "replaced",
    "bypassed",
    "unresponsive",
    "removed",
    "incompatible",
    "dataRelocation",
    "preFailCopy",
    "preFailCopyPending",
    "__UNDEFINED",
)

DRIVE_STATUS = MetricDescriptor(
    build_fq_name("drive", "status"),
    "Drive status",
    ("systemid", "tray", "slot", "status"))


class DrivesCollector(ESeriesCollector):
    name = "drives"
    supports_cache = True
    descriptors = (DRIVE_STATUS,)

    def fetch(self) -> HardwareInventory:
        path = api_path(self.target, "hardware-inventory")
        body, = self.fetch_all([path])
        inventory = HardwareInventory.from_api_response(decode_json(body, path))
        if not inventory.drives:
            raise EmptyResultError("No drives returned")
        return inventory

    def build_metrics(self, inventory: HardwareInventory):
        status = DRIVE_STATUS.family()
        tray_map = build_tray_map(inventory.trays)
        for drive in inventory.drives:
            tray, slot = resolve_location(drive, tray_map)
            add_status_samples(status, [self.target.name, tray, slot], drive.status, DRIVE_STATUSES)
        return [status]
