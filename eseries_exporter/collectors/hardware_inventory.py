# -----------------------------------------------------------------------------
# Copyright (c) 2025 E-Series Perf Analyzer (scaleoutSean@Github and (pre v3.1.0) NetApp, Inc)
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Hardware component status collector.

Batteries, fans, power supplies, cache memory DIMMs and thermal sensors
are read from one hardware-inventory call; every component gets a one-hot
status metric labelled with its tray and slot.
"""

from eseries_exporter.collectors.collector import ESeriesCollector, MetricDescriptor, add_status_samples, build_fq_name
from eseries_exporter.connection import api_path
from eseries_exporter.schema.models import HardwareInventory
from eseries_exporter.utils import build_tray_map, decode_json, resolve_location

LABELS = ("tray", "slot", "status")

BATTERY_STATUSES = (
    "optimal", "fullCharging", "nearExpiration", "failed", "removed", "notInConfig",
    "configMismatch", "learning", "overtemp", "expired", "maintenanceCharging", "replacementRequired",
)
FAN_STATUSES = ("optimal", "failed", "removed")
POWER_SUPPLY_STATUSES = ("optimal", "failed", "removed", "noinput")
CACHE_MEMORY_DIMM_STATUSES = ("optimal", "empty", "failed")
THERMAL_SENSOR_STATUSES = ("optimal", "nominalTempExceed", "maxTempExceed", "removed")

BATTERY_STATUS = MetricDescriptor(
    build_fq_name("battery", "status"), "Status of battery hardware device", LABELS)
FAN_STATUS = MetricDescriptor(
    build_fq_name("fan", "status"), "Status of fan hardware device", LABELS)
POWER_SUPPLY_STATUS = MetricDescriptor(
    build_fq_name("power_supply", "status"), "Status of power supply hardware device", LABELS)
CACHE_MEMORY_DIMM_STATUS = MetricDescriptor(
    build_fq_name("cache_memory_dimm", "status"), "Status of cache memory DIMM hardware device", LABELS)
THERMAL_SENSOR_STATUS = MetricDescriptor(
    build_fq_name("thermal_sensor", "status"), "Status of thermal sensor hardware device", LABELS)

# (inventory attribute, descriptor, known statuses)
COMPONENTS = (
    ("batteries", BATTERY_STATUS, BATTERY_STATUSES),
    ("fans", FAN_STATUS, FAN_STATUSES),
    ("powerSupplies", POWER_SUPPLY_STATUS, POWER_SUPPLY_STATUSES),
    ("cacheMemoryDimms", CACHE_MEMORY_DIMM_STATUS, CACHE_MEMORY_DIMM_STATUSES),
    ("thermalSensors", THERMAL_SENSOR_STATUS, THERMAL_SENSOR_STATUSES),
)


class HardwareInventoryCollector(ESeriesCollector):
    name = "hardware-inventory"
    descriptors = tuple(d for _, d, _ in COMPONENTS)

    def fetch(self) -> HardwareInventory:
        path = api_path(self.target, "hardware-inventory")
        body, = self.fetch_all([path])
        return HardwareInventory.from_api_response(decode_json(body, path))

    def build_metrics(self, inventory: HardwareInventory):
        tray_map = build_tray_map(inventory.trays)
        families = []
        for attribute, descriptor, statuses in COMPONENTS:
            family = descriptor.family()
            for component in getattr(inventory, attribute):
                tray, slot = resolve_location(component, tray_map)
                add_status_samples(family, [tray, slot], component.status, statuses)
            families.append(family)
        return families
