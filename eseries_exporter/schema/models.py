# -----------------------------------------------------------------------------
# Copyright (c) 2025 E-Series Perf Analyzer (scaleoutSean@Github and (pre v3.1.0) NetApp, Inc)
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Typed records for the SANtricity payloads the exporter reads.

Each record keeps only the fields that become metrics or labels. Inventory
records also keep the full payload, available through get_raw().
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

from eseries_exporter.errors import DecodeError


def safe_float(value, default=0.0):
    """Convert a numeric payload value to float, treating null as the default"""
    if value is None:
        return default
    try:
        return float(value)
    except (ValueError, TypeError):
        raise DecodeError(f"Expected a number, got {value!r}")


def safe_int(value, what: str, default=0):
    """Integer payload values such as slots and tray ids; numeric strings are accepted"""
    if value is None:
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        raise DecodeError(f"Expected an integer for {what}, got {value!r}")


def _require_dict(data, what: str) -> Dict:
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object for {what}, got {type(data).__name__}")
    return data


def _require_list(data, what: str) -> List:
    if data is None:
        return []
    if not isinstance(data, list):
        raise DecodeError(f"Expected a JSON array for {what}, got {type(data).__name__}")
    return data


@dataclass
class PhysicalLocation:
    """
    {
        "trayRef": "0E00000000000000000000000000000000000000",
        "slot": 53,
        "label": "A"
    }
    """
    trayRef: str = ""
    slot: int = 0
    label: str = ""

    @staticmethod
    def from_dict(data: Optional[Dict]) -> 'PhysicalLocation':
        data = _require_dict(data or {}, "physicalLocation")
        return PhysicalLocation(
            trayRef=data.get('trayRef') or "",
            slot=safe_int(data.get('slot'), 'slot'),
            label=data.get('label') or "",
        )


@dataclass
class Tray:
    trayRef: str = ""
    trayId: int = 0

    @staticmethod
    def from_api_response(data: Dict) -> 'Tray':
        data = _require_dict(data, "tray")
        return Tray(trayRef=data.get('trayRef') or "", trayId=safe_int(data.get('trayId'), 'trayId'))


@dataclass
class InventoryRecord:
    """A hardware-inventory component: drive, battery, fan, power supply, DIMM, sensor or controller."""
    id: str = ""
    status: str = ""
    physicalLocation: PhysicalLocation = field(default_factory=PhysicalLocation)
    _raw_data: Dict[str, Any] = field(default_factory=dict, repr=False)

    @staticmethod
    def from_api_response(data: Dict) -> 'InventoryRecord':
        data = _require_dict(data, "inventory record")
        return InventoryRecord(
            id=data.get('id') or "",
            status=data.get('status') or "",
            physicalLocation=PhysicalLocation.from_dict(data.get('physicalLocation')),
            _raw_data=data.copy(),
        )

    def get_raw(self, key, default=None):
        """Access any field from the raw data"""
        return self._raw_data.get(key, default)


@dataclass
class HardwareInventory:
    trays: List[Tray] = field(default_factory=list)
    drives: List[InventoryRecord] = field(default_factory=list)
    controllers: List[InventoryRecord] = field(default_factory=list)
    batteries: List[InventoryRecord] = field(default_factory=list)
    fans: List[InventoryRecord] = field(default_factory=list)
    powerSupplies: List[InventoryRecord] = field(default_factory=list)
    cacheMemoryDimms: List[InventoryRecord] = field(default_factory=list)
    thermalSensors: List[InventoryRecord] = field(default_factory=list)

    @staticmethod
    def from_api_response(data: Dict) -> 'HardwareInventory':
        data = _require_dict(data, "hardware-inventory")

        def records(key):
            return [InventoryRecord.from_api_response(d) for d in _require_list(data.get(key), key)]

        return HardwareInventory(
            trays=[Tray.from_api_response(t) for t in _require_list(data.get('trays'), 'trays')],
            drives=records('drives'),
            controllers=records('controllers'),
            batteries=records('batteries'),
            fans=records('fans'),
            powerSupplies=records('powerSupplies'),
            cacheMemoryDimms=records('cacheMemoryDimms'),
            thermalSensors=records('thermalSensors'),
        )


class StatisticsRecord:
    """
    Mixin for flat statistics payloads.

    Subclasses are dataclasses whose float fields are named after the JSON
    keys; the device id key differs per endpoint and is set with ID_KEY.
    """
    ID_KEY: Optional[str] = None

    @classmethod
    def from_api_response(cls, data: Dict):
        data = _require_dict(data, cls.__name__)
        values = {}
        for f in fields(cls):
            if f.name == 'id':
                values['id'] = str(data.get(cls.ID_KEY) or "") if cls.ID_KEY else ""
            else:
                values[f.name] = safe_float(data.get(f.name))
        return cls(**values)

    @classmethod
    def list_from_api_response(cls, data) -> List:
        return [cls.from_api_response(d) for d in _require_list(data, cls.__name__)]


@dataclass
class AnalysedDriveStatistics(StatisticsRecord):
    ID_KEY = 'diskId'
    id: str = ""
    averageReadOpSize: float = 0.0
    averageWriteOpSize: float = 0.0
    combinedResponseTime: float = 0.0
    readPhysicalIOps: float = 0.0
    readResponseTime: float = 0.0
    writePhysicalIOps: float = 0.0
    writeResponseTime: float = 0.0


@dataclass
class DriveStatistics(StatisticsRecord):
    ID_KEY = 'diskId'
    id: str = ""
    idleTime: float = 0.0
    otherOps: float = 0.0
    otherTimeTotal: float = 0.0
    readBytes: float = 0.0
    readOps: float = 0.0
    readTimeTotal: float = 0.0
    recoveredErrors: float = 0.0
    retriedIos: float = 0.0
    timeouts: float = 0.0
    unrecoveredErrors: float = 0.0
    writeBytes: float = 0.0
    writeOps: float = 0.0
    writeTimeTotal: float = 0.0
    queueDepthTotal: float = 0.0
    randomIosTotal: float = 0.0
    randomBytesTotal: float = 0.0


@dataclass
class AnalysedControllerStatistics(StatisticsRecord):
    ID_KEY = 'controllerId'
    id: str = ""
    averageReadOpSize: float = 0.0
    averageWriteOpSize: float = 0.0
    combinedResponseTime: float = 0.0
    readResponseTime: float = 0.0
    writeResponseTime: float = 0.0
    maxCpuUtilization: float = 0.0
    cpuAvgUtilization: float = 0.0


@dataclass
class ControllerStatistics(StatisticsRecord):
    ID_KEY = 'controllerId'
    id: str = ""
    totalIopsServiced: float = 0.0
    totalBytesServiced: float = 0.0
    cacheHitsIopsTotal: float = 0.0
    cacheHitsBytesTotal: float = 0.0
    randomIosTotal: float = 0.0
    randomBytesTotal: float = 0.0
    readIopsTotal: float = 0.0
    readBytesTotal: float = 0.0
    writeIopsTotal: float = 0.0
    writeBytesTotal: float = 0.0
    mirrorIopsTotal: float = 0.0
    mirrorBytesTotal: float = 0.0
    fullStripeWritesBytes: float = 0.0
    raid0BytesTransferred: float = 0.0
    raid1BytesTransferred: float = 0.0
    raid5BytesTransferred: float = 0.0
    raid6BytesTransferred: float = 0.0
    ddpBytesTransferred: float = 0.0
    maxPossibleBpsUnderCurrentLoad: float = 0.0
    maxPossibleIopsUnderCurrentLoad: float = 0.0


@dataclass
class SystemStatistics(StatisticsRecord):
    id: str = ""
    averageReadOpSize: float = 0.0
    averageWriteOpSize: float = 0.0
    cacheHitBytesPercent: float = 0.0
    combinedHitResponseTime: float = 0.0
    combinedIOps: float = 0.0
    combinedResponseTime: float = 0.0
    combinedThroughput: float = 0.0
    cpuAvgUtilization: float = 0.0
    ddpBytesPercent: float = 0.0
    fullStripeWritesBytesPercent: float = 0.0
    maxCpuUtilization: float = 0.0
    randomIosPercent: float = 0.0
    readHitResponseTime: float = 0.0
    readIOps: float = 0.0
    readPhysicalIOps: float = 0.0
    readResponseTime: float = 0.0
    readThroughput: float = 0.0
    writeHitResponseTime: float = 0.0
    writeIOps: float = 0.0
    writePhysicalIOps: float = 0.0
    writeResponseTime: float = 0.0
    writeThroughput: float = 0.0


@dataclass
class StorageSystem:
    id: str = ""
    name: str = ""
    status: str = ""

    @staticmethod
    def from_api_response(data: Dict) -> 'StorageSystem':
        data = _require_dict(data, "storage-system")
        return StorageSystem(
            id=data.get('id') or "",
            name=data.get('name') or "",
            status=data.get('status') or "",
        )
