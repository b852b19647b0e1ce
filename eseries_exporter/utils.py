# -----------------------------------------------------------------------------
# Copyright (c) 2025 E-Series Perf Analyzer (scaleoutSean@Github and (pre v3.1.0) NetApp, Inc)
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

import json
import logging
from typing import Dict, Iterable, Tuple

from eseries_exporter.errors import DecodeError
from eseries_exporter.schema.models import InventoryRecord, Tray

LOG = logging.getLogger(__name__)

BYTES_PER_MB = 1024 ** 2


def decode_json(body: bytes, path: str = ""):
    """Parse a response body, raising DecodeError on malformed JSON."""
    try:
        return json.loads(body)
    except (ValueError, TypeError) as e:
        raise DecodeError(f"Unable to decode JSON from {path or 'response'}: {e}") from e


def ms_to_seconds(value: float) -> float:
    return value / 1000


def us_to_seconds(value: float) -> float:
    """Drive statistics report cumulative times in microseconds"""
    return value / 1000000


def percent_to_ratio(value: float) -> float:
    return value / 100


def mb_to_bytes(value: float) -> float:
    """MB/s as reported by analysed statistics to bytes/s"""
    return value * BYTES_PER_MB


def build_tray_map(trays: Iterable[Tray]) -> Dict[str, str]:
    """Map trayRef to the human facing tray id, rebuilt on every collection."""
    return {t.trayRef: str(t.trayId) for t in trays}


def resolve_location(record: InventoryRecord, tray_map: Dict[str, str]) -> Tuple[str, str]:
    """
    Return (tray, slot) label values for an inventory record.

    An unknown trayRef leaves the tray empty rather than failing; the slot
    always comes straight from the physical location.
    """
    location = record.physicalLocation
    tray = tray_map.get(location.trayRef, "")
    if location.trayRef and not tray:
        LOG.debug(f"trayRef {location.trayRef} of {record.id} not found in inventory trays")
    return tray, str(location.slot)
