# -----------------------------------------------------------------------------
# Copyright (c) 2025 E-Series Perf Analyzer (scaleoutSean@Github and (pre v3.1.0) NetApp, Inc)
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Per-drive performance collector.

Joins analysed (rate) and raw (cumulative) drive statistics with the
hardware inventory so each drive is labelled by tray and slot instead of
its internal id.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from eseries_exporter.collectors.collector import (COUNTER, ESeriesCollector, MetricDescriptor, build_fq_name,
                                                   emit_statistics)
from eseries_exporter.connection import api_path
from eseries_exporter.errors import EmptyResultError
from eseries_exporter.schema.models import AnalysedDriveStatistics, DriveStatistics, HardwareInventory
from eseries_exporter.utils import build_tray_map, decode_json, ms_to_seconds, resolve_location, us_to_seconds

LABELS = ("tray", "slot")


def _gauge(name, key, convert=None):
    return MetricDescriptor(build_fq_name("drive", name), f"Drive statistic {key}", LABELS), key, convert


def _counter(name, key, convert=None):
    return MetricDescriptor(build_fq_name("drive", name), f"Drive statistic {key}", LABELS, COUNTER), key, convert


ANALYSED_METRICS = (
    _gauge("average_read_op_size_bytes", "averageReadOpSize"),
    _gauge("average_write_op_size_bytes", "averageWriteOpSize"),
    _gauge("combined_response_time_seconds", "combinedResponseTime", ms_to_seconds),
    _gauge("read_physical_iops", "readPhysicalIOps"),
    _gauge("read_response_time_seconds", "readResponseTime", ms_to_seconds),
    _gauge("write_physical_iops", "writePhysicalIOps"),
    _gauge("write_response_time_seconds", "writeResponseTime", ms_to_seconds),
)

# Cumulative times are reported in microseconds
RAW_METRICS = (
    _counter("idle_time_seconds_total", "idleTime", us_to_seconds),
    _counter("other_ops_total", "otherOps"),
    _counter("other_time_seconds_total", "otherTimeTotal", us_to_seconds),
    _counter("read_bytes_total", "readBytes"),
    _counter("read_ops_total", "readOps"),
    _counter("read_time_seconds_total", "readTimeTotal", us_to_seconds),
    _counter("recovered_errors_total", "recoveredErrors"),
    _counter("retried_ios_total", "retriedIos"),
    _counter("timeouts_total", "timeouts"),
    _counter("unrecovered_errors_total", "unrecoveredErrors"),
    _counter("write_bytes_total", "writeBytes"),
    _counter("write_ops_total", "writeOps"),
    _counter("write_time_seconds_total", "writeTimeTotal", us_to_seconds),
    _counter("queue_depth_total", "queueDepthTotal"),
    _counter("random_ios_total", "randomIosTotal"),
    _counter("random_bytes_total", "randomBytesTotal"),
)


@dataclass
class DriveStatisticsSnapshot:
    locations: Dict[str, Tuple[str, str]]
    analysed: List[AnalysedDriveStatistics]
    statistics: List[DriveStatistics]

    def location(self, disk_id: str) -> Tuple[str, str]:
        """(tray, slot) of a drive; statistics for unknown drives keep their raw id as the slot."""
        return self.locations.get(disk_id, ("", disk_id))



class DriveStatisticsCollector(ESeriesCollector):
    name = "drive-statistics"
    descriptors = tuple(d for d, _, _ in ANALYSED_METRICS + RAW_METRICS)

    def fetch(self) -> DriveStatisticsSnapshot:
        paths = [
            api_path(self.target, "hardware-inventory"),
            api_path(self.target, "analysed-drive-statistics"),
            api_path(self.target, "drive-statistics"),
        ]
        inventory_body, analysed_body, statistics_body = self.fetch_all(paths)

        inventory = HardwareInventory.from_api_response(decode_json(inventory_body, paths[0]))
        if not inventory.drives:
            raise EmptyResultError("No drives returned")
        analysed = AnalysedDriveStatistics.list_from_api_response(decode_json(analysed_body, paths[1]))
        statistics = DriveStatistics.list_from_api_response(decode_json(statistics_body, paths[2]))

        tray_map = build_tray_map(inventory.trays)
        locations = {drive.id: resolve_location(drive, tray_map) for drive in inventory.drives}
        for disk_id in sorted({r.id for r in analysed + statistics} - locations.keys()):
            self.logger.debug(f"Drive {disk_id} has statistics but is not in the inventory")
        return DriveStatisticsSnapshot(locations, analysed, statistics)

    def build_metrics(self, snapshot: DriveStatisticsSnapshot):
        return (emit_statistics(ANALYSED_METRICS, snapshot.analysed, snapshot.location)
                + emit_statistics(RAW_METRICS, snapshot.statistics, snapshot.location))
