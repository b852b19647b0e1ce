# -----------------------------------------------------------------------------
# Copyright (c) 2025 E-Series Perf Analyzer (scaleoutSean@Github and (pre v3.1.0) NetApp, Inc)
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Per-controller performance collector.

Analysed statistics carry response times in milliseconds and CPU use in
percent; both are converted before emission. Controllers are labelled with
their id and the physical label (A, B) taken from the hardware inventory.
"""

from dataclasses import dataclass
from typing import Dict, List

from eseries_exporter.collectors.collector import (COUNTER, GAUGE, ESeriesCollector, MetricDescriptor, build_fq_name,
                                                   emit_statistics)
from eseries_exporter.connection import api_path
from eseries_exporter.schema.models import AnalysedControllerStatistics, ControllerStatistics, HardwareInventory
from eseries_exporter.utils import decode_json, ms_to_seconds, percent_to_ratio

LABELS = ("controller", "controller_label")


def _metric(name, key, convert=None, metric_type=GAUGE, documentation=None):
    descriptor = MetricDescriptor(build_fq_name("controller", name),
                                  documentation or f"Controller statistic {key}", LABELS, metric_type)
    return descriptor, key, convert


ANALYSED_METRICS = (
    _metric("average_read_op_size_bytes", "averageReadOpSize"),
    _metric("average_write_op_size_bytes", "averageWriteOpSize"),
    _metric("combined_response_time_seconds", "combinedResponseTime", ms_to_seconds),
    _metric("read_response_time_seconds", "readResponseTime", ms_to_seconds),
    _metric("write_response_time_seconds", "writeResponseTime", ms_to_seconds),
    _metric("cpu_max_utilization_ratio", "maxCpuUtilization", percent_to_ratio,
            documentation="Controller statistic maxCpuUtilization (0.0-1.0 ratio of CPU percent utilization)"),
    _metric("cpu_average_utilization_ratio", "cpuAvgUtilization", percent_to_ratio,
            documentation="Controller statistic cpuAvgUtilization (0.0-1.0 ratio of CPU percent utilization)"),
)

RAW_METRICS = (
    _metric("iops_total", "totalIopsServiced", metric_type=COUNTER),
    _metric("bytes_total", "totalBytesServiced", metric_type=COUNTER),
    _metric("cache_hits_iops_total", "cacheHitsIopsTotal", metric_type=COUNTER),
    _metric("cache_hit_bytes_total", "cacheHitsBytesTotal", metric_type=COUNTER),
    _metric("random_ios_total", "randomIosTotal", metric_type=COUNTER),
    _metric("random_bytes_total", "randomBytesTotal", metric_type=COUNTER),
    _metric("read_iops_total", "readIopsTotal", metric_type=COUNTER),
    _metric("read_bytes_total", "readBytesTotal", metric_type=COUNTER),
    _metric("write_iops_total", "writeIopsTotal", metric_type=COUNTER),
    _metric("write_bytes_total", "writeBytesTotal", metric_type=COUNTER),
    _metric("mirror_iops_total", "mirrorIopsTotal", metric_type=COUNTER),
    _metric("mirror_bytes_total", "mirrorBytesTotal", metric_type=COUNTER),
    _metric("full_stripe_writes_bytes_total", "fullStripeWritesBytes", metric_type=COUNTER),
    _metric("raid0_transferred_bytes_total", "raid0BytesTransferred", metric_type=COUNTER),
    _metric("raid1_transferred_bytes_total", "raid1BytesTransferred", metric_type=COUNTER),
    _metric("raid5_transferred_bytes_total", "raid5BytesTransferred", metric_type=COUNTER),
    _metric("raid6_transferred_bytes_total", "raid6BytesTransferred", metric_type=COUNTER),
    _metric("ddp_transferred_bytes_total", "ddpBytesTransferred", metric_type=COUNTER),
    # Point-in-time estimates, not cumulative
    _metric("max_possible_throughput_bytes_per_second", "maxPossibleBpsUnderCurrentLoad"),
    _metric("max_possible_iops", "maxPossibleIopsUnderCurrentLoad"),
)


@dataclass
class ControllerStatisticsSnapshot:
    labels: Dict[str, str]
    analysed: List[AnalysedControllerStatistics]
    statistics: List[ControllerStatistics]

    def location(self, controller_id: str):
        return controller_id, self.labels.get(controller_id, controller_id)


class ControllerStatisticsCollector(ESeriesCollector):
    name = "controller-statistics"
    descriptors = tuple(d for d, _, _ in ANALYSED_METRICS + RAW_METRICS)

    def fetch(self) -> ControllerStatisticsSnapshot:
        paths = [
            api_path(self.target, "hardware-inventory"),
            api_path(self.target, "analysed-controller-statistics"),
            api_path(self.target, "controller-statistics"),
        ]
        inventory_body, analysed_body, statistics_body = self.fetch_all(paths)

        inventory = HardwareInventory.from_api_response(decode_json(inventory_body, paths[0]))
        analysed = AnalysedControllerStatistics.list_from_api_response(decode_json(analysed_body, paths[1]))
        statistics = ControllerStatistics.list_from_api_response(decode_json(statistics_body, paths[2]))

        labels = {c.id: c.physicalLocation.label for c in inventory.controllers}
        return ControllerStatisticsSnapshot(labels, analysed, statistics)

    def build_metrics(self, snapshot: ControllerStatisticsSnapshot):
        return (emit_statistics(ANALYSED_METRICS, snapshot.analysed, snapshot.location)
                + emit_statistics(RAW_METRICS, snapshot.statistics, snapshot.location))
