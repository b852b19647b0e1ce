# -----------------------------------------------------------------------------
# Copyright (c) 2025 E-Series Perf Analyzer (scaleoutSean@Github and (pre v3.1.0) NetApp, Inc)
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

from eseries_exporter.collectors.collector import ESeriesCollector, MetricDescriptor, build_fq_name, emit_statistics
from eseries_exporter.connection import api_path
from eseries_exporter.schema.models import SystemStatistics
from eseries_exporter.utils import decode_json, mb_to_bytes, ms_to_seconds, percent_to_ratio


def _gauge(name, key, convert=None, documentation=None):
    descriptor = MetricDescriptor(build_fq_name("system", name), documentation or f"System statistic {key}")
    return descriptor, key, convert


SYSTEM_METRICS = (
    _gauge("average_read_op_size_bytes", "averageReadOpSize"),
    _gauge("average_write_op_size_bytes", "averageWriteOpSize"),
    _gauge("cache_hit_bytes_percent", "cacheHitBytesPercent"),
    _gauge("combined_hit_response_time_seconds", "combinedHitResponseTime", ms_to_seconds),
    _gauge("combined_iops", "combinedIOps"),
    _gauge("combined_response_time_seconds", "combinedResponseTime", ms_to_seconds),
    _gauge("combined_throughput_bytes_per_second", "combinedThroughput", mb_to_bytes),
    _gauge("cpu_average_utilization_ratio", "cpuAvgUtilization", percent_to_ratio,
           "System statistic cpuAvgUtilization as a 0.0-1.0 ratio, formerly eseries_system_cpu_avg_utilization in percent"),
    _gauge("ddp_bytes_percent", "ddpBytesPercent"),
    _gauge("full_stripe_writes_bytes_percent", "fullStripeWritesBytesPercent"),
    _gauge("cpu_max_utilization_ratio", "maxCpuUtilization", percent_to_ratio,
           "System statistic maxCpuUtilization as a 0.0-1.0 ratio, formerly eseries_system_max_cpu_utilization in percent"),
    _gauge("random_ios_percent", "randomIosPercent"),
    _gauge("read_hit_response_time_seconds", "readHitResponseTime", ms_to_seconds),
    _gauge("read_iops", "readIOps"),
    _gauge("read_physical_iops", "readPhysicalIOps"),
    _gauge("read_response_time_seconds", "readResponseTime", ms_to_seconds),
    _gauge("read_throughput_bytes_per_second", "readThroughput", mb_to_bytes),
    _gauge("write_hit_response_time_seconds", "writeHitResponseTime", ms_to_seconds),
    _gauge("write_iops", "writeIOps"),
    _gauge("write_physical_iops", "writePhysicalIOps"),
    _gauge("write_response_time_seconds", "writeResponseTime", ms_to_seconds),
    _gauge("write_throughput_bytes_per_second", "writeThroughput", mb_to_bytes),
)


class SystemStatisticsCollector(ESeriesCollector):
    """Array-wide analysed statistics, one unlabelled gauge per field."""
    name = "system-statistics"
    descriptors = tuple(d for d, _, _ in SYSTEM_METRICS)

    def fetch(self) -> SystemStatistics:
        path = api_path(self.target, "analysed-system-statistics")
        body, = self.fetch_all([path])
        return SystemStatistics.from_api_response(decode_json(body, path))

    def build_metrics(self, statistics: SystemStatistics):
        return emit_statistics(SYSTEM_METRICS, [statistics], lambda _: ())
