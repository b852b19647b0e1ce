# -----------------------------------------------------------------------------
# Copyright (c) 2025 E-Series Perf Analyzer (scaleoutSean@Github and (pre v3.1.0) NetApp, Inc)
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

from eseries_exporter.collectors.collector import ESeriesCollector, MetricDescriptor, add_status_samples, build_fq_name
from eseries_exporter.connection import api_path
from eseries_exporter.errors import EmptyResultError
from eseries_exporter.schema.models import StorageSystem
from eseries_exporter.utils import decode_json

STORAGE_SYSTEM_STATUSES = (
    "neverContacted",
    "offline",
    "optimal",
    "needsAttn",
    "removed",
    "newDevice",
    "lockDown",
)

STORAGE_SYSTEM_STATUS = MetricDescriptor(
    build_fq_name("storage_system", "status"),
    "Storage System status",
    ("id", "status"))


class StorageSystemsCollector(ESeriesCollector):
    """Overall status of the storage system as seen by the proxy."""
    name = "storage-systems"
    supports_cache = True
    descriptors = (STORAGE_SYSTEM_STATUS,)

    def fetch(self) -> StorageSystem:
        path = api_path(self.target)
        body, = self.fetch_all([path])
        system = StorageSystem.from_api_response(decode_json(body, path))
        if not system.id:
            raise EmptyResultError("No storage systems returned")
        return system

    def build_metrics(self, system: StorageSystem):
        status = STORAGE_SYSTEM_STATUS.family()
        add_status_samples(status, [system.id], system.status, STORAGE_SYSTEM_STATUSES)
        return [status]
