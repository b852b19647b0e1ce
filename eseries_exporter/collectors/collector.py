# -----------------------------------------------------------------------------
# Copyright (c) 2025 E-Series Perf Analyzer (scaleoutSean@Github and (pre v3.1.0) NetApp, Inc)
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Base collector classes shared by every metric domain.

A collector runs one full cycle per scrape: fetch all endpoints it needs in
parallel, decode and correlate them, then emit its metric families followed by
the collect_error and collector_duration_seconds bookkeeping gauges.
"""

import concurrent.futures
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from eseries_exporter.cache.cache_manager import StaleCache
from eseries_exporter.config import Target
from eseries_exporter.connection import get_request
from eseries_exporter.errors import CollectionError

NAMESPACE = "eseries"

GAUGE = "gauge"
COUNTER = "counter"

# Synthetic status label value for statuses outside the known set
UNKNOWN_STATUS = "unknown"


def build_fq_name(subsystem: str, name: str) -> str:
    return "_".join(part for part in (NAMESPACE, subsystem, name) if part)


@dataclass(frozen=True)
class MetricDescriptor:
    """Static name, help text and label names of one metric."""
    name: str
    documentation: str
    labels: Tuple[str, ...] = ()
    metric_type: str = GAUGE

    def family(self) -> Metric:
        """Return a new, empty metric family for this descriptor."""
        if self.metric_type == COUNTER:
            return CounterMetricFamily(self.name, self.documentation, labels=list(self.labels))
        return GaugeMetricFamily(self.name, self.documentation, labels=list(self.labels))


COLLECT_ERROR = MetricDescriptor(
    build_fq_name("exporter", "collect_error"),
    "Indicates if error has occurred during collection",
    ("collector",))
COLLECT_DURATION = MetricDescriptor(
    build_fq_name("exporter", "collector_duration_seconds"),
    "Collector time duration.",
    ("collector",))


class CollectorLogAdapter(logging.LoggerAdapter):
    """Prefix every message with the collector and target it belongs to."""

    def process(self, msg, kwargs):
        return f"[{self.extra['collector']} target={self.extra['target']}] {msg}", kwargs


def scoped_logger(collector: str, target: str, logger: Optional[logging.Logger] = None) -> logging.LoggerAdapter:
    base = logger or logging.getLogger(__name__)
    return CollectorLogAdapter(base, {"collector": collector, "target": target})


def add_status_samples(family: Metric, label_values: Sequence[str], status: str,
                       known_statuses: Sequence[str]) -> None:
    """
    One-hot encode a status into the family.

    Emits one sample per known status (1 on an exact match, 0 otherwise) and
    a final "unknown" sample that is 1 only when nothing matched, so exactly
    one sample per record is 1 whatever the array reports.
    """
    for known in known_statuses:
        family.add_metric(list(label_values) + [known], 1.0 if status == known else 0.0)
    unknown = 0.0 if status in known_statuses else 1.0
    family.add_metric(list(label_values) + [UNKNOWN_STATUS], unknown)


def emit_statistics(table, records, location) -> List[Metric]:
    """
    Build one family per (descriptor, field, convert) row with a sample per record.

    location maps a record id to its label values.
    """
    families = []
    for descriptor, key, convert in table:
        family = descriptor.family()
        for record in records:
            value = getattr(record, key)
            family.add_metric(list(location(record.id)), convert(value) if convert else value)
        families.append(family)
    return families


class MetricCollector(ABC):
    """Anything the Prometheus registry can describe and collect."""

    @abstractmethod
    def describe(self) -> Iterable[Metric]:
        pass

    @abstractmethod
    def collect(self) -> Iterable[Metric]:
        pass


class ESeriesCollector(MetricCollector):
    """
    Base class for the per-domain collectors.

    Subclasses set name and descriptors and implement fetch() (network,
    decode, correlate; raises CollectionError) and build_metrics() (turn a
    snapshot into metric families).
    """
    name: str = ""
    supports_cache: bool = False
    descriptors: Tuple[MetricDescriptor, ...] = ()

    def __init__(self, target: Target, logger: Optional[logging.LoggerAdapter] = None,
                 cache: Optional[StaleCache] = None, use_cache: bool = False):
        self.target = target
        self.logger = logger or scoped_logger(self.name, target.name)
        self.cache = cache
        self.use_cache = bool(use_cache and self.supports_cache and cache is not None)

    def describe(self) -> Iterator[Metric]:
        for descriptor in self.descriptors + (COLLECT_ERROR, COLLECT_DURATION):
            yield descriptor.family()

    def collect(self) -> Iterator[Metric]:
        self.logger.debug(f"Collecting {self.name} metrics")
        collect_time = time.monotonic()
        error_metric = 0

        try:
            snapshot = self.fetch()
        except CollectionError as e:
            self.logger.error(f"{type(e).__name__}: {e}")
            error_metric = 1
            snapshot = None
            if self.use_cache:
                snapshot = self.cache.read(self.name, self.target.name)
                if snapshot is None:
                    self.logger.warning("No cached data available to fall back on")
                else:
                    self.logger.info("Using cached data from last successful collection")
        else:
            if self.use_cache:
                self.cache.write(self.name, self.target.name, snapshot)

        if snapshot is not None:
            for family in self.build_metrics(snapshot):
                if family.samples:
                    yield family

        error = COLLECT_ERROR.family()
        error.add_metric([self.name], float(error_metric))
        yield error
        duration = COLLECT_DURATION.family()
        duration.add_metric([self.name], time.monotonic() - collect_time)
        yield duration

    @abstractmethod
    def fetch(self) -> Any:
        """Fetch, decode and correlate; return the snapshot to emit."""

    @abstractmethod
    def build_metrics(self, snapshot: Any) -> Iterable[Metric]:
        """Turn a snapshot (fresh or cached) into metric families."""

    def fetch_all(self, paths: Sequence[str]) -> List[bytes]:
        """
        GET every path concurrently and wait for all of them.

        When several requests fail the error of the earliest path in the
        given order is raised, regardless of which one failed first in time.
        """
        if len(paths) == 1:
            return [get_request(self.target, paths[0], self.logger)]

        with concurrent.futures.ThreadPoolExecutor(max_workers=len(paths)) as executor:
            futures = [executor.submit(get_request, self.target, path, self.logger) for path in paths]
            concurrent.futures.wait(futures)

        for future in futures:
            error = future.exception()
            if error is not None:
                raise error
        return [future.result() for future in futures]
