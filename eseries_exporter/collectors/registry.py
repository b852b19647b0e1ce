# -----------------------------------------------------------------------------
# Copyright (c) 2025 E-Series Perf Analyzer (scaleoutSean@Github and (pre v3.1.0) NetApp, Inc)
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Collector registry.

CollectorFactory maps collector names to constructors and decides which of
them run for a target. EseriesCollector is what gets registered with the
per-request Prometheus registry: it runs the enabled collectors in parallel
and merges their output into a single exposition.
"""

import concurrent.futures
import logging
import time
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from prometheus_client.core import Metric

from eseries_exporter.cache.cache_manager import StaleCache
from eseries_exporter.collectors.collector import (COLLECT_DURATION, COLLECT_ERROR, ESeriesCollector, MetricCollector,
                                                    scoped_logger)
from eseries_exporter.collectors.controller_statistics import ControllerStatisticsCollector
from eseries_exporter.collectors.drive_statistics import DriveStatisticsCollector
from eseries_exporter.collectors.drives import DrivesCollector
from eseries_exporter.collectors.hardware_inventory import HardwareInventoryCollector
from eseries_exporter.collectors.storage_systems import StorageSystemsCollector
from eseries_exporter.collectors.system_statistics import SystemStatisticsCollector
from eseries_exporter.config import Target

LOG = logging.getLogger(__name__)

CollectorConstructor = Callable[..., ESeriesCollector]


def merge_families(results: Iterable[Iterable[Metric]]) -> List[Metric]:
    """
    Combine metric families with the same name into one.

    Every collector reports its own collect_error and duration sample; the
    exposition format allows each family only once, so samples are merged
    into the first family seen under that name.
    """
    merged: Dict[str, Metric] = {}
    for families in results:
        for family in families:
            if family.name in merged:
                merged[family.name].samples.extend(family.samples)
            else:
                merged[family.name] = family
    return list(merged.values())


class EseriesCollector(MetricCollector):
    """All collectors enabled for one target, run as a single scrape."""

    def __init__(self, target: Target, collectors: List[ESeriesCollector]):
        self.target = target
        self.collectors = collectors

    def describe(self) -> Iterator[Metric]:
        yield from merge_families(c.describe() for c in self.collectors)

    def collect(self) -> Iterator[Metric]:
        if not self.collectors:
            return
        LOG.debug(f"Scraping {self.target.name} with collectors {[c.name for c in self.collectors]}")
        with concurrent.futures.ThreadPoolExecutor(max_workers=len(self.collectors)) as executor:
            # map() keeps collector order, so output order is stable between scrapes
            results = list(executor.map(self._run, self.collectors))
        yield from merge_families(results)

    @staticmethod
    def _run(collector: ESeriesCollector) -> List[Metric]:
        start_time = time.monotonic()
        try:
            return list(collector.collect())
        except Exception:
            # partial output is dropped, the collector still reports its error and duration
            collector.logger.exception("Unexpected error during collection")
            error = COLLECT_ERROR.family()
            error.add_metric([collector.name], 1.0)
            duration = COLLECT_DURATION.family()
            duration.add_metric([collector.name], time.monotonic() - start_time)
            return [error, duration]


class CollectorFactory:
    """
    Registered collectors by name.

    Each entry carries a default-enabled flag used when a module does not
    list its collectors explicitly.
    """

    def __init__(self):
        self._collectors: Dict[str, Tuple[bool, CollectorConstructor]] = {}

    def register(self, name: str, default_enabled: bool, constructor: CollectorConstructor) -> None:
        if name in self._collectors:
            LOG.warning(f"Collector {name} registered twice, replacing previous entry")
        self._collectors[name] = (default_enabled, constructor)

    @property
    def names(self) -> List[str]:
        return sorted(self._collectors)

    def enabled_names(self, allow_list: Optional[List[str]] = None) -> List[str]:
        """
        Names of the collectors to run, sorted.

        With no allow-list every default-enabled collector runs. Otherwise
        exactly the registered names in the allow-list run; unknown names
        are ignored.
        """
        if not allow_list:
            return [n for n in self.names if self._collectors[n][0]]
        wanted = set(allow_list)
        return [n for n in self.names if n in wanted]

    def build(self, target: Target, cache: Optional[StaleCache] = None, use_cache: bool = False) -> EseriesCollector:
        collectors = []
        for name in self.enabled_names(target.collectors):
            _, constructor = self._collectors[name]
            collectors.append(constructor(target, logger=scoped_logger(name, target.name),
                                          cache=cache, use_cache=use_cache))
        return EseriesCollector(target, collectors)


def default_factory() -> CollectorFactory:
    """Factory with every built-in collector registered."""
    factory = CollectorFactory()
    factory.register(DrivesCollector.name, True, DrivesCollector)
    factory.register(DriveStatisticsCollector.name, False, DriveStatisticsCollector)
    factory.register(ControllerStatisticsCollector.name, True, ControllerStatisticsCollector)
    factory.register(SystemStatisticsCollector.name, True, SystemStatisticsCollector)
    factory.register(HardwareInventoryCollector.name, True, HardwareInventoryCollector)
    factory.register(StorageSystemsCollector.name, True, StorageSystemsCollector)
    return factory
