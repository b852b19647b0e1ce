"""
Collectors package for the E-Series Prometheus exporter.

Available collectors:
- collector.py: Base classes (MetricCollector, ESeriesCollector) and metric helpers
- drives.py: Drive status from the hardware inventory
- drive_statistics.py: Per-drive performance, joined with tray and slot
- controller_statistics.py: Per-controller performance and CPU utilization
- system_statistics.py: Array-wide analysed statistics
- hardware_inventory.py: Battery, fan, power supply, DIMM and sensor status
- storage_systems.py: Overall storage system status
- registry.py: CollectorFactory and the per-scrape EseriesCollector
"""

from eseries_exporter.collectors.registry import CollectorFactory, EseriesCollector, default_factory

__all__ = ["CollectorFactory", "EseriesCollector", "default_factory"]
