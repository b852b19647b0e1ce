"""Tests for the collector factory and the per-scrape aggregate collector."""
from prometheus_client import CollectorRegistry, generate_latest

from conftest import API, ReplaySession, sample
from eseries_exporter.cache.cache_manager import StaleCache
from eseries_exporter.collectors.drives import DrivesCollector
from eseries_exporter.collectors.registry import CollectorFactory, EseriesCollector, default_factory
from eseries_exporter.collectors.storage_systems import StorageSystemsCollector


class TestCollectorFactory:

    def test_default_registrations(self):
        factory = default_factory()
        assert factory.names == [
            "controller-statistics",
            "drive-statistics",
            "drives",
            "hardware-inventory",
            "storage-systems",
            "system-statistics",
        ]

    def test_no_allow_list_enables_defaults(self):
        factory = default_factory()
        enabled = factory.enabled_names(None)
        assert "drive-statistics" not in enabled
        assert enabled == ["controller-statistics", "drives", "hardware-inventory",
                           "storage-systems", "system-statistics"]
        assert factory.enabled_names([]) == enabled

    def test_allow_list_is_exact(self):
        factory = default_factory()
        assert factory.enabled_names(["drive-statistics"]) == ["drive-statistics"]
        assert factory.enabled_names(["storage-systems", "drives"]) == ["drives", "storage-systems"]

    def test_unknown_names_ignored(self):
        factory = default_factory()
        assert factory.enabled_names(["drives", "volumes"]) == ["drives"]
        assert factory.enabled_names(["volumes"]) == []

    def test_build_binds_target(self, make_target):
        target = make_target(ReplaySession(), collectors=["drives", "storage-systems"])
        aggregate = default_factory().build(target)

        assert isinstance(aggregate, EseriesCollector)
        assert [c.name for c in aggregate.collectors] == ["drives", "storage-systems"]
        assert all(c.target is target for c in aggregate.collectors)
        assert aggregate.collectors[0].logger.extra == {"collector": "drives", "target": "test"}

    def test_cache_only_for_capable_collectors(self, make_target):
        target = make_target(ReplaySession(), collectors=["drives", "system-statistics"])
        aggregate = default_factory().build(target, cache=StaleCache(), use_cache=True)

        use_cache = {c.name: c.use_cache for c in aggregate.collectors}
        assert use_cache == {"drives": True, "system-statistics": False}

    def test_custom_registration(self):
        factory = CollectorFactory()
        factory.register("drives", False, DrivesCollector)
        assert factory.enabled_names(None) == []
        assert factory.enabled_names(["drives"]) == ["drives"]


class TestEseriesCollector:

    def test_bookkeeping_merged_across_collectors(self, fixture_routes, make_target, collect_samples):
        target = make_target(ReplaySession(fixture_routes))
        aggregate = default_factory().build(target)

        families = list(aggregate.collect())
        family_names = [f.name for f in families]
        assert len(family_names) == len(set(family_names))

        samples = collect_samples(aggregate)
        for name in ("controller-statistics", "drives", "hardware-inventory",
                     "storage-systems", "system-statistics"):
            assert sample(samples, "eseries_exporter_collect_error", collector=name) == 0.0
            assert sample(samples, "eseries_exporter_collector_duration_seconds", collector=name) >= 0.0

    def test_failures_are_isolated(self, fixture_routes, make_target, collect_samples):
        del fixture_routes["/devmgr/v2/storage-systems/test/analysed-system-statistics"]
        aggregate = default_factory().build(make_target(ReplaySession(fixture_routes)))

        samples = collect_samples(aggregate)

        assert sample(samples, "eseries_exporter_collect_error", collector="system-statistics") == 1.0
        assert sample(samples, "eseries_exporter_collect_error", collector="drives") == 0.0
        assert sample(samples, "eseries_drive_status", systemid="test", tray="0", slot="53", status="failed") == 1.0

    def test_registers_with_prometheus_registry(self, target):
        registry = CollectorRegistry()
        registry.register(default_factory().build(target))

        output = generate_latest(registry).decode("utf-8")

        assert output.count("# TYPE eseries_exporter_collect_error gauge") == 1
        assert 'eseries_exporter_collect_error{collector="drives"} 0.0' in output
        assert "eseries_system_average_read_op_size_bytes 17357.11013434037" in output

    def test_idempotent_over_identical_fixtures(self, fixture_routes, make_target, collect_samples):
        target = make_target(ReplaySession(fixture_routes), collectors=[
            "drives", "drive-statistics", "controller-statistics",
            "system-statistics", "hardware-inventory", "storage-systems"])
        aggregate = default_factory().build(target)

        def values():
            return {k: v for k, v in collect_samples(aggregate).items()
                    if k[0] != "eseries_exporter_collector_duration_seconds"}

        assert values() == values()

    def test_output_order_is_stable(self, target):
        aggregate = default_factory().build(target)
        first = [f.name for f in aggregate.collect()]
        second = [f.name for f in aggregate.collect()]
        assert first == second

    def test_no_collectors(self, make_target):
        target = make_target(ReplaySession(), collectors=["volumes"])
        assert list(default_factory().build(target).collect()) == []


class FailingDrivesCollector(DrivesCollector):

    def build_metrics(self, snapshot):
        raise RuntimeError("broken")


class TestUnexpectedErrors:

    def test_unexpected_error_still_reports_bookkeeping(self, fixture_routes, make_target, collect_samples):
        factory = CollectorFactory()
        factory.register("drives", True, FailingDrivesCollector)
        factory.register("storage-systems", True, StorageSystemsCollector)
        aggregate = factory.build(make_target(ReplaySession(fixture_routes)))

        samples = collect_samples(aggregate)

        assert sample(samples, "eseries_exporter_collect_error", collector="drives") == 1.0
        assert sample(samples, "eseries_exporter_collector_duration_seconds", collector="drives") >= 0.0
        assert sample(samples, "eseries_exporter_collect_error", collector="storage-systems") == 0.0
        assert not any(name == "eseries_drive_status" for name, _ in samples)

    def test_bad_tray_id_reported_as_collect_error(self, fixture_routes, make_target, collect_samples):
        fixture_routes[f"{API}/hardware-inventory"] = (
            200, b'{"trays": [{"trayRef": "r1", "trayId": "abc"}], "drives": []}')
        target = make_target(ReplaySession(fixture_routes), collectors=["drives", "hardware-inventory"])

        samples = collect_samples(default_factory().build(target))

        assert sample(samples, "eseries_exporter_collect_error", collector="drives") == 1.0
        assert sample(samples, "eseries_exporter_collect_error", collector="hardware-inventory") == 1.0
        assert sample(samples, "eseries_exporter_collector_duration_seconds", collector="drives") >= 0.0
