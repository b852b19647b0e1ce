"""Pytest configuration and shared fixtures."""
import os
from unittest.mock import MagicMock

import pytest

from eseries_exporter.config import Target

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")

TARGET_NAME = "test"
BASE_URL = "http://localhost:8080"
API = f"/devmgr/v2/storage-systems/{TARGET_NAME}"


def load_fixture(name: str) -> bytes:
    with open(os.path.join(FIXTURES_DIR, name), "rb") as fp:
        return fp.read()


class ReplaySession:
    """
    Stand-in for requests.Session serving canned responses by URL suffix.

    A route value is either (status_code, body) or an exception to raise.
    Unmatched URLs answer 404.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self.headers = {}
        self.closed = False

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        response = self.routes.get(self._match(url), (404, b"Not Found"))
        if isinstance(response, Exception):
            raise response
        resp = MagicMock()
        resp.status_code, resp.content = response
        return resp

    def _match(self, url):
        # Longest suffix wins so '/storage-systems/test' never shadows its children
        matches = [suffix for suffix in self.routes if url.endswith(suffix)]
        return max(matches, key=len) if matches else None

    def close(self):
        self.closed = True


@pytest.fixture
def fixture_routes():
    """Every endpoint the collectors read, answered from tests/fixtures."""
    return {
        API: (200, load_fixture("storage-system.json")),
        f"{API}/hardware-inventory": (200, load_fixture("hardware-inventory.json")),
        f"{API}/analysed-drive-statistics": (200, load_fixture("analysed-drive-statistics.json")),
        f"{API}/drive-statistics": (200, load_fixture("drive-statistics.json")),
        f"{API}/analysed-controller-statistics": (200, load_fixture("analysed-controller-statistics.json")),
        f"{API}/controller-statistics": (200, load_fixture("controller-statistics.json")),
        f"{API}/analysed-system-statistics": (200, load_fixture("analysed-system-statistics.json")),
    }


@pytest.fixture
def make_target():
    def _make_target(session, collectors=None):
        return Target(
            name=TARGET_NAME,
            user="test",
            password="test",
            base_url=BASE_URL,
            session=session,
            collectors=collectors,
        )
    return _make_target


@pytest.fixture
def target(fixture_routes, make_target):
    return make_target(ReplaySession(fixture_routes))


@pytest.fixture
def broken_target(make_target):
    """A target whose proxy answers 404 to everything."""
    return make_target(ReplaySession())


@pytest.fixture
def collect_samples():
    """
    Run one collect() and index the samples.

    Returns {(sample name, sorted label items): value}.
    """
    def _collect(collector):
        samples = {}
        for family in collector.collect():
            for s in family.samples:
                samples[(s.name, tuple(sorted(s.labels.items())))] = s.value
        return samples
    return _collect


def sample(samples, name, **labels):
    """Value of one sample, None when it was not emitted."""
    return samples.get((name, tuple(sorted(labels.items()))))


def names(samples):
    return {name for name, _ in samples}
