# -----------------------------------------------------------------------------
# Copyright (c) 2025 E-Series Perf Analyzer (scaleoutSean@Github and (pre v3.1.0) NetApp, Inc)
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
WSGI application serving scrapes.

/eseries?target=<name>&module=<module> builds a fresh registry for the
requested array, runs the module's collectors and returns the text
exposition. /metrics exposes the exporter's own process metrics.
"""

import logging
import time
from typing import List, Optional, Tuple
from urllib.parse import parse_qs

from prometheus_client import REGISTRY, CollectorRegistry, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST

from eseries_exporter.cache.cache_manager import StaleCache
from eseries_exporter.collectors.registry import CollectorFactory
from eseries_exporter.config import DEFAULT_MODULE, SafeConfig
from eseries_exporter.connection import build_target

LOG = logging.getLogger(__name__)

TEXT_PLAIN = "text/plain; charset=utf-8"

LANDING_PAGE = b"""<html>
<head><title>E-Series Exporter</title></head>
<body>
<h1>E-Series Exporter</h1>
<p><a href="/metrics">Metrics</a></p>
<p><a href="/eseries?target=example&amp;module=default">Scrape an array: /eseries?target=&lt;name&gt;&amp;module=&lt;module&gt;</a></p>
</body>
</html>
"""


def _http_response(start_response, status: str, headers: List[Tuple[str, str]], body: bytes):
    start_response(status, headers + [("Content-Length", str(len(body)))])
    return [body]


class ExporterApp:
    """
    Routes scrape requests to the collectors.

    The config holder, collector factory and stale cache are created once by
    main() and shared by every request.
    """

    def __init__(self, config: SafeConfig, factory: CollectorFactory,
                 cache: Optional[StaleCache] = None, use_cache: bool = False):
        self.config = config
        self.factory = factory
        self.cache = cache
        self.use_cache = use_cache

    def __call__(self, environ, start_response):
        path = environ.get("PATH_INFO", "/")

        if path == "/eseries":
            return self.scrape(environ, start_response)
        if path == "/metrics":
            return _http_response(start_response, "200 OK",
                                  [("Content-Type", CONTENT_TYPE_LATEST)], generate_latest(REGISTRY))
        if path == "/":
            return _http_response(start_response, "200 OK",
                                  [("Content-Type", "text/html; charset=utf-8")], LANDING_PAGE)
        return _http_response(start_response, "404 Not Found", [("Content-Type", TEXT_PLAIN)], b"not found\n")

    def scrape(self, environ, start_response):
        params = parse_qs(environ.get("QUERY_STRING", ""))
        target_name = params.get("target", [""])[0]
        module_name = params.get("module", [""])[0] or DEFAULT_MODULE

        if not target_name:
            return _http_response(start_response, "400 Bad Request",
                                  [("Content-Type", TEXT_PLAIN)], b"'target' parameter must be specified\n")

        module = self.config.get_module(module_name)
        if module is None:
            LOG.error(f"Module {module_name} not found for target {target_name}")
            return _http_response(start_response, "404 Not Found", [("Content-Type", TEXT_PLAIN)],
                                  f"Module '{module_name}' not found\n".encode("utf-8"))

        start_time = time.monotonic()
        target = build_target(target_name, module)
        registry = CollectorRegistry()
        registry.register(self.factory.build(target, cache=self.cache, use_cache=self.use_cache))
        try:
            output = generate_latest(registry)
        finally:
            target.session.close()
        LOG.debug(f"Scraped target {target_name} with module {module_name} in {time.monotonic() - start_time:.3f}s")
        return _http_response(start_response, "200 OK", [("Content-Type", CONTENT_TYPE_LATEST)], output)
