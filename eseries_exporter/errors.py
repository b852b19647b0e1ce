# -----------------------------------------------------------------------------
# Copyright (c) 2025 E-Series Perf Analyzer (scaleoutSean@Github and (pre v3.1.0) NetApp, Inc)
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Error taxonomy.

Collection errors are all handled the same way by a collector (logged,
reported through the collect_error gauge, optionally replaced by cached data),
but keeping them apart makes log lines and tests precise.
"""


class ExporterError(Exception):
    """Base class for all exporter exceptions."""


class ConfigError(ExporterError):
    """Raised when the module configuration cannot be read or is invalid."""


class CollectionError(ExporterError):
    """Base class for failures of a single collection cycle."""


class NetworkError(CollectionError):
    """Raised when the request to the proxy fails at transport level."""


class HTTPStatusError(CollectionError):
    """Raised when the proxy answers with anything other than 200."""

    def __init__(self, url: str, status_code: int, body: bytes = b""):
        self.url = url
        self.status_code = status_code
        self.body = body
        text = body.decode("utf-8", errors="replace").strip() if body else ""
        super().__init__(f"HTTP {status_code} from {url}: {text}")


class DecodeError(CollectionError):
    """Raised when a response body is not the JSON document we expect."""


class EmptyResultError(CollectionError):
    """Raised when a response decodes fine but holds no records."""
