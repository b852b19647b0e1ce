# -----------------------------------------------------------------------------
# Copyright (c) 2025 E-Series Perf Analyzer (scaleoutSean@Github and (pre v3.1.0) NetApp, Inc)
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

import logging
import ssl
from urllib.parse import urljoin, urlparse

import requests
import urllib3
from requests.adapters import HTTPAdapter
from requests.auth import HTTPBasicAuth
from urllib3 import PoolManager
from urllib3.util.ssl_ import create_urllib3_context

from eseries_exporter.config import Module, Target
from eseries_exporter.errors import HTTPStatusError, NetworkError

LOG = logging.getLogger(__name__)

API_PREFIX = "/devmgr/v2"


class SSLAdapter(HTTPAdapter):
    """An HTTPS Transport Adapter that uses an explicit SSL context."""
    def __init__(self, verify_flags=ssl.VERIFY_DEFAULT, **kwargs):
        self.verify_flags = verify_flags
        super().__init__(**kwargs)
    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs):
        context = create_urllib3_context(verify_flags=self.verify_flags)
        self.poolmanager = PoolManager(num_pools=connections, maxsize=maxsize,
                                       block=block, ssl_context=context, **pool_kwargs)


def get_session(module: Module) -> requests.Session:
    """
    Return a requests.Session configured for the module's proxy.

    HTTPS proxies get an explicit SSL context. Verification uses the module's
    root_ca bundle when given, the system trust store otherwise, and is
    switched off entirely with insecure_ssl.
    """
    session = requests.Session()
    session.headers.update({"Accept": "application/json"})

    if urlparse(module.proxy_url).scheme != "https":
        return session

    LOG.debug(f"Setting up SSL transport for {module.proxy_url}")
    if module.insecure_ssl:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        session.verify = False
        LOG.warning(f"TLS validation is DISABLED for {module.proxy_url}. This is insecure and should only be used for testing.")
        return session

    session.mount("https://", SSLAdapter())
    if module.root_ca:
        session.verify = module.root_ca
    return session


def build_target(name: str, module: Module) -> Target:
    """Bind a requested target name to the settings of its module."""
    return Target(
        name=name,
        user=module.user,
        password=module.password,
        base_url=module.proxy_url,
        session=get_session(module),
        collectors=module.collectors,
        timeout=module.timeout,
    )


def api_path(target: Target, endpoint: str = "") -> str:
    """Path of a storage-systems endpoint for this target, e.g. 'drive-statistics'."""
    path = f"{API_PREFIX}/storage-systems/{target.name}"
    if endpoint:
        path = f"{path}/{endpoint}"
    return path


def get_request(target: Target, path: str, logger=LOG) -> bytes:
    """
    Perform a single authenticated GET against the target's proxy.

    Args:
        target: Target holding base URL, credentials and session
        path: Absolute API path, resolved against the base URL
        logger: Logger to report on, usually scoped to a collector

    Returns:
        Raw response body

    Raises:
        NetworkError: On transport failure or timeout
        HTTPStatusError: When the status code is not 200
    """
    url = urljoin(target.base_url, path)
    logger.debug(f"Performing GET request {url}")
    try:
        resp = target.session.get(
            url,
            headers={"Accept": "application/json"},
            auth=HTTPBasicAuth(target.user, target.password),
            timeout=target.timeout,
        )
    except requests.exceptions.RequestException as e:
        raise NetworkError(f"GET {url} failed: {e}") from e

    if resp.status_code != 200:
        logger.error(f"Response error: HTTP {resp.status_code} from {url}, body: {resp.content!r}")
        raise HTTPStatusError(url, resp.status_code, resp.content)
    return resp.content
