# -----------------------------------------------------------------------------
# Copyright (c) 2025 E-Series Perf Analyzer (scaleoutSean@Github and (pre v3.1.0) NetApp, Inc)
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Command line entry point: parse flags, configure logging, load the module
config and serve scrapes until interrupted.
"""

import argparse
import logging
import os
import signal
import sys
from typing import Tuple
from wsgiref.simple_server import WSGIRequestHandler, make_server

from prometheus_client.exposition import ThreadingWSGIServer

from eseries_exporter import __version__
from eseries_exporter.cache.cache_manager import StaleCache
from eseries_exporter.collectors.registry import default_factory
from eseries_exporter.config import EnvConfig, SafeConfig
from eseries_exporter.errors import ConfigError
from eseries_exporter.exporter import ExporterApp

FORMAT = '%(asctime)s - %(levelname)s - %(funcName)s - %(lineno)d - %(message)s'
DATEFMT = '%Y-%m-%dT%H:%M:%SZ'


class _SilentHandler(WSGIRequestHandler):
    """Per-request access lines go through logging at debug level instead of stderr."""

    def log_message(self, format, *args):
        logging.getLogger(__name__).debug(f"{self.address_string()} - {format % args}")


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split ':9313' or 'host:9313' into (host, port); an empty host binds all interfaces."""
    host, _, port = address.rpartition(":")
    if not port.isdigit():
        raise ValueError(f"Invalid listen address {address!r}, expected [host]:port")
    return host.strip("[]") or "0.0.0.0", int(port)


def parse_args(argv=None, env: EnvConfig = None) -> argparse.Namespace:
    env = env or EnvConfig()
    parser = argparse.ArgumentParser(description="Prometheus exporter for NetApp E-Series storage arrays")
    parser.add_argument('--config.file', dest='config_file', type=str, default=env.CONFIG_FILE,
                        help=f'Path to the YAML module configuration (default: {env.CONFIG_FILE}).')
    parser.add_argument('--web.listen-address', dest='listen_address', type=str, default=env.LISTEN_ADDRESS,
                        help=f'Address to listen on for scrapes (default: {env.LISTEN_ADDRESS}).')
    parser.add_argument('--exporter.use-cache', dest='use_cache', action='store_true', default=env.USE_CACHE,
                        help='Serve the last successful data for cache capable collectors when a collection fails.')
    parser.add_argument('--logfile', type=str, default=env.LOG_FILE,
                        help='Path to a log file. Logs to the console if not set.')
    parser.add_argument('--loglevel', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default=env.LOG_LEVEL.upper(), help='Log level (default: INFO).')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser.parse_args(argv)


def configure_logging(loglevel: str, logfile: str = None) -> None:
    log_level = getattr(logging, loglevel.upper())

    if logfile:
        logfile_dir = os.path.dirname(logfile) or '.'
        if os.path.isdir(logfile_dir) and os.access(logfile_dir, os.W_OK):
            logging.basicConfig(filename=logfile, level=log_level, format=FORMAT, datefmt=DATEFMT)
            logging.info(f'Logging to file: {logfile}')
        else:
            logging.basicConfig(level=log_level, format=FORMAT, datefmt=DATEFMT)
            logging.error(f'Logfile directory {logfile_dir} does not exist or is not writable')
            logging.warning('Falling back to console logging only')
    else:
        logging.basicConfig(level=log_level, format=FORMAT, datefmt=DATEFMT)

    # Never allow requests/urllib3 to log below INFO level due to credential exposure in URLs
    requests_level = max(log_level, logging.INFO)
    logging.getLogger("requests").setLevel(level=requests_level)
    logging.getLogger("urllib3").setLevel(level=requests_level)


def main(argv=None):
    CMD = parse_args(argv)
    configure_logging(CMD.loglevel, CMD.logfile)
    LOG = logging.getLogger(__name__)
    LOG.info(f"Starting eseries_exporter {__version__}")

    config = SafeConfig()
    try:
        config.reload_config(CMD.config_file)
    except ConfigError as e:
        LOG.error(f"Error loading config: {e}")
        sys.exit(1)

    def reload_handler(signum, frame):
        try:
            config.reload_config(CMD.config_file)
            LOG.info(f"Reloaded config from {CMD.config_file}")
        except ConfigError as e:
            LOG.error(f"Config reload failed, keeping previous config: {e}")

    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, reload_handler)

    try:
        host, port = parse_listen_address(CMD.listen_address)
    except ValueError as e:
        LOG.error(str(e))
        sys.exit(1)

    cache = StaleCache() if CMD.use_cache else None
    if CMD.use_cache:
        LOG.info("Stale cache enabled for drives and storage-systems collectors")
    app = ExporterApp(config, default_factory(), cache=cache, use_cache=CMD.use_cache)

    httpd = make_server(host, port, app, server_class=ThreadingWSGIServer, handler_class=_SilentHandler)
    LOG.info(f"Listening on {host}:{port}")
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        LOG.info("Interrupted by user. Exiting gracefully.")
    finally:
        httpd.server_close()


if __name__ == "__main__":
    main()
