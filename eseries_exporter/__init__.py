"""
Prometheus exporter for NetApp E-Series storage arrays, reached through the
SANtricity Web Services proxy.
"""

__version__ = "1.0.0"
