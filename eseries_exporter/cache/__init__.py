from eseries_exporter.cache.cache_manager import StaleCache

__all__ = ["StaleCache"]
