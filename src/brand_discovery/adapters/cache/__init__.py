from brand_discovery.adapters.cache.memory_cache import MemoryCache

__all__ = ["MemoryCache"]
