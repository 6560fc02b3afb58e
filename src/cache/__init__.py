from .vault_cache import CachedFile, CacheState, VaultCache

__all__ = ["CachedFile", "CacheState", "VaultCache"]
