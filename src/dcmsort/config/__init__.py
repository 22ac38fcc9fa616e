from .settings import DEFAULT_CONFIG_FILE, SortSettings

__all__ = ["DEFAULT_CONFIG_FILE", "SortSettings"]
