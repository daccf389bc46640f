"""Services package for Agent Config Hub.

Submodules are loaded lazily so importing one service does not pull in
the others (and their database wiring) at package import time.
"""

__all__ = ["ImportService", "SyncService", "ComponentService", "ComponentCache"]


def __getattr__(name):
    if name == "ImportService":
        from .import_service import ImportService as _ImportService

        return _ImportService
    if name == "SyncService":
        from .sync_service import SyncService as _SyncService

        return _SyncService
    if name == "ComponentService":
        from .component_service import ComponentService as _ComponentService

        return _ComponentService
    if name == "ComponentCache":
        from .component_cache import ComponentCache as _ComponentCache

        return _ComponentCache
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
