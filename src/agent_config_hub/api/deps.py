"""FastAPI dependency providers, overridable in tests."""

from fastapi import Depends

from ..database import get_async_session
from ..repositories import ComponentRepository, ProjectRepository
from ..services.component_cache import ComponentCache, get_component_cache
from ..services.component_service import ComponentService
from ..services.import_service import ImportService
from ..services.sync_service import SyncService


def get_session_factory():
    return get_async_session()


def get_cache() -> ComponentCache:
    return get_component_cache()


def get_import_service(session_factory=Depends(get_session_factory)) -> ImportService:
    return ImportService(session_factory)


def get_sync_service(
    cache: ComponentCache = Depends(get_cache),
    session_factory=Depends(get_session_factory),
) -> SyncService:
    return SyncService(cache=cache, project_repository=ProjectRepository(session_factory))


def get_component_service(session_factory=Depends(get_session_factory)) -> ComponentService:
    return ComponentService(
        repository=ComponentRepository(session_factory),
        project_repository=ProjectRepository(session_factory),
    )
