"""Data access for stored components and projects."""

from .component_repository import ComponentRepository
from .project_repository import ProjectRepository

__all__ = ["ComponentRepository", "ProjectRepository"]
