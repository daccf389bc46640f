"""Database module for Agent Config Hub."""

from .base import Base, get_async_engine, get_async_session
from .models import Component, Project
from .enums import ComponentTypeEnum

__all__ = [
    "Base",
    "get_async_engine",
    "get_async_session",
    "Component",
    "Project",
    "ComponentTypeEnum",
]
