"""Database models."""

import json
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    String,
    Text,
    UniqueConstraint,
)
from .base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Component(Base):
    """Generic stored component with a JSON payload whose shape depends on type."""

    __tablename__ = "component"
    __table_args__ = (UniqueConstraint("type", "name", name="uq_component_type_name"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    type = Column(String(50), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    config = Column(Text, nullable=False)
    source_url = Column(String(1024), nullable=True)
    version = Column(String(50), nullable=True)
    tags = Column(String(500), nullable=False, default="")
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now
    )

    def load_config(self) -> dict:
        """Decode the stored JSON payload."""
        return json.loads(self.config)

    def __repr__(self) -> str:
        return f"<Component {self.type}:{self.name}>"


class Project(Base):
    """A project that can reference a model profile and receive syncs."""

    __tablename__ = "project"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    path = Column(String(1024), nullable=False)
    machine = Column(String(255), nullable=True)
    auto_claude_enabled = Column(Boolean, nullable=False, default=False)
    model_profile_id = Column(String(36), nullable=True, index=True)
    last_auto_claude_sync = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now
    )
