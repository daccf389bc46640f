"""Repository for Component operations."""

import json
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import Component, get_async_session
from ..database.enums import AUTO_CLAUDE_TYPES
from ..errors import ConflictError, NotFoundError, StorageError

logger = logging.getLogger(__name__)


def dump_config(payload: dict) -> str:
    """Serialize a payload the same way for every write."""
    return json.dumps(payload, sort_keys=True)


class ComponentRepository:
    """Repository for managing stored components in database."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or get_async_session()

    async def find_by_type_and_name(
        self, component_type: str, name: str
    ) -> Optional[Component]:
        """
        Find a component by its unique (type, name) pair.

        Args:
            component_type: Component type, e.g. 'AUTO_CLAUDE_PROMPT'
            name: Component name

        Returns:
            Component if found, None otherwise
        """
        async with self.session_factory() as session:
            try:
                stmt = select(Component).where(
                    Component.type == component_type, Component.name == name
                )
                result = await session.execute(stmt)
                return result.scalar_one_or_none()
            except SQLAlchemyError as e:
                logger.error(f"Error fetching component {component_type}:{name}: {e}")
                raise StorageError(f"Failed to read component {name}") from e

    async def list_by_type(self, component_type: str) -> List[Component]:
        async with self.session_factory() as session:
            try:
                stmt = (
                    select(Component)
                    .where(Component.type == component_type)
                    .order_by(Component.name)
                )
                result = await session.execute(stmt)
                return list(result.scalars().all())
            except SQLAlchemyError as e:
                logger.error(f"Error listing components of type {component_type}: {e}")
                raise StorageError(f"Failed to list {component_type}") from e

    async def list_enabled_auto_claude(self) -> List[Component]:
        """All enabled components of the Auto-Claude types."""
        async with self.session_factory() as session:
            try:
                stmt = (
                    select(Component)
                    .where(
                        Component.type.in_(AUTO_CLAUDE_TYPES),
                        Component.enabled.is_(True),
                    )
                    .order_by(Component.type, Component.name)
                )
                result = await session.execute(stmt)
                return list(result.scalars().all())
            except SQLAlchemyError as e:
                logger.error(f"Error loading enabled components: {e}")
                raise StorageError("Failed to load enabled components") from e

    async def add(self, component: Component) -> Component:
        """
        Insert a new component.

        Raises:
            ConflictError: A component with the same (type, name) already exists
        """
        async with self.session_factory() as session:
            try:
                async with session.begin():
                    session.add(component)
                return component
            except IntegrityError as e:
                logger.warning(f"Component {component.type}:{component.name} already exists: {e}")
                raise ConflictError(f"{component.type} '{component.name}' already exists") from e
            except SQLAlchemyError as e:
                logger.error(f"Error saving component {component.name}: {e}")
                raise StorageError(f"Failed to save component {component.name}") from e

    async def save_config(
        self, component_id: str, payload: dict, description: Optional[str] = None
    ) -> Component:
        """Replace the stored payload (and optionally the description)."""
        async with self.session_factory() as session:
            try:
                async with session.begin():
                    component = await session.get(Component, component_id)
                    if component is None:
                        raise NotFoundError(f"Component {component_id} not found")
                    component.config = dump_config(payload)
                    if description is not None:
                        component.description = description
                return component
            except SQLAlchemyError as e:
                logger.error(f"Error updating component {component_id}: {e}")
                raise StorageError(f"Failed to update component {component_id}") from e

    async def delete(self, component_id: str) -> None:
        async with self.session_factory() as session:
            try:
                async with session.begin():
                    component = await session.get(Component, component_id)
                    if component is not None:
                        await session.delete(component)
            except SQLAlchemyError as e:
                logger.error(f"Error deleting component {component_id}: {e}")
                raise StorageError(f"Failed to delete component {component_id}") from e

    @staticmethod
    async def upsert_many(
        session: AsyncSession,
        entities: Iterable[Tuple[str, str, str, dict, str]],
    ) -> Tuple[int, int]:
        """
        Stage creates and updates for many components inside a caller's transaction.

        Existing rows are loaded with one query, then every entity is created
        or updated in place and flushed as a single unit of work. Enabled flag
        and tags of existing rows are left alone.

        Args:
            session: Session with an open transaction
            entities: (type, name, description, payload, tags) tuples

        Returns:
            Tuple of (created, updated) counts
        """
        entities = list(entities)
        keys = [(component_type, name) for component_type, name, _, _, _ in entities]
        existing: Dict[Tuple[str, str], Component] = {}
        if keys:
            types = sorted({component_type for component_type, _ in keys})
            stmt = select(Component).where(Component.type.in_(types))
            result = await session.execute(stmt)
            wanted = set(keys)
            existing = {
                (c.type, c.name): c
                for c in result.scalars().all()
                if (c.type, c.name) in wanted
            }

        created = updated = 0
        for component_type, name, description, payload, tags in entities:
            component = existing.get((component_type, name))
            if component is None:
                session.add(
                    Component(
                        type=component_type,
                        name=name,
                        description=description,
                        config=dump_config(payload),
                        tags=tags,
                        enabled=True,
                    )
                )
                created += 1
            else:
                component.description = description
                component.config = dump_config(payload)
                updated += 1

        await session.flush()
        return created, updated
