"""Repository for Project operations."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError

from ..database import Project, get_async_session
from ..errors import StorageError

logger = logging.getLogger(__name__)


class ProjectRepository:
    """Repository for projects that reference model profiles."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or get_async_session()

    async def find_by_id(self, project_id: str) -> Optional[Project]:
        async with self.session_factory() as session:
            try:
                return await session.get(Project, project_id)
            except SQLAlchemyError as e:
                logger.error(f"Error fetching project {project_id}: {e}")
                raise StorageError(f"Failed to read project {project_id}") from e

    async def count_referencing_profile(self, component_id: str) -> int:
        """Number of projects whose model profile is the given component."""
        async with self.session_factory() as session:
            try:
                stmt = select(func.count()).select_from(Project).where(
                    Project.model_profile_id == component_id
                )
                result = await session.execute(stmt)
                return result.scalar() or 0
            except SQLAlchemyError as e:
                logger.error(f"Error counting projects for profile {component_id}: {e}")
                raise StorageError("Failed to check model profile references") from e

    async def mark_synced(
        self, synced_at: datetime, project_id: Optional[str] = None
    ) -> int:
        """
        Set the last sync time on one project, or on every enabled one.

        Returns:
            Number of projects updated
        """
        async with self.session_factory() as session:
            try:
                async with session.begin():
                    stmt = update(Project).values(last_auto_claude_sync=synced_at)
                    if project_id:
                        stmt = stmt.where(Project.id == project_id)
                    else:
                        stmt = stmt.where(Project.auto_claude_enabled.is_(True))
                    result = await session.execute(stmt)
                return result.rowcount or 0
            except SQLAlchemyError as e:
                logger.error(f"Error marking projects synced: {e}")
                raise StorageError("Failed to record sync time") from e
