"""Render stored Auto-Claude configuration back into an installation."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..config import settings
from ..defaults import DEFAULT_PROJECT_CONFIG_NAME
from ..errors import ConfigurationError, HubError, NotFoundError, NothingToSyncError
from ..generators import (
    GeneratedFile,
    generate_agent_configs,
    generate_env_file,
    generate_prompt_files,
    generate_task_metadata,
)
from ..models.auto_claude import ModelProfile, ProjectConfig
from ..models.results import SyncResult
from ..parsers import extract_preserved_variables, parse_env_file
from ..performance import time_operation
from ..repositories.project_repository import ProjectRepository
from .component_cache import ComponentCache, ComponentSnapshot, get_component_cache
from .file_writer import FileWriter

logger = logging.getLogger(__name__)

BACKEND_DIR = Path("apps") / "backend"
AGENT_CONFIGS_FILE = "agent_configs.json"
TASK_METADATA_FILE = ".auto-claude/task_metadata.json"
ENV_FILE = ".auto-claude/.env"


def check_target(target_path: Union[str, Path, None]) -> Path:
    """
    Resolve and verify the installation sync writes into.

    Raises:
        ConfigurationError: No path configured, or the path is not an install
    """
    target_path = target_path or settings.autoclaude_backend_path
    if not target_path or not str(target_path).strip():
        raise ConfigurationError(
            "No target path given and AUTOCLAUDE_BACKEND_PATH is not configured"
        )

    root = Path(target_path).expanduser()
    if not root.exists():
        raise ConfigurationError(f"Target path does not exist: {root}")
    if not root.is_dir():
        raise ConfigurationError(f"Target path is not a directory: {root}")
    if not (root / BACKEND_DIR).is_dir():
        raise ConfigurationError(
            f"{root} is not an Auto-Claude installation: {BACKEND_DIR} not found"
        )
    return root


def render_files(
    snapshot: ComponentSnapshot,
    profile: Optional[ModelProfile],
    project_config: Optional[ProjectConfig],
    preserved: Optional[Dict[str, str]] = None,
) -> List[GeneratedFile]:
    """All files a sync writes, paths relative to the installation root."""
    files = [
        GeneratedFile(path=f"{BACKEND_DIR.as_posix()}/{file.path}", content=file.content)
        for file in generate_prompt_files(snapshot.prompts)
    ]
    if snapshot.agent_configs:
        files.append(
            GeneratedFile(
                path=AGENT_CONFIGS_FILE,
                content=generate_agent_configs(snapshot.agent_configs),
            )
        )
    files.append(
        GeneratedFile(path=TASK_METADATA_FILE, content=generate_task_metadata(profile))
    )
    if project_config is not None:
        files.append(
            GeneratedFile(path=ENV_FILE, content=generate_env_file(project_config, preserved))
        )
    return files


class SyncService:
    """Writes the cached component snapshot into an Auto-Claude installation."""

    def __init__(
        self,
        cache: Optional[ComponentCache] = None,
        project_repository: Optional[ProjectRepository] = None,
        writer_factory=FileWriter,
    ):
        self.cache = cache or get_component_cache()
        self.project_repository = project_repository or ProjectRepository()
        self.writer_factory = writer_factory

    async def _select_profile(
        self, snapshot: ComponentSnapshot, project_id: Optional[str]
    ) -> Optional[ModelProfile]:
        if project_id:
            project = await self.project_repository.find_by_id(project_id)
            if project is None:
                raise NotFoundError(f"Project {project_id} not found")
            if project.model_profile_id:
                for component_id, profile in snapshot.model_profiles.values():
                    if component_id == project.model_profile_id:
                        return profile
                logger.warning(
                    f"Project {project_id} references model profile "
                    f"{project.model_profile_id} which is not enabled, using default"
                )

        entry = snapshot.model_profiles.get(settings.default_model_profile)
        return entry[1] if entry else None

    @staticmethod
    def _select_project_config(snapshot: ComponentSnapshot) -> Optional[ProjectConfig]:
        if DEFAULT_PROJECT_CONFIG_NAME in snapshot.project_configs:
            return snapshot.project_configs[DEFAULT_PROJECT_CONFIG_NAME]
        return next(iter(snapshot.project_configs.values()), None)

    @staticmethod
    async def _read_preserved(root: Path) -> Dict[str, str]:
        env_path = root / ENV_FILE
        if not env_path.is_file():
            return {}
        result = await parse_env_file(env_path)
        return extract_preserved_variables(result.variables)

    async def _mark_synced(self, project_id: Optional[str]) -> None:
        try:
            count = await self.project_repository.mark_synced(
                datetime.now(timezone.utc), project_id
            )
            logger.info(f"Recorded sync time on {count} project(s)")
        except HubError as e:
            logger.warning(f"Could not record sync time: {e.message}")

    async def sync(
        self,
        target_path: Union[str, Path, None] = None,
        dry_run: bool = False,
        project_id: Optional[str] = None,
    ) -> SyncResult:
        """
        Write prompts, agent manifest, task metadata and settings to an install.

        Args:
            target_path: Installation root, defaults to AUTOCLAUDE_BACKEND_PATH
            dry_run: Report the files that would be written without writing
            project_id: Project whose model profile drives task metadata

        Returns:
            SyncResult; individual write failures are listed in errors

        Raises:
            ConfigurationError: Target missing or invalid
            NothingToSyncError: No components stored
            SnapshotError: Stored components could not be parsed
        """
        root = check_target(target_path)
        logger.info(f"Syncing Auto-Claude configuration to {root} (dry_run={dry_run})")

        async with time_operation(
            "auto_claude_sync", budget_ms=settings.sync_latency_budget_ms
        ) as timer:
            snapshot = await self.cache.get_snapshot()
            if snapshot.is_empty:
                raise NothingToSyncError("No Auto-Claude components to sync, run an import first")

            profile = await self._select_profile(snapshot, project_id)
            project_config = self._select_project_config(snapshot)
            preserved = {} if dry_run else await self._read_preserved(root)
            files = render_files(snapshot, profile, project_config, preserved)

            if dry_run:
                result = SyncResult(
                    success=True,
                    dry_run=True,
                    target_path=str(root),
                    written_count=len(files),
                    files_written=[file.path for file in files],
                )
            else:
                report = await self.writer_factory(root).write_files(files)
                result = SyncResult(
                    success=not report.errors,
                    target_path=str(root),
                    written_count=report.written,
                    files_written=report.written_paths,
                    errors=report.errors,
                )
            timer.items_processed = result.written_count
            timer.errors = len(result.errors)

        result.duration_ms = round(timer.duration_ms, 2)
        if not dry_run and not result.errors:
            await self._mark_synced(project_id)

        logger.info(
            f"Sync {'preview' if dry_run else 'finished'}: {result.written_count} file(s), "
            f"{len(result.errors)} error(s)"
        )
        return result
