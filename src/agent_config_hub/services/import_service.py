"""Import Auto-Claude configuration from an installation into the store."""

import asyncio
import copy
import logging
from pathlib import Path
from typing import Dict, List, Tuple, Union

from sqlalchemy.exc import SQLAlchemyError

from ..config import settings
from ..database import get_async_session
from ..database.enums import ComponentTypeEnum
from ..defaults import DEFAULT_MODEL_PROFILES, DEFAULT_PROJECT_CONFIG_NAME
from ..errors import ConfigurationError, ImportValidationError, StorageError
from ..models.results import ImportResult
from ..parsers import (
    EnvParseResult,
    ModelsParseResult,
    PromptsParseResult,
    parse_env_file,
    parse_models_file,
    parse_prompts_directory,
)
from ..performance import time_operation
from ..repositories.component_repository import ComponentRepository
from .validation import ImportCandidates, ValidatedBatch, validate_batch

logger = logging.getLogger(__name__)

BACKEND_DIR = Path("apps") / "backend"
ENV_LOCATIONS = (Path(".auto-claude") / ".env", Path(".env"))


async def _resolved(value):
    return value


def find_env_file(root: Path):
    """First settings file present in the installation, or None."""
    for relative in ENV_LOCATIONS:
        candidate = root / relative
        if candidate.is_file():
            return candidate
    return None


def check_installation(source_path: Union[str, Path, None]) -> Path:
    """
    Verify the source path before anything is parsed.

    Raises:
        ConfigurationError: If the path is missing or not an Auto-Claude install
    """
    if source_path is None or not str(source_path).strip():
        raise ConfigurationError("Source path is required")

    root = Path(source_path).expanduser()
    if not root.exists():
        raise ConfigurationError(f"Source path does not exist: {root}")
    if not root.is_dir():
        raise ConfigurationError(f"Source path is not a directory: {root}")

    backend = root / BACKEND_DIR
    if not (backend / "models.py").is_file() and not (backend / "prompts").is_dir():
        raise ConfigurationError(
            f"{root} does not look like an Auto-Claude installation: "
            f"neither {BACKEND_DIR / 'models.py'} nor {BACKEND_DIR / 'prompts'} found"
        )
    return root


class ImportService:
    """Two-phase import: validate everything, then write everything in one transaction."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or get_async_session()

    async def _parse(
        self, root: Path
    ) -> Tuple[ImportCandidates, List[str], Dict[str, Dict[str, str]]]:
        backend = root / BACKEND_DIR
        models_path = backend / "models.py"
        prompts_path = backend / "prompts"
        env_path = find_env_file(root)

        warnings: List[str] = []
        if not models_path.is_file():
            warnings.append("models.py not found, no agent configs imported")
        if not prompts_path.is_dir():
            warnings.append("prompts directory not found, no prompts imported")
        if env_path is None:
            warnings.append(".env not found, no project config imported")

        models_result, prompts_result, env_result = await asyncio.gather(
            parse_models_file(models_path)
            if models_path.is_file()
            else _resolved(ModelsParseResult(located=False)),
            parse_prompts_directory(prompts_path)
            if prompts_path.is_dir()
            else _resolved(PromptsParseResult()),
            parse_env_file(env_path)
            if env_path is not None
            else _resolved(EnvParseResult()),
        )

        warnings.extend(f"models.py: {error}" for error in models_result.errors)
        warnings.extend(f"models.py: {warning}" for warning in models_result.warnings)
        warnings.extend(f"prompts: {error}" for error in prompts_result.errors)
        warnings.extend(f".env: {error}" for error in env_result.errors)

        candidates = ImportCandidates(
            agent_configs=models_result.agent_configs,
            prompts=prompts_result.prompts,
            model_profiles=copy.deepcopy(DEFAULT_MODEL_PROFILES),
            project_config=env_result.project_config,
        )
        return candidates, warnings, prompts_result.front_matter

    async def _persist(
        self, batch: ValidatedBatch, front_matter: Dict[str, Dict[str, str]]
    ) -> Tuple[int, int]:
        entities = []
        for config in batch.agent_configs:
            entities.append(
                (
                    ComponentTypeEnum.AUTO_CLAUDE_AGENT_CONFIG.value,
                    config.agent_type,
                    f"Auto-Claude agent configuration for {config.agent_type}",
                    config.to_payload(),
                    "auto-claude,agent-config,imported",
                )
            )
        for prompt in batch.prompts:
            description = front_matter.get(prompt.agent_type, {}).get("description")
            entities.append(
                (
                    ComponentTypeEnum.AUTO_CLAUDE_PROMPT.value,
                    prompt.agent_type,
                    description or f"Auto-Claude prompt for {prompt.agent_type} agent",
                    prompt.to_payload(),
                    "auto-claude,prompt,imported",
                )
            )
        for profile in batch.model_profiles:
            entities.append(
                (
                    ComponentTypeEnum.AUTO_CLAUDE_MODEL_PROFILE.value,
                    profile.name,
                    profile.description,
                    profile.to_payload(),
                    "auto-claude,model-profile,imported",
                )
            )
        if batch.project_config is not None:
            entities.append(
                (
                    ComponentTypeEnum.AUTO_CLAUDE_PROJECT_CONFIG.value,
                    DEFAULT_PROJECT_CONFIG_NAME,
                    "Auto-Claude project configuration",
                    batch.project_config.to_payload(),
                    "auto-claude,project-config,imported",
                )
            )

        async with self.session_factory() as session:
            try:
                async with session.begin():
                    return await ComponentRepository.upsert_many(session, entities)
            except SQLAlchemyError as e:
                logger.error(f"Import transaction rolled back: {e}")
                raise StorageError("Import failed, no changes were saved") from e

    async def import_configs(
        self, source_path: Union[str, Path], dry_run: bool = False
    ) -> ImportResult:
        """
        Import agent configs, prompts, model profiles and project config.

        Args:
            source_path: Root of the Auto-Claude installation
            dry_run: Parse and validate only

        Returns:
            ImportResult with counts, or preview counts for a dry run

        Raises:
            ConfigurationError: Source path is missing or not an installation
            ImportValidationError: Any entity failed validation, nothing written
            StorageError: The transaction failed and was rolled back
        """
        root = check_installation(source_path)
        logger.info(f"Importing Auto-Claude configuration from {root} (dry_run={dry_run})")

        async with time_operation(
            "auto_claude_import", budget_ms=settings.import_latency_budget_ms
        ) as timer:
            candidates, warnings, front_matter = await self._parse(root)
            batch = validate_batch(candidates)
            counts = batch.counts()

            if not batch.ok:
                raise ImportValidationError(
                    batch.errors,
                    preview=counts.model_dump(by_alias=True),
                    warnings=warnings,
                )

            if dry_run:
                result = ImportResult(dry_run=True, preview=counts, warnings=warnings)
            else:
                created, updated = await self._persist(batch, front_matter)
                result = ImportResult(
                    imported=counts, created=created, updated=updated, warnings=warnings
                )
                timer.items_processed = created + updated
            timer.errors = len(warnings)

        result.duration_ms = round(timer.duration_ms, 2)
        for warning in warnings:
            logger.warning(f"Import warning: {warning}")
        logger.info(
            f"Import {'preview' if dry_run else 'finished'}: "
            f"{counts.agent_configs} agent config(s), {counts.prompts} prompt(s), "
            f"{counts.model_profiles} model profile(s), {counts.project_config} project config(s)"
        )
        return result
