"""Short-lived cache of the enabled Auto-Claude component snapshot.

Writes elsewhere do not invalidate the cache, so a reader may see state up
to one TTL old.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError

from ..config import settings
from ..database import Component
from ..database.enums import ComponentTypeEnum
from ..errors import SnapshotError
from ..models.auto_claude import AgentConfig, ModelProfile, ProjectConfig, Prompt
from ..performance import time_operation
from ..repositories.component_repository import ComponentRepository
from .validation import format_validation_error

logger = logging.getLogger(__name__)

SNAPSHOT_KEY = "auto-claude-components"


@dataclass
class ComponentSnapshot:
    """Parsed view of every enabled Auto-Claude component."""

    agent_configs: List[AgentConfig] = field(default_factory=list)
    prompts: List[Prompt] = field(default_factory=list)
    # name -> (component id, profile)
    model_profiles: Dict[str, Tuple[str, ModelProfile]] = field(default_factory=dict)
    project_configs: Dict[str, ProjectConfig] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.agent_configs and not self.prompts


@dataclass
class CacheEntry:
    snapshot: ComponentSnapshot
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


_PARSERS = {
    ComponentTypeEnum.AUTO_CLAUDE_AGENT_CONFIG.value: AgentConfig,
    ComponentTypeEnum.AUTO_CLAUDE_PROMPT.value: Prompt,
    ComponentTypeEnum.AUTO_CLAUDE_MODEL_PROFILE.value: ModelProfile,
    ComponentTypeEnum.AUTO_CLAUDE_PROJECT_CONFIG.value: ProjectConfig,
}


def build_snapshot(components: List[Component]) -> ComponentSnapshot:
    """
    Parse stored rows into a snapshot.

    Raises:
        SnapshotError: If any row fails to parse, listing every failure
    """
    snapshot = ComponentSnapshot()
    errors: List[str] = []

    for component in components:
        model_cls = _PARSERS.get(component.type)
        if model_cls is None:
            continue
        label = f"{component.type}[{component.name}]"
        try:
            entity = model_cls.model_validate_json(component.config)
        except ValidationError as e:
            errors.extend(format_validation_error(label, e))
            continue

        if isinstance(entity, AgentConfig):
            snapshot.agent_configs.append(entity)
        elif isinstance(entity, Prompt):
            snapshot.prompts.append(entity)
        elif isinstance(entity, ModelProfile):
            snapshot.model_profiles[component.name] = (component.id, entity)
        else:
            snapshot.project_configs[component.name] = entity

    if errors:
        raise SnapshotError(errors)
    return snapshot


class ComponentCache:
    """Single-key TTL cache in front of the component store."""

    def __init__(
        self,
        loader: Callable[[], Awaitable[List[Component]]],
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self._ttl = settings.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self.hits = 0
        self.misses = 0
        self.loads = 0

    def clear_expired(self) -> None:
        now = self._clock()
        for key in [k for k, entry in self._entries.items() if entry.is_expired(now)]:
            del self._entries[key]

    async def get_snapshot(self) -> ComponentSnapshot:
        """
        Return the cached snapshot, loading it from storage when absent or expired.

        Raises:
            SnapshotError: A stored payload could not be parsed; nothing is cached
            StorageError: The store could not be read
        """
        self.clear_expired()
        entry = self._entries.get(SNAPSHOT_KEY)
        if entry is not None:
            self.hits += 1
            return entry.snapshot

        self.misses += 1
        async with time_operation("component_cache_load") as timer:
            components = await self._loader()
            self.loads += 1
            timer.items_processed = len(components)
            snapshot = build_snapshot(components)

        self._entries[SNAPSHOT_KEY] = CacheEntry(
            snapshot=snapshot, expires_at=self._clock() + self._ttl
        )
        logger.info(f"Cached snapshot of {len(components)} component(s) for {self._ttl}s")
        return snapshot

    def clear(self) -> None:
        self._entries.clear()

    @property
    def stats(self) -> Dict[str, int]:
        return {
            "entries": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "loads": self.loads,
        }


# Process-wide cache
component_cache = None


def get_component_cache() -> ComponentCache:
    """Get or create the shared component cache."""
    global component_cache
    if component_cache is None:
        repository = ComponentRepository()
        component_cache = ComponentCache(repository.list_enabled_auto_claude)
    return component_cache
