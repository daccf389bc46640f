"""Create, update and delete individual Auto-Claude components."""

import copy
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from ..database import Component
from ..database.enums import ComponentTypeEnum
from ..defaults import DEFAULT_PROJECT_CONFIG_NAME
from ..errors import ConflictError, InvalidComponentError, NotFoundError
from ..models.auto_claude import AgentConfig, ModelProfile, ProjectConfig, Prompt
from ..repositories.component_repository import ComponentRepository, dump_config
from ..repositories.project_repository import ProjectRepository
from .validation import format_validation_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComponentKind:
    """How one URL-level kind maps onto stored components."""

    slug: str
    type: ComponentTypeEnum
    model: Type[BaseModel]
    # Payload key holding the identity, None when the name lives outside the payload
    identity_key: Optional[str]
    tags: str


KINDS: Dict[str, ComponentKind] = {
    "agents": ComponentKind(
        "agents",
        ComponentTypeEnum.AUTO_CLAUDE_AGENT_CONFIG,
        AgentConfig,
        "agentType",
        "auto-claude,agent-config",
    ),
    "prompts": ComponentKind(
        "prompts",
        ComponentTypeEnum.AUTO_CLAUDE_PROMPT,
        Prompt,
        "agentType",
        "auto-claude,prompt",
    ),
    "model-profiles": ComponentKind(
        "model-profiles",
        ComponentTypeEnum.AUTO_CLAUDE_MODEL_PROFILE,
        ModelProfile,
        "name",
        "auto-claude,model-profile",
    ),
    "project-configs": ComponentKind(
        "project-configs",
        ComponentTypeEnum.AUTO_CLAUDE_PROJECT_CONFIG,
        ProjectConfig,
        None,
        "auto-claude,project-config",
    ),
}


def deep_merge(base: dict, changes: dict) -> dict:
    """Merge changes into a copy of base; nested dicts merge, everything else replaces."""
    merged = copy.deepcopy(base)
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _default_description(kind: ComponentKind, name: str, payload: dict) -> str:
    if kind.type == ComponentTypeEnum.AUTO_CLAUDE_MODEL_PROFILE:
        return payload["description"]
    if kind.type == ComponentTypeEnum.AUTO_CLAUDE_AGENT_CONFIG:
        return f"Auto-Claude agent configuration for {name}"
    if kind.type == ComponentTypeEnum.AUTO_CLAUDE_PROMPT:
        return f"Auto-Claude prompt for {name} agent"
    return "Auto-Claude project configuration"


class ComponentService:
    """CRUD over Auto-Claude components with schema validation on every write."""

    def __init__(
        self,
        repository: Optional[ComponentRepository] = None,
        project_repository: Optional[ProjectRepository] = None,
    ):
        self.repository = repository or ComponentRepository()
        self.project_repository = project_repository or ProjectRepository()

    @staticmethod
    def get_kind(slug: str) -> ComponentKind:
        kind = KINDS.get(slug)
        if kind is None:
            raise NotFoundError(
                f"Unknown component kind '{slug}', expected one of {', '.join(KINDS)}"
            )
        return kind

    @staticmethod
    def _validate(kind: ComponentKind, payload: dict) -> dict:
        try:
            return kind.model.model_validate(payload).to_payload()
        except ValidationError as e:
            raise InvalidComponentError(format_validation_error(kind.slug, e))

    async def list(self, slug: str) -> List[Component]:
        kind = self.get_kind(slug)
        return await self.repository.list_by_type(kind.type.value)

    async def get(self, slug: str, name: str) -> Component:
        kind = self.get_kind(slug)
        component = await self.repository.find_by_type_and_name(kind.type.value, name)
        if component is None:
            raise NotFoundError(f"{kind.slug} '{name}' not found")
        return component

    async def create(
        self,
        slug: str,
        payload: dict,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Component:
        """
        Create a component.

        Raises:
            InvalidComponentError: Payload failed validation
            ConflictError: A component with the same name already exists
        """
        kind = self.get_kind(slug)
        payload = dict(payload)
        if kind.identity_key:
            name = payload.get(kind.identity_key) or name
            if name:
                payload[kind.identity_key] = name
        else:
            name = name or DEFAULT_PROJECT_CONFIG_NAME
        if not name:
            raise InvalidComponentError([f"{kind.slug}: {kind.identity_key} is required"])

        validated = self._validate(kind, payload)
        if await self.repository.find_by_type_and_name(kind.type.value, name):
            raise ConflictError(f"{kind.slug} '{name}' already exists")

        component = Component(
            type=kind.type.value,
            name=name,
            description=description or _default_description(kind, name, validated),
            config=dump_config(validated),
            tags=kind.tags,
            enabled=True,
        )
        component = await self.repository.add(component)
        logger.info(f"Created {kind.slug} '{name}'")
        return component

    async def update(self, slug: str, name: str, changes: dict) -> Component:
        """
        Merge changes into a stored component and re-validate the result.

        Raises:
            NotFoundError: No such component
            InvalidComponentError: Identity change or merged payload invalid
        """
        kind = self.get_kind(slug)
        component = await self.get(slug, name)

        if kind.identity_key and kind.identity_key in changes:
            if changes[kind.identity_key] != name:
                raise InvalidComponentError(
                    [f"{kind.slug}.{kind.identity_key}: cannot be changed"]
                )

        merged = deep_merge(component.load_config(), changes)
        validated = self._validate(kind, merged)
        description = (
            validated["description"]
            if kind.type == ComponentTypeEnum.AUTO_CLAUDE_MODEL_PROFILE
            else None
        )
        updated = await self.repository.save_config(component.id, validated, description)
        logger.info(f"Updated {kind.slug} '{name}'")
        return updated

    async def delete(self, slug: str, name: str) -> None:
        """
        Delete a component.

        Raises:
            NotFoundError: No such component
            ConflictError: Model profile still referenced by a project
        """
        kind = self.get_kind(slug)
        component = await self.get(slug, name)

        if kind.type == ComponentTypeEnum.AUTO_CLAUDE_MODEL_PROFILE:
            references = await self.project_repository.count_referencing_profile(
                component.id
            )
            if references:
                raise ConflictError(
                    f"Model profile '{name}' is used by {references} project(s)"
                )

        await self.repository.delete(component.id)
        logger.info(f"Deleted {kind.slug} '{name}'")
