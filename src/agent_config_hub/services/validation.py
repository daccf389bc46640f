"""Schema validation for parsed candidates, run before any storage write."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..models.auto_claude import AgentConfig, ModelProfile, ProjectConfig, Prompt
from ..models.results import ImportCounts

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


@dataclass
class ImportCandidates:
    """Raw camelCase payloads recovered by the parsers."""

    agent_configs: List[dict] = field(default_factory=list)
    prompts: List[dict] = field(default_factory=list)
    model_profiles: List[dict] = field(default_factory=list)
    project_config: Optional[dict] = None


@dataclass
class ValidatedBatch:
    """Entities that passed validation and every error collected on the way."""

    agent_configs: List[AgentConfig] = field(default_factory=list)
    prompts: List[Prompt] = field(default_factory=list)
    model_profiles: List[ModelProfile] = field(default_factory=list)
    project_config: Optional[ProjectConfig] = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def counts(self) -> ImportCounts:
        return ImportCounts(
            agent_configs=len(self.agent_configs),
            prompts=len(self.prompts),
            model_profiles=len(self.model_profiles),
            project_config=1 if self.project_config is not None else 0,
        )


def format_validation_error(label: str, exc: ValidationError) -> List[str]:
    """Flatten a pydantic error into ``label.field.path: message`` strings."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        prefix = f"{label}.{location}" if location else label
        messages.append(f"{prefix}: {error['msg']}")
    return messages


def validate_entity(
    model_cls: Type[M], payload: dict, label: str, errors: List[str]
) -> Optional[M]:
    """Validate one payload, appending any failure to errors."""
    try:
        return model_cls.model_validate(payload)
    except ValidationError as e:
        errors.extend(format_validation_error(label, e))
        return None


def _check_duplicates(kind: str, identities: List[str], errors: List[str]) -> None:
    seen: Dict[str, int] = {}
    for identity in identities:
        seen[identity] = seen.get(identity, 0) + 1
    for identity, count in seen.items():
        if count > 1:
            errors.append(f"{kind}[{identity}]: defined {count} times")


def validate_batch(candidates: ImportCandidates) -> ValidatedBatch:
    """
    Validate every candidate and collect all errors.

    Nothing short-circuits: the returned batch lists every failure so the
    caller can report them together.

    Args:
        candidates: Parsed payloads

    Returns:
        ValidatedBatch with the valid entities and the full error list
    """
    batch = ValidatedBatch()

    for index, payload in enumerate(candidates.agent_configs):
        label = f"agentConfig[{payload.get('agentType', index)}]"
        config = validate_entity(AgentConfig, payload, label, batch.errors)
        if config is not None:
            batch.agent_configs.append(config)

    for index, payload in enumerate(candidates.prompts):
        label = f"prompt[{payload.get('agentType', index)}]"
        prompt = validate_entity(Prompt, payload, label, batch.errors)
        if prompt is not None:
            batch.prompts.append(prompt)

    for index, payload in enumerate(candidates.model_profiles):
        label = f"modelProfile[{payload.get('name', index)}]"
        profile = validate_entity(ModelProfile, payload, label, batch.errors)
        if profile is not None:
            batch.model_profiles.append(profile)

    if candidates.project_config is not None:
        batch.project_config = validate_entity(
            ProjectConfig, candidates.project_config, "projectConfig[default]", batch.errors
        )

    _check_duplicates(
        "agentConfig", [c.agent_type for c in batch.agent_configs], batch.errors
    )
    _check_duplicates("prompt", [p.agent_type for p in batch.prompts], batch.errors)
    _check_duplicates(
        "modelProfile", [p.name for p in batch.model_profiles], batch.errors
    )

    if batch.errors:
        logger.warning(f"Validation found {len(batch.errors)} error(s)")
    return batch
