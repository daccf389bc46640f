"""Data models for Agent Config Hub."""

from .auto_claude import (
    AgentConfig,
    AgentMcpOverride,
    CustomMcpServer,
    InjectionPoints,
    ModelProfile,
    PhaseModels,
    PhaseThinking,
    ProjectConfig,
    Prompt,
)
from .results import (
    ComponentResponse,
    ImportCounts,
    ImportRequest,
    ImportResult,
    SyncRequest,
    SyncResult,
)

__all__ = [
    "AgentConfig",
    "AgentMcpOverride",
    "CustomMcpServer",
    "InjectionPoints",
    "ModelProfile",
    "PhaseModels",
    "PhaseThinking",
    "ProjectConfig",
    "Prompt",
    "ComponentResponse",
    "ImportCounts",
    "ImportRequest",
    "ImportResult",
    "SyncRequest",
    "SyncResult",
]
