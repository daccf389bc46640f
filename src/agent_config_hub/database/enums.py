"""Database enums."""

from enum import Enum


class ComponentTypeEnum(str, Enum):
    """Stored component types managed by the Auto-Claude pipeline."""

    AUTO_CLAUDE_AGENT_CONFIG = "AUTO_CLAUDE_AGENT_CONFIG"
    AUTO_CLAUDE_PROMPT = "AUTO_CLAUDE_PROMPT"
    AUTO_CLAUDE_MODEL_PROFILE = "AUTO_CLAUDE_MODEL_PROFILE"
    AUTO_CLAUDE_PROJECT_CONFIG = "AUTO_CLAUDE_PROJECT_CONFIG"


AUTO_CLAUDE_TYPES = [member.value for member in ComponentTypeEnum]
