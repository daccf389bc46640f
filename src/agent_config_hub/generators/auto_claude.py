"""Pure render functions for the files sync writes.

Nothing here touches the filesystem. Output is deterministic for a given
input so repeated syncs of unchanged state produce identical files.
"""

import json
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..defaults import DEFAULT_PHASE_MODELS, DEFAULT_PHASE_THINKING, PHASES
from ..models.auto_claude import AgentConfig, ModelProfile, ProjectConfig, Prompt
from ..parsers.env_settings import BOOLEAN_SETTINGS, OPTIONAL_SETTINGS


@dataclass
class GeneratedFile:
    """A rendered file, path relative to the target root."""

    path: str
    content: str


def generate_prompt_files(prompts: Iterable[Prompt]) -> List[GeneratedFile]:
    """One markdown file per prompt, placeholders kept verbatim."""
    return [
        GeneratedFile(
            path=f"prompts/{prompt.agent_type}.md",
            content=prompt.prompt_content.rstrip("\n") + "\n",
        )
        for prompt in sorted(prompts, key=lambda p: p.agent_type)
    ]


def generate_agent_configs(configs: Iterable[AgentConfig]) -> str:
    """JSON manifest keyed by agent type."""
    manifest = {
        config.agent_type: config.to_payload()
        for config in sorted(configs, key=lambda c: c.agent_type)
    }
    return json.dumps(manifest, indent=2) + "\n"


def generate_task_metadata(profile: Optional[ModelProfile] = None) -> str:
    """
    Render task metadata for a model profile.

    Args:
        profile: Profile to render, built-in defaults when None

    Returns:
        JSON with ``models`` and ``thinking`` maps for every phase
    """
    models = dict(DEFAULT_PHASE_MODELS)
    thinking = dict(DEFAULT_PHASE_THINKING)
    if profile is not None:
        for phase in PHASES:
            models[phase] = getattr(profile.phase_models, phase) or models[phase]
            thinking[phase] = getattr(profile.phase_thinking, phase) or thinking[phase]
    return json.dumps({"models": models, "thinking": thinking}, indent=2) + "\n"


def custom_server_env_prefix(server_id: str) -> str:
    """Settings key prefix for a custom server id, reversed by the env parser."""
    return f"CUSTOM_MCP_{server_id.upper()}"


def _quote(value: str) -> str:
    if value == "" or re.search(r"\s|#|[\"']", value):
        return '"' + value + '"'
    return value


def generate_env_file(
    project_config: ProjectConfig, preserved: Optional[Dict[str, str]] = None
) -> str:
    """
    Render a settings file the env parser reads back into the same config.

    Args:
        project_config: Config to render
        preserved: Extra variables carried over from the existing file

    Returns:
        File content
    """
    payload = project_config.to_payload()
    lines = ["# Auto-Claude configuration", "# Managed by Agent Config Hub", ""]

    if preserved:
        for key in sorted(preserved):
            lines.append(f"{key}={_quote(preserved[key])}")
        lines.append("")

    lines.append("# Integrations")
    for env_key, (payload_key, _) in BOOLEAN_SETTINGS.items():
        lines.append(f"{env_key}={'true' if payload[payload_key] else 'false'}")
    for env_key, payload_key in OPTIONAL_SETTINGS.items():
        if payload.get(payload_key):
            lines.append(f"{env_key}={_quote(payload[payload_key])}")

    if project_config.custom_mcp_servers:
        lines.extend(["", "# Custom MCP servers"])
        for server in project_config.custom_mcp_servers:
            prefix = custom_server_env_prefix(server.id)
            lines.append(f"{prefix}_TYPE={server.type}")
            lines.append(f"{prefix}_NAME={_quote(server.name)}")
            if server.type == "command":
                lines.append(f"{prefix}_COMMAND={_quote(server.command)}")
                if server.args:
                    lines.append(f"{prefix}_ARGS={_quote(' '.join(server.args))}")
            else:
                lines.append(f"{prefix}_URL={_quote(server.url)}")
                if server.headers:
                    headers = ",".join(f"{k}:{v}" for k, v in server.headers.items())
                    lines.append(f"{prefix}_HEADERS={_quote(headers)}")

    if project_config.agent_mcp_overrides:
        lines.extend(["", "# Per-agent MCP overrides"])
        for agent_type in sorted(project_config.agent_mcp_overrides):
            override = project_config.agent_mcp_overrides[agent_type]
            key = agent_type.upper()
            if override.add is not None:
                lines.append(f"AGENT_{key}_MCP_ADD={','.join(override.add)}")
            if override.remove is not None:
                lines.append(f"AGENT_{key}_MCP_REMOVE={','.join(override.remove)}")

    return "\n".join(lines) + "\n"
