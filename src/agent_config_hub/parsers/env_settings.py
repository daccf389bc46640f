"""Parser for Auto-Claude ``.env`` settings files."""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..performance import time_operation_sync

logger = logging.getLogger(__name__)

# Defaults applied when a toggle is absent from the file
BOOLEAN_SETTINGS = {
    "CONTEXT7_ENABLED": ("context7Enabled", True),
    "LINEAR_MCP_ENABLED": ("linearMcpEnabled", False),
    "ELECTRON_MCP_ENABLED": ("electronMcpEnabled", False),
    "PUPPETEER_MCP_ENABLED": ("puppeteerMcpEnabled", False),
    "GRAPHITI_ENABLED": ("graphitiEnabled", False),
}

OPTIONAL_SETTINGS = {
    "LINEAR_API_KEY": "linearApiKey",
    "LINEAR_TEAM_ID": "linearTeamId",
    "GITHUB_TOKEN": "githubToken",
    "GITHUB_REPO": "githubRepo",
}

# Carried over when sync rewrites an existing file
PRESERVED_ENV_KEYS = (
    "ANTHROPIC_API_KEY",
    "AUTO_CLAUDE_ENABLED",
    "AUTO_CLAUDE_DEBUG",
    "AUTO_CLAUDE_LOG_LEVEL",
)

CUSTOM_SERVER_TYPE_KEY = re.compile(r"^CUSTOM_MCP_([A-Z0-9_]+)_TYPE$")
AGENT_OVERRIDE_KEY = re.compile(r"^AGENT_([A-Z0-9_]+)_MCP_(ADD|REMOVE)$")


@dataclass
class EnvParseResult:
    """Project config rebuilt from a settings file."""

    project_config: Optional[dict] = None
    variables: Dict[str, str] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def parse_env_variables(text: str) -> Dict[str, str]:
    """
    Read ``KEY=value`` pairs from settings text.

    Lines are located by newline position rather than split into a list.
    Blank lines and ``#`` comments are skipped, values have one matching pair
    of surrounding quotes removed, and a repeated key keeps the last value.
    """
    variables: Dict[str, str] = {}
    length = len(text)
    pos = 0
    while pos < length:
        end = text.find("\n", pos)
        if end == -1:
            end = length
        line = text[pos:end].strip()
        pos = end + 1

        if not line or line.startswith("#"):
            continue
        separator = line.find("=")
        if separator <= 0:
            continue
        key = line[:separator].strip()
        variables[key] = _unquote(line[separator + 1:].strip())
    return variables


def _is_true(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() == "true"


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_headers(value: str) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    for item in value.split(","):
        key, sep, header_value = item.partition(":")
        if sep and key.strip():
            headers[key.strip()] = header_value.strip()
    return headers


def _custom_servers(variables: Dict[str, str], errors: List[str]) -> List[dict]:
    servers = []
    for key in variables:
        match = CUSTOM_SERVER_TYPE_KEY.match(key)
        if not match:
            continue
        prefix = f"CUSTOM_MCP_{match.group(1)}"
        server_id = match.group(1).lower()
        server_type = variables[key].strip().lower()
        server = {
            "id": server_id,
            "name": variables.get(f"{prefix}_NAME") or server_id.replace("_", "-"),
            "type": server_type,
        }

        if server_type == "command":
            command = variables.get(f"{prefix}_COMMAND")
            if not command:
                errors.append(f"Custom MCP server '{server_id}' has no command, skipped")
                continue
            server["command"] = command
            args = variables.get(f"{prefix}_ARGS", "").split()
            if args:
                server["args"] = args
        elif server_type == "http":
            url = variables.get(f"{prefix}_URL")
            if not url:
                errors.append(f"Custom MCP server '{server_id}' has no url, skipped")
                continue
            server["url"] = url
            headers = _parse_headers(variables.get(f"{prefix}_HEADERS", ""))
            if headers:
                server["headers"] = headers
        else:
            errors.append(
                f"Custom MCP server '{server_id}' has unknown type '{server_type}', skipped"
            )
            continue
        servers.append(server)
    return servers


def _agent_overrides(variables: Dict[str, str]) -> Dict[str, dict]:
    overrides: Dict[str, dict] = {}
    for key, value in variables.items():
        match = AGENT_OVERRIDE_KEY.match(key)
        if not match:
            continue
        agent_type = match.group(1).lower()
        action = match.group(2).lower()
        overrides.setdefault(agent_type, {})[action] = _split_list(value)
    return overrides


def build_project_config(variables: Dict[str, str], errors: List[str]) -> dict:
    """Map settings variables onto a camelCase project config payload."""
    config: Dict[str, object] = {}
    for env_key, (payload_key, default) in BOOLEAN_SETTINGS.items():
        config[payload_key] = _is_true(variables.get(env_key), default)

    config["customMcpServers"] = _custom_servers(variables, errors)
    config["agentMcpOverrides"] = _agent_overrides(variables)

    for env_key, payload_key in OPTIONAL_SETTINGS.items():
        value = variables.get(env_key)
        if value:
            config[payload_key] = value
    return config


def parse_env_content(text: str) -> EnvParseResult:
    """
    Parse settings text into a project config payload.

    Empty content, or content without any variable, yields an error result.
    """
    with time_operation_sync("parse_env_content") as timer:
        if not text.strip():
            return EnvParseResult(errors=["Env file is empty"])

        variables = parse_env_variables(text)
        timer.items_processed = len(variables)
        if not variables:
            return EnvParseResult(errors=["No variables found in env file"])

        errors: List[str] = []
        config = build_project_config(variables, errors)
        timer.errors = len(errors)
        return EnvParseResult(project_config=config, variables=variables, errors=errors)


async def parse_env_file(path: Union[str, Path]) -> EnvParseResult:
    """Read a settings file off the event loop and parse it."""
    path = Path(path)
    try:
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Failed to read env file {path}: {e}")
        return EnvParseResult(errors=[f"Failed to read {path.name}: {e}"])

    result = parse_env_content(text)
    logger.info(f"Parsed {len(result.variables)} variable(s) from {path}")
    return result


def extract_preserved_variables(variables: Dict[str, str]) -> Dict[str, str]:
    """Pick the keys that are not project config but must survive a rewrite."""
    return {key: variables[key] for key in PRESERVED_ENV_KEYS if key in variables}
