"""Auto-Claude component schemas.

Payloads are stored and exchanged in camelCase. Every model accepts either
the camelCase alias or the snake_case field name, and ``to_payload`` returns
the camelCase dict that is persisted in ``Component.config``.
"""

import re
from typing import Dict, List, Literal, Optional

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

KNOWN_TOOLS = (
    "Read",
    "Write",
    "Edit",
    "Bash",
    "Glob",
    "Grep",
    "Task",
    "WebFetch",
    "WebSearch",
)

ThinkingLevel = Literal["none", "low", "medium", "high", "ultrathink"]
ModelName = Literal["opus", "sonnet", "haiku"]

AGENT_TYPE_PATTERN = r"^[a-z_]+$"
PROFILE_NAME_PATTERN = r"^[a-z0-9_-]+$"
# Ids that appear inside settings-file keys
ENV_KEY_ID_PATTERN = r"^[a-z0-9_]+$"
GITHUB_REPO_PATTERN = re.compile(r"^[\w.-]+/[\w.-]+$")

_http_url = TypeAdapter(AnyHttpUrl)


class AutoClaudeModel(BaseModel):
    """Base for all payload models."""

    class Config:
        populate_by_name = True

    def to_payload(self) -> dict:
        """Return the camelCase dict stored for this entity."""
        return self.model_dump(by_alias=True, exclude_none=True)


class AgentConfig(AutoClaudeModel):
    """Tool and MCP server permissions for one agent type."""

    agent_type: str = Field(
        ..., alias="agentType", pattern=AGENT_TYPE_PATTERN, description="Agent type key"
    )
    tools: List[str] = Field(..., min_length=1, description="Allowed built-in tools")
    mcp_servers: List[str] = Field(
        ..., alias="mcpServers", description="Required MCP servers"
    )
    mcp_servers_optional: List[str] = Field(
        default_factory=list,
        alias="mcpServersOptional",
        description="MCP servers enabled when available",
    )
    auto_claude_tools: List[str] = Field(
        default_factory=list,
        alias="autoClaudeTools",
        description="Auto-Claude specific tools",
    )
    thinking_default: ThinkingLevel = Field(
        "medium", alias="thinkingDefault", description="Default thinking level"
    )

    @field_validator("tools")
    @classmethod
    def check_known_tools(cls, tools: List[str]) -> List[str]:
        unknown = [tool for tool in tools if tool not in KNOWN_TOOLS]
        if unknown:
            raise ValueError(
                f"unknown tool(s) {', '.join(unknown)}; expected one of {', '.join(KNOWN_TOOLS)}"
            )
        return tools

    @model_validator(mode="after")
    def check_disjoint_servers(self):
        overlap = sorted(set(self.mcp_servers) & set(self.mcp_servers_optional))
        if overlap:
            raise ValueError(
                f"servers listed as both required and optional: {', '.join(overlap)}"
            )
        return self


class InjectionPoints(AutoClaudeModel):
    """Placeholders detected in a prompt body."""

    spec_directory: bool = Field(False, alias="specDirectory")
    project_context: bool = Field(False, alias="projectContext")
    mcp_documentation: bool = Field(False, alias="mcpDocumentation")


class Prompt(AutoClaudeModel):
    """Persona prompt for one agent type."""

    agent_type: str = Field(..., alias="agentType", pattern=AGENT_TYPE_PATTERN)
    prompt_content: str = Field(
        ..., alias="promptContent", min_length=10, max_length=50000
    )
    injection_points: Optional[InjectionPoints] = Field(None, alias="injectionPoints")

    @field_validator("prompt_content")
    @classmethod
    def check_not_blank(cls, content: str) -> str:
        if not content.strip():
            raise ValueError("prompt content is empty")
        return content


class PhaseModels(AutoClaudeModel):
    spec: ModelName
    planning: ModelName
    coding: ModelName
    qa: ModelName


class PhaseThinking(AutoClaudeModel):
    spec: ThinkingLevel
    planning: ThinkingLevel
    coding: ThinkingLevel
    qa: ThinkingLevel


class ModelProfile(AutoClaudeModel):
    """Model and thinking level per task phase."""

    name: str = Field(..., pattern=PROFILE_NAME_PATTERN, min_length=1, max_length=50)
    description: str = Field(..., min_length=1, max_length=500)
    phase_models: PhaseModels = Field(..., alias="phaseModels")
    phase_thinking: PhaseThinking = Field(..., alias="phaseThinking")


class CustomMcpServer(AutoClaudeModel):
    """User-defined MCP server reachable by command or over HTTP."""

    id: str = Field(
        ..., pattern=ENV_KEY_ID_PATTERN, description="Lowercase letters, digits and underscores"
    )
    name: str = Field(..., min_length=1)
    type: Literal["command", "http"]
    command: Optional[str] = None
    args: Optional[List[str]] = None
    url: Optional[str] = None
    headers: Optional[Dict[str, str]] = None

    @model_validator(mode="after")
    def check_transport(self):
        if self.type == "command" and not self.command:
            raise ValueError("command servers require a command")
        if self.type == "http":
            if not self.url:
                raise ValueError("http servers require a url")
            try:
                _http_url.validate_python(self.url)
            except ValidationError:
                raise ValueError(f"invalid url {self.url!r}")
        return self


class AgentMcpOverride(AutoClaudeModel):
    """Per-agent additions and removals on top of the agent's MCP servers."""

    add: Optional[List[str]] = None
    remove: Optional[List[str]] = None

    @model_validator(mode="after")
    def check_not_empty(self):
        if self.add is None and self.remove is None:
            raise ValueError("override needs at least one of add or remove")
        return self


class ProjectConfig(AutoClaudeModel):
    """Project-level integration toggles and custom MCP servers."""

    context7_enabled: bool = Field(True, alias="context7Enabled")
    linear_mcp_enabled: bool = Field(False, alias="linearMcpEnabled")
    electron_mcp_enabled: bool = Field(False, alias="electronMcpEnabled")
    puppeteer_mcp_enabled: bool = Field(False, alias="puppeteerMcpEnabled")
    graphiti_enabled: bool = Field(False, alias="graphitiEnabled")
    custom_mcp_servers: List[CustomMcpServer] = Field(
        default_factory=list, alias="customMcpServers"
    )
    agent_mcp_overrides: Dict[str, AgentMcpOverride] = Field(
        default_factory=dict, alias="agentMcpOverrides"
    )
    linear_api_key: Optional[str] = Field(None, alias="linearApiKey")
    linear_team_id: Optional[str] = Field(None, alias="linearTeamId")
    github_token: Optional[str] = Field(None, alias="githubToken")
    github_repo: Optional[str] = Field(None, alias="githubRepo")

    @field_validator("github_repo")
    @classmethod
    def check_github_repo(cls, repo: Optional[str]) -> Optional[str]:
        if repo is not None and not GITHUB_REPO_PATTERN.match(repo):
            raise ValueError("githubRepo must look like owner/repo")
        return repo

    @field_validator("agent_mcp_overrides")
    @classmethod
    def check_override_keys(
        cls, overrides: Dict[str, AgentMcpOverride]
    ) -> Dict[str, AgentMcpOverride]:
        invalid = sorted(key for key in overrides if not re.match(ENV_KEY_ID_PATTERN, key))
        if invalid:
            raise ValueError(
                f"override key(s) {', '.join(invalid)} must use lowercase letters, digits and underscores"
            )
        return overrides

    @model_validator(mode="after")
    def check_integrations(self):
        if self.linear_mcp_enabled and not (self.linear_api_key and self.linear_team_id):
            raise ValueError("Linear integration requires linearApiKey and linearTeamId")

        ids = [server.id for server in self.custom_mcp_servers]
        duplicates = sorted({server_id for server_id in ids if ids.count(server_id) > 1})
        if duplicates:
            raise ValueError(f"duplicate custom MCP server id(s): {', '.join(duplicates)}")
        return self
