"""
Pytest configuration and shared fixtures.

Provides an on-disk SQLite database per test and a builder for fake
Auto-Claude installations.
"""

from pathlib import Path
from typing import Dict, Optional

import pytest

from agent_config_hub.database.base import build_engine, build_session_factory
from agent_config_hub.database.init import create_tables

MODELS_SOURCE = '''"""Agent configuration for Auto-Claude."""

BASE_READ_TOOLS = ["Read", "Glob", "Grep"]

AGENT_CONFIGS: dict[str, dict] = {
    # Writes the spec
    "spec_writer": {
        "tools": ["Read", "Glob", "Grep", "Write"],
        "mcp_servers": ["context7"],
        "auto_claude_tools": [],
        "thinking_default": "high",
    },
    "coder": {
        "tools": ["Read", "Write", "Edit", "Bash", "Glob", "Grep"],
        "mcp_servers": ["context7", "graphiti"],
        "mcp_servers_optional": ["linear"],
        "auto_claude_tools": ["update_subtask_status"],
    },
    "qa_reviewer": {
        "tools": ["Read", "Bash", "Glob", "Grep"],  # no writes
        "mcp_servers": [],
        "thinking_default": "low",
    },
}


def get_config(agent_type):
    return AGENT_CONFIGS[agent_type]
'''

PROMPTS = {
    "coder.md": (
        "---\n"
        "description: \"Implements subtasks\"\n"
        "version: 2\n"
        "---\n"
        "You are the coder agent.\n\n"
        "Read the spec in {{specDirectory}} and follow {{ projectContext }}.\n"
    ),
    "planner.md": "You are the planner agent. Break the spec into subtasks.\n",
    "qa_reviewer.md": "You are the QA reviewer. Use {{mcpDocumentation}} for tools.\n",
}

ENV_CONTENT = """# Auto-Claude settings
ANTHROPIC_API_KEY=sk-test-key
AUTO_CLAUDE_DEBUG=true

CONTEXT7_ENABLED=true
GRAPHITI_ENABLED=TRUE
GITHUB_REPO="acme/widgets"

CUSTOM_MCP_FOO_TYPE=command
CUSTOM_MCP_FOO_COMMAND=foo-server
CUSTOM_MCP_DOCS_TYPE=http
CUSTOM_MCP_DOCS_URL=https://docs.example.com/mcp
CUSTOM_MCP_DOCS_HEADERS=Authorization:Bearer abc,X-Team:core

AGENT_CODER_MCP_ADD=puppeteer
AGENT_QA_REVIEWER_MCP_REMOVE=graphiti,linear
"""


def write_install(
    root: Path,
    models: Optional[str] = MODELS_SOURCE,
    prompts: Optional[Dict[str, str]] = None,
    env: Optional[str] = ENV_CONTENT,
) -> Path:
    """Create an Auto-Claude installation layout under root."""
    backend = root / "apps" / "backend"
    backend.mkdir(parents=True, exist_ok=True)
    if models is not None:
        (backend / "models.py").write_text(models)

    prompts = PROMPTS if prompts is None else prompts
    if prompts:
        prompts_dir = backend / "prompts"
        prompts_dir.mkdir(exist_ok=True)
        for filename, content in prompts.items():
            (prompts_dir / filename).write_text(content)

    if env is not None:
        env_dir = root / ".auto-claude"
        env_dir.mkdir(exist_ok=True)
        (env_dir / ".env").write_text(env)
    return root


@pytest.fixture
def install_dir(tmp_path):
    """A complete fake Auto-Claude installation."""
    return write_install(tmp_path / "auto-claude")


@pytest.fixture
def make_install(tmp_path):
    """Factory for installations with custom contents."""
    counter = {"n": 0}

    def _make(**kwargs) -> Path:
        counter["n"] += 1
        return write_install(tmp_path / f"install-{counter['n']}", **kwargs)

    return _make


@pytest.fixture
async def engine(tmp_path):
    """SQLite engine with all tables created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'hub.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def models_source():
    return MODELS_SOURCE


@pytest.fixture
def env_content():
    return ENV_CONTENT
