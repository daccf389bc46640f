"""Tests for the models.py AGENT_CONFIGS parser."""

import pytest

from agent_config_hub.parsers.models_source import (
    find_matching,
    parse_models_file,
    parse_models_source,
)


class TestParseModelsSource:
    """Tests for parse_models_source."""

    def test_parses_all_entries(self, models_source):
        result = parse_models_source(models_source)

        assert result.located
        assert result.errors == []
        assert [c["agentType"] for c in result.agent_configs] == [
            "spec_writer",
            "coder",
            "qa_reviewer",
        ]

    def test_reads_fields_and_defaults(self, models_source):
        configs = {c["agentType"]: c for c in parse_models_source(models_source).agent_configs}

        coder = configs["coder"]
        assert coder["tools"] == ["Read", "Write", "Edit", "Bash", "Glob", "Grep"]
        assert coder["mcpServers"] == ["context7", "graphiti"]
        assert coder["mcpServersOptional"] == ["linear"]
        assert coder["autoClaudeTools"] == ["update_subtask_status"]
        assert coder["thinkingDefault"] == "medium"

        assert configs["spec_writer"]["thinkingDefault"] == "high"
        assert configs["qa_reviewer"]["mcpServers"] == []
        assert configs["qa_reviewer"]["mcpServersOptional"] == []

    def test_entry_missing_tools_is_reported_and_skipped(self):
        text = """
AGENT_CONFIGS = {
    "planner": {
        "tools": ["Read", "Glob"],
        "mcp_servers": ["context7"],
    },
    "broken": {
        "mcp_servers": ["context7"],
    },
}
"""
        result = parse_models_source(text)

        assert len(result.agent_configs) == 1
        assert result.agent_configs[0]["agentType"] == "planner"
        assert result.agent_configs[0]["mcpServersOptional"] == []
        assert len(result.errors) == 1
        assert "broken" in result.errors[0]
        assert "tools" in result.errors[0]

    def test_non_literal_list_fails_only_that_entry(self):
        text = """
AGENT_CONFIGS = {
    "reader": {
        "tools": BASE_READ_TOOLS + ["Write"],
        "mcp_servers": [],
    },
    "writer": {
        "tools": ["Write"],
        "mcp_servers": [],
    },
}
"""
        result = parse_models_source(text)

        assert [c["agentType"] for c in result.agent_configs] == ["writer"]
        assert "not a literal list" in result.errors[0]

    def test_non_literal_optional_items_keep_the_entry(self):
        text = """
AGENT_CONFIGS = {
    "coder": {
        "tools": ["Read", "Write"],
        "mcp_servers": ["context7"],
        "mcp_servers_optional": ["linear", OPTIONAL_SERVER],
        "auto_claude_tools": [TOOL_UPDATE_SUBTASK_STATUS, TOOL_GET_BUILD_PROGRESS],
        "thinking_default": THINKING_LEVEL,
    },
    "planner": {
        "tools": ["Read"],
        "mcp_servers": [],
        "auto_claude_tools": PLANNER_TOOLS,
    },
}
"""
        result = parse_models_source(text)

        configs = {c["agentType"]: c for c in result.agent_configs}
        assert result.errors == []
        assert configs["coder"]["mcpServersOptional"] == ["linear"]
        assert configs["coder"]["autoClaudeTools"] == []
        assert configs["coder"]["thinkingDefault"] == "medium"
        assert configs["planner"]["autoClaudeTools"] == []
        assert len(result.warnings) == 4
        assert all(w.startswith(("Entry 'coder'", "Entry 'planner'")) for w in result.warnings)

    def test_non_literal_item_in_required_list_fails_entry(self):
        text = """
AGENT_CONFIGS = {
    "coder": {
        "tools": ["Read", EXTRA_TOOL],
        "mcp_servers": [],
    },
}
"""
        result = parse_models_source(text)

        assert result.agent_configs == []
        assert "'tools' is not a literal list" in result.errors[0]

    def test_non_dict_value_is_reported(self):
        text = """
AGENT_CONFIGS = {
    "alias": OTHER_CONFIG,
    "real": {"tools": ["Read"], "mcp_servers": []},
}
"""
        result = parse_models_source(text)

        assert [c["agentType"] for c in result.agent_configs] == ["real"]
        assert result.errors == ["Entry 'alias': value is not a dict literal"]

    def test_braces_inside_strings_and_comments_are_ignored(self):
        text = """
AGENT_CONFIGS = {
    # a stray } in a comment
    "odd": {
        "tools": ["Read"],  # }
        "mcp_servers": ["weird}name"],
        "thinking_default": 'low',
    },
}
"""
        result = parse_models_source(text)

        assert result.errors == []
        assert result.agent_configs[0]["mcpServers"] == ["weird}name"]
        assert result.agent_configs[0]["thinkingDefault"] == "low"

    def test_missing_assignment_fails_whole_file(self):
        result = parse_models_source("OTHER = {}\n")

        assert not result.located
        assert result.agent_configs == []
        assert result.errors == ["Could not find AGENT_CONFIGS assignment"]

    def test_unbalanced_assignment_fails_whole_file(self):
        result = parse_models_source('AGENT_CONFIGS = {\n    "a": {"tools": ["Read"]\n')

        assert not result.located
        assert result.agent_configs == []

    def test_duplicate_key_keeps_later_definition(self):
        text = """
AGENT_CONFIGS = {
    "coder": {"tools": ["Read"], "mcp_servers": []},
    "coder": {"tools": ["Write"], "mcp_servers": []},
}
"""
        result = parse_models_source(text)

        assert len(result.agent_configs) == 1
        assert result.agent_configs[0]["tools"] == ["Write"]
        assert "duplicate" in result.errors[0]

    def test_custom_assignment_name(self):
        text = 'EXTRA_AGENTS = {"helper": {"tools": ["Read"], "mcp_servers": []}}'

        result = parse_models_source(text, name="EXTRA_AGENTS")

        assert result.agent_configs[0]["agentType"] == "helper"


class TestFindMatching:
    """Tests for the balanced delimiter scanner."""

    def test_nested(self):
        text = "{[()]}"
        assert find_matching(text, 0) == 5
        assert find_matching(text, 1) == 4

    def test_mismatched(self):
        assert find_matching("{]", 0) == -1

    def test_triple_quoted_string(self):
        text = '{"""}"""}'
        assert find_matching(text, 0) == len(text) - 1


class TestParseModelsFile:
    """Tests for the async file wrapper."""

    @pytest.mark.asyncio
    async def test_reads_file(self, tmp_path, models_source):
        path = tmp_path / "models.py"
        path.write_text(models_source)

        result = await parse_models_file(path)

        assert len(result.agent_configs) == 3

    @pytest.mark.asyncio
    async def test_missing_file_is_an_error_result(self, tmp_path):
        result = await parse_models_file(tmp_path / "missing.py")

        assert not result.located
        assert "Failed to read" in result.errors[0]
