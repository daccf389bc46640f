"""Tests for the prompts directory parser."""

import pytest

from agent_config_hub.errors import ParseError
from agent_config_hub.parsers.prompts_directory import (
    detect_injection_points,
    parse_prompt_text,
    parse_prompts_directory,
    split_front_matter,
)


class TestParsePromptText:
    def test_detects_injection_points(self):
        prompt, metadata = parse_prompt_text(
            "coder.md", "Work in {{specDirectory}} with {{projectContext}} in mind."
        )

        assert prompt["agentType"] == "coder"
        assert prompt["injectionPoints"] == {
            "specDirectory": True,
            "projectContext": True,
            "mcpDocumentation": False,
        }
        assert metadata == {}

    def test_no_markers_means_no_injection_points(self):
        prompt, _ = parse_prompt_text("planner.md", "Plan the work carefully.")

        assert "injectionPoints" not in prompt

    def test_markers_tolerate_whitespace_and_case(self):
        points = detect_injection_points("See {{  MCPDocumentation }}")

        assert points["mcpDocumentation"] is True

    def test_front_matter_is_stripped(self):
        text = '---\ndescription: "Reviews work"\nowner: qa\n---\n\n  Review every change.  \n'

        prompt, metadata = parse_prompt_text("qa_reviewer.md", text)

        assert prompt["promptContent"] == "Review every change."
        assert metadata == {"description": "Reviews work", "owner": "qa"}

    def test_empty_body_is_an_error(self):
        with pytest.raises(ParseError, match="empty"):
            parse_prompt_text("coder.md", "---\ndescription: x\n---\n   \n")

    def test_invalid_file_name_is_an_error(self):
        with pytest.raises(ParseError, match="file name"):
            parse_prompt_text("Coder-2.md", "Some prompt text here")


class TestSplitFrontMatter:
    def test_unclosed_block_is_body(self):
        text = "---\ndescription: x\nno closing line"

        metadata, body = split_front_matter(text)

        assert metadata == {}
        assert body == text

    def test_nested_values_are_not_parsed(self):
        metadata, _ = split_front_matter("---\ntags:\n  - a\nname: coder\n---\nbody")

        assert metadata["name"] == "coder"
        assert metadata["tags"] == ""


class TestParsePromptsDirectory:
    @pytest.mark.asyncio
    async def test_parses_directory(self, install_dir):
        result = await parse_prompts_directory(install_dir / "apps" / "backend" / "prompts")

        assert [p["agentType"] for p in result.prompts] == ["coder", "planner", "qa_reviewer"]
        assert result.errors == []
        assert result.front_matter["coder"]["description"] == "Implements subtasks"

    @pytest.mark.asyncio
    async def test_bad_names_are_reported_individually(self, make_install):
        root = make_install(
            prompts={
                "coder.md": "You are the coder agent.",
                "README.txt": "not a prompt",
                "empty.md": "",
            }
        )
        prompts_dir = root / "apps" / "backend" / "prompts"
        (prompts_dir / "archive").mkdir()

        result = await parse_prompts_directory(prompts_dir)

        assert [p["agentType"] for p in result.prompts] == ["coder"]
        assert len(result.errors) == 2
        assert any("README.txt" in error for error in result.errors)
        assert any("empty.md" in error for error in result.errors)

    @pytest.mark.asyncio
    async def test_missing_directory(self, tmp_path):
        result = await parse_prompts_directory(tmp_path / "nope")

        assert result.prompts == []
        assert "Failed to read prompts directory" in result.errors[0]
