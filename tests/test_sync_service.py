"""Tests for the sync orchestrator."""

import json

import pytest
from sqlalchemy import select

from agent_config_hub.config import settings
from agent_config_hub.database import Component, Project
from agent_config_hub.database.enums import ComponentTypeEnum
from agent_config_hub.errors import ConfigurationError, NothingToSyncError
from agent_config_hub.parsers import parse_env_variables
from agent_config_hub.repositories import ComponentRepository, ProjectRepository
from agent_config_hub.services.component_cache import ComponentCache
from agent_config_hub.services.file_writer import FileWriter
from agent_config_hub.services.import_service import ImportService
from agent_config_hub.services.sync_service import SyncService


def make_service(session_factory):
    return SyncService(
        cache=ComponentCache(ComponentRepository(session_factory).list_enabled_auto_claude),
        project_repository=ProjectRepository(session_factory),
        writer_factory=lambda root: FileWriter(root, memory_sampler=lambda: 0.0),
    )


@pytest.fixture
async def imported(session_factory, install_dir):
    await ImportService(session_factory).import_configs(install_dir)
    return install_dir


@pytest.fixture
def target(make_install):
    """An installation with only the backend directory."""
    return make_install(models=None, prompts={}, env=None)


class TestSyncPreconditions:
    @pytest.mark.asyncio
    async def test_target_required(self, session_factory, monkeypatch):
        monkeypatch.setattr(settings, "autoclaude_backend_path", None)

        with pytest.raises(ConfigurationError, match="No target path"):
            await make_service(session_factory).sync()

    @pytest.mark.asyncio
    async def test_target_must_contain_backend(self, session_factory, tmp_path):
        with pytest.raises(ConfigurationError, match="apps"):
            await make_service(session_factory).sync(tmp_path)

    @pytest.mark.asyncio
    async def test_nothing_to_sync(self, session_factory, target):
        with pytest.raises(NothingToSyncError):
            await make_service(session_factory).sync(target)


class TestSync:
    @pytest.mark.asyncio
    async def test_writes_all_files(self, session_factory, imported, target):
        result = await make_service(session_factory).sync(target)

        assert result.success
        assert result.errors == []
        assert sorted(result.files_written) == [
            ".auto-claude/.env",
            ".auto-claude/task_metadata.json",
            "agent_configs.json",
            "apps/backend/prompts/coder.md",
            "apps/backend/prompts/planner.md",
            "apps/backend/prompts/qa_reviewer.md",
        ]
        assert result.written_count == 6

        manifest = json.loads((target / "agent_configs.json").read_text())
        assert sorted(manifest) == ["coder", "qa_reviewer", "spec_writer"]
        prompt = (target / "apps" / "backend" / "prompts" / "coder.md").read_text()
        assert "{{specDirectory}}" in prompt

    @pytest.mark.asyncio
    async def test_task_metadata_uses_default_profile(self, session_factory, imported, target):
        await make_service(session_factory).sync(target)

        metadata = json.loads((target / ".auto-claude" / "task_metadata.json").read_text())
        assert metadata["models"]["qa"] == "sonnet"
        assert metadata["thinking"]["qa"] == "high"

    @pytest.mark.asyncio
    async def test_project_profile_and_sync_time(self, session_factory, imported, target):
        async with session_factory() as session:
            async with session.begin():
                profile = (
                    await session.execute(
                        select(Component).where(
                            Component.type == ComponentTypeEnum.AUTO_CLAUDE_MODEL_PROFILE.value,
                            Component.name == "quality-focused",
                        )
                    )
                ).scalar_one()
                project = Project(
                    name="widgets", path=str(target), model_profile_id=profile.id
                )
                session.add(project)

        await make_service(session_factory).sync(target, project_id=project.id)

        metadata = json.loads((target / ".auto-claude" / "task_metadata.json").read_text())
        assert metadata["models"]["spec"] == "opus"
        stored = await ProjectRepository(session_factory).find_by_id(project.id)
        assert stored.last_auto_claude_sync is not None

    @pytest.mark.asyncio
    async def test_existing_env_is_backed_up_and_preserved(
        self, session_factory, imported, target
    ):
        env_path = target / ".auto-claude" / ".env"
        env_path.parent.mkdir()
        env_path.write_text("ANTHROPIC_API_KEY=sk-keep-me\nCONTEXT7_ENABLED=false\n")

        await make_service(session_factory).sync(target)

        variables = parse_env_variables(env_path.read_text())
        assert variables["ANTHROPIC_API_KEY"] == "sk-keep-me"
        assert variables["CONTEXT7_ENABLED"] == "true"
        assert variables["GITHUB_REPO"] == "acme/widgets"
        backups = list(env_path.parent.glob(".env.backup.*"))
        assert len(backups) == 1
        assert "sk-keep-me" in backups[0].read_text()

    @pytest.mark.asyncio
    async def test_dry_run_touches_nothing(self, session_factory, imported, target):
        result = await make_service(session_factory).sync(target, dry_run=True)

        assert result.dry_run
        assert result.written_count == 6
        assert not (target / "agent_configs.json").exists()
        assert not (target / ".auto-claude").exists()

    @pytest.mark.asyncio
    async def test_partial_failure_is_reported(self, session_factory, imported, target):
        (target / "agent_configs.json").mkdir()

        result = await make_service(session_factory).sync(target)

        assert not result.success
        assert result.written_count == 5
        assert len(result.errors) == 1
        assert result.errors[0].startswith("agent_configs.json")
