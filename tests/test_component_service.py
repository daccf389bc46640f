"""Tests for component create, update and delete."""

import copy
import json

import pytest

from agent_config_hub.database import Project
from agent_config_hub.defaults import DEFAULT_MODEL_PROFILES
from agent_config_hub.errors import ConflictError, InvalidComponentError, NotFoundError
from agent_config_hub.repositories import ComponentRepository, ProjectRepository
from agent_config_hub.services.component_service import ComponentService, deep_merge


@pytest.fixture
def service(session_factory):
    return ComponentService(
        repository=ComponentRepository(session_factory),
        project_repository=ProjectRepository(session_factory),
    )


def profile_payload(name="fast"):
    payload = copy.deepcopy(DEFAULT_MODEL_PROFILES[0])
    payload["name"] = name
    return payload


class TestDeepMerge:
    def test_nested_maps_merge_and_lists_replace(self):
        base = {"a": {"x": 1, "y": 2}, "tools": ["Read"], "keep": True}

        merged = deep_merge(base, {"a": {"y": 3}, "tools": ["Write"]})

        assert merged == {"a": {"x": 1, "y": 3}, "tools": ["Write"], "keep": True}
        assert base["a"]["y"] == 2


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_and_get(self, service):
        await service.create("model-profiles", profile_payload())

        component = await service.get("model-profiles", "fast")

        assert component.description == DEFAULT_MODEL_PROFILES[0]["description"]
        assert json.loads(component.config)["phaseModels"]["spec"] == "sonnet"

    @pytest.mark.asyncio
    async def test_duplicate_is_conflict(self, service):
        await service.create("model-profiles", profile_payload())

        with pytest.raises(ConflictError):
            await service.create("model-profiles", profile_payload())

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_insert_is_conflict(self, service, monkeypatch):
        async def not_found(component_type, name):
            return None

        # Both creates pass the existence check, the unique constraint decides
        monkeypatch.setattr(service.repository, "find_by_type_and_name", not_found)
        await service.create("model-profiles", profile_payload())

        with pytest.raises(ConflictError):
            await service.create("model-profiles", profile_payload())

    @pytest.mark.asyncio
    async def test_invalid_payload(self, service):
        with pytest.raises(InvalidComponentError):
            await service.create("agents", {"agentType": "coder", "tools": []})

    @pytest.mark.asyncio
    async def test_project_config_defaults_to_default_name(self, service):
        component = await service.create("project-configs", {"graphitiEnabled": True})

        assert component.name == "default"

    @pytest.mark.asyncio
    async def test_unknown_kind(self, service):
        with pytest.raises(NotFoundError, match="Unknown component kind"):
            await service.list("widgets")


class TestUpdate:
    @pytest.mark.asyncio
    async def test_partial_merge(self, service):
        await service.create("model-profiles", profile_payload())

        await service.update("model-profiles", "fast", {"phaseModels": {"qa": "haiku"}})

        config = json.loads((await service.get("model-profiles", "fast")).config)
        assert config["phaseModels"] == {
            "spec": "sonnet",
            "planning": "sonnet",
            "coding": "sonnet",
            "qa": "haiku",
        }
        assert config["phaseThinking"]["planning"] == "high"

    @pytest.mark.asyncio
    async def test_name_is_immutable(self, service):
        await service.create("model-profiles", profile_payload())

        with pytest.raises(InvalidComponentError, match="cannot be changed"):
            await service.update("model-profiles", "fast", {"name": "slow"})

    @pytest.mark.asyncio
    async def test_merged_result_is_validated(self, service):
        await service.create(
            "agents", {"agentType": "coder", "tools": ["Read"], "mcpServers": ["linear"]}
        )

        with pytest.raises(InvalidComponentError):
            await service.update("agents", "coder", {"mcpServersOptional": ["linear"]})

    @pytest.mark.asyncio
    async def test_missing_component(self, service):
        with pytest.raises(NotFoundError):
            await service.update("agents", "ghost", {"tools": ["Read"]})


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete(self, service):
        await service.create("prompts", {"agentType": "coder", "promptContent": "You write code."})

        await service.delete("prompts", "coder")

        assert await service.list("prompts") == []

    @pytest.mark.asyncio
    async def test_referenced_profile_cannot_be_deleted(self, service, session_factory):
        profile = await service.create("model-profiles", profile_payload())
        async with session_factory() as session:
            async with session.begin():
                session.add(Project(name="widgets", path="/tmp/widgets", model_profile_id=profile.id))

        with pytest.raises(ConflictError, match="used by 1 project"):
            await service.delete("model-profiles", "fast")

        assert await service.get("model-profiles", "fast")

    @pytest.mark.asyncio
    async def test_delete_missing(self, service):
        with pytest.raises(NotFoundError):
            await service.delete("prompts", "ghost")
