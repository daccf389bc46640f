"""Tests for the concurrent sync file writer."""

import pytest

from agent_config_hub.config import settings
from agent_config_hub.generators import GeneratedFile
from agent_config_hub.services import file_writer
from agent_config_hub.services.file_writer import FileWriter


def files(count):
    return [GeneratedFile(path=f"out/file_{i}.txt", content=f"content {i}") for i in range(count)]


class TestConcurrency:
    def test_base_concurrency(self, tmp_path):
        writer = FileWriter(tmp_path, memory_sampler=lambda: 50.0)

        assert writer.concurrency_for(4) == 4
        assert writer.concurrency_for(50) == 10

    def test_reduced_under_memory_pressure(self, tmp_path):
        writer = FileWriter(tmp_path, memory_sampler=lambda: 512.0)

        assert writer.concurrency_for(50) == 7
        assert writer.concurrency_for(4) == 3


class TestWriteFiles:
    @pytest.mark.asyncio
    async def test_writes_all_files(self, tmp_path):
        writer = FileWriter(tmp_path, memory_sampler=lambda: 0.0)

        report = await writer.write_files(files(25))

        assert report.written == 25
        assert report.errors == []
        assert (tmp_path / "out" / "file_24.txt").read_text() == "content 24"

    @pytest.mark.asyncio
    async def test_one_failure_does_not_abort_others(self, tmp_path):
        # A directory where a file should go makes that single write fail
        (tmp_path / "out" / "file_2.txt").mkdir(parents=True)
        writer = FileWriter(tmp_path, memory_sampler=lambda: 0.0)

        report = await writer.write_files(files(5))

        assert report.written == 4
        assert len(report.errors) == 1
        assert report.errors[0].startswith("out/file_2.txt")
        assert "out/file_2.txt" not in report.written_paths

    @pytest.mark.asyncio
    async def test_overwrite_creates_one_backup(self, tmp_path):
        target = tmp_path / "out" / "file_0.txt"
        target.parent.mkdir()
        target.write_text("old content")
        writer = FileWriter(tmp_path, memory_sampler=lambda: 0.0)

        await writer.write_files(files(1))

        backups = list(target.parent.glob("file_0.txt.backup.*"))
        assert len(backups) == 1
        assert backups[0].read_text() == "old content"
        assert backups[0].name.split(".backup.")[1].isdigit()
        assert target.read_text() == "content 0"

    @pytest.mark.asyncio
    async def test_new_file_has_no_backup(self, tmp_path):
        writer = FileWriter(tmp_path, memory_sampler=lambda: 0.0)

        await writer.write_files(files(1))

        assert list((tmp_path / "out").glob("*.backup.*")) == []

    @pytest.mark.asyncio
    async def test_empty_input(self, tmp_path):
        report = await FileWriter(tmp_path).write_files([])

        assert report.written == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count,pauses", [(25, 2), (45, 4), (20, 0), (5, 0)])
    async def test_pauses_between_batches_for_large_runs(
        self, tmp_path, monkeypatch, count, pauses
    ):
        sleeps = []

        async def fake_sleep(delay):
            sleeps.append(delay)

        monkeypatch.setattr(file_writer.asyncio, "sleep", fake_sleep)
        writer = FileWriter(tmp_path, memory_sampler=lambda: 0.0, max_concurrency=10)

        report = await writer.write_files(files(count))

        assert report.written == count
        assert len(sleeps) == pauses
        assert all(delay == settings.sync_batch_pause_ms / 1000 for delay in sleeps)
