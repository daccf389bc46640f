"""Render stored configuration into Auto-Claude files."""

from .auto_claude import (
    GeneratedFile,
    custom_server_env_prefix,
    generate_agent_configs,
    generate_env_file,
    generate_prompt_files,
    generate_task_metadata,
)

__all__ = [
    "GeneratedFile",
    "custom_server_env_prefix",
    "generate_agent_configs",
    "generate_env_file",
    "generate_prompt_files",
    "generate_task_metadata",
]
