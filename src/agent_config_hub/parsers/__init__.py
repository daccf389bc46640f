"""Parsers that recover structured configuration from an Auto-Claude install."""

from .env_settings import (
    EnvParseResult,
    extract_preserved_variables,
    parse_env_content,
    parse_env_file,
    parse_env_variables,
)
from .models_source import (
    EntryResult,
    ModelsParseResult,
    parse_models_file,
    parse_models_source,
)
from .prompts_directory import (
    PromptsParseResult,
    parse_prompt_text,
    parse_prompts_directory,
)

__all__ = [
    "EnvParseResult",
    "extract_preserved_variables",
    "parse_env_content",
    "parse_env_file",
    "parse_env_variables",
    "EntryResult",
    "ModelsParseResult",
    "parse_models_file",
    "parse_models_source",
    "PromptsParseResult",
    "parse_prompt_text",
    "parse_prompts_directory",
]
