"""Parser for the Auto-Claude prompts directory (``<agentType>.md`` files)."""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..errors import ParseError
from ..performance import time_operation

logger = logging.getLogger(__name__)

PROMPT_FILENAME = re.compile(r"^([a-z_]+)\.md$")
FRONT_MATTER_DELIMITER = "---"

INJECTION_MARKERS = {
    "specDirectory": re.compile(r"\{\{\s*specDirectory\s*\}\}", re.IGNORECASE),
    "projectContext": re.compile(r"\{\{\s*projectContext\s*\}\}", re.IGNORECASE),
    "mcpDocumentation": re.compile(r"\{\{\s*mcpDocumentation\s*\}\}", re.IGNORECASE),
}


@dataclass
class PromptsParseResult:
    """Parsed prompt payloads, their front matter and per-file errors."""

    prompts: List[dict] = field(default_factory=list)
    front_matter: Dict[str, Dict[str, str]] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def split_front_matter(text: str) -> Tuple[Dict[str, str], str]:
    """
    Split an optional leading ``---`` block of flat ``key: value`` pairs.

    Nested YAML is not supported; lines without a colon are ignored.

    Returns:
        Tuple of (front matter dict, remaining body)
    """
    lines = text.replace("\r\n", "\n").split("\n")
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        return {}, text

    for index in range(1, len(lines)):
        if lines[index].strip() == FRONT_MATTER_DELIMITER:
            break
    else:
        # No closing delimiter, treat everything as body
        return {}, text

    metadata: Dict[str, str] = {}
    for line in lines[1:index]:
        key, sep, value = line.partition(":")
        key = key.strip()
        if not sep or not key or key.startswith("#"):
            continue
        metadata[key] = _unquote(value.strip())
    return metadata, "\n".join(lines[index + 1:])


def detect_injection_points(content: str) -> Optional[Dict[str, bool]]:
    """Return flags for all three markers, or None if none is present."""
    found = {key: bool(pattern.search(content)) for key, pattern in INJECTION_MARKERS.items()}
    return found if any(found.values()) else None


def parse_prompt_text(filename: str, text: str) -> Tuple[dict, Dict[str, str]]:
    """
    Parse one prompt file.

    Args:
        filename: File name, must be ``<agentType>.md``
        text: File contents

    Returns:
        Tuple of (prompt payload, front matter)

    Raises:
        ParseError: If the name is not a valid agent type or the body is empty
    """
    match = PROMPT_FILENAME.match(filename)
    if not match:
        raise ParseError(f"{filename}: file name must match <agent_type>.md")

    metadata, body = split_front_matter(text)
    content = body.strip()
    if not content:
        raise ParseError(f"{filename}: prompt is empty")

    prompt = {"agentType": match.group(1), "promptContent": content}
    injection_points = detect_injection_points(content)
    if injection_points:
        prompt["injectionPoints"] = injection_points
    return prompt, metadata


async def _read_prompt(path: Path) -> Tuple[dict, Dict[str, str]]:
    try:
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"{path.name}: failed to read ({e})")
    return parse_prompt_text(path.name, text)


async def parse_prompts_directory(path: Union[str, Path]) -> PromptsParseResult:
    """
    Parse every ``<agentType>.md`` file directly inside a directory.

    Files with other names are reported as errors; subdirectories are skipped.
    Results are ordered by file name.
    """
    path = Path(path)
    result = PromptsParseResult()

    async with time_operation("parse_prompts_directory") as timer:
        try:
            entries = await asyncio.to_thread(lambda: sorted(path.iterdir()))
        except OSError as e:
            logger.error(f"Failed to list prompts directory {path}: {e}")
            result.errors.append(f"Failed to read prompts directory {path}: {e}")
            return result

        files = [entry for entry in entries if entry.is_file()]
        outcomes = await asyncio.gather(
            *(_read_prompt(entry) for entry in files), return_exceptions=True
        )
        for entry, outcome in zip(files, outcomes):
            if isinstance(outcome, ParseError):
                result.errors.append(outcome.message)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                prompt, metadata = outcome
                result.prompts.append(prompt)
                if metadata:
                    result.front_matter[prompt["agentType"]] = metadata

        timer.items_processed = len(result.prompts)
        timer.errors = len(result.errors)

    logger.info(
        f"Parsed {len(result.prompts)} prompt(s) from {path} "
        f"with {len(result.errors)} error(s)"
    )
    return result
