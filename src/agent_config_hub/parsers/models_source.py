"""Best-effort parser for the ``AGENT_CONFIGS`` dict in Auto-Claude's models.py.

This is not a Python parser. It locates the assignment, isolates each
top-level ``"key": {...}`` entry with a balanced-delimiter scan that skips
string literals and ``#`` comments, then reads the known fields of each entry
with independent patterns. Entries it cannot read are reported and skipped.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..errors import ParseError
from ..performance import time_operation

logger = logging.getLogger(__name__)

DEFAULT_ASSIGNMENT = "AGENT_CONFIGS"
DEFAULT_THINKING = "medium"

_CLOSERS = {"{": "}", "[": "]", "(": ")"}
_STRING_LITERAL = re.compile(r"""\s*(?:"((?:\\.|[^"\\])*)"|'((?:\\.|[^'\\])*)')\s*""")

# (source key, payload key, required)
_LIST_FIELDS = (
    ("tools", "tools", True),
    ("mcp_servers", "mcpServers", True),
    ("mcp_servers_optional", "mcpServersOptional", False),
    ("auto_claude_tools", "autoClaudeTools", False),
)


@dataclass
class EntryResult:
    """Outcome for a single dict entry, either a config or an error."""

    key: str
    config: Optional[dict] = None
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ModelsParseResult:
    """
    Parsed agent configs plus one error string per skipped entry.

    ``warnings`` lists optional fields that were kept only in part, or
    replaced by their default, because they were not plain literals.
    """

    agent_configs: List[dict] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    located: bool = True


def _skip_string(text: str, pos: int) -> int:
    """Return the index just past the string literal starting at pos."""
    triple = text[pos:pos + 3]
    if triple in ('"""', "'''"):
        end = text.find(triple, pos + 3)
        return len(text) if end == -1 else end + 3

    quote = text[pos]
    i = pos + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n":
            # Unterminated literal, resume scanning on the next line
            return i
        i += 1
    return len(text)


def _skip_comment(text: str, pos: int) -> int:
    end = text.find("\n", pos)
    return len(text) if end == -1 else end


def find_matching(text: str, open_pos: int) -> int:
    """
    Find the delimiter closing the bracket at open_pos.

    Args:
        text: Source text
        open_pos: Index of an opening ``{``, ``[`` or ``(``

    Returns:
        Index of the matching closer, or -1 if unbalanced
    """
    stack: List[str] = []
    i = open_pos
    while i < len(text):
        ch = text[i]
        if ch in "\"'":
            i = _skip_string(text, i)
            continue
        if ch == "#":
            i = _skip_comment(text, i)
            continue
        if ch in _CLOSERS:
            stack.append(_CLOSERS[ch])
        elif ch in ")]}":
            if not stack or stack.pop() != ch:
                return -1
            if not stack:
                return i
        i += 1
    return -1


def _next_top_level_comma(text: str, pos: int) -> int:
    """Index of the next comma outside any bracket, or len(text)."""
    i = pos
    while i < len(text):
        ch = text[i]
        if ch in "\"'":
            i = _skip_string(text, i)
            continue
        if ch == "#":
            i = _skip_comment(text, i)
            continue
        if ch in _CLOSERS:
            end = find_matching(text, i)
            if end == -1:
                return len(text)
            i = end + 1
            continue
        if ch == ",":
            return i
        i += 1
    return len(text)


def _skip_blank(text: str, pos: int) -> int:
    """Skip whitespace, commas and comments."""
    while pos < len(text):
        ch = text[pos]
        if ch.isspace() or ch == ",":
            pos += 1
        elif ch == "#":
            pos = _skip_comment(text, pos)
        else:
            break
    return pos


def _strip_comments(text: str) -> str:
    """Remove ``#`` comments while leaving string literals intact."""
    parts = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in "\"'":
            end = _skip_string(text, i)
            parts.append(text[i:end])
            i = end
        elif ch == "#":
            i = _skip_comment(text, i)
        else:
            parts.append(ch)
            i += 1
    return "".join(parts)


def _unescape(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)


def _parse_string_list(body: str) -> Tuple[List[str], int]:
    """
    Split the inside of a list literal into its string items.

    Returns:
        Tuple of (string items, number of items that were not string literals)
    """
    body = _strip_comments(body)
    items: List[str] = []
    skipped = 0
    pos = 0
    while pos < len(body):
        end = _next_top_level_comma(body, pos)
        item = body[pos:end]
        pos = end + 1
        if not item.strip():
            continue
        match = _STRING_LITERAL.fullmatch(item)
        if match:
            value = match.group(1) if match.group(1) is not None else match.group(2)
            items.append(_unescape(value))
        else:
            skipped += 1
    return items, skipped


def _field_pattern(name: str) -> re.Pattern:
    return re.compile(rf"""["']{re.escape(name)}["']\s*:\s*""")


def _extract_list(
    entry: str, name: str
) -> Tuple[bool, Optional[List[str]], int]:
    """
    Return (present, values, skipped) for a list field.

    values is None when the field is not a list literal at all.
    """
    match = _field_pattern(name).search(entry)
    if not match:
        return False, None, 0
    start = match.end()
    if start >= len(entry) or entry[start] != "[":
        return True, None, 0
    end = find_matching(entry, start)
    if end == -1:
        return True, None, 0
    values, skipped = _parse_string_list(entry[start + 1:end])
    return True, values, skipped


def _extract_string(entry: str, name: str) -> Tuple[bool, Optional[str]]:
    match = _field_pattern(name).search(entry)
    if not match:
        return False, None
    literal = _STRING_LITERAL.match(entry, match.end())
    if not literal:
        return True, None
    value = literal.group(1) if literal.group(1) is not None else literal.group(2)
    return True, _unescape(value)


def parse_entry(
    agent_type: str, entry: str, warnings: Optional[List[str]] = None
) -> dict:
    """
    Read the known fields of one entry body.

    Required fields must be literal lists of strings. Optional fields keep
    their string items and drop anything else, or fall back to their default
    when they are not a list literal; each such fallback adds a warning.

    Raises:
        ParseError: If a required field is missing or not a literal list of strings
    """
    warnings = warnings if warnings is not None else []
    entry = _strip_comments(entry)
    config: Dict[str, Union[str, List[str]]] = {"agentType": agent_type}

    for source_key, payload_key, required in _LIST_FIELDS:
        present, values, skipped = _extract_list(entry, source_key)
        if required:
            if not present:
                raise ParseError(f"missing required field '{source_key}'")
            if values is None or skipped:
                raise ParseError(f"field '{source_key}' is not a literal list of strings")
        elif not present:
            values = []
        elif values is None:
            warnings.append(f"field '{source_key}' is not a list literal, using []")
            values = []
        elif skipped:
            warnings.append(
                f"field '{source_key}' has {skipped} non-literal item(s), skipped"
            )
        config[payload_key] = values

    present, thinking = _extract_string(entry, "thinking_default")
    if present and thinking is None:
        warnings.append(
            f"field 'thinking_default' is not a string literal, using '{DEFAULT_THINKING}'"
        )
    config["thinkingDefault"] = thinking if thinking is not None else DEFAULT_THINKING
    return config


def _iter_entries(body: str) -> List[EntryResult]:
    results: List[EntryResult] = []
    pos = _skip_blank(body, 0)
    while pos < len(body):
        key_match = _STRING_LITERAL.match(body, pos)
        colon = key_match.end() if key_match else -1
        if not key_match or colon >= len(body) or body[colon] != ":":
            end = _next_top_level_comma(body, pos)
            snippet = body[pos:end].strip().splitlines()[0][:40] if body[pos:end].strip() else ""
            results.append(
                EntryResult(key="?", error=f"Unrecognized content near '{snippet}'")
            )
            pos = _skip_blank(body, end)
            continue

        key = key_match.group(1) if key_match.group(1) is not None else key_match.group(2)
        value_pos = colon + 1
        while value_pos < len(body) and body[value_pos].isspace():
            value_pos += 1

        if value_pos >= len(body) or body[value_pos] != "{":
            end = _next_top_level_comma(body, value_pos)
            results.append(
                EntryResult(key=key, error=f"Entry '{key}': value is not a dict literal")
            )
            pos = _skip_blank(body, end)
            continue

        end = find_matching(body, value_pos)
        if end == -1:
            results.append(EntryResult(key=key, error=f"Entry '{key}': unbalanced braces"))
            break

        try:
            warnings: List[str] = []
            config = parse_entry(key, body[value_pos + 1:end], warnings)
            results.append(
                EntryResult(
                    key=key,
                    config=config,
                    warnings=[f"Entry '{key}': {warning}" for warning in warnings],
                )
            )
        except ParseError as e:
            results.append(EntryResult(key=key, error=f"Entry '{key}': {e.message}"))
        pos = _skip_blank(body, end + 1)
    return results


def parse_models_source(text: str, name: str = DEFAULT_ASSIGNMENT) -> ModelsParseResult:
    """
    Extract agent configs from the source text of a models.py file.

    Args:
        text: File contents
        name: Name of the dict assignment to read

    Returns:
        ModelsParseResult with one config per readable entry and one error per
        skipped entry. If the assignment cannot be located nothing is returned
        and ``located`` is False.
    """
    assignment = re.compile(
        rf"^[ \t]*{re.escape(name)}\s*(?::[^=\n]+)?=\s*\{{", re.MULTILINE
    )
    match = assignment.search(text)
    if not match:
        return ModelsParseResult(
            errors=[f"Could not find {name} assignment"], located=False
        )

    open_pos = match.end() - 1
    close_pos = find_matching(text, open_pos)
    if close_pos == -1:
        return ModelsParseResult(
            errors=[f"Unbalanced braces in {name} assignment"], located=False
        )

    result = ModelsParseResult()
    by_key: Dict[str, dict] = {}
    for entry in _iter_entries(text[open_pos + 1:close_pos]):
        if not entry.ok:
            result.errors.append(entry.error)
            continue
        result.warnings.extend(entry.warnings)
        if entry.key in by_key:
            result.errors.append(
                f"Entry '{entry.key}': duplicate key, the later definition wins"
            )
        by_key[entry.key] = entry.config

    result.agent_configs = list(by_key.values())
    return result


async def parse_models_file(
    path: Union[str, Path], name: str = DEFAULT_ASSIGNMENT
) -> ModelsParseResult:
    """Read a models.py file off the event loop and parse it."""
    path = Path(path)
    async with time_operation("parse_models_file") as timer:
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read models file {path}: {e}")
            return ModelsParseResult(
                errors=[f"Failed to read {path.name}: {e}"], located=False
            )

        result = parse_models_source(text, name)
        timer.items_processed = len(result.agent_configs)
        timer.errors = len(result.errors)

    logger.info(
        f"Parsed {len(result.agent_configs)} agent config(s) from {path.name} "
        f"with {len(result.errors)} error(s)"
    )
    return result
