"""
Heuristic pattern tables for the output interpreter.

Each table is an ordered tuple of :class:`Signal` rows.  The interpreter
walks a table top to bottom and stops at the first row that matches, so
row order is priority order.  Adding support for another agent CLI means
adding rows here, not branches in the interpreter.

Tables:
  DETECTION_SIGNATURES — "this stream is an agent" (sticky detection)
  WORKING_SIGNALS      — the agent is busy right now
  MENU_CONTEXT         — a modal prompt is open; suppresses the idle glyph
  ACTION_LINES         — message candidates, highest priority
  RESULT_LINES         — message candidates, second priority
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from re import Pattern


@dataclass(frozen=True)
class Signal:
    """One named heuristic: a compiled pattern and the label it reports."""

    name: str
    pattern: Pattern[str]

    def search(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def first_match(table: tuple[Signal, ...], text: str) -> Signal | None:
    """Return the first row of *table* whose pattern occurs in *text*."""
    for signal in table:
        if signal.search(text):
            return signal
    return None


# ---------------------------------------------------------------------------
# Glyphs
# ---------------------------------------------------------------------------

SPINNER_CHARS = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
ACTION_MARKER = "⏺"
RESULT_MARKER = "⎿"
THINKING_MARKERS = "✻✳"
IDLE_PROMPT_GLYPH = "❯"

_SPINNER_CLASS = f"[{SPINNER_CHARS}]"

# Lines made only of glyphs carry no narrative
GLYPH_ONLY_RE = re.compile(
    rf"^[{SPINNER_CHARS}{THINKING_MARKERS}{ACTION_MARKER}{RESULT_MARKER}◇◆●○\s]+$"
)
SEPARATOR_RE = re.compile(r"^[─━═]+$")
IDLE_PROMPT_RE = re.compile(rf"^{IDLE_PROMPT_GLYPH}\s*$")
# Animated status lines ("✻ Thinking…", "⏺ Working") are never messages
STATUS_LINE_RE = re.compile(
    rf"^[{THINKING_MARKERS}{ACTION_MARKER}{RESULT_MARKER}◇◆●○]\s*"
    r"(?:Vibing|Thinking|Working|Burrowing)",
    re.IGNORECASE,
)

# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

DETECTION_SIGNATURES: tuple[Signal, ...] = (
    Signal("product_name", re.compile(r"claude(?:-code)?", re.IGNORECASE)),
    Signal("vendor_name", re.compile(r"anthropic", re.IGNORECASE)),
    Signal("thinking_word", re.compile(r"vibing", re.IGNORECASE)),
    Signal("spinner_glyph", re.compile(_SPINNER_CLASS)),
    Signal("status_glyph", re.compile(f"[{THINKING_MARKERS}{ACTION_MARKER}{RESULT_MARKER}]")),
    Signal("token_arrow", re.compile(r"↓\s*[\d.]+k?\s*tokens", re.IGNORECASE)),
)


def keyword_signatures(keywords: list[str]) -> tuple[Signal, ...]:
    """Build detection rows for user-configured extra keywords."""
    return tuple(
        Signal(f"keyword:{kw}", re.compile(re.escape(kw), re.IGNORECASE)) for kw in keywords if kw
    )


# ---------------------------------------------------------------------------
# Working
# ---------------------------------------------------------------------------

WORKING_SIGNALS: tuple[Signal, ...] = (
    Signal("spinner", re.compile(_SPINNER_CLASS)),
    Signal(
        "thinking",
        re.compile(
            rf"[{THINKING_MARKERS}]\s*(?:Vibing|Thinking|Working)"
            r"|(?:Vibing|Thinking)…"
            r"|thinking\)"
            r"|thought for \d+",
            re.IGNORECASE,
        ),
    ),
    Signal("status_star", re.compile(rf"^\s*[{THINKING_MARKERS}]\s+\S", re.MULTILINE)),
    Signal(
        "file_progress",
        re.compile(
            r"^\s*(?:Reading|Writing|Editing)\s+\S*[./]\S*", re.MULTILINE | re.IGNORECASE
        ),
    ),
    Signal(
        "tool_invocation",
        re.compile(
            rf"^\s*{ACTION_MARKER}\s*"
            r"(?:Read|Write|Edit|MultiEdit|Update|Bash|Glob|Grep|Task|WebFetch|WebSearch)",
            re.MULTILINE | re.IGNORECASE,
        ),
    ),
    Signal(
        "result_in_progress",
        re.compile(
            rf"^\s*{RESULT_MARKER}\s*(?:Reading|Writing|Editing|Running|Executing|Searching)",
            re.MULTILINE | re.IGNORECASE,
        ),
    ),
    Signal("token_count", re.compile(r"tokens\s*·|↓\s*[\d.]+k?\s*tokens", re.IGNORECASE)),
    Signal("sub_agent", re.compile(r"Burrowing|Launching|Task\s*\([^)\n]+\)", re.IGNORECASE)),
    Signal(
        "searching",
        re.compile(
            r"^\s*(?:[^\w\s]\s*)?(?:Searching|Analyzing|Processing|Executing|Running)\b",
            re.MULTILINE,
        ),
    ),
)

# ---------------------------------------------------------------------------
# Menu / confirmation context
# ---------------------------------------------------------------------------
# Numbered option menus ("1. ..." / "2. ...") are recognised structurally by
# sanitize.extract_choices(); these rows cover the remaining shapes.

MENU_CONTEXT: tuple[Signal, ...] = (
    Signal("yes_no_brackets", re.compile(r"\[\s*[Yy]\s*/\s*[Nn]\s*\]")),
    Signal("numbered_yes_no", re.compile(r"\d+\.\s*(?:Yes|No)\b", re.IGNORECASE)),
    Signal(
        "continue_question",
        re.compile(r"Do you want to|(?:proceed|continue)\s*\?", re.IGNORECASE),
    ),
)

# ---------------------------------------------------------------------------
# Message candidates
# ---------------------------------------------------------------------------

# Thinking stars also prefix status lines ("✻ Thinking (3s · esc to interrupt)");
# behind a star only core tool names are tool calls.
ACTION_LINES: tuple[Signal, ...] = (
    Signal("tool_call", re.compile(rf"^{ACTION_MARKER}\s*[A-Za-z][\w-]*\s*\(")),
    Signal(
        "starred_tool_call",
        re.compile(
            rf"^[{THINKING_MARKERS}]\s*(?:Write|Read|Edit|Bash|Glob|Grep|Task)\s*\(",
            re.IGNORECASE,
        ),
    ),
)

RESULT_LINES: tuple[Signal, ...] = (
    Signal(
        "result_marker",
        re.compile(
            rf"^{RESULT_MARKER}\s*(?:Wrote|Read|Edited|Updated|Ran|Found|Added|Removed)\b",
            re.IGNORECASE,
        ),
    ),
    Signal(
        "result_summary",
        re.compile(
            r"\b(?:Wrote|Read)\s+\d+\s+lines|\bFound\s+\d+\s+(?:files?|matches?)",
            re.IGNORECASE,
        ),
    ),
)
