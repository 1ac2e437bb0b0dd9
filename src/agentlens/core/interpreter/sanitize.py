"""
Terminal output sanitization for the output interpreter.

Turns the raw, ANSI-decorated PTY buffer into a plain-text *decoded view*
that the heuristics in :mod:`agentlens.core.interpreter.patterns` can
match against, and provides the line-level filters used by message
extraction (keyboard hints, garbage remnants, menu choices).

Every function here is total: any ``str`` input, including truncated
escape sequences and lone surrogates, produces a string (or bool/list)
without raising.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Escape sequence regex
# ---------------------------------------------------------------------------
# Matches:
#   CSI sequences   \x1b[ params intermediates final  (private modes ? > < = included)
#   OSC sequences   \x1b] ... BEL  or  \x1b] ... ST
#   DCS/SOS/PM/APC  \x1bP ... ST (and X ^ _)
#   Charset desig.  \x1b( \x1b) \x1b# followed by designator
#   Other ESC seqs  \x1b + intermediates + final   (\x1b=, \x1b7, \x1bM)
# An OSC or DCS still waiting for its terminator runs to the end of the
# buffer and is dropped whole; once the terminator arrives it matches normally.
_ANSI_RE = re.compile(
    r"\x1b\[[0-?]*[ -/]*[@-~]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\|\Z)"
    r"|\x1b[PX^_][^\x1b]*(?:\x1b\\|\Z)"
    r"|\x1b[()#][A-Za-z0-9]"
    r"|\x1b[ -/]*[0-~]"
)

# Private-mode remnants left when the buffer window starts mid-sequence
_REMNANT_RE = re.compile(r"\[\?[0-9;]*[hlsu]")

# Everything non-printable except tab and newline (CR is handled per line)
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")

# ---------------------------------------------------------------------------
# Keyboard hint lines
# ---------------------------------------------------------------------------
# Footer hints the agent TUI prints under its input box.  They change with
# every redraw and never describe what the agent is doing.
_TERMINAL_HINT_RE = re.compile(
    r"ctrl\+[a-z](?:\s+to\b|\s*$)"
    r"|^\s*(?:esc|escape|tab|shift\+tab|enter)\s+to\b"
    r"|^\s*\?\s+for\s+shortcuts"
    r"|\b(?:press\s+enter|use\s+(?:the\s+)?arrow\s+keys)\b"
    r"|↑/↓",
    re.IGNORECASE,
)

# ---------------------------------------------------------------------------
# Choice extraction patterns
# ---------------------------------------------------------------------------

# Numbered choices: "1) Fast", "2. Balanced", "❯ 1. Yes, I trust this folder"
_NUMBERED_CHOICE_RE = re.compile(
    r"^\s*[^\s\d]?\s*(\d{1,4})\s*[).\]:]\s+(.+?)$",
    re.MULTILINE,
)

# Lettered choices: "a) Option", "B. Option"
_LETTERED_CHOICE_RE = re.compile(
    r"^\s*([A-Za-z])\s*[).\]:]\s+(.+?)$",
    re.MULTILINE,
)


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences (CSI, OSC, DCS, charset, two-byte ESC)."""
    return _REMNANT_RE.sub("", _ANSI_RE.sub("", text))


def _overwrite_carriage_returns(line: str) -> str:
    # "⠋ Thinking\r⠙ Thinking" shows only the last redraw; a trailing bare \r
    # (the rest not yet received) leaves the previous text on screen.
    if "\r" not in line:
        return line
    for part in reversed(line.split("\r")):
        if part:
            return part
    return ""


def decode_view(raw: str) -> str:
    """
    Build the analysis view of a raw terminal buffer.

    Escape sequences are stripped, CRLF is normalised to LF, carriage-return
    redraws keep only their latest text, and any remaining control bytes
    are dropped.  The raw buffer itself is never modified.
    """
    text = strip_ansi(raw).replace("\r\n", "\n")
    lines = [_overwrite_carriage_returns(line) for line in text.split("\n")]
    return _CONTROL_RE.sub("", "\n".join(lines))


def alpha_ratio(text: str) -> float:
    """Return the share of ASCII letters among all characters of *text*."""
    if not text:
        return 0.0
    letters = sum(1 for ch in text if ("a" <= ch <= "z") or ("A" <= ch <= "Z"))
    return letters / len(text)


def is_garbage(text: str, min_alpha_ratio: float) -> bool:
    """Return True if *text* looks like escape-sequence debris rather than prose.

    Rejects strings shorter than 3 characters, strings whose letter ratio is
    below *min_alpha_ratio*, and the shapes stray CSI remnants take once
    their ESC byte is gone (``2026h``, ``[?25``, ``uts``).
    """
    if len(text) < 3:
        return True
    if alpha_ratio(text) < min_alpha_ratio:
        return True
    if re.fullmatch(r"[0-9]+[a-z]", text, re.IGNORECASE):
        return True
    if re.fullmatch(r"\[?\??[0-9]+[a-z]*", text, re.IGNORECASE):
        return True
    return bool(re.fullmatch(r"[a-z]{1,3}", text, re.IGNORECASE))


def is_terminal_hint(line: str) -> bool:
    """Return True for keyboard hint lines such as ``ctrl+e to explain``."""
    return bool(_TERMINAL_HINT_RE.search(line))


def extract_choices(text: str) -> list[str]:
    """Extract menu choices from prompt text.

    Supports numbered lists (``1) Fast``, ``❯ 1. Yes``) and lettered lists
    (``a) Alpha``, ``B. Bravo``).  Numbering must be consecutive from 1 (or
    A) and at least two items must be present; otherwise an empty list is
    returned.
    """
    numbered = _NUMBERED_CHOICE_RE.findall(text)
    if len(numbered) >= 2:
        nums = [int(n) for n, _ in numbered]
        if nums == list(range(1, len(nums) + 1)):
            return [label.strip() for _, label in numbered]

    lettered = _LETTERED_CHOICE_RE.findall(text)
    if len(lettered) >= 2:
        letters = [ch.upper() for ch, _ in lettered]
        expected = [chr(ord("A") + i) for i in range(len(letters))]
        if letters == expected:
            return [label.strip() for _, label in lettered]

    return []
