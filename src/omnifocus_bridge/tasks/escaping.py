# src/omnifocus_bridge/tasks/escaping.py

"""
Escaping for values interpolated into generated AppleScript.

Every caller-supplied string (names, notes, project names, date literals, task ids)
must go through `quote_applescript` / `escape_applescript_string` before it lands in a
script. Nothing else in the package builds string literals by hand.
"""

from __future__ import annotations

# Backslash first, otherwise the backslashes inserted by later rules get doubled.
_APPLESCRIPT_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("\r", "\\r"),
    ("\n", "\\n"),
    ("\t", "\\t"),
)


def escape_applescript_string(value: str) -> str:
    """Escape `value` for use inside a double-quoted AppleScript string literal."""
    out = value
    for raw, escaped in _APPLESCRIPT_REPLACEMENTS:
        out = out.replace(raw, escaped)
    return out


def quote_applescript(value: str) -> str:
    """Return `value` as a complete, escaped AppleScript string literal (with quotes)."""
    return f'"{escape_applescript_string(value)}"'
