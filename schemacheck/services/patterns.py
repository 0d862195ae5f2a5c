"""
ECMA-262 regular expressions on top of Python's ``re``.

JSON Schema patterns are written in the ECMA-262 dialect. The differences
that matter in practice are rewritten before compiling:

- ``\\/`` is a plain slash (ECMA requires the escape in literals)
- ``(?<name>...)`` and ``\\k<name>`` are spelled ``(?P<name>...)`` and ``(?P=name)``
- ``$`` outside a character class anchors at the very end of input,
  whereas Python's ``$`` also matches before a trailing newline
"""

from __future__ import annotations

import re


def translate_pattern(pattern: str) -> str:
    """Rewrite an ECMA-262 pattern into Python ``re`` syntax."""
    out: list[str] = []
    in_class = False
    i = 0
    length = len(pattern)

    while i < length:
        ch = pattern[i]

        if ch == "\\" and i + 1 < length:
            escaped = pattern[i + 1]
            if escaped == "/":
                out.append("/")
            elif escaped == "k" and not in_class and pattern.startswith("<", i + 2):
                end = pattern.find(">", i + 3)
                if end == -1:
                    out.append(ch + escaped)
                else:
                    out.append(f"(?P={pattern[i + 3:end]})")
                    i = end + 1
                    continue
            else:
                out.append(ch + escaped)
            i += 2
            continue

        if in_class:
            if ch == "]":
                in_class = False
            out.append(ch)
        elif ch == "[":
            in_class = True
            out.append(ch)
            # a leading "]" (after an optional "^") is a literal in Python
            if pattern.startswith("^", i + 1):
                out.append("^")
                i += 1
            if pattern.startswith("]", i + 1):
                out.append("]")
                i += 1
        elif ch == "$":
            out.append(r"\Z")
        elif pattern.startswith("(?<", i) and not pattern.startswith(("(?<=", "(?<!"), i):
            out.append("(?P<")
            i += 3
            continue
        else:
            out.append(ch)
        i += 1

    return "".join(out)


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile an ECMA-262 pattern; raises ``re.error`` when it is invalid."""
    return re.compile(translate_pattern(pattern))
