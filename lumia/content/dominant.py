"""Dominant trait marker insertion."""

import re

BEHAVIOR_MARKER = "(My MOST PREVALENT Trait)"
PERSONALITY_MARKER = "(My MOST PREVALENT Personality)"
MEMBER_MARKER = "(Most Prevalent for this member)"

_BOLD_LINE = re.compile(r"^(\*\*)(.+?)(\*\*)(.*)?$")
_BOLD_REPLACE = re.compile(r"^(\s*)(\*\*)(.+?)(\*\*)")
_HEADING_LINE = re.compile(r"^(#{1,6})\s+(.+)$")
_HEADING_REPLACE = re.compile(r"^(\s*)(#{1,6})\s+(.+)$")


def append_dominant_tag(content: str, tag: str) -> str:
    """Insert tag into the first non-blank line of content.

    "**Header**: rest" → "**Header tag**: rest"
    "## Heading"       → "## Heading tag"
    anything else      → line + " tag"
    """
    if not content or not tag:
        return content

    lines = content.split("\n")
    for i, raw in enumerate(lines):
        line = raw.strip()
        if not line:
            continue
        if _BOLD_LINE.match(line):
            lines[i] = _BOLD_REPLACE.sub(
                lambda m: f"{m.group(1)}{m.group(2)}{m.group(3)} {tag}{m.group(4)}", raw, count=1
            )
        elif _HEADING_LINE.match(line):
            lines[i] = _HEADING_REPLACE.sub(
                lambda m: f"{m.group(1)}{m.group(2)} {m.group(3)} {tag}", raw, count=1
            )
        else:
            lines[i] = f"{raw} {tag}"
        break

    return "\n".join(lines)
