"""Inline tag extraction for Lumia definition and personality bodies.

Definition bodies may carry bracket tags:
  [lumia_img=<url>]       avatar image
  [lumia_author=<name>]   definition author

Legacy personality bodies may embed both payloads as variable assignments:
  {{setvar::lumia_behavior_<suffix>::<text>}}
  {{setglobalvar::lumia_personality_<suffix>::<text>}}
"""

import re
from typing import NamedTuple

_IMAGE_TAG = re.compile(r"\[lumia_img=([^\]]+)\]")
_AUTHOR_TAG = re.compile(r"\[lumia_author=([^\]]+)\]")

_LEGACY_BEHAVIOR = re.compile(r"\{\{setvar::lumia_behavior_\w+::(.*?)\}\}", re.DOTALL)
_LEGACY_PERSONALITY = re.compile(
    r"\{\{setglobalvar::lumia_personality_\w+::(.*?)\}\}", re.DOTALL
)


class Metadata(NamedTuple):
    image: str | None
    author: str | None
    content: str


class LegacySplit(NamedTuple):
    behavior: str | None
    personality: str


def extract_metadata(content: str) -> Metadata:
    """Pull the first image and author tags out of a definition body.

    Each tag is matched against the original text. Matched tags are removed
    and the remainder trimmed; with no tags the content comes back untouched.
    """
    clean = content
    image = None
    author = None

    img_match = _IMAGE_TAG.search(content)
    if img_match:
        image = img_match.group(1).strip()
        clean = clean.replace(img_match.group(0), "", 1).strip()

    author_match = _AUTHOR_TAG.search(content)
    if author_match:
        author = author_match.group(1).strip()
        clean = clean.replace(author_match.group(0), "", 1).strip()

    return Metadata(image=image, author=author, content=clean)


def split_legacy_personality(content: str) -> LegacySplit:
    """Recover behavior/personality payloads from a legacy personality body.

    Without a personality assignment the whole body is the personality text.
    """
    behavior_match = _LEGACY_BEHAVIOR.search(content)
    personality_match = _LEGACY_PERSONALITY.search(content)

    behavior = behavior_match.group(1).strip() if behavior_match else None
    personality = personality_match.group(1).strip() if personality_match else content
    return LegacySplit(behavior=behavior, personality=personality)
