"""
Plain-text heuristics shared by the narrative validators.

Headings, list items and MUST-bearing lines are recognised with line-anchored
regular expressions; all matching is case-insensitive.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional

HEADING = re.compile(r"^#{1,6}\s+", re.MULTILINE)
LIST_ITEM = re.compile(r"^(?:[-*+]|\d+\.)\s+(.*)$")
SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")
MUST_LINE = re.compile(r"\b(must|shall|required to)\b", re.IGNORECASE)
NEGATION = re.compile(
    r"(not required|will not|must not|shall not|out of scope|non-goal)",
    re.IGNORECASE,
)
UNSOURCED_MARKER = re.compile(r"\b(UNSOURCED|INFERENCE)\b", re.IGNORECASE)

NEGATION_WINDOW = 40
MAX_KEY_TERMS = 8
MIN_KEY_TERM_LENGTH = 5


def has_section(text: str, title: str) -> bool:
    """True if ``title`` appears as a markdown heading, underlined heading or label line."""
    escaped = re.escape(title)
    flags = re.IGNORECASE | re.MULTILINE
    patterns = (
        rf"^#{{1,6}}\s+{escaped}\s*$",
        rf"^{escaped}\s*$\s*^[-=]{{3,}}\s*$",
        rf"^{escaped}\s*:\s*$",
    )
    return any(re.search(p, text, flags) for p in patterns)


def split_chunks(text: str) -> List[str]:
    """Split text into heading, list-item and sentence chunks."""
    chunks: List[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if (
            HEADING.match(stripped)
            or re.match(r"^[-*+]\s+", stripped)
            or re.match(r"^\d+\.\s+", stripped)
        ):
            chunks.append(stripped)
        else:
            chunks.extend(p for p in SENTENCE_BREAK.split(stripped) if p.strip())
    return chunks


def normalize_item(value: str) -> str:
    return re.sub(r"\s+", " ", value.strip().lower())


def extract_section(text: str, heading: str) -> Optional[str]:
    """Body of the first markdown section titled ``heading``, up to the next heading."""
    match = re.search(
        rf"^#{{1,6}}\s+{re.escape(heading)}\s*$",
        text,
        re.IGNORECASE | re.MULTILINE,
    )
    if not match:
        return None
    rest = text[match.end():]
    following = HEADING.search(rest)
    block = rest[: following.start()] if following else rest
    return block.strip()


def list_items_under(text: str, headings: Iterable[str]) -> List[str]:
    """Normalized list items found under any of the given headings."""
    items: List[str] = []
    for heading in headings:
        block = extract_section(text, heading)
        if not block:
            continue
        for line in block.splitlines():
            match = LIST_ITEM.match(line.strip())
            if match and len(match.group(1).strip()) > 2:
                item = normalize_item(match.group(1))
                if item not in items:
                    items.append(item)
    return items


def must_statements(text: str) -> List[str]:
    statements: List[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped and MUST_LINE.search(stripped) and stripped not in statements:
            statements.append(stripped)
    return statements


def key_terms(statement: str) -> List[str]:
    """The first few long words of a statement, used as match anchors."""
    words = re.sub(r"[^\w\s-]", " ", statement).split()
    return [w for w in words if len(w) >= MIN_KEY_TERM_LENGTH][:MAX_KEY_TERMS]


def negates(text: str, statement: str) -> bool:
    """True if a key term of ``statement`` sits near a negation phrase in ``text``."""
    for term in key_terms(statement):
        match = re.search(
            rf".{{0,{NEGATION_WINDOW}}}\b{re.escape(term)}\b.{{0,{NEGATION_WINDOW}}}",
            text,
            re.IGNORECASE,
        )
        if match and NEGATION.search(match.group(0)):
            return True
    return False


def trim_to(value: str, limit: int) -> str:
    return value if len(value) <= limit else value[: limit - 3] + "..."
