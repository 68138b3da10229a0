"""Cosmetic cleanup of raw LLM story output."""

import re

_CLEANUP_PATTERNS: list[tuple[re.Pattern, str]] = [
    (
        re.compile(r"<s>|</s>|\[B_ANSWER\]|\[INST\]|\[/INST\]|\[PROMPT\]|\[/PROMPT\]"),
        "",
    ),
    (re.compile(r"\A[\"']|[\"']\Z"), ""),
    (re.compile(r"\A\*+|\*+\Z"), ""),
    (re.compile(r"^#{1,6}[ \t]*", re.MULTILINE), ""),
    (re.compile(r"^\d+\.[ \t]*\*\*.*?\*\*[ \t]*", re.MULTILINE), ""),
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"AI Generated Story", re.IGNORECASE), ""),
    (re.compile(r"\AResponse\b:?\s*", re.IGNORECASE), ""),
    (re.compile(r"^(?:INTERPRETATION|STORY)\b:?[ \t]*\n?", re.MULTILINE), ""),
]


def _clean_once(text: str) -> str:
    for pattern, replacement in _CLEANUP_PATTERNS:
        text = pattern.sub(replacement, text)
    return text.strip()


def clean_story_text(text: str) -> str:
    """Strip chat markup, markdown and echoed labels from a completion.

    Every rule only ever removes characters, so repeating the pass until the
    text stops changing terminates, and the result is a fixed point:
    clean_story_text(clean_story_text(x)) == clean_story_text(x).
    """
    cleaned = text.strip()
    while True:
        next_pass = _clean_once(cleaned)
        if next_pass == cleaned:
            return cleaned
        cleaned = next_pass
