"""
Markdown detection heuristics.
"""

import re

MARKDOWN_PATTERNS = [
    re.compile(r"^#{1,6}\s", re.MULTILINE),      # headers
    re.compile(r"\*\*.*\*\*"),                   # bold
    re.compile(r"\*.*\*"),                       # italic
    re.compile(r"`.*`"),                         # inline code
    re.compile(r"```[\s\S]*```"),                # fenced code
    re.compile(r"^[-*+]\s", re.MULTILINE),       # bullet lists
    re.compile(r"^\d+\.\s", re.MULTILINE),       # numbered lists
    re.compile(r"\[.*\]\(.*\)"),                 # links
    re.compile(r"!\[.*\]\(.*\)"),                # images
    re.compile(r"^>\s", re.MULTILINE),           # blockquotes
    re.compile(r"^---", re.MULTILINE),           # horizontal rules
    re.compile(r"\|\s*\|"),                      # tables
]


def is_markdown(text: str | None) -> bool:
    """True if the text looks like Markdown."""
    if not text or not isinstance(text, str):
        return False
    return any(pattern.search(text) for pattern in MARKDOWN_PATTERNS)
