#!/usr/bin/env python3
"""
md.py
-------------------
Markdown helpers shared by the Markdown outline and Longform importers.

Functions:
    split_frontmatter: Separate YAML frontmatter from body lines
    load_frontmatter: Parse frontmatter text into a dict
    parse_heading: Recognise an ATX heading line
    parse_bullet: Recognise a `- ` / `* ` list item
    parse_blockquote: Recognise a `>` line
    inline_markdown_to_html: Escape text, convert **bold** and *italic*
    paragraphs_to_html: Plain or lightly marked-up text -> <p> HTML
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import html
import re
from typing import Any, Dict, List, Optional, Tuple

# --- Third party imports ---
import yaml

_HEADING = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")
_BOLD = re.compile(r"(\*\*|__)(?=\S)(.+?)(?<=\S)\1")
_ITALIC = re.compile(r"(?<![\w*])([*_])(?=\S)(.+?)(?<=\S)\1(?![\w*])")


def split_frontmatter(content: str) -> Tuple[str, List[str]]:
    """
    Split markdown content into YAML frontmatter and body.

    Expected format:
        ---
        yaml: content
        ---

        Body content here...

    Args:
        content: Full markdown file content

    Returns:
        Tuple of (frontmatter_text, body_lines)
        - frontmatter_text: YAML content as string (empty if no frontmatter)
        - body_lines: List of body content lines

    Examples:
        >>> fm, body = split_frontmatter("---\\ntitle: Draft\\n---\\n\\nBody text")
        >>> fm
        'title: Draft'
        >>> body
        ['Body text']
    """
    lines = content.lstrip("\ufeff").splitlines()

    if not lines or lines[0].strip() != "---":
        return "", lines

    frontmatter_end = None
    for i, line in enumerate(lines[1:], 1):
        if line.strip() == "---":
            frontmatter_end = i
            break

    if frontmatter_end is None:
        return "", lines

    frontmatter_lines = lines[1:frontmatter_end]
    body_lines = lines[frontmatter_end + 1 :]

    while body_lines and body_lines[0].strip() == "":
        body_lines.pop(0)

    return "\n".join(frontmatter_lines), body_lines


def load_frontmatter(frontmatter: str) -> Dict[str, Any]:
    """
    Parse frontmatter YAML into a mapping.

    Returns an empty dict for empty or non-mapping documents.

    Raises:
        yaml.YAMLError: On malformed YAML
    """
    if not frontmatter.strip():
        return {}
    data = yaml.safe_load(frontmatter)
    return data if isinstance(data, dict) else {}


def parse_heading(line: str) -> Optional[Tuple[int, str]]:
    """
    Parse an ATX heading.

    Examples:
        >>> parse_heading("## Chapter One ##")
        (2, 'Chapter One')
        >>> parse_heading("#hashtag") is None
        True
    """
    match = _HEADING.match(line.strip())
    if not match:
        return None
    return len(match.group(1)), match.group(2).strip()


def parse_bullet(line: str) -> Optional[str]:
    """Text of a `- ` or `* ` list item, or None."""
    stripped = line.lstrip()
    for marker in ("- ", "* "):
        if stripped.startswith(marker):
            return stripped[len(marker) :].strip()
    return None


def parse_blockquote(line: str) -> Optional[str]:
    """Text of a `>` line, or None."""
    stripped = line.lstrip()
    if not stripped.startswith(">"):
        return None
    return stripped[1:].strip()


def inline_markdown_to_html(text: str) -> str:
    """
    Escape HTML special characters, then render `**bold**` and `*italic*`.

    Examples:
        >>> inline_markdown_to_html("a **b** & *c*")
        'a <strong>b</strong> &amp; <em>c</em>'
    """
    escaped = html.escape(text, quote=False)
    escaped = _BOLD.sub(r"<strong>\2</strong>", escaped)
    return _ITALIC.sub(r"<em>\2</em>", escaped)


def paragraphs_to_html(text: Optional[str]) -> Optional[str]:
    """
    Convert blank-line separated text into `<p>` HTML.

    Lines within a paragraph are joined with a space. Returns None when
    the text is empty.

    Examples:
        >>> paragraphs_to_html("One\\ntwo\\n\\nThree")
        '<p>One two</p><p>Three</p>'
    """
    if not text or not text.strip():
        return None

    paragraphs: List[str] = []
    current: List[str] = []
    for line in text.splitlines():
        if line.strip():
            current.append(line.strip())
        elif current:
            paragraphs.append(" ".join(current))
            current = []
    if current:
        paragraphs.append(" ".join(current))

    return "".join(f"<p>{inline_markdown_to_html(p)}</p>" for p in paragraphs)
