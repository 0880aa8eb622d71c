#!/usr/bin/env python3
"""
smart_text.py
-------------------
Rich-text prose to formatted paragraphs, plus typographic rewriting.

Prose is stored as HTML fragments written by a WYSIWYG editor. The only
markup that carries meaning is:

    - inline marks: <strong>/<b> (bold), <em>/<i> (italic)
    - blocks: <p>, <blockquote>
    - the void tag <br>
    - entities (decoded by html.parser)

Everything else is ignored; its text content is kept.

Functions:
    parse_formatted_paragraphs: HTML -> List[FormattedParagraph]
    smartify: straight quotes -> curly quotes
    normalize_punctuation: dashes and spacing
    rewrite_typography: smartify + normalize_punctuation
    strip_html: HTML -> plain paragraphs joined by blank lines
    count_words: whitespace tokens of stripped HTML

Usage:
    from kindling.utils.smart_text import parse_formatted_paragraphs

    for paragraph in parse_formatted_paragraphs(beat.prose or ""):
        for run in paragraph.runs:
            print(run.text, run.bold, run.italic)

Parsing never raises: if the parser fails, the whole fragment degrades
to a single Normal paragraph of stripped, rewritten text.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import re
from dataclasses import dataclass, field
from enum import Enum
from html.parser import HTMLParser
from typing import List, Optional, Tuple

LEFT_DOUBLE = "\u201c"
RIGHT_DOUBLE = "\u201d"
LEFT_SINGLE = "\u2018"
RIGHT_SINGLE = "\u2019"
EM_DASH = "\u2014"

OPENING_CONTEXT = ("(", "[", "{")

BOLD_TAGS = ("strong", "b")
ITALIC_TAGS = ("em", "i")
BLOCK_TAGS = ("p", "blockquote")

_SPACES_AROUND_EM_DASH = re.compile(f" ?{EM_DASH} ?")
_MULTIPLE_SPACES = re.compile(r" {2,}")


# ----- Formatted output -----
class ParagraphType(str, Enum):
    NORMAL = "normal"
    BLOCKQUOTE = "blockquote"


@dataclass
class FormattedRun:
    """Stretch of text sharing one set of inline marks."""

    text: str
    bold: bool = False
    italic: bool = False

    @property
    def marks(self) -> Tuple[bool, bool]:
        return (self.bold, self.italic)


@dataclass
class FormattedParagraph:
    paragraph_type: ParagraphType = ParagraphType.NORMAL
    runs: List[FormattedRun] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


# ----- Typography -----
def _opens(previous: str) -> bool:
    """True when a quote after `previous` is an opening quote."""
    return previous == "" or previous.isspace() or previous in OPENING_CONTEXT


def smartify(text: str, preceding: str = "") -> str:
    """
    Replace straight quotes with curly quotes.

    A double quote opens after nothing, whitespace or an opening bracket
    and closes otherwise. An apostrophe between two letters is always a
    right single quote; any other apostrophe follows the double-quote rule.

    Args:
        text: Text to rewrite
        preceding: Character emitted just before `text` (for text split
            across nodes)

    Examples:
        >>> smartify('"Hello"')
        '“Hello”'
        >>> smartify("don't")
        'don’t'
    """
    out: List[str] = []
    previous = preceding[-1:] if preceding else ""

    for index, char in enumerate(text):
        if char == '"':
            char = LEFT_DOUBLE if _opens(previous) else RIGHT_DOUBLE
        elif char == "'":
            following = text[index + 1] if index + 1 < len(text) else ""
            if previous.isalpha() and following.isalpha():
                char = RIGHT_SINGLE
            else:
                char = LEFT_SINGLE if _opens(previous) else RIGHT_SINGLE
        out.append(char)
        previous = char

    return "".join(out)


def normalize_punctuation(text: str) -> str:
    """
    Collapse dashes and spaces.

    `---` and `--` become an em dash; one space on either side of an em
    dash is removed; runs of two or more spaces become one.

    Examples:
        >>> normalize_punctuation("a -- b")
        'a—b'
    """
    text = text.replace("---", EM_DASH).replace("--", EM_DASH)
    text = _SPACES_AROUND_EM_DASH.sub(EM_DASH, text)
    return _MULTIPLE_SPACES.sub(" ", text)


def rewrite_typography(text: str, preceding: str = "") -> str:
    """Smart quotes, then dash and spacing normalization."""
    return normalize_punctuation(smartify(text, preceding))


# ----- Plain text -----
def strip_html(html: str) -> str:
    """
    Reduce HTML to plain text paragraphs.

    Tags are dropped; `</p>`, `<br>` and `<br/>` end a paragraph. Lines are
    trimmed, empty lines removed, and paragraphs joined with a blank line.
    Entities are left as written, so stripping twice equals stripping once.

    Examples:
        >>> strip_html("<p>Hello</p><p>World</p>")
        'Hello\\n\\nWorld'
    """
    result: List[str] = []
    in_tag = False
    reading_name = False
    tag_name: List[str] = []

    for char in html:
        if char == "<":
            in_tag = True
            reading_name = True
            tag_name = []
        elif char == ">":
            in_tag = False
            reading_name = False
            name = "".join(tag_name).lower()
            if name in ("/p", "br", "br/") and result and not result[-1].endswith("\n"):
                result.append("\n\n")
            tag_name = []
        elif char in (" ", "/") and reading_name and tag_name:
            reading_name = False
        elif in_tag:
            if reading_name:
                tag_name.append(char)
        else:
            result.append(char)

    text = re.sub(r"\n+", "\n", "".join(result))
    lines = (line.strip() for line in text.split("\n"))
    return "\n\n".join(line for line in lines if line)


def count_words(html: Optional[str]) -> int:
    """Whitespace-split word count of stripped HTML."""
    if not html:
        return 0
    return len(strip_html(html).split())


# ----- HTML -> paragraphs -----
class _ProseParser(HTMLParser):
    """
    Depth-counting parser for editor prose.

    Bold, italic and blockquote state are plain counters, so unbalanced
    markup only leaves a counter raised until the end of input.
    """

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.paragraphs: List[FormattedParagraph] = []
        self._runs: List[FormattedRun] = []
        self._bold = 0
        self._italic = 0
        self._blockquote = 0
        self._last_char = ""

    # --- tag events ---
    def handle_starttag(self, tag, attrs):
        if tag in BOLD_TAGS:
            self._bold += 1
        elif tag in ITALIC_TAGS:
            self._italic += 1
        elif tag in BLOCK_TAGS:
            self._flush()
            if tag == "blockquote":
                self._blockquote += 1
        elif tag == "br":
            self._line_break()

    def handle_endtag(self, tag):
        if tag in BOLD_TAGS:
            self._bold = max(0, self._bold - 1)
        elif tag in ITALIC_TAGS:
            self._italic = max(0, self._italic - 1)
        elif tag in BLOCK_TAGS:
            self._flush()
            if tag == "blockquote":
                self._blockquote = max(0, self._blockquote - 1)

    def handle_startendtag(self, tag, attrs):
        if tag == "br":
            self._line_break()
        else:
            self.handle_starttag(tag, attrs)
            self.handle_endtag(tag)

    def handle_data(self, data):
        text = data.replace("\u00a0", " ").replace("\r", " ").replace("\n", " ")
        text = text.replace("\t", " ")
        if not text:
            return
        text = rewrite_typography(text, self._last_char)
        self._last_char = text[-1:] or self._last_char
        self._append(text)

    # --- run bookkeeping ---
    def _append(self, text: str) -> None:
        marks = (self._bold > 0, self._italic > 0)
        if self._runs and self._runs[-1].marks == marks:
            self._runs[-1].text += text
        else:
            self._runs.append(FormattedRun(text, bold=marks[0], italic=marks[1]))

    def _line_break(self) -> None:
        if self._runs:
            self._runs[-1].text += " "
        else:
            self._append(" ")
        self._last_char = " "

    def _flush(self) -> None:
        runs, self._runs = self._runs, []
        self._last_char = ""
        if not any(run.text.strip() for run in runs):
            return

        for run in runs:
            run.text = run.text.lstrip()
            if run.text:
                break
        for run in reversed(runs):
            run.text = run.text.rstrip()
            if run.text:
                break
        runs = [run for run in runs if run.text]

        paragraph_type = (
            ParagraphType.BLOCKQUOTE if self._blockquote > 0 else ParagraphType.NORMAL
        )
        self.paragraphs.append(FormattedParagraph(paragraph_type, runs))

    def finish(self) -> List[FormattedParagraph]:
        self.close()
        self._flush()
        return self.paragraphs


def parse_formatted_paragraphs(html: Optional[str]) -> List[FormattedParagraph]:
    """
    Parse editor HTML into formatted paragraphs.

    Args:
        html: HTML fragment (may be malformed or plain text)

    Returns:
        Non-empty paragraphs in document order
    """
    if not html or not html.strip():
        return []

    parser = _ProseParser()
    try:
        parser.feed(html)
        return parser.finish()
    except (AssertionError, ValueError):
        # HTMLParser gives up on some malformed declarations
        text = rewrite_typography(strip_html(html))
        if not text.strip():
            return []
        return [FormattedParagraph(ParagraphType.NORMAL, [FormattedRun(text)])]
