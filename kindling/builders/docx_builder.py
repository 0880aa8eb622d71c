#!/usr/bin/env python3
"""
docx_builder.py
-------------------
Render a manuscript as a Standard Manuscript Format (SMF) `.docx`.

Layout:
    - 1" margins, 0.5" header distance, 12pt Courier New or Times New Roman
    - optional title page: contact block, word count, centered title block
    - running header "{surname} / {TITLE} / {page}" on every page after the
      title page (different-first-page mode)
    - each chapter on a new page, heading a third of the way down
    - scenes separated by a centered break marker
    - first paragraph after a chapter heading or scene break flush left,
      every other paragraph indented 0.5"

Prose HTML goes through the smart-text pipeline, so quotes and dashes
are typographic and bold / italic runs survive.

The whole document is built in memory and moved into place atomically:
the target path either holds a complete file or is untouched.

Usage:
    builder = DocxBuilder(content, options, settings, logger=logger)
    stats = builder.build()
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from io import BytesIO
from typing import Optional

# --- Third party ---
from docx import Document
from docx.enum.style import WD_STYLE_TYPE
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Pt, RGBColor, Twips

# --- Local imports ---
from kindling.core.exceptions import ExportError
from kindling.core.logging_manager import KindlingLogger
from kindling.core.settings import AppSettings
from kindling.utils.fs import atomic_write_bytes
from kindling.utils.smart_text import (
    FormattedParagraph,
    ParagraphType,
    parse_formatted_paragraphs,
    rewrite_typography,
)
from .base import BaseBuilder, ChapterContent, ExportStats, ManuscriptContent, SceneContent
from .options import ChapterHeadingStyle, DocxExportOptions, ExportScope, SceneBreakStyle

ONES = [
    "ZERO", "ONE", "TWO", "THREE", "FOUR", "FIVE", "SIX", "SEVEN", "EIGHT", "NINE",
    "TEN", "ELEVEN", "TWELVE", "THIRTEEN", "FOURTEEN", "FIFTEEN", "SIXTEEN",
    "SEVENTEEN", "EIGHTEEN", "NINETEEN",
]
TENS = ["", "", "TWENTY", "THIRTY", "FORTY", "FIFTY", "SIXTY", "SEVENTY", "EIGHTY", "NINETY"]

INDENT = Twips(720)
BODY_SIZE = Pt(12)
TITLE_PAGE_DROP = 12
CHAPTER_DROP = 12
AFTER_HEADING = 4

BODY_STYLE = "Body Text"
SYNOPSIS_STYLE = "Synopsis"


# ----- Text helpers -----
def number_to_words(number: int) -> str:
    """
    Spell a chapter number in capitals.

    Examples:
        >>> number_to_words(42)
        'FORTY-TWO'
        >>> number_to_words(101)
        '101'
    """
    if 0 <= number < 20:
        return ONES[number]
    if 20 <= number < 100:
        tens, ones = divmod(number, 10)
        return TENS[tens] if ones == 0 else f"{TENS[tens]}-{ONES[ones]}"
    if number == 100:
        return "ONE HUNDRED"
    return str(number)


def format_chapter_heading(number: int, title: str, style: ChapterHeadingStyle) -> str:
    """
    Chapter heading text for a heading style.

    Examples:
        >>> format_chapter_heading(1, "The Beginning", ChapterHeadingStyle.NUMBER_AND_TITLE)
        'CHAPTER ONE: THE BEGINNING'
    """
    title = title.upper()
    if style is ChapterHeadingStyle.NUMBER_ONLY:
        return f"CHAPTER {number_to_words(number)}"
    if style is ChapterHeadingStyle.NUMBER_AND_TITLE:
        return f"CHAPTER {number_to_words(number)}: {title}"
    if style is ChapterHeadingStyle.TITLE_ONLY:
        return title
    if style is ChapterHeadingStyle.NUMBER_ARABIC:
        return f"CHAPTER {number}"
    return f"CHAPTER {number}: {title}"


def format_word_count(words: int) -> str:
    """
    Title-page word count; rounded to the nearest thousand from 1000 up.

    Examples:
        >>> format_word_count(999)
        '999 words'
        >>> format_word_count(1500)
        'approx. 2000 words'
    """
    if words < 1000:
        return f"{words} words"
    return f"approx. {(words + 500) // 1000 * 1000} words"


def extract_surname(name: Optional[str]) -> str:
    """Last whitespace-separated token of a name, or an empty string."""
    tokens = (name or "").split()
    return tokens[-1] if tokens else ""


def running_header_text(surname: str, title: str) -> str:
    """Header text before the page number: up to three title words, uppercased."""
    short_title = " ".join(title.split()[:3]).upper()
    return f"{surname} / {short_title} / "


# ----- OOXML helpers -----
def _set_font(font, name: str) -> None:
    """Apply a font name to ascii, hAnsi and eastAsia slots."""
    font.name = name
    r_pr = font.element.get_or_add_rPr()
    r_fonts = r_pr.find(qn("w:rFonts"))
    if r_fonts is None:
        r_fonts = OxmlElement("w:rFonts")
        r_pr.append(r_fonts)
    r_fonts.set(qn("w:eastAsia"), name)


def _add_field_char(paragraph, char_type: str) -> None:
    run = paragraph.add_run()
    fld_char = OxmlElement("w:fldChar")
    fld_char.set(qn("w:fldCharType"), char_type)
    run._r.append(fld_char)


def add_page_field(paragraph) -> None:
    """Append a PAGE field (begin, instruction, separate, placeholder, end)."""
    _add_field_char(paragraph, "begin")

    run = paragraph.add_run()
    instr = OxmlElement("w:instrText")
    instr.set(qn("xml:space"), "preserve")
    instr.text = "PAGE"
    run._r.append(instr)

    _add_field_char(paragraph, "separate")
    paragraph.add_run("1")
    _add_field_char(paragraph, "end")


class DocxBuilder(BaseBuilder):
    """
    Build an SMF manuscript document.

    Attributes:
        content: Manuscript tree (archived rows already removed)
        options: DOCX export options
        settings: App settings (legal name and contact block)
    """

    def __init__(
        self,
        content: ManuscriptContent,
        options: DocxExportOptions,
        settings: Optional[AppSettings] = None,
        logger: Optional[KindlingLogger] = None,
    ):
        super().__init__(content, logger)
        self.options = options
        self.settings = settings or AppSettings()
        self.font_name = options.font_family.font_name
        self.line_spacing = options.line_spacing.multiple

        self.document = Document()
        self.stats = ExportStats(str(options.output_path))
        # First normal paragraph after a chapter heading or scene break is flush
        self._section_start = True

    # ---- Setup ----
    def _setup_page(self) -> None:
        section = self.document.sections[0]
        section.top_margin = Inches(1)
        section.bottom_margin = Inches(1)
        section.left_margin = Inches(1)
        section.right_margin = Inches(1)
        section.header_distance = Twips(720)
        section.footer_distance = Twips(720)

    def _setup_styles(self) -> None:
        styles = self.document.styles

        normal = styles["Normal"]
        _set_font(normal.font, self.font_name)
        normal.font.size = BODY_SIZE

        body = self._style(BODY_STYLE)
        _set_font(body.font, self.font_name)
        body.font.size = BODY_SIZE
        body.paragraph_format.line_spacing = self.line_spacing
        body.paragraph_format.space_before = Pt(0)
        body.paragraph_format.space_after = Pt(0)

        synopsis = self._style(SYNOPSIS_STYLE)
        _set_font(synopsis.font, self.font_name)
        synopsis.font.size = BODY_SIZE
        synopsis.font.italic = True
        synopsis.paragraph_format.left_indent = INDENT
        synopsis.paragraph_format.line_spacing = self.line_spacing
        synopsis.paragraph_format.space_after = Pt(0)

        for name, bold, italic in (
            ("Heading 1", False, False),
            ("Heading 2", True, False),
            ("Heading 3", True, True),
        ):
            heading = self._style(name)
            _set_font(heading.font, self.font_name)
            heading.font.size = BODY_SIZE
            heading.font.bold = bold
            heading.font.italic = italic
            heading.font.color.rgb = RGBColor(0, 0, 0)
            heading.paragraph_format.space_before = Pt(0)
            heading.paragraph_format.space_after = Pt(0)
            heading.paragraph_format.line_spacing = self.line_spacing
            heading.paragraph_format.keep_with_next = True

    def _style(self, name: str):
        styles = self.document.styles
        try:
            return styles[name]
        except KeyError:
            style = styles.add_style(name, WD_STYLE_TYPE.PARAGRAPH)
            style.base_style = styles["Normal"]
            return style

    def _setup_header(self) -> None:
        section = self.document.sections[0]
        section.different_first_page_header_footer = self.options.include_title_page

        surname = extract_surname(
            self.content.project.author_pen_name or self.settings.author_name
        )
        paragraph = section.header.paragraphs[0]
        paragraph.alignment = WD_ALIGN_PARAGRAPH.RIGHT
        run = paragraph.add_run(running_header_text(surname, self.content.project.name))
        _set_font(run.font, self.font_name)
        run.font.size = BODY_SIZE
        add_page_field(paragraph)

    # ---- Paragraph helpers ----
    def _paragraph(self, text: str = "", style: str = BODY_STYLE, spacing: Optional[float] = None):
        paragraph = self.document.add_paragraph(style=style)
        if text:
            run = paragraph.add_run(text)
            run.font.size = BODY_SIZE
        paragraph.paragraph_format.line_spacing = spacing or self.line_spacing
        return paragraph

    def _blank(self, count: int, spacing: Optional[float] = None) -> None:
        for _ in range(count):
            self._paragraph(spacing=spacing)

    def _page_break(self) -> None:
        self._paragraph().paragraph_format.page_break_before = True

    # ---- Title page ----
    def _title_page(self) -> None:
        project = self.content.project
        settings = self.settings

        contact = [
            settings.author_name,
            settings.contact_address_line1,
            settings.contact_address_line2,
            settings.contact_phone,
            settings.contact_email,
        ]
        for line in contact:
            if line and line.strip():
                self._paragraph(line.strip(), spacing=1.0).alignment = WD_ALIGN_PARAGRAPH.LEFT

        self._blank(1, spacing=1.0)
        count = self._paragraph(format_word_count(self.content.word_count), spacing=1.0)
        count.alignment = WD_ALIGN_PARAGRAPH.RIGHT

        self._blank(TITLE_PAGE_DROP)

        byline = project.author_pen_name or settings.author_name or ""
        for text in (project.name.upper(), "", "by", "", byline):
            self._paragraph(text).alignment = WD_ALIGN_PARAGRAPH.CENTER
        if project.genre and project.genre.strip():
            genre = self._paragraph()
            genre.alignment = WD_ALIGN_PARAGRAPH.CENTER
            run = genre.add_run(project.genre.strip())
            run.italic = True
            run.font.size = BODY_SIZE

        self._page_break()

    # ---- Chapters ----
    def _chapter(self, chapter: ChapterContent, first: bool) -> None:
        if not first and self.options.page_breaks_between_chapters:
            self._page_break()

        self._blank(CHAPTER_DROP)
        heading = self.document.add_paragraph(
            format_chapter_heading(
                chapter.number, chapter.chapter.title, self.options.chapter_heading_style
            ),
            style="Heading 1",
        )
        heading.alignment = WD_ALIGN_PARAGRAPH.CENTER
        self._blank(AFTER_HEADING)

        self._section_start = True
        for index, scene in enumerate(chapter.scenes):
            if index > 0:
                self._scene_break()
            self._scene(scene)

        self.stats.chapters_exported += 1

    def _scene_break(self) -> None:
        style = self.options.scene_break_style
        if style is SceneBreakStyle.BLANK_LINE:
            paragraph = self._paragraph()
            one_line = Twips(self.options.line_spacing.twips)
            paragraph.paragraph_format.space_before = one_line
            paragraph.paragraph_format.space_after = one_line
        else:
            paragraph = self._paragraph(style.marker)
            paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        self._section_start = True
        self.stats.scene_breaks += 1

    # ---- Scenes and beats ----
    def _scene(self, content: SceneContent) -> None:
        scene = content.scene
        if self.options.include_beat_markers:
            self.document.add_paragraph(scene.title, style="Heading 2")

        if self.options.include_synopsis and scene.synopsis and scene.synopsis.strip():
            self.document.add_paragraph(
                rewrite_typography(scene.synopsis.strip()), style=SYNOPSIS_STYLE
            )

        for beat in content.beats:
            if self.options.include_beat_markers:
                marker = self.document.add_paragraph(beat.content, style="Heading 3")
                marker.paragraph_format.space_before = BODY_SIZE
            for paragraph in parse_formatted_paragraphs(beat.prose):
                self._prose_paragraph(paragraph)

        self.stats.scenes_exported += 1

    def _prose_paragraph(self, formatted: FormattedParagraph) -> None:
        paragraph = self.document.add_paragraph(style=BODY_STYLE)
        fmt = paragraph.paragraph_format
        fmt.line_spacing = self.line_spacing

        if formatted.paragraph_type is ParagraphType.BLOCKQUOTE:
            fmt.left_indent = INDENT
            fmt.right_indent = INDENT
            fmt.first_line_indent = Twips(0)
        else:
            flush = self._section_start and not self.options.include_beat_markers
            fmt.first_line_indent = Twips(0) if flush else INDENT
            self._section_start = False

        for formatted_run in formatted.runs:
            run = paragraph.add_run(formatted_run.text)
            run.bold = formatted_run.bold or None
            run.italic = formatted_run.italic or None
            _set_font(run.font, self.font_name)
            run.font.size = BODY_SIZE

    # ---- Build ----
    def render(self) -> None:
        """Populate the in-memory document."""
        self._setup_page()
        self._setup_styles()
        self._setup_header()

        if self.options.include_title_page:
            self._title_page()

        if self.content.scope is ExportScope.SCENE:
            self._section_start = True
            for chapter in self.content.chapters:
                for index, scene in enumerate(chapter.scenes):
                    if index > 0:
                        self._scene_break()
                    self._scene(scene)
            return

        for index, chapter in enumerate(self.content.chapters):
            self._chapter(chapter, first=index == 0)

    def to_bytes(self) -> bytes:
        buffer = BytesIO()
        self.document.save(buffer)
        return buffer.getvalue()

    def build(self) -> ExportStats:
        """
        Render the manuscript and write the `.docx` file.

        Raises:
            ExportError: If the document cannot be packed or written
        """
        self.render()
        output_path = self.options.output_path
        try:
            atomic_write_bytes(output_path, self.to_bytes())
        except OSError as e:
            self._log_error(e, {"operation": "docx_write", "output_path": str(output_path)})
            raise ExportError(f"Failed to write DOCX file {output_path}: {e}") from e

        self.stats.files_created = 1
        self._log_operation(
            "docx_exported",
            {
                "output_path": str(output_path),
                "chapters": self.stats.chapters_exported,
                "scenes": self.stats.scenes_exported,
                "scene_breaks": self.stats.scene_breaks,
            },
        )
        return self.stats

