#!/usr/bin/env python3
"""
Tests for DocxBuilder - Standard Manuscript Format output.

Documents are built to a temporary file and read back with python-docx:
- Text helpers (chapter numbers, headings, word counts, running header)
- Title page and running header
- Chapter headings, scene breaks and paragraph indentation
- Beat markers, synopses and scene scope
"""
import pytest
from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Twips

from kindling.builders import (
    ChapterHeadingStyle,
    DocxBuilder,
    DocxExportOptions,
    ExportScope,
    ManuscriptContent,
)
from kindling.builders.docx_builder import (
    extract_surname,
    format_chapter_heading,
    format_word_count,
    number_to_words,
    running_header_text,
)
from kindling.core.exceptions import ExportError

INDENT = Twips(720)


@pytest.fixture
def render(tmp_dir, app_settings):
    """Build content with options and return (document, stats)."""

    def _render(content, **options):
        output = tmp_dir / "out" / "manuscript.docx"
        builder = DocxBuilder(
            content, DocxExportOptions(output_path=output, **options), app_settings
        )
        stats = builder.build()
        return Document(str(output)), stats

    return _render


def texts(document):
    return [p.text for p in document.paragraphs]


def paragraph(document, text):
    return next(p for p in document.paragraphs if p.text == text)


def styled(document, style_name):
    return [p.text for p in document.paragraphs if p.style.name == style_name]


class TestTextHelpers:
    """Test pure text helpers."""

    def test_number_to_words(self):
        assert number_to_words(1) == "ONE"
        assert number_to_words(13) == "THIRTEEN"
        assert number_to_words(20) == "TWENTY"
        assert number_to_words(42) == "FORTY-TWO"
        assert number_to_words(99) == "NINETY-NINE"
        assert number_to_words(100) == "ONE HUNDRED"
        assert number_to_words(101) == "101"

    def test_chapter_heading_styles(self):
        title = "The Beginning"
        assert format_chapter_heading(1, title, ChapterHeadingStyle.NUMBER_ONLY) == "CHAPTER ONE"
        assert (
            format_chapter_heading(1, title, ChapterHeadingStyle.NUMBER_AND_TITLE)
            == "CHAPTER ONE: THE BEGINNING"
        )
        assert format_chapter_heading(1, title, ChapterHeadingStyle.TITLE_ONLY) == "THE BEGINNING"
        assert format_chapter_heading(12, title, ChapterHeadingStyle.NUMBER_ARABIC) == "CHAPTER 12"
        assert (
            format_chapter_heading(12, title, ChapterHeadingStyle.NUMBER_ARABIC_AND_TITLE)
            == "CHAPTER 12: THE BEGINNING"
        )

    def test_word_count(self):
        assert format_word_count(0) == "0 words"
        assert format_word_count(999) == "999 words"
        assert format_word_count(1000) == "approx. 1000 words"
        assert format_word_count(1499) == "approx. 1000 words"
        assert format_word_count(1500) == "approx. 2000 words"
        assert format_word_count(87654) == "approx. 88000 words"

    def test_surname(self):
        assert extract_surname("Jane Q. Doe") == "Doe"
        assert extract_surname("Cher") == "Cher"
        assert extract_surname(None) == ""
        assert extract_surname("   ") == ""

    def test_running_header(self):
        assert running_header_text("Doe", "The Long Night") == "Doe / THE LONG NIGHT / "
        assert running_header_text("Doe", "A Very Long Title Here") == "Doe / A VERY LONG / "


class TestTitlePageAndHeader:
    """Test the title page block and running header."""

    def test_contact_block_and_word_count(self, render, manuscript_content):
        document, _ = render(manuscript_content)
        lines = texts(document)

        start = lines.index("Jane Q. Doe")
        assert lines[start : start + 3] == ["Jane Q. Doe", "1 Main Street", "jane@example.com"]
        assert "11 words" in lines
        assert paragraph(document, "11 words").alignment == WD_ALIGN_PARAGRAPH.RIGHT

    def test_title_block(self, render, manuscript_content):
        document, _ = render(manuscript_content)
        lines = texts(document)

        title = lines.index("THE LONG NIGHT")
        assert lines[title : title + 5] == ["THE LONG NIGHT", "", "by", "", "Jane Doe"]
        assert paragraph(document, "THE LONG NIGHT").alignment == WD_ALIGN_PARAGRAPH.CENTER

        genre = paragraph(document, "Thriller")
        assert genre.runs[0].italic is True

    def test_title_block_sits_twelve_lines_down(self, render, manuscript_content):
        document, _ = render(manuscript_content)
        lines = texts(document)

        count = lines.index("11 words")
        title = lines.index("THE LONG NIGHT")
        assert lines[count + 1 : title] == [""] * 12

    def test_running_header(self, render, manuscript_content):
        document, _ = render(manuscript_content)
        section = document.sections[0]

        assert section.different_first_page_header_footer is True
        header = section.header.paragraphs[0]
        assert header.text == "Doe / THE LONG NIGHT / 1"
        assert header.alignment == WD_ALIGN_PARAGRAPH.RIGHT
        assert "PAGE" in header._p.xml

    def test_without_title_page(self, render, manuscript_content):
        document, _ = render(manuscript_content, include_title_page=False)

        assert "Jane Q. Doe" not in texts(document)
        assert document.sections[0].different_first_page_header_footer is False

    def test_settings_name_used_without_pen_name(self, render, sample_bundle, content_builder):
        sample_bundle.project.author_pen_name = None
        document, _ = render(content_builder(sample_bundle))

        assert document.sections[0].header.paragraphs[0].text.startswith("Doe / ")
        lines = texts(document)
        by = lines.index("by")
        assert lines[by + 2] == "Jane Q. Doe"

    def test_margins(self, render, manuscript_content):
        document, _ = render(manuscript_content)
        section = document.sections[0]
        assert section.left_margin == Twips(1440)
        assert section.top_margin == Twips(1440)


class TestChaptersAndScenes:
    """Test chapter headings, breaks and prose."""

    def test_chapter_headings(self, render, manuscript_content):
        document, stats = render(manuscript_content)

        assert styled(document, "Heading 1") == ["CHAPTER ONE", "CHAPTER TWO"]
        assert stats.chapters_exported == 2
        assert stats.scenes_exported == 3
        assert stats.files_created == 1

    def test_heading_style_option(self, render, manuscript_content):
        document, _ = render(
            manuscript_content, chapter_heading_style="number_and_title"
        )
        assert styled(document, "Heading 1") == ["CHAPTER ONE: ARRIVAL", "CHAPTER TWO: DEPARTURE"]

    def test_page_breaks(self, render, manuscript_content):
        document, _ = render(manuscript_content)
        breaks = [p for p in document.paragraphs if p.paragraph_format.page_break_before]
        assert len(breaks) == 2

        document, _ = render(
            manuscript_content, include_title_page=False, page_breaks_between_chapters=False
        )
        assert not [p for p in document.paragraphs if p.paragraph_format.page_break_before]

    def test_scene_break_between_scenes_only(self, render, manuscript_content):
        document, stats = render(manuscript_content)

        breaks = [p for p in document.paragraphs if p.text == "#"]
        assert len(breaks) == 1
        assert breaks[0].alignment == WD_ALIGN_PARAGRAPH.CENTER
        assert stats.scene_breaks == 1

    @pytest.mark.parametrize("style, marker", [("asterisks", "* * *"), ("asterism", "⁂")])
    def test_scene_break_markers(self, render, manuscript_content, style, marker):
        document, _ = render(manuscript_content, scene_break_style=style)
        assert marker in texts(document)

    def test_prose_runs_keep_italics(self, render, manuscript_content):
        document, _ = render(manuscript_content)

        prose = paragraph(document, "She knocked twice.")
        italic = [run.text for run in prose.runs if run.italic]
        assert italic == ["twice"]

    def test_smart_typography(self, render, bundle_factory, content_builder):
        bundle = bundle_factory()
        bundle.beats[0].prose = '<p>"Hi," she said -- quietly.</p>'
        document, _ = render(content_builder(bundle))
        assert "“Hi,” she said—quietly." in texts(document)

    def test_first_paragraph_after_heading_or_break_is_flush(self, render, bundle_factory, content_builder):
        bundle = bundle_factory()
        bundle.beats[0].prose = "<p>First.</p><p>Second.</p>"
        bundle.beats[1].prose = "<p>After break.</p><p>Then more.</p>"
        document, _ = render(content_builder(bundle))

        assert (paragraph(document, "First.").paragraph_format.first_line_indent or 0) == 0
        assert paragraph(document, "Second.").paragraph_format.first_line_indent == INDENT
        assert (paragraph(document, "After break.").paragraph_format.first_line_indent or 0) == 0
        assert paragraph(document, "Then more.").paragraph_format.first_line_indent == INDENT

    def test_blockquote_indented_both_sides(self, render, bundle_factory, content_builder):
        bundle = bundle_factory()
        bundle.beats[0].prose = "<p>Intro.</p><blockquote><p>Quoted.</p></blockquote>"
        document, _ = render(content_builder(bundle))

        quoted = paragraph(document, "Quoted.").paragraph_format
        assert quoted.left_indent == INDENT
        assert quoted.right_indent == INDENT

    def test_line_spacing_and_font(self, render, manuscript_content):
        document, _ = render(
            manuscript_content, line_spacing="one_and_half", font_family="times_new_roman"
        )
        assert paragraph(document, "She knocked twice.").paragraph_format.line_spacing == 1.5
        assert document.styles["Normal"].font.name == "Times New Roman"


class TestMarkersAndSynopsis:
    """Test optional beat markers and synopses."""

    def test_beat_markers(self, render, manuscript_content):
        document, _ = render(manuscript_content, include_beat_markers=True)

        assert styled(document, "Heading 2") == ["At the Gate", "The Hall", "The Road"]
        assert styled(document, "Heading 3") == ["Mara knocks", "The hall is empty", "She leaves"]
        assert paragraph(document, "She knocked twice.").paragraph_format.first_line_indent == INDENT

    def test_no_markers_by_default(self, render, manuscript_content):
        document, _ = render(manuscript_content)
        assert styled(document, "Heading 2") == []
        assert styled(document, "Heading 3") == []

    def test_synopsis(self, render, manuscript_content):
        document, _ = render(manuscript_content, include_synopsis=True)
        assert styled(document, "Synopsis") == ["Mara reaches the gate."]

        document, _ = render(manuscript_content)
        assert styled(document, "Synopsis") == []


class TestScopesAndErrors:
    """Test scene scope and write failures."""

    def test_scene_scope_has_no_chapter_heading(self, render, sample_bundle, content_builder):
        content = content_builder(sample_bundle, scope="scene")
        content.chapters = [content.chapters[1]]
        document, stats = render(content, scope=ExportScope.SCENE, scope_id="any")

        assert styled(document, "Heading 1") == []
        assert "Mara walked away." in texts(document)
        assert stats.chapters_exported == 0
        assert stats.scenes_exported == 1

    def test_empty_manuscript(self, render, sample_bundle):
        document, stats = render(
            ManuscriptContent(project=sample_bundle.project), include_title_page=False
        )
        assert styled(document, "Heading 1") == []
        assert stats.scenes_exported == 0

    def test_write_failure_raises_export_error(self, tmp_dir, manuscript_content, app_settings):
        target = tmp_dir / "occupied"
        target.mkdir()
        builder = DocxBuilder(
            manuscript_content, DocxExportOptions(output_path=target), app_settings
        )

        with pytest.raises(ExportError):
            builder.build()
        assert target.is_dir()
