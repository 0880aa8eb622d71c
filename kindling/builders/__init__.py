"""
Builders package for Kindling.

Provides builder classes for exporting manuscripts:
- DocxBuilder: Standard Manuscript Format `.docx`
- MarkdownBuilder: one Markdown file per scene in chapter folders

All builders render a `ManuscriptContent` tree assembled by the export
manager and follow the interface defined by the base classes.
"""

from kindling.builders.base import (
    BaseBuilder,
    BuilderStats,
    ChapterContent,
    ExportStats,
    ManuscriptContent,
    SceneContent,
)
from kindling.builders.docx_builder import DocxBuilder
from kindling.builders.markdown_builder import MarkdownBuilder
from kindling.builders.options import (
    ChapterHeadingStyle,
    DocxExportOptions,
    ExportResult,
    ExportScope,
    FontFamily,
    LineSpacing,
    MarkdownExportOptions,
    SceneBreakStyle,
)

__all__ = [
    # Base classes
    "BaseBuilder",
    "BuilderStats",
    "ExportStats",
    # Content tree
    "ManuscriptContent",
    "ChapterContent",
    "SceneContent",
    # Builders
    "DocxBuilder",
    "MarkdownBuilder",
    # Options
    "ChapterHeadingStyle",
    "DocxExportOptions",
    "ExportResult",
    "ExportScope",
    "FontFamily",
    "LineSpacing",
    "MarkdownExportOptions",
    "SceneBreakStyle",
]
