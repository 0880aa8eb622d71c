#!/usr/bin/env python3
"""
options.py
-------------------
Export option sets and the result record shared by both exporters.

Enums are string-valued so they round-trip through CLI choices and JSON.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

# --- Local imports ---
from kindling.core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


class _ChoiceEnum(str, Enum):
    @classmethod
    def choices(cls) -> List[str]:
        return [member.value for member in cls]


class ExportScope(_ChoiceEnum):
    """What part of a project an export covers."""

    PROJECT = "project"
    CHAPTER = "chapter"
    SCENE = "scene"


class ChapterHeadingStyle(_ChoiceEnum):
    """
    Chapter heading text.
    - NUMBER_ONLY: CHAPTER ONE
    - NUMBER_AND_TITLE: CHAPTER ONE: THE BEGINNING
    - TITLE_ONLY: THE BEGINNING
    - NUMBER_ARABIC: CHAPTER 1
    - NUMBER_ARABIC_AND_TITLE: CHAPTER 1: THE BEGINNING
    """

    NUMBER_ONLY = "number_only"
    NUMBER_AND_TITLE = "number_and_title"
    TITLE_ONLY = "title_only"
    NUMBER_ARABIC = "number_arabic"
    NUMBER_ARABIC_AND_TITLE = "number_arabic_and_title"


class SceneBreakStyle(_ChoiceEnum):
    """Separator between scenes of one chapter."""

    HASH = "hash"
    ASTERISKS = "asterisks"
    ASTERISM = "asterism"
    BLANK_LINE = "blank_line"

    @property
    def marker(self) -> str:
        return {
            SceneBreakStyle.HASH: "#",
            SceneBreakStyle.ASTERISKS: "* * *",
            SceneBreakStyle.ASTERISM: "⁂",
            SceneBreakStyle.BLANK_LINE: "",
        }[self]


class FontFamily(_ChoiceEnum):
    COURIER_NEW = "courier_new"
    TIMES_NEW_ROMAN = "times_new_roman"

    @property
    def font_name(self) -> str:
        return "Courier New" if self is FontFamily.COURIER_NEW else "Times New Roman"


class LineSpacing(_ChoiceEnum):
    """Body line spacing; `twips` is the OOXML line value at 12pt."""

    SINGLE = "single"
    ONE_AND_HALF = "one_and_half"
    DOUBLE = "double"

    @property
    def twips(self) -> int:
        return {
            LineSpacing.SINGLE: 240,
            LineSpacing.ONE_AND_HALF: 360,
            LineSpacing.DOUBLE: 480,
        }[self]

    @property
    def multiple(self) -> float:
        return self.twips / 240


def coerce_enum(enum_cls: Type[E], value: Union[str, E], option: str) -> E:
    """
    Convert a string to an enum member.

    Raises:
        ValidationError: If the value is not one of the enum's values
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {option} '{value}'. Use one of: {choices}") from None


def _check_scope(scope: ExportScope, scope_id: Optional[str]) -> None:
    if scope is not ExportScope.PROJECT and not scope_id:
        raise ValidationError(f"Export scope '{scope.value}' needs a {scope.value} id")


@dataclass
class DocxExportOptions:
    """
    Options for a Standard Manuscript Format DOCX export.

    Attributes:
        output_path: Target `.docx` file (parent created on demand)
        scope: project, chapter or scene
        scope_id: Chapter or scene id for the narrower scopes
        include_beat_markers: Beat content as Heading 3, scene titles as Heading 2
        include_synopsis: Scene synopsis as an indented italic paragraph
        create_snapshot: Take an export snapshot first
        page_breaks_between_chapters: Page break before every chapter but the first
        include_title_page: SMF title page with contact block
        chapter_heading_style: Heading text style
        scene_break_style: Separator between scenes
        font_family: Courier New or Times New Roman
        line_spacing: Body line spacing
    """

    output_path: Path
    scope: ExportScope = ExportScope.PROJECT
    scope_id: Optional[str] = None
    include_beat_markers: bool = False
    include_synopsis: bool = False
    create_snapshot: bool = False
    page_breaks_between_chapters: bool = True
    include_title_page: bool = True
    chapter_heading_style: ChapterHeadingStyle = ChapterHeadingStyle.NUMBER_ONLY
    scene_break_style: SceneBreakStyle = SceneBreakStyle.HASH
    font_family: FontFamily = FontFamily.COURIER_NEW
    line_spacing: LineSpacing = LineSpacing.DOUBLE

    def __post_init__(self) -> None:
        self.output_path = Path(self.output_path).expanduser()
        self.scope = coerce_enum(ExportScope, self.scope, "scope")
        self.chapter_heading_style = coerce_enum(
            ChapterHeadingStyle, self.chapter_heading_style, "chapter heading style"
        )
        self.scene_break_style = coerce_enum(
            SceneBreakStyle, self.scene_break_style, "scene break style"
        )
        self.font_family = coerce_enum(FontFamily, self.font_family, "font family")
        self.line_spacing = coerce_enum(LineSpacing, self.line_spacing, "line spacing")
        _check_scope(self.scope, self.scope_id)


@dataclass
class MarkdownExportOptions:
    """
    Options for a Markdown folder export.

    Attributes:
        output_path: Folder that receives the project folder
        scope: project, chapter or scene
        scope_id: Chapter or scene id for the narrower scopes
        include_beat_markers: Write each beat's content as a `##` heading
        delete_existing: Remove the targeted folder or file before writing
        export_name: Project folder name (defaults to the project name)
        create_snapshot: Take an export snapshot first
    """

    output_path: Path
    scope: ExportScope = ExportScope.PROJECT
    scope_id: Optional[str] = None
    include_beat_markers: bool = True
    delete_existing: bool = False
    export_name: Optional[str] = None
    create_snapshot: bool = False

    def __post_init__(self) -> None:
        self.output_path = Path(self.output_path).expanduser()
        self.scope = coerce_enum(ExportScope, self.scope, "scope")
        _check_scope(self.scope, self.scope_id)


@dataclass
class ExportResult:
    output_path: str
    files_created: int = 0
    chapters_exported: int = 0
    scenes_exported: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
