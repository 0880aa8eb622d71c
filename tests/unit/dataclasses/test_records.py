"""
test_records.py
---------------
Unit tests for the canonical records and whole-project containers.
"""
import uuid

from kindling.dataclasses import (
    BeatData,
    ProjectData,
    ReimportSummary,
    SceneData,
    SnapshotData,
)
from kindling.dataclasses.bundle import LIST_FIELDS


class TestRecords:
    """Test record defaults and dict conversion."""

    def test_new_records_get_distinct_uuids(self):
        first = ProjectData(name="A", source_type="markdown")
        second = ProjectData(name="A", source_type="markdown")
        assert first.id != second.id
        assert str(uuid.UUID(first.id)) == first.id

    def test_reference_types_default_not_shared(self):
        first = ProjectData(name="A", source_type="markdown")
        second = ProjectData(name="B", source_type="markdown")
        first.reference_types.append("item")
        assert second.reference_types == ["characters", "locations"]

    def test_from_dict_ignores_unknown_keys(self):
        project = ProjectData(name="A", source_type="plottr", word_target=500)
        data = project.to_dict()
        data["legacy_field"] = "ignored"

        assert ProjectData.from_dict(data) == project

    def test_from_dict_uses_defaults_for_missing_optional_keys(self):
        scene = SceneData.from_dict({"chapter_id": "c", "title": "T", "position": 2})
        assert scene.position == 2
        assert scene.archived is False
        assert scene.synopsis is None


class TestParsedBundle:
    """Test ParsedBundle helpers."""

    def test_summary(self, sample_bundle):
        assert sample_bundle.summary() == {
            "chapters": 2,
            "scenes": 3,
            "beats": 3,
            "characters": 1,
            "locations": 1,
            "reference_items": 1,
        }


class TestSnapshotData:
    """Test snapshot document conversion."""

    def test_list_keys_follow_insertion_order(self):
        assert list(LIST_FIELDS)[:3] == ["chapters", "scenes", "beats"]

    def test_round_trip(self, sample_bundle):
        data = SnapshotData(
            project=sample_bundle.project,
            chapters=sample_bundle.chapters,
            scenes=sample_bundle.scenes,
            beats=sample_bundle.beats,
            characters=sample_bundle.characters,
        )
        assert SnapshotData.from_dict(data.to_dict()) == data

    def test_word_count_counts_raw_tokens(self, sample_bundle):
        beat = BeatData(scene_id="s", content="x", position=0, prose="<p>one two</p> three")
        data = SnapshotData(project=sample_bundle.project, beats=[beat])
        assert data.word_count() == 3

    def test_word_count_includes_scene_prose(self, sample_bundle):
        scene = SceneData(chapter_id="c", title="T", position=0, prose="a b c d")
        data = SnapshotData(project=sample_bundle.project, scenes=[scene])
        assert data.word_count() == 4


class TestReimportSummary:
    """Test the reimport counters."""

    def test_preserved_prose_alone_is_not_a_change(self):
        assert not ReimportSummary(prose_preserved=3, locked_skipped=1).changed

    def test_any_added_or_updated_row_is_a_change(self):
        assert ReimportSummary(beats_added=1).changed
        assert ReimportSummary(chapters_updated=1).changed
