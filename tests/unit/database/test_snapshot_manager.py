"""Tests for snapshot capture, listing, restore and deletion."""
import gzip
import json
from pathlib import Path

import pytest

from kindling.core.exceptions import (
    CorruptSnapshotError,
    NotFoundError,
    SnapshotError,
    ValidationError,
)
from kindling.dataclasses import SceneReferenceStateData, SnapshotData
from kindling.database.models import RestoreMode
from kindling.database.snapshot_manager import (
    decode_snapshot,
    encode_snapshot,
    remap_identifiers,
)

SNAPSHOT_KEYS = {
    "version",
    "created_at",
    "project",
    "chapters",
    "scenes",
    "beats",
    "characters",
    "locations",
    "reference_items",
    "scene_character_refs",
    "scene_location_refs",
    "scene_reference_item_refs",
    "scene_reference_states",
}


@pytest.fixture
def project_id(inserted_bundle):
    return inserted_bundle.project.id


class TestArchiveCodec:
    """Tests for the gzip JSON archive format."""

    def test_document_has_exact_top_level_keys(self, sample_bundle):
        data = SnapshotData(project=sample_bundle.project, chapters=sample_bundle.chapters)
        payload, size = encode_snapshot(data)

        document = json.loads(gzip.decompress(payload))
        assert set(document) == SNAPSHOT_KEYS
        assert document["version"] == 1
        assert size == len(gzip.decompress(payload))

    def test_decode_round_trip(self, sample_bundle):
        data = SnapshotData(
            project=sample_bundle.project,
            chapters=sample_bundle.chapters,
            scenes=sample_bundle.scenes,
            characters=sample_bundle.characters,
        )
        decoded = decode_snapshot(encode_snapshot(data)[0])

        assert decoded.project == data.project
        assert decoded.scenes == data.scenes
        assert decoded.characters[0].attributes == {"role": "Protagonist", "age": "32"}

    def test_decode_tolerates_missing_lists_and_unknown_keys(self, sample_bundle):
        document = {"project": sample_bundle.project.to_dict(), "extra": 1}
        decoded = decode_snapshot(gzip.compress(json.dumps(document).encode()))

        assert decoded.chapters == []
        assert decoded.scene_reference_states == []

    def test_not_gzip_is_corrupt(self):
        with pytest.raises(CorruptSnapshotError):
            decode_snapshot(b"plain bytes")

    def test_missing_project_is_corrupt(self):
        with pytest.raises(CorruptSnapshotError):
            decode_snapshot(gzip.compress(b'{"chapters": []}'))

    def test_non_object_is_corrupt(self):
        with pytest.raises(CorruptSnapshotError):
            decode_snapshot(gzip.compress(b"[1, 2, 3]"))


class TestRemapIdentifiers:
    """Tests for create-new identity remapping."""

    def test_every_identifier_changes(self, sample_bundle):
        data = SnapshotData(
            project=sample_bundle.project,
            chapters=sample_bundle.chapters,
            scenes=sample_bundle.scenes,
            beats=sample_bundle.beats,
            characters=sample_bundle.characters,
            scene_character_refs=sample_bundle.scene_character_refs,
        )
        clone = remap_identifiers(data)

        old_ids = {data.project.id} | {r.id for r in data.chapters + data.scenes + data.beats}
        new_ids = {clone.project.id} | {r.id for r in clone.chapters + clone.scenes + clone.beats}
        assert not old_ids & new_ids
        assert clone.project.name == "The Long Night (Copy)"

        chapter_ids = {c.id for c in clone.chapters}
        assert all(s.chapter_id in chapter_ids for s in clone.scenes)
        ref = clone.scene_character_refs[0]
        assert ref.character_id == clone.characters[0].id
        assert ref.scene_id == clone.scenes[0].id

    def test_reference_states_follow_map(self, sample_bundle):
        scene = sample_bundle.scenes[0]
        character = sample_bundle.characters[0]
        data = SnapshotData(
            project=sample_bundle.project,
            chapters=sample_bundle.chapters,
            scenes=sample_bundle.scenes,
            characters=sample_bundle.characters,
            scene_reference_states=[
                SceneReferenceStateData(scene.id, "characters", character.id, 0, True),
                SceneReferenceStateData(scene.id, "characters", "not-in-archive", 1, False),
            ],
        )
        clone = remap_identifiers(data, name="Draft Two")

        assert clone.project.name == "Draft Two"
        assert len(clone.scene_reference_states) == 1
        state = clone.scene_reference_states[0]
        assert state.reference_id == clone.characters[0].id
        assert state.scene_id == clone.scenes[0].id
        assert state.expanded is True

    def test_dangling_foreign_key_raises(self, sample_bundle):
        data = SnapshotData(project=sample_bundle.project, scenes=sample_bundle.scenes)
        with pytest.raises(KeyError):
            remap_identifiers(data)


class TestCreateSnapshot:
    """Tests for SnapshotManager.create_snapshot."""

    def test_writes_archive_and_metadata(self, snapshot_manager, snapshot_dir, project_id):
        metadata = snapshot_manager.create_snapshot(project_id, "First draft", "before edits")

        path = Path(metadata["file_path"])
        assert path.exists()
        assert path.parent == snapshot_dir / project_id
        assert path.name.endswith("_manual.json.gz")
        assert metadata["name"] == "First draft"
        assert metadata["description"] == "before edits"
        assert metadata["chapter_count"] == 2
        assert metadata["scene_count"] == 3
        assert metadata["beat_count"] == 3
        assert metadata["file_size"] == path.stat().st_size
        assert metadata["uncompressed_size"] > 0
        assert metadata["schema_version"] == 1

    def test_word_count_uses_raw_prose(self, snapshot_manager, project_id):
        """Whitespace tokens of the stored prose, markup included."""
        metadata = snapshot_manager.create_snapshot(project_id, "Count")
        assert metadata["word_count"] == 11

    def test_trigger_in_file_name(self, snapshot_manager, project_id):
        metadata = snapshot_manager.create_snapshot(project_id, "Export", trigger="export")
        assert metadata["trigger_type"] == "export"
        assert metadata["file_path"].endswith("_export.json.gz")

    def test_invalid_trigger(self, snapshot_manager, project_id):
        with pytest.raises(ValidationError, match="Unknown snapshot trigger"):
            snapshot_manager.create_snapshot(project_id, "Bad", trigger="nightly")

    def test_missing_project_leaves_no_file(self, snapshot_manager, snapshot_dir, test_db):
        with pytest.raises(NotFoundError):
            snapshot_manager.create_snapshot("missing", "Nothing")
        assert not list(snapshot_dir.rglob("*.json.gz"))

    def test_same_second_snapshots_get_distinct_files(self, snapshot_manager, project_id):
        first = snapshot_manager.create_snapshot(project_id, "A")
        second = snapshot_manager.create_snapshot(project_id, "B")
        assert first["file_path"] != second["file_path"]
        assert Path(first["file_path"]).exists()
        assert Path(second["file_path"]).exists()


class TestListAndPreview:
    """Tests for listing, lookup and preview."""

    def test_list_newest_first(self, snapshot_manager, project_id):
        snapshot_manager.create_snapshot(project_id, "Older")
        snapshot_manager.create_snapshot(project_id, "Newer")

        names = [row["name"] for row in snapshot_manager.list_snapshots(project_id)]
        assert names == ["Newer", "Older"]

    def test_list_empty(self, snapshot_manager, project_id):
        assert snapshot_manager.list_snapshots(project_id) == []

    def test_get_missing(self, snapshot_manager):
        with pytest.raises(NotFoundError):
            snapshot_manager.get_snapshot("missing")

    def test_preview_includes_project_name(self, snapshot_manager, project_id):
        created = snapshot_manager.create_snapshot(project_id, "Look")
        preview = snapshot_manager.preview_snapshot(created["id"])

        assert preview["project_name"] == "The Long Night"
        assert preview["scene_count"] == 3

    def test_preview_missing_file(self, snapshot_manager, project_id):
        created = snapshot_manager.create_snapshot(project_id, "Gone")
        Path(created["file_path"]).unlink()

        with pytest.raises(SnapshotError):
            snapshot_manager.preview_snapshot(created["id"])


class TestRestoreReplaceCurrent:
    """Tests for replace-in-place restore."""

    def test_restores_structure_and_ids(self, test_db, snapshot_manager, inserted_bundle, project_id):
        snapshot = snapshot_manager.create_snapshot(project_id, "Clean")

        with test_db.session_scope():
            test_db.projects.update_scene(inserted_bundle.scenes[0].id, title="Changed")
            test_db.projects.set_chapter_archived(inserted_bundle.chapters[1].id)
            test_db.projects.rename_project(project_id, "Renamed")
            test_db.projects.update_beat(inserted_bundle.beats[0].id, prose=None)

        restored = snapshot_manager.restore_snapshot(snapshot["id"])

        assert restored.id == project_id
        assert restored.name == "The Long Night"
        with test_db.session_scope():
            data = test_db.bundles.load_snapshot_data(project_id)
        assert [s.id for s in data.scenes] == [s.id for s in inserted_bundle.scenes]
        assert data.scenes[0].title == "At the Gate"
        assert not any(c.archived for c in data.chapters)
        assert data.beats[0].prose == "<p>She knocked <em>twice</em>.</p>"
        assert len(data.scene_character_refs) == 1

    def test_bumps_modified_at(self, test_db, snapshot_manager, project_id):
        snapshot = snapshot_manager.create_snapshot(project_id, "Clean")
        with test_db.session_scope():
            before = test_db.projects.get_project(project_id).modified_at

        restored = snapshot_manager.restore_snapshot(snapshot["id"], mode="replace_current")
        assert restored.modified_at != before

    def test_corrupt_archive_changes_nothing(self, test_db, snapshot_manager, inserted_bundle, project_id):
        snapshot = snapshot_manager.create_snapshot(project_id, "Broken")
        Path(snapshot["file_path"]).write_bytes(b"\x1f\x8b not really gzip")

        with test_db.session_scope():
            test_db.projects.update_scene(inserted_bundle.scenes[0].id, title="Edited")

        with pytest.raises(CorruptSnapshotError):
            snapshot_manager.restore_snapshot(snapshot["id"])

        with test_db.session_scope():
            assert test_db.projects.get_scene(inserted_bundle.scenes[0].id).title == "Edited"
            assert test_db.projects.structure_counts(project_id)["scenes"] == 3

    def test_unknown_mode(self, snapshot_manager, project_id):
        snapshot = snapshot_manager.create_snapshot(project_id, "Clean")
        with pytest.raises(ValidationError, match="Unknown restore mode"):
            snapshot_manager.restore_snapshot(snapshot["id"], mode="merge")


class TestRestoreCreateNew:
    """Tests for clone-with-new-identities restore."""

    def test_creates_independent_copy(self, test_db, snapshot_manager, inserted_bundle, project_id):
        snapshot = snapshot_manager.create_snapshot(project_id, "Clone me")

        clone = snapshot_manager.restore_snapshot(snapshot["id"], mode=RestoreMode.CREATE_NEW)

        assert clone.id != project_id
        assert clone.name == "The Long Night (Copy)"
        with test_db.session_scope():
            assert test_db.projects.count_projects() == 2
            original = test_db.bundles.load_snapshot_data(project_id)
            copy = test_db.bundles.load_snapshot_data(clone.id)

        assert [s.title for s in copy.scenes] == [s.title for s in original.scenes]
        assert not {s.id for s in copy.scenes} & {s.id for s in original.scenes}
        assert copy.scene_character_refs[0].character_id == copy.characters[0].id
        assert copy.characters[0].attributes == original.characters[0].attributes

    def test_custom_name(self, snapshot_manager, project_id):
        snapshot = snapshot_manager.create_snapshot(project_id, "Clone me")
        clone = snapshot_manager.restore_snapshot(
            snapshot["id"], mode="create_new", new_project_name="Second Draft"
        )
        assert clone.name == "Second Draft"


class TestDeleteSnapshot:
    """Tests for snapshot deletion."""

    def test_removes_file_and_row(self, snapshot_manager, project_id):
        snapshot = snapshot_manager.create_snapshot(project_id, "Temp")
        snapshot_manager.delete_snapshot(snapshot["id"])

        assert not Path(snapshot["file_path"]).exists()
        with pytest.raises(NotFoundError):
            snapshot_manager.get_snapshot(snapshot["id"])

    def test_missing_file_still_deletes_row(self, snapshot_manager, project_id):
        snapshot = snapshot_manager.create_snapshot(project_id, "Temp")
        Path(snapshot["file_path"]).unlink()

        snapshot_manager.delete_snapshot(snapshot["id"])
        assert snapshot_manager.list_snapshots(project_id) == []

    def test_unknown_id(self, snapshot_manager):
        with pytest.raises(NotFoundError):
            snapshot_manager.delete_snapshot("missing")
