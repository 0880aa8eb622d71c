"""
test_fs.py
----------
Unit tests for kindling.utils.fs module.
"""
from kindling.utils.fs import atomic_write_bytes, sanitize_filename, unique_path


class TestSanitizeFilename:
    """Test sanitize_filename function."""

    def test_invalid_characters(self):
        assert sanitize_filename('a/b\\c:d*e?f"g<h>i|j') == "a_b_c_d_e_f_g_h_i_j"

    def test_trims_whitespace(self):
        assert sanitize_filename("  What? ") == "What_"

    def test_keeps_inner_spaces_and_unicode(self):
        assert sanitize_filename("Café de Flore") == "Café de Flore"


class TestAtomicWriteBytes:
    """Test atomic_write_bytes function."""

    def test_creates_parent_and_writes(self, tmp_dir):
        target = tmp_dir / "nested" / "deeper" / "out.bin"
        atomic_write_bytes(target, b"payload")
        assert target.read_bytes() == b"payload"

    def test_overwrites_and_leaves_no_temp_files(self, tmp_dir):
        target = tmp_dir / "out.bin"
        atomic_write_bytes(target, b"first")
        atomic_write_bytes(target, b"second")

        assert target.read_bytes() == b"second"
        assert [p.name for p in tmp_dir.iterdir()] == ["out.bin"]


class TestUniquePath:
    """Test unique_path function."""

    def test_free_path_returned(self, tmp_dir):
        assert unique_path(tmp_dir / "a.json.gz") == tmp_dir / "a.json.gz"

    def test_suffixes_kept_whole(self, tmp_dir):
        (tmp_dir / "a.json.gz").write_bytes(b"")
        assert unique_path(tmp_dir / "a.json.gz") == tmp_dir / "a_1.json.gz"

    def test_counts_up(self, tmp_dir):
        (tmp_dir / "a.txt").write_text("")
        (tmp_dir / "a_1.txt").write_text("")
        assert unique_path(tmp_dir / "a.txt") == tmp_dir / "a_2.txt"

    def test_no_suffix(self, tmp_dir):
        (tmp_dir / "folder").mkdir()
        assert unique_path(tmp_dir / "folder") == tmp_dir / "folder_1"
