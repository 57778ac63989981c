"""
Fragment Locator Tests

Run with:
    pytest tests/test_file_loader.py -v
"""

import os

import pytest

from modeler.errors import NotFound
from modeler.model_manager.utils.file_loader import locate_fragments, sorted_paths


# ============================================================================
# DISCOVERY
# ============================================================================

class TestLocateFragments:

    def test_missing_root_raises_not_found(self, tmp_path):
        with pytest.raises(NotFound) as exc:
            locate_fragments(str(tmp_path / "nope"))
        assert "nope" in str(exc.value)

    def test_single_file_root_returns_that_file(self, write_file):
        path = write_file("only.dmd", "<design/>")
        assert locate_fragments(path) == [os.path.realpath(path)]

    def test_recursive_and_filtered_by_extension(self, write_file, tmp_path):
        write_file("m/z.xml", "<design/>")
        write_file("m/sub/a.xml", "<design/>")
        write_file("m/sub/readme.txt", "ignored")
        write_file("m/UPPER.XML", "<design/>")

        found = locate_fragments(str(tmp_path / "m"))

        names = [os.path.relpath(p, os.path.realpath(tmp_path / "m")) for p in found]
        assert names == ["UPPER.XML", os.path.join("sub", "a.xml"), "z.xml"]
        assert all(os.path.isabs(p) for p in found)

    def test_custom_extensions_without_dot(self, write_file, tmp_path):
        write_file("m/a.xml", "<design/>")
        write_file("m/b.frag", "<design/>")

        found = locate_fragments(str(tmp_path / "m"), extensions=["frag"])

        assert [os.path.basename(p) for p in found] == ["b.frag"]

    def test_hidden_directories_skipped(self, write_file, tmp_path):
        write_file("m/.backup/a.xml", "<design/>")
        write_file("m/b.xml", "<design/>")

        found = locate_fragments(str(tmp_path / "m"))

        assert [os.path.basename(p) for p in found] == ["b.xml"]

    def test_empty_directory(self, tmp_path):
        (tmp_path / "empty").mkdir()
        assert locate_fragments(str(tmp_path / "empty")) == []


class TestSortedPaths:

    def test_same_order_as_locator(self, scenario_dir):
        located = locate_fragments(str(scenario_dir))
        assert sorted_paths(list(reversed(located))) == located
