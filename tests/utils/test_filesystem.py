# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the path and filesystem helpers.
"""

from pathlib import Path

import pytest

from terust.utils.filesystem import remove_tree, safe_delete
from terust.utils.paths import ensure_directory, validate_path_within


class TestSafeDelete:
    def test_deletes_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "item_1.rs"
        target.write_text("fn main() {}", encoding="utf-8")

        assert safe_delete(target) is True
        assert not target.exists()

    def test_missing_file_is_fine(self, tmp_path: Path) -> None:
        assert safe_delete(tmp_path / "never.rs") is False


class TestRemoveTree:
    def test_removes_nested(self, tmp_path: Path) -> None:
        root = tmp_path / "scratch"
        (root / "deep").mkdir(parents=True)
        (root / "deep" / "file.rlib").write_bytes(b"\0")

        assert remove_tree(root) is True
        assert not root.exists()

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert remove_tree(tmp_path / "gone") is False


class TestPaths:
    def test_ensure_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b"
        assert ensure_directory(target) == target
        assert target.is_dir()
        ensure_directory(target)

    def test_path_inside_root(self, tmp_path: Path) -> None:
        inside = tmp_path / "item_5.rs"
        assert validate_path_within(inside, tmp_path) == inside.resolve()

    def test_root_itself_allowed(self, tmp_path: Path) -> None:
        assert validate_path_within(tmp_path, tmp_path) == tmp_path.resolve()

    def test_escape_rejected(self, tmp_path: Path) -> None:
        root = tmp_path / "scratch"
        root.mkdir()
        with pytest.raises(ValueError, match="outside"):
            validate_path_within(root / ".." / "elsewhere.rs", root)
