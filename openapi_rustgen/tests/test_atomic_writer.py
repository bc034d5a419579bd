"""
Tests for writing rendered files.
"""

import pytest

from openapi_rustgen.errors import OutputError
from openapi_rustgen.pipeline import AtomicWriter, OutputConfig, OutputMode


class TestAtomicWriter:
    def test_write_creates_parents(self, tmp_path):
        target = tmp_path / "src" / "endpoints" / "mod.rs"
        AtomicWriter().write(target, "pub mod widgets;\n")
        assert target.read_text() == "pub mod widgets;\n"

    def test_invalid_rust_leaves_nothing_behind(self, tmp_path):
        target = tmp_path / "models.rs"
        with pytest.raises(OutputError):
            AtomicWriter().write(target, "pub struct Widget {\n")
        assert not target.exists()
        assert list(tmp_path.iterdir()) == []

    def test_other_files_are_not_validated(self, tmp_path):
        target = tmp_path / "notes.md"
        AtomicWriter().write(target, "{ unbalanced")
        assert target.read_text() == "{ unbalanced"

    def test_custom_validator(self, tmp_path):
        def reject(content):
            raise OutputError("rejected")

        with pytest.raises(OutputError, match="rejected"):
            AtomicWriter(validate_rust=reject).write(tmp_path / "lib.rs", "")

    def test_write_if_not_exists(self, tmp_path):
        target = tmp_path / "lib.rs"
        writer = AtomicWriter()
        writer.write_if_not_exists(target, "mod a;\n")
        with pytest.raises(FileExistsError):
            writer.write_if_not_exists(target, "mod b;\n")
        assert target.read_text() == "mod a;\n"


class TestWriteFiles:
    FILES = {"src/models.rs": "pub struct A {}\n", "src/endpoints/mod.rs": "pub mod a;\n"}

    def test_conflict_writes_nothing(self, tmp_path):
        existing = tmp_path / "src" / "endpoints" / "mod.rs"
        existing.parent.mkdir(parents=True)
        existing.write_text("old\n")

        with pytest.raises(FileExistsError):
            AtomicWriter().write_files(tmp_path, self.FILES, OutputConfig())

        assert not (tmp_path / "src" / "models.rs").exists()
        assert existing.read_text() == "old\n"

    def test_force_overwrites(self, tmp_path):
        existing = tmp_path / "src" / "endpoints" / "mod.rs"
        existing.parent.mkdir(parents=True)
        existing.write_text("old\n")

        written = AtomicWriter().write_files(tmp_path, self.FILES, OutputConfig(mode=OutputMode.FORCE))

        assert sorted(p.name for p in written) == ["mod.rs", "models.rs"]
        assert existing.read_text() == "pub mod a;\n"

    def test_plain_write(self, tmp_path):
        AtomicWriter().write_files(tmp_path, self.FILES, OutputConfig(atomic_write=False))
        assert (tmp_path / "src" / "models.rs").read_text() == "pub struct A {}\n"
