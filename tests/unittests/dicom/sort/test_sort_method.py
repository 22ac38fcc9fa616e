import errno
import os
import sys
from pathlib import Path

import pytest

from dcmsort.exceptions import FileOperationError
from dcmsort.sort import FileAction, PlanEntry, execute, handle_file, unique_path


@pytest.fixture
def source(tmp_path: Path) -> Path:
    path = tmp_path / "source.dcm"
    path.write_text("Test content")
    return path


def entry(source: Path, destination: Path, make_meta) -> PlanEntry:
    return PlanEntry(source, destination, make_meta(source.name))


class TestUniquePath:
    def test_free_destination_is_kept(self, tmp_path: Path) -> None:
        assert unique_path(tmp_path / "a.dcm") == tmp_path / "a.dcm"

    def test_probes_numbered_names(self, tmp_path: Path) -> None:
        (tmp_path / "a.dcm").write_text("x")
        (tmp_path / "a_1.dcm").write_text("x")
        assert unique_path(tmp_path / "a.dcm") == tmp_path / "a_2.dcm"

    def test_taken_paths_count_as_used(self, tmp_path: Path) -> None:
        taken = {tmp_path / "a.dcm", tmp_path / "a_1.dcm"}
        assert unique_path(tmp_path / "a.dcm", taken=taken) == tmp_path / "a_2.dcm"

    def test_no_extension(self, tmp_path: Path) -> None:
        (tmp_path / "IM0001").write_text("x")
        assert unique_path(tmp_path / "IM0001") == tmp_path / "IM0001_1"

    def test_exhaustion_returns_original(self, tmp_path: Path) -> None:
        (tmp_path / "a.dcm").write_text("x")
        (tmp_path / "a_1.dcm").write_text("x")
        (tmp_path / "a_2.dcm").write_text("x")
        assert unique_path(tmp_path / "a.dcm", max_attempts=3) == tmp_path / "a.dcm"


class TestHandleFile:
    def test_copy_file(self, tmp_path: Path, source: Path) -> None:
        destination = tmp_path / "out" / "nested" / "destination.dcm"

        assert handle_file(source, destination, FileAction.COPY) is False

        assert source.exists()
        assert destination.read_text() == "Test content"

    def test_move_file(self, tmp_path: Path, source: Path) -> None:
        destination = tmp_path / "out" / "destination.dcm"

        assert handle_file(source, destination, "move") is False

        assert not source.exists()
        assert destination.read_text() == "Test content"

    def test_create_hardlink(self, tmp_path: Path, source: Path) -> None:
        destination = tmp_path / "out" / "hardlink.dcm"

        handle_file(source, destination, FileAction.HARDLINK)

        assert destination.stat().st_ino == source.stat().st_ino

    def test_move_falls_back_to_copy_and_delete(
        self, tmp_path: Path, source: Path, monkeypatch
    ) -> None:
        def cross_device(self, target):
            raise OSError(errno.EXDEV, "Invalid cross-device link")

        monkeypatch.setattr(Path, "rename", cross_device)
        destination = tmp_path / "out" / "destination.dcm"

        assert handle_file(source, destination, FileAction.MOVE) is True

        assert not source.exists()
        assert destination.read_text() == "Test content"

    def test_hardlink_falls_back_to_copy(
        self, tmp_path: Path, source: Path, monkeypatch
    ) -> None:
        def unsupported(self, target):
            raise OSError(errno.EXDEV, "Invalid cross-device link")

        monkeypatch.setattr(Path, "hardlink_to", unsupported)
        destination = tmp_path / "out" / "destination.dcm"

        assert handle_file(source, destination, FileAction.HARDLINK) is True

        assert source.exists()
        assert destination.read_text() == "Test content"
        assert destination.stat().st_ino != source.stat().st_ino

    def test_failed_fallback_is_fatal(
        self, tmp_path: Path, source: Path, monkeypatch
    ) -> None:
        def fail(*args, **kwargs):
            raise OSError(errno.ENOSPC, "No space left on device")

        monkeypatch.setattr(Path, "hardlink_to", fail)
        monkeypatch.setattr("shutil.copy2", fail)
        destination = tmp_path / "out" / "destination.dcm"

        with pytest.raises(FileOperationError, match="hardlink fallback failed") as excinfo:
            handle_file(source, destination, FileAction.HARDLINK)

        assert excinfo.value.source == source
        assert excinfo.value.destination == destination

    def test_source_does_not_exist(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError, match="source does not exist"):
            handle_file(tmp_path / "missing.dcm", tmp_path / "d.dcm", FileAction.COPY)

    def test_invalid_action(self, tmp_path: Path, source: Path) -> None:
        with pytest.raises(ValueError, match="Must be one of"):
            handle_file(source, tmp_path / "d.dcm", "symlink")

    @pytest.mark.skipif(
        sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="Skipping test: chmod is not enforced on Windows or for root.",
    )
    def test_parent_directory_creation_error(self, tmp_path: Path, source: Path) -> None:
        locked = tmp_path / "locked"
        locked.mkdir()
        os.chmod(locked, 0o500)
        try:
            with pytest.raises(FileOperationError, match="failed to create parent directory"):
                handle_file(source, locked / "sub" / "d.dcm", FileAction.COPY)
        finally:
            os.chmod(locked, 0o700)


def test_choices() -> None:
    assert FileAction.choices() == ["copy", "move", "hardlink"]


class TestExecute:
    def test_copies_in_plan_order(self, tmp_path: Path, make_meta) -> None:
        sources = []
        for name in ["a.dcm", "b.dcm"]:
            path = tmp_path / name
            path.write_text(name)
            sources.append(path)
        out = tmp_path / "out"
        plan = [
            entry(sources[0], out / "s" / "00001_x.dcm", make_meta),
            entry(sources[1], out / "s" / "00002_y.dcm", make_meta),
        ]

        result = execute(plan, FileAction.COPY)

        assert result.placed == [(p.source, p.destination) for p in plan]
        assert (out / "s" / "00001_x.dcm").read_text() == "a.dcm"
        assert (out / "s" / "00002_y.dcm").read_text() == "b.dcm"
        assert result.fallbacks == 0
        assert not result.dry_run

    def test_identical_destinations_do_not_overwrite(self, tmp_path: Path, make_meta) -> None:
        first, second = tmp_path / "first.dcm", tmp_path / "second.dcm"
        first.write_text("first")
        second.write_text("second")
        destination = tmp_path / "out" / "name.dcm"

        result = execute(
            [entry(first, destination, make_meta), entry(second, destination, make_meta)],
            FileAction.COPY,
        )

        assert [dst for _, dst in result.placed] == [
            destination,
            destination.with_name("name_1.dcm"),
        ]
        assert destination.read_text() == "first"
        assert destination.with_name("name_1.dcm").read_text() == "second"

    def test_existing_file_is_never_overwritten(self, tmp_path: Path, source: Path, make_meta) -> None:
        destination = tmp_path / "out" / "name.dcm"
        destination.parent.mkdir()
        destination.write_text("already here")

        result = execute([entry(source, destination, make_meta)], FileAction.MOVE)

        assert result.placed[0][1] == destination.with_name("name_1.dcm")
        assert destination.read_text() == "already here"

    def test_dry_run_touches_nothing(self, tmp_path: Path, source: Path, make_meta) -> None:
        destination = tmp_path / "out" / "name.dcm"
        plan = [entry(source, destination, make_meta), entry(source, destination, make_meta)]

        calls = []
        result = execute(plan, FileAction.MOVE, dry_run=True, on_placed=lambda s, d: calls.append(d))

        assert result.dry_run
        assert calls == [destination, destination.with_name("name_1.dcm")]
        assert source.exists()
        assert not (tmp_path / "out").exists()

    def test_failure_aborts_without_rollback(self, tmp_path: Path, source: Path, make_meta) -> None:
        out = tmp_path / "out"
        plan = [
            entry(source, out / "1.dcm", make_meta),
            entry(tmp_path / "missing.dcm", out / "2.dcm", make_meta),
            entry(source, out / "3.dcm", make_meta),
        ]

        with pytest.raises(FileOperationError):
            execute(plan, FileAction.COPY)

        assert (out / "1.dcm").exists()
        assert not (out / "3.dcm").exists()
