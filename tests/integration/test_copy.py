"""Integration tests for copy strategies."""

import errno
import logging
import os
from types import SimpleNamespace

import pytest

from filemech.constants import CopyStrategy
from filemech.core.errors import (
    ByteCountMismatchError,
    CopyFallbackError,
    DirectoryCreateError,
    FileOperationError,
    InvalidInputError,
    SameFileError,
    SourceNotFoundError,
)
from filemech.files import copy as copy_module
from filemech.files.copy import (
    build_copy_request,
    copy_by_io,
    copy_by_io_then_link,
    copy_by_io_with_buffer,
    copy_by_link,
    copy_by_link_then_io,
    copy_file,
)
from filemech.files.manager import FileManager
from filemech.schemas.config import FileMechConfig

PAYLOAD = bytes(range(256)) * 40


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "src" / "payload.bin"
    path.parent.mkdir()
    path.write_bytes(PAYLOAD)
    return path


def _cross_device_link(src, dst, *args, **kwargs):
    raise OSError(errno.EXDEV, "Invalid cross-device link")


class TestCopyStrategies:
    """Tests that every strategy produces an identical destination."""

    @pytest.mark.parametrize("strategy", list(CopyStrategy))
    def test_destination_identical(self, tmp_path, source, strategy):
        """Test length and content match the source."""
        destination = tmp_path / "dst" / "copy.bin"

        result = FileManager(source).copy_to(destination, strategy, buffer_size=100)

        assert destination.read_bytes() == PAYLOAD
        assert destination.stat().st_size == source.stat().st_size
        assert result.size == len(PAYLOAD)
        assert not result.fallback_used

    def test_link_shares_inode(self, tmp_path, source):
        """Test a hard-link copy is the same file on disk."""
        destination = tmp_path / "linked.bin"

        result = FileManager(source).copy_to(destination, CopyStrategy.LINK)

        assert result.technique == CopyStrategy.LINK
        assert os.path.samefile(source, destination)

    def test_io_is_independent_copy(self, tmp_path, source):
        """Test a stream copy does not share the inode."""
        destination = tmp_path / "streamed.bin"

        result = FileManager(source).copy_to(destination, CopyStrategy.IO)

        assert result.technique == CopyStrategy.IO
        assert not os.path.samefile(source, destination)

    def test_module_level_helpers(self, tmp_path, source):
        """Test the per-strategy copy functions."""
        copy_by_io(source, tmp_path / "a.bin")
        copy_by_io_with_buffer(source, tmp_path / "b.bin", 7)
        copy_by_link(source, tmp_path / "c.bin")
        copy_by_io_then_link(source, tmp_path / "d.bin")
        copy_by_link_then_io(source, tmp_path / "e.bin")

        for name in "abcde":
            assert (tmp_path / f"{name}.bin").read_bytes() == PAYLOAD

    def test_empty_source(self, tmp_path):
        """Test copying an empty file."""
        source = tmp_path / "empty.txt"
        source.write_bytes(b"")

        result = copy_by_io(source, tmp_path / "empty_copy.txt")

        assert result.size == 0
        assert (tmp_path / "empty_copy.txt").read_bytes() == b""

    def test_default_strategy_from_config(self, tmp_path, source):
        """Test copy_to without a strategy uses the configured default."""
        fm = FileManager(source, config=FileMechConfig(default_copy_strategy=CopyStrategy.LINK))

        result = fm.copy_to(tmp_path / "default.bin")

        assert result.technique == CopyStrategy.LINK

    def test_pending_writes_are_copied(self, tmp_path):
        """Test buffered writes on the source are flushed before copying."""
        fm = FileManager(tmp_path / "fresh.txt")
        fm.write_bytes(b"not yet on disk", truncate_first=True)

        fm.copy_to(tmp_path / "copy.txt")

        assert (tmp_path / "copy.txt").read_bytes() == b"not yet on disk"

    def test_copy_to_file_manager(self, tmp_path, source):
        """Test the destination may be another FileManager."""
        destination = FileManager(tmp_path / "managed.bin")

        FileManager(source).copy_to(destination)

        assert destination.read_all() == PAYLOAD
        destination.close()

    def test_copy_to_directory(self, tmp_path, source):
        """Test copying into a directory keeps the file name."""
        FileManager(source).copy_to_directory(tmp_path / "out")

        assert (tmp_path / "out" / "payload.bin").read_bytes() == PAYLOAD


class TestFallback:
    """Tests for composite strategies when one technique fails."""

    def test_link_then_io_cross_device(self, tmp_path, source, monkeypatch, caplog):
        """Test a cross-device link failure falls back to streaming."""
        monkeypatch.setattr(os, "link", _cross_device_link)
        destination = tmp_path / "other_fs" / "copy.bin"

        with caplog.at_level(logging.WARNING, logger="filemech.files.copy"):
            result = FileManager(source).copy_to(destination, CopyStrategy.LINK_THEN_IO)

        assert result.fallback_used
        assert result.technique == CopyStrategy.IO
        assert destination.read_bytes() == PAYLOAD
        assert "falling back" in caplog.text

    def test_io_then_link_uses_link_when_stream_fails(self, tmp_path, source, monkeypatch):
        """Test a stream failure falls back to a hard link."""
        def broken_stream(*args, **kwargs):
            raise OSError(errno.EIO, "Input/output error")

        monkeypatch.setattr(copy_module, "_stream_copy", broken_stream)
        destination = tmp_path / "linked.bin"

        result = copy_by_io_then_link(source, destination)

        assert result.fallback_used
        assert result.technique == CopyStrategy.LINK
        assert os.path.samefile(source, destination)

    def test_both_techniques_fail(self, tmp_path, source, monkeypatch):
        """Test both errors are reported when the fallback also fails."""
        def full_disk(*args, **kwargs):
            raise OSError(errno.ENOSPC, "No space left on device")

        monkeypatch.setattr(os, "link", _cross_device_link)
        monkeypatch.setattr(copy_module, "_stream_copy", full_disk)

        with pytest.raises(CopyFallbackError) as exc_info:
            copy_by_link_then_io(source, tmp_path / "never.bin")

        err = exc_info.value
        assert err.primary_error.errno == errno.EXDEV
        assert err.fallback_error.errno == errno.ENOSPC
        assert err.__cause__ is err.fallback_error

    def test_single_technique_does_not_fall_back(self, tmp_path, source, monkeypatch):
        """Test LINK alone reports the link error."""
        monkeypatch.setattr(os, "link", _cross_device_link)

        with pytest.raises(FileOperationError) as exc_info:
            copy_by_link(source, tmp_path / "x.bin")

        assert exc_info.value.errno == errno.EXDEV
        assert not (tmp_path / "x.bin").exists()


class TestCopySetup:
    """Tests for validation and destination preparation."""

    def test_missing_source(self, tmp_path):
        """Test a missing source is fatal and creates nothing."""
        destination = tmp_path / "out" / "copy.bin"

        with pytest.raises(SourceNotFoundError):
            copy_by_link_then_io(tmp_path / "ghost.bin", destination)

        assert not destination.exists()

    def test_same_path(self, source):
        """Test copying a file onto itself is rejected."""
        with pytest.raises(SameFileError):
            FileManager(source).copy_to(source)

    def test_same_file_through_hard_link(self, tmp_path, source):
        """Test two names for one inode are detected as the same file."""
        alias = tmp_path / "alias.bin"
        os.link(source, alias)

        with pytest.raises(SameFileError):
            copy_by_io(source, alias)

    def test_source_is_directory(self, tmp_path):
        """Test a directory source is rejected."""
        folder = tmp_path / "folder"
        folder.mkdir()

        with pytest.raises(InvalidInputError):
            copy_by_io(folder, tmp_path / "copy")

    def test_destination_is_directory(self, tmp_path, source):
        """Test an existing directory destination is rejected."""
        (tmp_path / "taken").mkdir()

        with pytest.raises(InvalidInputError):
            copy_by_io(source, tmp_path / "taken")

    def test_existing_destination_replaced(self, tmp_path, source):
        """Test an existing destination is deleted and replaced."""
        destination = tmp_path / "existing.bin"
        destination.write_bytes(b"old content that is longer than nothing")

        copy_by_link(source, destination)

        assert destination.read_bytes() == PAYLOAD

    def test_existing_destination_kept_for_link(self, tmp_path, source):
        """Test a link onto a kept destination fails with EEXIST."""
        destination = tmp_path / "existing.bin"
        destination.write_bytes(b"keep me")

        with pytest.raises(FileOperationError) as exc_info:
            copy_by_link(source, destination, delete_existing_destination=False)

        assert exc_info.value.errno == errno.EEXIST
        assert destination.read_bytes() == b"keep me"

    def test_missing_directory_not_created(self, tmp_path, source):
        """Test a missing destination directory is an error when creation is off."""
        destination = tmp_path / "no" / "such" / "dir" / "copy.bin"

        with pytest.raises(FileOperationError) as exc_info:
            copy_by_io(source, destination, create_destination_dir=False)

        assert exc_info.value.errno == errno.ENOENT
        assert not destination.parent.exists()

    def test_build_request_same_file(self, tmp_path):
        """Test build_copy_request reports identical paths as SameFileError."""
        with pytest.raises(SameFileError):
            build_copy_request(tmp_path / "a", str(tmp_path / "a"))


    def test_failed_destination_delete_is_fatal(self, tmp_path, source, monkeypatch):
        """Test a destination that cannot be deleted stops the copy before any technique runs."""
        destination = tmp_path / "existing.bin"
        destination.write_bytes(b"keep me")
        link_calls = []

        def refuse(path, *args, **kwargs):
            raise PermissionError(errno.EACCES, "Permission denied", str(path))

        def record_link(src, dst, *args, **kwargs):
            link_calls.append((src, dst))

        monkeypatch.setattr(os, "remove", refuse)
        monkeypatch.setattr(os, "link", record_link)

        with pytest.raises(FileOperationError) as exc_info:
            copy_by_link_then_io(source, destination)

        monkeypatch.undo()
        assert not isinstance(exc_info.value, CopyFallbackError)
        assert exc_info.value.operation == "delete_existing_destination"
        assert exc_info.value.errno == errno.EACCES
        assert link_calls == []
        assert destination.read_bytes() == b"keep me"

    def test_directory_creation_failure_is_fatal(self, tmp_path, source, monkeypatch):
        """Test a destination directory that cannot be created is not retried by the fallback."""
        def refuse(*args, **kwargs):
            raise PermissionError(errno.EACCES, "Permission denied")

        monkeypatch.setattr(os, "makedirs", refuse)
        destination = tmp_path / "blocked" / "copy.bin"

        with pytest.raises(DirectoryCreateError):
            FileManager(source).copy_to(destination, CopyStrategy.LINK_THEN_IO)

        assert not destination.parent.exists()

class TestPartialCopyCleanup:
    """Tests that a failed stream copy does not leave a partial destination."""

    def test_size_mismatch_removes_destination(self, tmp_path, source, monkeypatch):
        """Test a byte-count mismatch removes the file the copy created."""
        real_fstat = os.fstat
        monkeypatch.setattr(
            os, "fstat", lambda fd: SimpleNamespace(st_size=real_fstat(fd).st_size + 1)
        )
        destination = tmp_path / "partial.bin"

        with pytest.raises(ByteCountMismatchError):
            copy_file(build_copy_request(source, destination))

        assert not destination.exists()


class TestLinkVerification:
    """Tests for failures after a hard link was made."""

    @pytest.fixture
    def unreadable_destination(self, tmp_path, monkeypatch):
        destination = tmp_path / "linked.bin"
        real_stat = os.stat

        def flaky_stat(path, *args, **kwargs):
            if (
                isinstance(path, (str, os.PathLike))
                and os.fspath(path) == str(destination)
                and os.path.lexists(destination)
            ):
                raise OSError(errno.EIO, "Input/output error")
            return real_stat(path, *args, **kwargs)

        monkeypatch.setattr(os, "stat", flaky_stat)
        return destination

    def test_stat_failure_is_wrapped(self, source, unreadable_destination, monkeypatch):
        """Test a stat error after linking is reported and the link removed."""
        with pytest.raises(FileOperationError) as exc_info:
            copy_by_link(source, unreadable_destination)

        monkeypatch.undo()
        assert exc_info.value.errno == errno.EIO
        assert exc_info.value.operation == "copy_by_link"
        assert not unreadable_destination.exists()
        assert source.read_bytes() == PAYLOAD

    def test_fallback_does_not_write_through_link(self, source, unreadable_destination, monkeypatch):
        """Test the stream fallback copies into a fresh file and leaves the source intact."""
        result = copy_by_link_then_io(source, unreadable_destination)

        monkeypatch.undo()
        assert result.fallback_used
        assert result.technique == CopyStrategy.IO
        assert unreadable_destination.read_bytes() == PAYLOAD
        assert source.read_bytes() == PAYLOAD
        assert not os.path.samefile(source, unreadable_destination)
