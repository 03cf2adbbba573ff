"""Unit tests for permission conversion."""

import stat

import pytest

from filemech.constants import EntryType
from filemech.core.errors import InvalidInputError, PermissionFormatError
from filemech.core.permissions import PermissionSpec


class TestFromSymbolic:
    """Tests for parsing 10-character symbolic permissions."""

    def test_regular_file_converts_to_744(self):
        """Test '-rwxr--r--' converts to octal 744."""
        spec = PermissionSpec.from_symbolic("-rwxr--r--")

        assert spec.octal_digits == 744
        assert spec.permission_bits == 0o744
        assert spec.entry_type == EntryType.NONE

    def test_directory_entry_type(self):
        """Test the 'd' entry type sets the directory bits."""
        spec = PermissionSpec.from_symbolic("drwxr-xr-x")

        assert spec.is_dir
        assert spec.mode == stat.S_IFDIR | 0o755
        assert spec.octal_digits == 40755

    @pytest.mark.parametrize("text", [
        "----------",
        "-rwxrwxrwx",
        "-rw-r--r--",
        "drwxr-x---",
        "lrwxrwxrwx",
        "prw-------",
        "srwxr-xr-x",
        "crw-rw----",
        "brw-rw----",
        "---x--x--x",
    ])
    def test_symbolic_round_trip(self, text):
        """Test to_symbolic(from_symbolic(s)) == s for valid strings."""
        assert PermissionSpec.from_symbolic(text).to_symbolic() == text

    @pytest.mark.parametrize("text", [
        "",
        "-rwx",
        "-rwxr--r--x",
        "?rwxr--r--",
        "-rwxr--r-q",
        "-wrxr--r--",
        "-rwxr--r-w",
    ])
    def test_invalid_symbolic_rejected(self, text):
        """Test malformed strings are rejected as a whole."""
        with pytest.raises(PermissionFormatError):
            PermissionSpec.from_symbolic(text)

    def test_format_error_is_invalid_input(self):
        """Test permission errors are also ValueErrors."""
        with pytest.raises(InvalidInputError):
            PermissionSpec.from_symbolic("bogus")
        with pytest.raises(ValueError):
            PermissionSpec.from_symbolic("bogus")

    def test_str_is_symbolic(self):
        """Test str() renders the symbolic form."""
        assert str(PermissionSpec.from_symbolic("-rw-r-----")) == "-rw-r-----"


class TestFromOctal:
    """Tests for octal bit patterns and octal digits."""

    @pytest.mark.parametrize("mode", [
        0o644,
        stat.S_IFREG | 0o600,
        stat.S_IFDIR | 0o755,
        stat.S_IFLNK | 0o777,
        stat.S_IFIFO | 0o640,
    ])
    def test_composed_mode_matches_platform_mode(self, mode):
        """Test from_octal(n).mode reproduces n."""
        assert PermissionSpec.from_octal(mode).mode == mode

    def test_unknown_entry_bits_rejected(self):
        """Test bits above 0o777 that are not an entry type are rejected."""
        with pytest.raises(PermissionFormatError):
            PermissionSpec.from_octal(0o1000)

    def test_negative_rejected(self):
        """Test negative modes are rejected."""
        with pytest.raises(PermissionFormatError):
            PermissionSpec.from_octal(-1)

    def test_octal_digits_directory(self):
        """Test digits 40755 decode to a directory with rwxr-xr-x."""
        spec = PermissionSpec.from_octal_digits(40755)

        assert spec.is_dir
        assert spec.to_symbolic() == "drwxr-xr-x"

    @pytest.mark.parametrize("digits", [744, "744", "0744", "0o744"])
    def test_octal_digit_spellings(self, digits):
        """Test int and string spellings of the same digits agree."""
        assert PermissionSpec.from_octal_digits(digits).to_symbolic() == "-rwxr--r--"

    @pytest.mark.parametrize("digits", [798, "abc", ""])
    def test_invalid_octal_digits(self, digits):
        """Test non-octal digits are rejected."""
        with pytest.raises(PermissionFormatError):
            PermissionSpec.from_octal_digits(digits)

    def test_octal_text(self):
        """Test zero-padded octal rendering."""
        assert PermissionSpec.from_symbolic("-rw-------").octal_text == "0600"


class TestFromFileMode:
    """Tests for platform st_mode conversion."""

    def test_regular_file_mode(self):
        """Test an st_mode for a regular file."""
        spec = PermissionSpec.from_file_mode(stat.S_IFREG | 0o640)

        assert spec.entry_type == EntryType.REGULAR
        assert spec.is_regular
        assert spec.to_symbolic() == "-rw-r-----"

    def test_special_bits_dropped(self):
        """Test setuid/setgid/sticky bits are discarded."""
        spec = PermissionSpec.from_file_mode(stat.S_IFDIR | stat.S_ISVTX | 0o777)

        assert spec.is_dir
        assert spec.permission_bits == 0o777
