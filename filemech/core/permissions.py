"""File permission conversion.

A PermissionSpec is an entry type plus 9 unix permission bits. It converts
between three representations:

- symbolic text, always 10 characters: '-rwxr--r--', 'drwxr-xr-x'
- octal: an integer bit pattern (0o744) or octal digits (744, "0744")
- platform mode: the composed value used by os.chmod / reported by os.stat
"""

import stat

from pydantic import BaseModel, ConfigDict, Field

from ..constants import PERMISSION_MASK, EntryType
from .errors import PermissionFormatError

# Accepted characters per symbolic position 1..9 (position 0 is the entry type)
_SYMBOL_POSITIONS = ("r", "w", "x") * 3

# setuid, setgid, sticky
_SPECIAL_BITS = stat.S_ISUID | stat.S_ISGID | stat.S_ISVTX


class PermissionSpec(BaseModel):
    """Entry type and permission bits of a file system entry."""

    model_config = ConfigDict(frozen=True, extra='forbid')

    entry_type: EntryType = Field(
        default=EntryType.NONE,
        description="Entry-type component (file, directory, ...)"
    )
    permission_bits: int = Field(
        default=0,
        ge=0,
        le=PERMISSION_MASK,
        description="Owner/group/other rwx bits"
    )

    @classmethod
    def from_symbolic(cls, text: str) -> "PermissionSpec":
        """Parse a 10-character symbolic permission string.

        Validation is all-or-nothing: every character must be valid.

        Raises:
            PermissionFormatError: On wrong length, unknown entry-type letter,
                or an unexpected symbol at any permission position

        Examples:
            >>> PermissionSpec.from_symbolic('-rwxr--r--').octal_digits
            744
        """
        if not isinstance(text, str) or len(text) != 10:
            length = len(text) if isinstance(text, str) else "n/a"
            raise PermissionFormatError(
                f"Symbolic permission must contain 10 characters, got {length}: {text!r}",
                operation="from_symbolic",
            )

        entry_type = EntryType.from_letter(text[0])
        if entry_type is None:
            raise PermissionFormatError(
                f"Unrecognized entry-type character {text[0]!r} in {text!r}",
                operation="from_symbolic",
            )

        bits = 0
        for position, (char, expected) in enumerate(zip(text[1:], _SYMBOL_POSITIONS), 1):
            bit = 1 << (9 - position)
            if char == expected:
                bits |= bit
            elif char != "-":
                raise PermissionFormatError(
                    f"Invalid character {char!r} at position {position} of {text!r}; "
                    f"expected {expected!r} or '-'",
                    operation="from_symbolic",
                )

        return cls(entry_type=entry_type, permission_bits=bits)

    @classmethod
    def from_octal(cls, mode: int) -> "PermissionSpec":
        """Decompose an integer mode into entry type and permission bits.

        Raises:
            PermissionFormatError: If the bits above 0o777 are not a known entry type
        """
        if isinstance(mode, bool) or not isinstance(mode, int) or mode < 0:
            raise PermissionFormatError(
                f"Octal mode must be a non-negative integer, got {mode!r}",
                operation="from_octal",
            )

        entry_bits = mode & ~PERMISSION_MASK
        entry_type = EntryType.from_bits(entry_bits)
        if entry_type is None:
            raise PermissionFormatError(
                f"Invalid entry type {oct(entry_bits)} in mode {oct(mode)}",
                operation="from_octal",
            )

        return cls(entry_type=entry_type, permission_bits=mode & PERMISSION_MASK)

    @classmethod
    def from_octal_digits(cls, digits: int | str) -> "PermissionSpec":
        """Parse octal digits written out as an int or string (744, '0744', '0o744')."""
        text = str(digits).strip().lower()
        if text.startswith("0o"):
            text = text[2:]
        try:
            mode = int(text, 8)
        except ValueError:
            raise PermissionFormatError(
                f"Not a valid octal number: {digits!r}",
                operation="from_octal_digits",
            ) from None
        if mode < 0:
            raise PermissionFormatError(
                f"Octal mode must be non-negative, got {digits!r}",
                operation="from_octal_digits",
            )
        return cls.from_octal(mode)

    @classmethod
    def from_file_mode(cls, st_mode: int) -> "PermissionSpec":
        """Build from a platform mode such as ``os.stat(path).st_mode``.

        setuid/setgid/sticky bits are discarded.
        """
        return cls.from_octal(st_mode & ~_SPECIAL_BITS)

    def to_symbolic(self) -> str:
        chars = [self.entry_type.letter]
        for position, symbol in enumerate(_SYMBOL_POSITIONS, 1):
            chars.append(symbol if self.permission_bits & (1 << (9 - position)) else "-")
        return "".join(chars)

    @property
    def mode(self) -> int:
        """Composed mode: entry-type bits | permission bits."""
        return self.entry_type.bits | self.permission_bits

    @property
    def octal_digits(self) -> int:
        """Composed mode written as octal digits, e.g. 744 or 40755."""
        return int(format(self.mode, "o"))

    @property
    def octal_text(self) -> str:
        return format(self.mode, "04o")

    @property
    def is_dir(self) -> bool:
        return self.entry_type == EntryType.DIRECTORY

    @property
    def is_regular(self) -> bool:
        return self.entry_type in (EntryType.NONE, EntryType.REGULAR)

    def __str__(self) -> str:
        return self.to_symbolic()
