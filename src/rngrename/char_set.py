"""Character sets used to build random names.

A character set is an ordered sequence of unique, filename-safe characters.
Predefined sets are selected by name and case; custom sets are validated
before use.
"""

import logging
import string
from collections import Counter
from enum import Enum
from typing import Iterator, Optional, Sequence

from rngrename.finalise import sanitize_filename

# Configure logging
logger = logging.getLogger(__name__)


class CharSetError(Exception):
    """Raised when a character set cannot be constructed."""

    pass


class CharSetSelection(Enum):
    LETTERS = "letters"
    NUMBERS = "numbers"
    ALPHA_NUMERIC = "alpha_numeric"
    BASE16 = "base16"
    BASE64 = "base64"
    CUSTOM = "custom"


class Casing(Enum):
    UPPER = "upper"
    LOWER = "lower"
    MIXED = "mixed"


# (selection, casing) -> (label, characters). A casing of None is the default
# for selections that support casing and the only option for those that don't.
_PREDEFINED = {
    (CharSetSelection.LETTERS, Casing.LOWER): ("[a-z]", string.ascii_lowercase),
    (CharSetSelection.LETTERS, Casing.UPPER): ("[A-Z]", string.ascii_uppercase),
    (CharSetSelection.LETTERS, Casing.MIXED): ("[a-zA-Z]", string.ascii_letters),
    (CharSetSelection.NUMBERS, None): ("[0-9]", string.digits),
    (CharSetSelection.ALPHA_NUMERIC, Casing.LOWER): (
        "[a-z0-9]",
        string.ascii_lowercase + string.digits,
    ),
    (CharSetSelection.ALPHA_NUMERIC, Casing.UPPER): (
        "[A-Z0-9]",
        string.ascii_uppercase + string.digits,
    ),
    (CharSetSelection.ALPHA_NUMERIC, Casing.MIXED): (
        "[a-zA-Z0-9]",
        string.ascii_letters + string.digits,
    ),
    (CharSetSelection.BASE16, Casing.LOWER): ("[0-9a-f]", "0123456789abcdef"),
    (CharSetSelection.BASE16, Casing.UPPER): ("[0-9A-F]", "0123456789ABCDEF"),
    # base64url alphabet, so every character is filename-safe
    (CharSetSelection.BASE64, None): (
        "[A-Za-z0-9-_]",
        string.ascii_uppercase + string.ascii_lowercase + string.digits + "-_",
    ),
}

_CASED_SELECTIONS = {
    CharSetSelection.LETTERS,
    CharSetSelection.ALPHA_NUMERIC,
    CharSetSelection.BASE16,
}


class CharSet(Sequence[str]):
    """An immutable, ordered set of unique characters.

    Indexing is stable for the lifetime of the instance, so a name can be
    built by drawing random indices into the set.
    """

    def __init__(self, chars: str, label: Optional[str] = None):
        self._chars = tuple(chars)
        self.label = label if label is not None else f'Custom("{chars}")'

    @classmethod
    def custom(cls, chars: str) -> "CharSet":
        """Build a character set from user-supplied characters.

        Args:
            chars: The characters to use, in order

        Returns:
            A validated custom CharSet

        Raises:
            CharSetError: If the set is empty, contains characters that are
                not filename-safe, or contains duplicates
        """
        if not chars:
            raise CharSetError("the custom character set is empty")

        illegal = [c for c in dict.fromkeys(chars) if sanitize_filename(c) != c]
        if illegal:
            raise CharSetError(
                "the custom character set contains illegal characters: "
                + ", ".join(repr(c) for c in illegal)
            )

        duplicates = [c for c, count in Counter(chars).items() if count > 1]
        if duplicates:
            raise CharSetError(
                "the custom character set contains duplicate characters: "
                + ", ".join(repr(c) for c in duplicates)
            )

        return cls(chars)

    @classmethod
    def from_selection(
        cls,
        selection: CharSetSelection,
        custom_chars: Optional[str] = None,
        case: Optional[Casing] = None,
    ) -> "CharSet":
        """Resolve a selection, optional custom characters and case into a set.

        Args:
            selection: Which character set to use
            custom_chars: Characters for the custom set
            case: Upper, lower or mixed, where the selection supports it

        Returns:
            The matching CharSet

        Raises:
            CharSetError: If the combination is invalid
        """
        if selection is CharSetSelection.CUSTOM:
            if custom_chars is None:
                raise CharSetError(
                    "`--custom-chars` is required when `--char-set=custom`"
                )
            if case is not None:
                raise CharSetError(
                    f"the character set {selection.value} is incompatible "
                    f"with the case {case.value}"
                )
            return cls.custom(custom_chars)

        if custom_chars is not None:
            raise CharSetError(
                "`--custom-chars` cannot be used unless `--char-set=custom`"
            )

        if case is None and selection in _CASED_SELECTIONS:
            case = Casing.LOWER

        try:
            label, chars = _PREDEFINED[(selection, case)]
        except KeyError:
            raise CharSetError(
                f"the character set {selection.value} is incompatible "
                f"with the case {case.value if case else None}"
            )

        logger.debug(f"Resolved character set {label}")
        return cls(chars, label)

    def __getitem__(self, index):
        return self._chars[index]

    def __len__(self) -> int:
        return len(self._chars)

    def __iter__(self) -> Iterator[str]:
        return iter(self._chars)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CharSet):
            return NotImplemented
        return self._chars == other._chars

    def __hash__(self) -> int:
        return hash(self._chars)

    def __str__(self) -> str:
        return self.label

    def __repr__(self) -> str:
        return f"CharSet({''.join(self._chars)!r}, label={self.label!r})"
