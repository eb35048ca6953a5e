"""Turn raw random names into final file names.

The random part of each name is wrapped with an optional prefix and suffix,
then the extension chosen by the extension mode is appended.
"""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from rich.markup import escape

from rngrename.prompt import ErrorHandlingMode, OnErrorResponse, handle_error

# Configure logging
logger = logging.getLogger(__name__)

# Characters that are not allowed in a file name on common platforms
_ILLEGAL_CHARS = re.compile(r'[/\\?<>:*|"\x00-\x1f\x80-\x9f]')
_RESERVED_NAMES = re.compile(r"^\.+$")


class NameFinaliseError(Exception):
    """Raised when final names cannot be composed."""

    pass


class ExtensionModeSelection(Enum):
    KEEP_ALL = "keep_all"
    KEEP_LAST = "keep_last"
    STATIC = "static"
    DISCARD = "discard"


class ExtensionMode:
    """How to derive the new extension from the original file name.

    E.g. for `tarball.tar.xz`: keep_all gives `tar.xz`, keep_last gives `xz`,
    static gives the static extension, and discard gives none.
    """

    def __init__(
        self, selection: ExtensionModeSelection, static_ext: Optional[str] = None
    ):
        """Initialize extension mode.

        Args:
            selection: Which extension mode to use
            static_ext: Extension (without leading dot) for static mode

        Raises:
            NameFinaliseError: If static mode is chosen without an extension
        """
        if selection is ExtensionModeSelection.STATIC:
            if static_ext is None:
                raise NameFinaliseError(
                    "`--static-ext` is required when `--ext-mode=static`"
                )
            static_ext = sanitize_filename(static_ext)
        elif static_ext is not None:
            raise NameFinaliseError(
                "`--static-ext` cannot be used unless `--ext-mode=static`"
            )
        self.selection = selection
        self.static_ext = static_ext

    def extension_of(self, path: Path) -> Optional[str]:
        """Return the extension to give the renamed file, if any.

        Only the part of the name that is read has to be valid text; static
        and discard never read it.

        Raises:
            UnicodeEncodeError: If the part of the file name that is carried
                over is not valid text
        """
        if self.selection is ExtensionModeSelection.KEEP_ALL:
            name = path.name
            # names decoded with surrogate escapes cannot be carried over
            name.encode("utf-8")
            if name.startswith("."):
                name = name[1:]
            _, dot, ext = name.partition(".")
            return ext if dot else None
        if self.selection is ExtensionModeSelection.KEEP_LAST:
            suffix = path.suffix
            suffix.encode("utf-8")
            return suffix[1:] or None
        if self.selection is ExtensionModeSelection.STATIC:
            return self.static_ext or None
        return None

    def __str__(self) -> str:
        if self.selection is ExtensionModeSelection.STATIC:
            return f"static({self.static_ext})"
        return self.selection.value


def sanitize_filename(name: str) -> str:
    """Remove characters that are not allowed in file names.

    A name made only of dots is reserved and becomes empty.
    """
    name = _ILLEGAL_CHARS.sub("", name)
    if _RESERVED_NAMES.match(name):
        return ""
    return name


def finalise_names(
    pairs: List[Tuple[Path, str]],
    prefix: str,
    suffix: str,
    extension_mode: ExtensionMode,
    err_mode: ErrorHandlingMode,
) -> List[Tuple[Path, str]]:
    """Add the prefix, suffix and extension to every random name.

    Files whose extension cannot be determined are dropped, retried or cause
    a halt depending on err_mode.

    Args:
        pairs: (path, random name) pairs
        prefix: Static text placed before the random name
        suffix: Static text placed after the random name, before the extension
        extension_mode: How to derive each new extension
        err_mode: What to do when an extension cannot be determined

    Returns:
        (path, final name) pairs

    Raises:
        NameFinaliseError: If an error occurs in halt mode
        UserHaltError: If the user chooses to halt
    """
    prefix = sanitize_filename(prefix)
    suffix = sanitize_filename(suffix)

    final_pairs = []
    logger.debug("Appending extensions to generated file names.")
    for path, random_name in pairs:
        while True:
            try:
                ext = extension_mode.extension_of(path)
            except UnicodeEncodeError as e:
                logger.debug(f"Error getting extension of {path!r}: {e}")
                response = handle_error(
                    err_mode,
                    f"Error getting extension of [red]{escape(repr(str(path)))}[/red]: "
                    "file name is not valid UTF-8",
                    "What to do with this file?",
                )
                if response is None:
                    raise NameFinaliseError(f"{path!r} is not valid UTF-8")
                if response is OnErrorResponse.RETRY:
                    continue
                break

            logger.debug(f"The new extension for {path} is {ext!r}")
            new_name = f"{prefix}{random_name}{suffix}"
            if ext:
                new_name = f"{new_name}.{ext}"
            final_pairs.append((path, new_name))
            break

    logger.debug(f"Finalised names for {len(final_pairs)} files.")
    return final_pairs
