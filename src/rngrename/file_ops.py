"""Filesystem operations: resolving input paths and renaming files."""

import logging
import math
import os
from enum import Enum
from pathlib import Path
from typing import List, Sequence, Tuple, Union

from rich.markup import escape

from rngrename.prompt import (
    BatchConfirmResponse,
    ErrorHandlingMode,
    OnErrorResponse,
    UserHaltError,
    batch_prompt,
    console,
    handle_error,
)

# Configure logging
logger = logging.getLogger(__name__)


class FileOperationError(Exception):
    """Raised when a file operation fails in halt mode."""

    pass


class ConfirmMode(Enum):
    NONE = "none"
    BATCH = "batch"
    EACH = "each"


def dedup_paths(
    files: Sequence[Union[str, Path]], err_mode: ErrorHandlingMode
) -> List[Path]:
    """Resolve every path to an absolute path, then remove duplicates.

    Order of first appearance is preserved.

    Raises:
        FileOperationError: If a path cannot be resolved in halt mode
        UserHaltError: If the user chooses to halt
    """
    resolved = []
    for file in files:
        path = Path(file)
        while True:
            try:
                abs_path = path.resolve(strict=True)
            except OSError as e:
                logger.debug(f"Error resolving path {path}: {e}")
                response = handle_error(
                    err_mode,
                    f"Error resolving path [red]{escape(str(path))}[/red]: {escape(str(e))}",
                    "What to do with this path?",
                )
                if response is None:
                    raise FileOperationError(f"Cannot resolve path {path}: {e}")
                if response is OnErrorResponse.RETRY:
                    continue
                break

            logger.debug(f"Resolved {path} into {abs_path}.")
            resolved.append(abs_path)
            break

    unique = list(dict.fromkeys(resolved))
    if len(unique) != len(resolved):
        logger.info(f"Removed {len(resolved) - len(unique)} duplicate paths.")
    return unique


def rename_files(
    pairs: Sequence[Tuple[Path, str]],
    dry_run: bool,
    confirm_mode: ConfirmMode,
    confirm_batch_size: int,
    err_mode: ErrorHandlingMode,
) -> int:
    """Rename every path to its new name, in the same directory.

    Args:
        pairs: (path, new file name) pairs
        dry_run: Preview the renames without touching any file
        confirm_mode: Whether and how to ask before renaming
        confirm_batch_size: Files per batch in batch mode; 0 means all at once
        err_mode: What to do when a rename fails

    Returns:
        The number of files successfully renamed (or previewed)

    Raises:
        FileOperationError: If a rename fails in halt mode
        UserHaltError: If the user chooses to halt
    """
    if confirm_mode is ConfirmMode.NONE:
        logger.debug("Renaming files without confirmation.")
        success_count = sum(
            _rename_with_retry(path, new_name, dry_run, err_mode)
            for path, new_name in pairs
        )
    else:
        batch_size = 1 if confirm_mode is ConfirmMode.EACH else confirm_batch_size
        success_count = _rename_files_confirm(pairs, dry_run, batch_size, err_mode)

    logger.info(f"Successfully renamed {success_count} files")
    return success_count


def _rename_files_confirm(
    pairs: Sequence[Tuple[Path, str]],
    dry_run: bool,
    batch_size: int,
    err_mode: ErrorHandlingMode,
) -> int:
    if batch_size == 0:
        batch_size = max(len(pairs), 1)
    logger.debug(f"Renaming files with confirmation and batch size of {batch_size}.")

    success_count = 0
    batch_count = math.ceil(len(pairs) / batch_size)
    for batch_idx in range(batch_count):
        batch = pairs[batch_idx * batch_size : (batch_idx + 1) * batch_size]

        dry_run_note = " ([red]DRY RUN[/red])" if dry_run else ""
        console.print(
            f"Batch [yellow]#{batch_idx + 1}[/yellow]/[green]{batch_count}[/green]"
            f"{dry_run_note}:"
        )
        for path, new_name in batch:
            console.print(
                f'\t[yellow]{escape(str(path))}[/yellow] -> [green]"{escape(new_name)}"[/green]'
            )

        response = batch_prompt()
        logger.debug(f'User selected "{response.value}"')
        if response is BatchConfirmResponse.SKIP:
            continue
        if response is BatchConfirmResponse.HALT:
            raise UserHaltError()

        success_count += sum(
            _rename_with_retry(path, new_name, dry_run, err_mode)
            for path, new_name in batch
        )

    return success_count


def _rename_with_retry(
    path: Path, new_name: str, dry_run: bool, err_mode: ErrorHandlingMode
) -> bool:
    """Rename one file, handling failures per err_mode. Returns success."""
    while True:
        try:
            do_rename(path, new_name, dry_run)
        except OSError as e:
            logger.debug(f"Failed to rename {path} to {new_name}: {e}")
            response = handle_error(
                err_mode,
                f"Failed to rename [red]{escape(str(path))}[/red] to "
                f"[red]{escape(new_name)}[/red]: {escape(str(e))}",
                "What to do with this file?",
            )
            if response is None:
                raise FileOperationError(
                    f"Failed to rename {path} to {new_name}: {e}"
                )
            if response is OnErrorResponse.RETRY:
                continue
            return False

        logger.debug(f"Rename from {path} to {new_name} successful.")
        return True


def do_rename(path: Path, new_name: str, dry_run: bool) -> Path:
    """Rename a single file within its directory.

    Returns:
        The new path

    Raises:
        FileExistsError: If the new path already exists
        OSError: If the rename itself fails
    """
    new_path = path.parent / new_name
    if new_path.exists():
        raise FileExistsError(
            f"renaming {path} to {new_path} will overwrite an existing file"
        )

    if dry_run:
        console.print(
            f"\tRename preview: [yellow]{escape(str(path))}[/yellow] -> "
            f"[green]{escape(str(new_path))}[/green]"
        )
    else:
        logger.debug(f"New full path is {new_path}")
        os.rename(path, new_path)

    return new_path
