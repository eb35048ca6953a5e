"""Command-line entry point for rngrename.

This module parses arguments, wires the components together and reports
errors with an exit code.
"""

import argparse
import logging
import sys
from typing import List, Optional

from rngrename import __version__
from rngrename.char_set import Casing, CharSet, CharSetError, CharSetSelection
from rngrename.config import Config, ConfigError
from rngrename.file_ops import ConfirmMode, FileOperationError, dedup_paths, rename_files
from rngrename.finalise import (
    ExtensionMode,
    ExtensionModeSelection,
    NameFinaliseError,
    finalise_names,
)
from rngrename.name_generator import NameGenerationError, NameGenerator, Strategy
from rngrename.prompt import ErrorHandlingMode, UserHaltError, console

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _choices(enum_type) -> List[str]:
    return [member.value for member in enum_type]


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"{value} is negative")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Options left unset default to None so that config values show through.
    """
    parser = argparse.ArgumentParser(
        prog="rngrename",
        description="Rename files to unique, randomly generated names.",
        epilog="If a file name starts with '-', put '--' before the list of files. "
        "Values starting with '-' must be attached with '=', e.g. --prefix=-old.",
    )
    parser.add_argument(
        "-c",
        "--confirm",
        dest="confirm_mode",
        choices=_choices(ConfirmMode),
        help="confirm before renaming: none, several at a time, or each one "
        "(default: batch)",
    )
    parser.add_argument(
        "--confirm-batch",
        dest="confirm_batch_size",
        type=_non_negative_int,
        metavar="SIZE",
        help="files per confirmation batch, 0 for all at once (default: 10)",
    )
    parser.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        help="preview the renames without touching any file",
    )
    parser.add_argument(
        "-x",
        "--ext-mode",
        dest="ext_mode",
        choices=_choices(ExtensionModeSelection),
        help="for tarball.tar.xz: keep_all = tar.xz, keep_last = xz, "
        "static = STATIC_EXT, discard = none (default: keep_last)",
    )
    parser.add_argument(
        "--static-ext",
        metavar="EXT",
        help="extension without the leading dot, for --ext-mode=static",
    )
    parser.add_argument(
        "-e",
        "--error-handling-mode",
        dest="error_handling_mode",
        choices=_choices(ErrorHandlingMode),
        help="on error: ignore silently, prompt (warn), or halt (default: warn)",
    )
    parser.add_argument(
        "--force-generation-strategy",
        dest="force_strategy",
        choices=_choices(Strategy),
        help="force a name generation strategy; for testing performance",
    )
    parser.add_argument(
        "-l",
        "--length",
        dest="name_length",
        type=_non_negative_int,
        metavar="LEN",
        help="number of random characters in each name (default: 8)",
    )
    parser.add_argument(
        "--prefix",
        help="static text placed before each name; write --prefix=-x for values "
        "starting with -",
    )
    parser.add_argument(
        "--suffix",
        help="static text placed after each name, before the extension; write "
        "--suffix=-x for values starting with -",
    )
    parser.add_argument(
        "-s",
        "--char-set",
        "--charset",
        dest="char_set",
        choices=_choices(CharSetSelection),
        help="characters to draw from (default: base16)",
    )
    parser.add_argument(
        "--custom-chars",
        metavar="CHARS",
        help="characters to use with --char-set=custom; write --custom-chars=-_ab "
        "for values starting with -",
    )
    parser.add_argument(
        "--case",
        choices=_choices(Casing),
        help="case of the random characters, where the set supports it",
    )
    parser.add_argument("--config", metavar="FILE", help="path to a TOML config file")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="more logging; repeat for debug output",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("files", nargs="+", metavar="FILES", help="files to rename")
    return parser


def configure_logging(verbosity: int) -> None:
    """Configure logging for the given number of -v flags."""
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def apply_args(config: Config, args: argparse.Namespace) -> Config:
    """Override config values with any options given on the command line.

    Raises:
        ConfigError: If the resulting configuration is invalid
    """
    enum_options = {
        "char_set": CharSetSelection,
        "case": Casing,
        "ext_mode": ExtensionModeSelection,
        "confirm_mode": ConfirmMode,
        "error_handling_mode": ErrorHandlingMode,
    }
    for key in (
        "name_length",
        "custom_chars",
        "static_ext",
        "prefix",
        "suffix",
        "confirm_batch_size",
        *enum_options,
    ):
        value = getattr(args, key)
        if value is None:
            continue
        if key in enum_options:
            value = enum_options[key](value)
        setattr(config, key, value)

    config.validate()
    return config


def run(args: argparse.Namespace) -> int:
    """Rename the files named in args.

    Returns:
        The number of files renamed

    Raises:
        ConfigError, CharSetError, NameGenerationError, NameFinaliseError,
        FileOperationError, UserHaltError: On failure
    """
    config = apply_args(Config.from_env_and_file(args.config), args)
    logger.debug(f"Effective configuration: {config}")

    if args.dry_run:
        console.print(
            "You are in [red]DRY RUN MODE[/red]. Your files will not be touched."
        )

    char_set = CharSet.from_selection(
        config.char_set, config.custom_chars, config.case
    )
    logger.debug(f"Character set is {char_set}")
    extension_mode = ExtensionMode(config.ext_mode, config.static_ext)
    logger.debug(f"Extension mode is {extension_mode}")

    files = dedup_paths(args.files, config.error_handling_mode)

    generator = NameGenerator(
        file_count_max=config.file_count_max,
        permutation_count_max=config.permutation_count_max,
        strategy_ratio_threshold=config.strategy_ratio_threshold,
    )
    force_strategy = Strategy(args.force_strategy) if args.force_strategy else None
    random_names = generator.generate(
        files, char_set, config.name_length, force_strategy
    )

    final_names = finalise_names(
        random_names,
        config.prefix,
        config.suffix,
        extension_mode,
        config.error_handling_mode,
    )

    return rename_files(
        final_names,
        args.dry_run,
        config.confirm_mode,
        config.confirm_batch_size,
        config.error_handling_mode,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the application."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    logger.debug(f"Arguments: {args}")

    try:
        success_count = run(args)
    except (ConfigError, CharSetError) as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    except NameGenerationError as e:
        logger.error(f"Name generation failed, no files were touched: {e}")
        sys.exit(1)
    except (NameFinaliseError, FileOperationError) as e:
        logger.error(str(e))
        sys.exit(1)
    except UserHaltError:
        logger.error("Halted by user.")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        sys.exit(1)

    dry_run_note = " ([red]DRY RUN[/red])" if args.dry_run else ""
    console.print(f"Renamed [green]{success_count}[/green] files{dry_run_note}. Done.")
