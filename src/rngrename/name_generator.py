"""Random name generation for a batch of files.

This module assigns every input file a unique random name of a fixed length
drawn from a character set. Two strategies are available:

- on demand: draw each name independently and redraw on collision. Cheap
  when the naming space is much larger than the number of files.
- match: enumerate the whole naming space, then draw names from it without
  replacement. Cheap when the number of files is a sizeable fraction of the
  naming space.

Requests that cannot succeed are refused before any name is generated.
"""

import itertools
import logging
import math
import random
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from rngrename.char_set import CharSet

# Configure logging
logger = logging.getLogger(__name__)

# Maximum number of files processed in one request
FILE_COUNT_MAX = 2**24

# Maximum naming space size the match strategy will enumerate
PERMUTATION_COUNT_MAX = 2**28

# Ratio of files to naming space at which on demand gives way to match
STRATEGY_RATIO_THRESHOLD = 0.1

NameAssignment = List[Tuple[Path, str]]


class Strategy(Enum):
    ON_DEMAND = "on_demand"
    MATCH = "match"


class NameGenerationError(Exception):
    """Raised when a request for random names cannot be satisfied."""

    pass


class InsufficientNamingSpaceError(NameGenerationError):
    """Raised when there are more files than unique names available."""

    def __init__(self, needs: int, space: int):
        self.needs = needs
        self.space = space
        super().__init__(
            "This combination of character set and length cannot uniquely "
            f"cover every file. There are {needs} files but only {space} "
            "unique names available."
        )


class TooManyFilesError(NameGenerationError):
    """Raised when the number of files exceeds the processing limit."""

    def __init__(self, count: int, limit: int):
        self.count = count
        self.limit = limit
        super().__init__(
            f"Cannot process {count} files at once. Currently the limit is {limit}."
        )


class TooManyPermutationsError(NameGenerationError):
    """Raised when the naming space is too large to enumerate."""

    def __init__(self, char_set: CharSet, length: int):
        self.char_set = char_set
        self.length = length
        super().__init__(
            "Cannot enumerate all permutations with the character set "
            f"{char_set} and length {length}."
        )


class NameGenerator:
    """Generates unique random names and matches them to files.

    The limits and the strategy threshold default to the module constants and
    can be tuned per instance. Each call to generate() owns its working set;
    nothing is shared between calls except the random number generator.
    """

    def __init__(
        self,
        file_count_max: int = FILE_COUNT_MAX,
        permutation_count_max: int = PERMUTATION_COUNT_MAX,
        strategy_ratio_threshold: float = STRATEGY_RATIO_THRESHOLD,
        rng: Optional[random.Random] = None,
    ):
        """Initialize name generator.

        Args:
            file_count_max: Maximum number of files per request
            permutation_count_max: Maximum naming space the match strategy
                will enumerate
            strategy_ratio_threshold: Files to naming space ratio at or above
                which the match strategy is chosen
            rng: Random number generator (default: a fresh random.Random)
        """
        self.file_count_max = file_count_max
        self.permutation_count_max = permutation_count_max
        self.strategy_ratio_threshold = strategy_ratio_threshold
        self.rng = rng or random.Random()

    def generate(
        self,
        files: Sequence[Union[str, Path]],
        char_set: CharSet,
        length: int,
        force_strategy: Optional[Strategy] = None,
    ) -> NameAssignment:
        """Generate a unique random name for every file.

        Args:
            files: Deduplicated file paths
            char_set: Characters to build names from
            length: Number of characters in each name
            force_strategy: Use this strategy instead of choosing one

        Returns:
            List of (path, name) pairs in input order, names pairwise distinct

        Raises:
            InsufficientNamingSpaceError: If there are more files than names
            TooManyFilesError: If there are more files than the limit allows
            TooManyPermutationsError: If the match strategy is used on a
                naming space too large to enumerate
        """
        naming_space_size = self.check_capacity(len(files), char_set, length)
        strategy = self.select_strategy(
            len(files), naming_space_size, force_strategy
        )

        if strategy is Strategy.ON_DEMAND:
            return self.generate_on_demand(files, char_set, length)
        return self.generate_then_match(files, char_set, length)

    def check_capacity(self, file_count: int, char_set: CharSet, length: int) -> int:
        """Check that a request can be satisfied at all.

        Args:
            file_count: Number of files needing names
            char_set: Characters to build names from
            length: Number of characters in each name

        Returns:
            The size of the naming space, or a lower bound on it when it is
            too large to change the strategy or pass the enumeration limit

        Raises:
            InsufficientNamingSpaceError: If file_count exceeds the naming space
            TooManyFilesError: If file_count exceeds file_count_max
        """
        logger.debug("Checking if there are enough permutations.")
        naming_space_size = _bounded_power(
            len(char_set), length, self._naming_space_bound(file_count)
        )
        if file_count > naming_space_size:
            raise InsufficientNamingSpaceError(file_count, naming_space_size)

        logger.debug("Checking the number of files does not exceed the maximum.")
        if file_count > self.file_count_max:
            raise TooManyFilesError(file_count, self.file_count_max)

        return naming_space_size

    def select_strategy(
        self,
        file_count: int,
        naming_space_size: int,
        force_strategy: Optional[Strategy] = None,
    ) -> Strategy:
        """Choose the strategy expected to do the least work.

        Args:
            file_count: Number of files needing names
            naming_space_size: Number of distinct names available
            force_strategy: If set, returned unconditionally

        Returns:
            The strategy to use
        """
        if force_strategy is not None:
            logger.debug(f'Forcing "{force_strategy.value}" strategy.')
            return force_strategy

        ratio = file_count / naming_space_size
        logger.debug(f"Ratio of files to naming space is {ratio:.2e}.")
        if ratio < self.strategy_ratio_threshold:
            return Strategy.ON_DEMAND
        return Strategy.MATCH

    def generate_on_demand(
        self,
        files: Sequence[Union[str, Path]],
        char_set: CharSet,
        length: int,
    ) -> NameAssignment:
        """Generate each name independently, redrawing on collision.

        Use when the naming space is large and the files are few.
        """
        logger.info('Using "generate on demand" strategy.')

        used_names = set()
        name_map = []
        for file in files:
            while True:
                name = self._random_name(char_set, length)
                if name not in used_names:
                    break
                logger.debug(f'Random name conflict: "{name}". Retrying.')
            used_names.add(name)
            name_map.append((Path(file), name))

        logger.debug(f"Generated {len(name_map)} random names.")
        return name_map

    def generate_then_match(
        self,
        files: Sequence[Union[str, Path]],
        char_set: CharSet,
        length: int,
    ) -> NameAssignment:
        """Enumerate every possible name, then match them to files at random.

        Use when the naming space is on the same order of magnitude as the
        number of files.

        Raises:
            TooManyPermutationsError: If the naming space exceeds
                permutation_count_max
        """
        logger.info('Using "generate then match" strategy.')

        logger.debug("Checking if the number of permutations is too large.")
        permutation_count = _bounded_power(
            len(char_set), length, self.permutation_count_max
        )
        if permutation_count > self.permutation_count_max:
            raise TooManyPermutationsError(char_set, length)

        logger.debug("Generating all possible permutations.")
        candidates = [
            "".join(chars) for chars in itertools.product(char_set, repeat=length)
        ]

        name_map = []
        for file in files:
            # swap-remove keeps removal O(1); candidate order is irrelevant
            index = self.rng.randrange(len(candidates))
            candidates[index], candidates[-1] = candidates[-1], candidates[index]
            name_map.append((Path(file), candidates.pop()))

        logger.debug(f"Generated {len(name_map)} random names.")
        return name_map

    def _naming_space_bound(self, file_count: int) -> int:
        """Naming space size past which the exact size no longer matters.

        Above it the ratio is below the threshold and the space cannot be
        enumerated, so every decision comes out the same.
        """
        bound = max(file_count, self.permutation_count_max)
        if self.strategy_ratio_threshold > 0:
            bound = max(bound, math.ceil(file_count / self.strategy_ratio_threshold))
        return bound

    def _random_name(self, char_set: CharSet, length: int) -> str:
        """Draw a random name of the given length from the character set."""
        return "".join(
            char_set[self.rng.randrange(len(char_set))] for _ in range(length)
        )


def _bounded_power(base: int, exponent: int, bound: int) -> int:
    """Return base ** exponent, or bound + 1 if it would be larger than bound.

    Huge lengths never build the full integer.
    """
    if base <= 1 or exponent == 0:
        return base**exponent
    # base >= 2, so the power is at least 2 ** exponent > bound
    if exponent >= bound.bit_length():
        return bound + 1
    return min(base**exponent, bound + 1)


def generate_random_names(
    files: Sequence[Union[str, Path]],
    char_set: CharSet,
    length: int,
    force_strategy: Optional[Strategy] = None,
) -> NameAssignment:
    """Generate random names using the default limits and threshold."""
    return NameGenerator().generate(files, char_set, length, force_strategy)
