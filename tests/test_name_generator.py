"""Property-based and unit tests for random name generation."""

import random
import string
from pathlib import Path

import pytest
from hypothesis import given, settings, strategies as st

from rngrename.char_set import CharSet, CharSetSelection
from rngrename.name_generator import (
    FILE_COUNT_MAX,
    PERMUTATION_COUNT_MAX,
    InsufficientNamingSpaceError,
    NameGenerator,
    Strategy,
    TooManyFilesError,
    TooManyPermutationsError,
    generate_random_names,
)

DIGITS = CharSet(string.digits, "[0-9]")
HEX = CharSet.from_selection(CharSetSelection.BASE16)
BINARY = CharSet("01")


def make_files(count):
    return [Path(f"/tmp/file_{i}.txt") for i in range(count)]


@st.composite
def naming_requests(draw):
    """A char set, a name length and a file count that fits the naming space."""
    chars = draw(
        st.text(alphabet=string.ascii_letters + string.digits, min_size=1, max_size=6)
    )
    char_set = CharSet("".join(dict.fromkeys(chars)))
    length = draw(st.integers(min_value=0, max_value=4))
    space = len(char_set) ** length
    file_count = draw(st.integers(min_value=0, max_value=min(space, 60)))
    return char_set, length, file_count


class TestNameGeneratorProperties:
    """Property-based tests for name generation."""

    @settings(max_examples=100)
    @given(naming_requests(), st.sampled_from([None, Strategy.ON_DEMAND, Strategy.MATCH]))
    def test_names_are_unique_and_complete(self, naming_request, strategy):
        """Every strategy returns one distinct name per file, in input order."""
        char_set, length, file_count = naming_request
        files = make_files(file_count)

        assignment = NameGenerator(rng=random.Random(0)).generate(
            files, char_set, length, strategy
        )

        assert [path for path, _ in assignment] == files
        names = [name for _, name in assignment]
        assert len(set(names)) == len(names)
        for name in names:
            assert len(name) == length
            assert all(c in char_set for c in name)

    @settings(max_examples=100)
    @given(
        st.integers(min_value=1, max_value=10),
        st.integers(min_value=0, max_value=3),
        st.integers(min_value=1, max_value=50),
    )
    def test_capacity_gate(self, alphabet_size, length, extra):
        """More files than names always fails before generating anything."""
        char_set = CharSet(string.ascii_lowercase[:alphabet_size])
        space = alphabet_size**length
        files = make_files(space + extra)

        with pytest.raises(InsufficientNamingSpaceError) as exc_info:
            NameGenerator().generate(files, char_set, length)

        assert exc_info.value.needs == space + extra
        assert exc_info.value.space == space

    @settings(max_examples=100)
    @given(
        st.integers(min_value=0, max_value=10_000),
        st.integers(min_value=1, max_value=10**12),
    )
    def test_strategy_selection_is_deterministic(self, file_count, space):
        """The same ratio always selects the same strategy."""
        generator = NameGenerator()

        first = generator.select_strategy(file_count, space)
        second = NameGenerator().select_strategy(file_count, space)

        assert first == second
        expected = (
            Strategy.ON_DEMAND if file_count / space < 0.1 else Strategy.MATCH
        )
        assert first is expected


class TestNameGeneratorUnitTests:
    """Unit tests for name generation scenarios and edge cases."""

    def test_small_space_uses_match_strategy(self, caplog):
        """Ten digits, length one, five files selects the match strategy."""
        generator = NameGenerator()
        assert generator.select_strategy(5, 10) is Strategy.MATCH

        with caplog.at_level("INFO"):
            assignment = generator.generate(make_files(5), DIGITS, 1)

        assert "generate then match" in caplog.text
        names = [name for _, name in assignment]
        assert len(set(names)) == 5
        assert all(name in string.digits for name in names)

    def test_insufficient_naming_space(self):
        """Eleven files cannot fit into ten single digit names."""
        with pytest.raises(InsufficientNamingSpaceError) as exc_info:
            NameGenerator().generate(make_files(11), DIGITS, 1)

        assert exc_info.value.needs == 11
        assert exc_info.value.space == 10
        assert "11 files but only 10" in str(exc_info.value)

    def test_large_space_uses_on_demand_strategy(self, caplog):
        """Hex names of length eight for three files are drawn on demand."""
        with caplog.at_level("INFO"):
            assignment = NameGenerator().generate(make_files(3), HEX, 8)

        assert "generate on demand" in caplog.text
        names = [name for _, name in assignment]
        assert len(set(names)) == 3
        assert all(len(name) == 8 for name in names)
        assert all(c in "0123456789abcdef" for name in names for c in name)

    def test_huge_space_on_demand_succeeds(self):
        """A binary alphabet with length 40 works on demand."""
        assignment = NameGenerator().generate(make_files(100), BINARY, 40)

        names = [name for _, name in assignment]
        assert len(set(names)) == 100

    def test_huge_space_forced_match_fails(self):
        """Forcing the match strategy on a 2^40 space is refused."""
        with pytest.raises(TooManyPermutationsError) as exc_info:
            NameGenerator().generate(make_files(100), BINARY, 40, Strategy.MATCH)

        assert exc_info.value.char_set == BINARY
        assert exc_info.value.length == 40

    def test_enormous_length_selects_on_demand(self):
        """A billion-character length is sized without building the full power."""
        generator = NameGenerator()

        space = generator.check_capacity(3, HEX, 10**9)

        assert space > PERMUTATION_COUNT_MAX
        assert generator.select_strategy(3, space) is Strategy.ON_DEMAND

    def test_enormous_length_forced_match_fails(self):
        with pytest.raises(TooManyPermutationsError):
            NameGenerator().generate_then_match(make_files(1), BINARY, 10**9)

    def test_naming_space_is_exact_below_limits(self):
        assert NameGenerator().check_capacity(5, DIGITS, 3) == 1000
        assert NameGenerator().check_capacity(1, BINARY, 28) == 2**28

    def test_too_many_files(self):
        """File counts above the configured limit are refused."""
        generator = NameGenerator(file_count_max=4)

        with pytest.raises(TooManyFilesError) as exc_info:
            generator.generate(make_files(5), HEX, 8)

        assert exc_info.value.count == 5
        assert exc_info.value.limit == 4

    def test_default_file_limit(self):
        assert NameGenerator().file_count_max == FILE_COUNT_MAX

    def test_forced_on_demand_fills_entire_space(self):
        """On demand terminates even when every name must be used."""
        assignment = NameGenerator().generate(
            make_files(10), DIGITS, 1, Strategy.ON_DEMAND
        )

        assert sorted(name for _, name in assignment) == list(string.digits)

    def test_forced_strategy_ignores_ratio(self):
        generator = NameGenerator()

        assert generator.select_strategy(1, 10**9, Strategy.MATCH) is Strategy.MATCH
        assert generator.select_strategy(10, 10, Strategy.ON_DEMAND) is Strategy.ON_DEMAND

    def test_custom_threshold(self):
        generator = NameGenerator(strategy_ratio_threshold=0.5)

        assert generator.select_strategy(4, 10) is Strategy.ON_DEMAND
        assert generator.select_strategy(5, 10) is Strategy.MATCH

    def test_permutation_limit_is_configurable(self):
        generator = NameGenerator(permutation_count_max=99)

        with pytest.raises(TooManyPermutationsError):
            generator.generate(make_files(60), DIGITS, 2)

    def test_no_files(self):
        assert NameGenerator().generate([], HEX, 8) == []

    def test_zero_length_names(self):
        """Length zero gives a naming space of exactly one empty name."""
        assert NameGenerator().generate(make_files(1), HEX, 0) == [
            (make_files(1)[0], "")
        ]
        with pytest.raises(InsufficientNamingSpaceError):
            NameGenerator().generate(make_files(2), HEX, 0)

    def test_accepts_string_paths(self):
        assignment = NameGenerator().generate(["a.txt", "b.txt"], HEX, 4)

        assert [path for path, _ in assignment] == [Path("a.txt"), Path("b.txt")]

    def test_seeded_generators_are_reproducible(self):
        files = make_files(20)

        first = NameGenerator(rng=random.Random(42)).generate(files, HEX, 6)
        second = NameGenerator(rng=random.Random(42)).generate(files, HEX, 6)

        assert first == second

    def test_on_demand_retries_on_collision(self, caplog):
        """A colliding draw is discarded and the whole name redrawn."""

        class ScriptedRandom:
            def __init__(self, indices):
                self.indices = iter(indices)

            def randrange(self, stop):
                return next(self.indices)

        # names drawn: "00", "00" (collision), "01"
        generator = NameGenerator(rng=ScriptedRandom([0, 0, 0, 0, 0, 1]))

        with caplog.at_level("DEBUG"):
            assignment = generator.generate_on_demand(make_files(2), DIGITS, 2)

        assert [name for _, name in assignment] == ["00", "01"]
        assert 'Random name conflict: "00"' in caplog.text

    def test_module_level_helper(self):
        assignment = generate_random_names(make_files(3), DIGITS, 1)

        assert len({name for _, name in assignment}) == 3
