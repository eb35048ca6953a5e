"""Tests for path resolution and rename execution."""

from unittest.mock import patch

import pytest

from rngrename.file_ops import (
    ConfirmMode,
    FileOperationError,
    dedup_paths,
    do_rename,
    rename_files,
)
from rngrename.prompt import (
    BatchConfirmResponse,
    ErrorHandlingMode,
    OnErrorResponse,
    UserHaltError,
)


@pytest.fixture
def sample_files(tmp_path):
    """Create a directory with a few files."""
    files = []
    for name in ("a.txt", "b.txt", "c.txt"):
        path = tmp_path / name
        path.write_text(name)
        files.append(path)
    return files


class TestDedupPaths:
    """Unit tests for resolving and deduplicating input paths."""

    def test_resolves_and_deduplicates(self, sample_files, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        inputs = ["a.txt", str(sample_files[0]), "./b.txt", "a.txt"]

        result = dedup_paths(inputs, ErrorHandlingMode.HALT)

        assert result == [sample_files[0].resolve(), sample_files[1].resolve()]

    def test_missing_file_halt_mode(self, tmp_path):
        with pytest.raises(FileOperationError, match="Cannot resolve"):
            dedup_paths([tmp_path / "missing"], ErrorHandlingMode.HALT)

    def test_missing_file_ignore_mode(self, sample_files, tmp_path):
        result = dedup_paths(
            [tmp_path / "missing", sample_files[2]], ErrorHandlingMode.IGNORE
        )

        assert result == [sample_files[2].resolve()]

    def test_missing_file_warn_mode_retry_then_skip(self, tmp_path):
        missing = tmp_path / "late.txt"
        responses = iter([OnErrorResponse.RETRY, OnErrorResponse.SKIP])

        with patch("rngrename.prompt.error_prompt", side_effect=lambda q: next(responses)) as mock_prompt:
            result = dedup_paths([missing], ErrorHandlingMode.WARN)

        assert result == []
        assert mock_prompt.call_count == 2

    def test_missing_file_warn_mode_halt(self, tmp_path):
        with patch("rngrename.prompt.error_prompt", return_value=OnErrorResponse.HALT):
            with pytest.raises(UserHaltError):
                dedup_paths([tmp_path / "missing"], ErrorHandlingMode.WARN)


class TestRenameFiles:
    """Unit tests for renaming with confirmation and error handling."""

    def test_rename_without_confirmation(self, sample_files, tmp_path):
        pairs = [(path, f"new_{i}.txt") for i, path in enumerate(sample_files)]

        count = rename_files(pairs, False, ConfirmMode.NONE, 10, ErrorHandlingMode.HALT)

        assert count == 3
        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "new_0.txt",
            "new_1.txt",
            "new_2.txt",
        ]
        assert (tmp_path / "new_0.txt").read_text() == "a.txt"

    def test_dry_run_touches_nothing(self, sample_files, tmp_path):
        pairs = [(path, f"new_{i}.txt") for i, path in enumerate(sample_files)]

        count = rename_files(pairs, True, ConfirmMode.NONE, 10, ErrorHandlingMode.HALT)

        assert count == 3
        assert sorted(p.name for p in tmp_path.iterdir()) == ["a.txt", "b.txt", "c.txt"]

    def test_refuses_to_overwrite(self, sample_files):
        with pytest.raises(FileExistsError):
            do_rename(sample_files[0], "b.txt", dry_run=False)

        assert sample_files[0].exists()
        assert sample_files[1].read_text() == "b.txt"

    def test_overwrite_halt_mode(self, sample_files):
        pairs = [(sample_files[0], "b.txt")]

        with pytest.raises(FileOperationError, match="overwrite"):
            rename_files(pairs, False, ConfirmMode.NONE, 10, ErrorHandlingMode.HALT)

    def test_overwrite_ignore_mode_continues(self, sample_files, tmp_path):
        pairs = [(sample_files[0], "b.txt"), (sample_files[2], "z.txt")]

        count = rename_files(
            pairs, False, ConfirmMode.NONE, 10, ErrorHandlingMode.IGNORE
        )

        assert count == 1
        assert (tmp_path / "z.txt").exists()
        assert sample_files[0].exists()

    def test_batch_confirmation(self, sample_files, tmp_path):
        pairs = [(path, f"new_{i}.txt") for i, path in enumerate(sample_files)]
        responses = iter([BatchConfirmResponse.PROCEED, BatchConfirmResponse.SKIP])

        with patch(
            "rngrename.file_ops.batch_prompt", side_effect=lambda: next(responses)
        ) as mock_prompt:
            count = rename_files(
                pairs, False, ConfirmMode.BATCH, 2, ErrorHandlingMode.HALT
            )

        assert mock_prompt.call_count == 2
        assert count == 2
        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "c.txt",
            "new_0.txt",
            "new_1.txt",
        ]

    def test_batch_size_zero_confirms_once(self, sample_files):
        pairs = [(path, f"new_{i}.txt") for i, path in enumerate(sample_files)]

        with patch(
            "rngrename.file_ops.batch_prompt",
            return_value=BatchConfirmResponse.PROCEED,
        ) as mock_prompt:
            count = rename_files(
                pairs, False, ConfirmMode.BATCH, 0, ErrorHandlingMode.HALT
            )

        assert mock_prompt.call_count == 1
        assert count == 3

    def test_each_confirmation(self, sample_files):
        pairs = [(path, f"new_{i}.txt") for i, path in enumerate(sample_files)]

        with patch(
            "rngrename.file_ops.batch_prompt",
            return_value=BatchConfirmResponse.PROCEED,
        ) as mock_prompt:
            count = rename_files(
                pairs, False, ConfirmMode.EACH, 10, ErrorHandlingMode.HALT
            )

        assert mock_prompt.call_count == 3
        assert count == 3

    def test_batch_halt(self, sample_files):
        pairs = [(path, f"new_{i}.txt") for i, path in enumerate(sample_files)]

        with patch(
            "rngrename.file_ops.batch_prompt", return_value=BatchConfirmResponse.HALT
        ):
            with pytest.raises(UserHaltError):
                rename_files(pairs, False, ConfirmMode.BATCH, 10, ErrorHandlingMode.HALT)

        assert all(path.exists() for path in sample_files)
