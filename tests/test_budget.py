import pytest
from pydantic import ValidationError

from marktrim.budget import DEFAULT_MAX_BYTES, DEFAULT_OMISSION, MeasureBy, TruncationBudget


def test_defaults() -> None:
    budget = TruncationBudget()
    assert budget.max_bytes == DEFAULT_MAX_BYTES
    assert budget.omission == DEFAULT_OMISSION
    assert budget.measure_by is MeasureBy.SERIALIZED
    assert budget.word_boundary is None
    assert budget.omission_size == 3


def test_negative_max_bytes_clamped() -> None:
    assert TruncationBudget(max_bytes=-10).max_bytes == 0


def test_empty_word_boundary_is_none() -> None:
    assert TruncationBudget(word_boundary="").word_boundary is None


def test_window_includes_omission() -> None:
    assert TruncationBudget(omission="...", boundary_window=5).window == 8


def test_budget_is_frozen_and_strict() -> None:
    budget = TruncationBudget()
    with pytest.raises(ValidationError):
        budget.max_bytes = 5  # type: ignore[misc]
    with pytest.raises(ValidationError):
        TruncationBudget(unknown=1)  # type: ignore[call-arg]
    with pytest.raises(ValidationError):
        TruncationBudget(boundary_window=-1)


def test_measure_by_from_string() -> None:
    assert TruncationBudget(measure_by="content").measure_by is MeasureBy.CONTENT
