import pytest

from projax.script_runner_helpers import RetryBudget


def test_budget_counts_down_to_exhaustion():
    budget = RetryBudget(1)

    assert not budget.exhausted
    budget.consume()
    assert budget.exhausted
    assert budget.used == 1
    with pytest.raises(RuntimeError):
        budget.consume()


def test_zero_budget_starts_exhausted():
    assert RetryBudget(0).exhausted


def test_negative_budget_rejected():
    with pytest.raises(ValueError):
        RetryBudget(-1)
