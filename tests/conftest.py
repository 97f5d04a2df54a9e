from __future__ import annotations

from typing import Iterable, Tuple

import pytest

from trial_core.evaluator import ValidityEvaluator
from trial_core.validity import create_evaluate_validity


class FlagRecorder:
    """Stand-in for ``handle_engagement_flags`` that keeps every call."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def __call__(self, *args) -> None:
        self.calls.append(args)

    @property
    def last(self) -> tuple:
        assert self.calls, "callback was never invoked"
        return self.calls[-1]


def feed(evaluator: ValidityEvaluator, rows: Iterable[Tuple[float, str, int]]) -> None:
    for rt, response, correct in rows:
        evaluator.add_response_data(rt, response, correct)


def build_evaluator(recorder: FlagRecorder, **options) -> ValidityEvaluator:
    """Create an evaluator wired to ``recorder`` with policy ``options``."""

    return ValidityEvaluator(
        evaluate_validity=create_evaluate_validity(**options),
        handle_engagement_flags=recorder,
    )


@pytest.fixture
def recorder() -> FlagRecorder:
    return FlagRecorder()


@pytest.fixture
def block_evaluator(recorder: FlagRecorder) -> ValidityEvaluator:
    evaluator = build_evaluator(
        recorder,
        responseTimeLowThreshold=500,
        responseTimeHighThreshold=800,
        includedReliabilityFlags=["responseTimeTooFast", "incomplete"],
        minResponsesRequired=4,
    )
    evaluator.start_new_block_validation("DEL")
    return evaluator
