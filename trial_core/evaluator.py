# trial_core/evaluator.py
"""Stateful response-validity evaluation for one experiment run.

The run is modelled as an immutable :class:`EvaluatorState` and three pure
transitions (``start_block``, ``record_response``, ``complete``).
:class:`ValidityEvaluator` threads that state through successive trial events
and hands every emitted report to the engagement-flag callback.
"""
from __future__ import annotations
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple
import logging

from .config import DEBUG_TRACE, TRACE_FIELDS, FLAG_INCOMPLETE
from .types import EvaluatorState, EngagementCallback, PolicyFn, ValidityReport, ValidityResult
from .validity import noop_evaluate_validity

log = logging.getLogger(__name__)


def _emit_trace(**values: object) -> None:
    if not DEBUG_TRACE:
        return
    ordered = []
    for key in TRACE_FIELDS:
        if key in values:
            ordered.append(f"{key}={values[key]}")
    if ordered:
        log.info("trace %s", " ".join(str(val) for val in ordered))


def _noop_callback(*_: Any) -> None:
    return None


def suffix_flags(flags: List[str], block: str) -> List[str]:
    """Tag block flags with ``_<block>``; ``incomplete`` is run-level and stays bare."""
    return [f if f == FLAG_INCOMPLETE else f"{f}_{block}" for f in flags]


def _as_correct(value: Any) -> int:
    return 1 if value == 1 else 0


def _evaluate(state: EvaluatorState, policy: PolicyFn) -> ValidityResult:
    result = policy(
        response_times=list(state.response_times),
        responses=list(state.responses),
        correct=list(state.correct),
        completed=state.completed,
    )
    flags, is_reliable = result
    return ValidityResult(list(flags or []), bool(is_reliable))


def _publish(state: EvaluatorState, policy: PolicyFn) -> Tuple[EvaluatorState, ValidityReport]:
    result = _evaluate(state, policy)
    if not state.block_scoped:
        report = ValidityReport(
            flags=result.flags,
            is_reliable=result.is_reliable,
            n_responses=state.n_responses,
        )
        return state, report

    block = state.current_block
    by_block = dict(state.reliability_by_block)
    by_block[block] = result.is_reliable
    state = replace(state, reliability_by_block=by_block)
    report = ValidityReport(
        flags=list(state.preserved_flags) + suffix_flags(result.flags, block),
        is_reliable=all(by_block.values()),
        reliability_by_block=dict(by_block),
        block=block,
        n_responses=state.n_responses,
    )
    return state, report


def record_response(
    state: EvaluatorState,
    policy: PolicyFn,
    response_time: float,
    response: str,
    is_correct: int,
) -> Tuple[EvaluatorState, ValidityReport]:
    state = replace(
        state,
        response_times=state.response_times + (float(response_time),),
        responses=state.responses + (response,),
        correct=state.correct + (_as_correct(is_correct),),
    )
    return _publish(state, policy)


def complete(state: EvaluatorState, policy: PolicyFn) -> Tuple[EvaluatorState, ValidityReport]:
    return _publish(replace(state, completed=True), policy)


def start_block(state: EvaluatorState, policy: PolicyFn, block_name: str) -> EvaluatorState:
    """Finalize the outgoing block (if it has data) and open ``block_name``.

    The outgoing block is scored with ``policy``; its verdict is recorded and
    its flags are frozen into ``preserved_flags``. Emits no report.
    """

    if state.response_times and state.block_scoped:
        outgoing = state.current_block
        result = _evaluate(state, policy)
        by_block = dict(state.reliability_by_block)
        by_block[outgoing] = result.is_reliable
        state = replace(
            state,
            preserved_flags=state.preserved_flags + tuple(suffix_flags(result.flags, outgoing)),
            reliability_by_block=by_block,
        )
        log.info("block %s finalized: reliable=%s flags=%s", outgoing, result.is_reliable, result.flags)
    elif state.response_times:
        log.info("discarding %d unscoped responses at first block start", state.n_responses)

    return replace(
        state,
        current_block=block_name,
        response_times=(),
        responses=(),
        correct=(),
        completed=False,
    )


class ValidityEvaluator:
    """Accumulates trial responses and reports engagement flags.

    ``handle_engagement_flags`` is called after every response and on
    completion, with ``(flags, is_reliable)`` for an unscoped run or
    ``(flags, is_reliable, reliability_by_block)`` once a block has been
    started.
    """

    def __init__(
        self,
        evaluate_validity: Optional[PolicyFn] = None,
        handle_engagement_flags: Optional[EngagementCallback] = None,
    ):
        self.evaluate_validity: PolicyFn = evaluate_validity or noop_evaluate_validity
        self.handle_engagement_flags: EngagementCallback = handle_engagement_flags or _noop_callback
        self.state = EvaluatorState()
        self.audit_events: List[Dict[str, object]] = []
        self.last_report: Optional[ValidityReport] = None
        self._step = 0

    # read-only views of the current state
    @property
    def response_times(self) -> List[float]:
        return list(self.state.response_times)

    @property
    def responses(self) -> List[str]:
        return list(self.state.responses)

    @property
    def correct(self) -> List[int]:
        return list(self.state.correct)

    @property
    def preserved_flags(self) -> List[str]:
        return list(self.state.preserved_flags)

    @property
    def current_block(self) -> Optional[str]:
        return self.state.current_block

    @property
    def reliability_by_block(self) -> Dict[str, bool]:
        return dict(self.state.reliability_by_block)

    @property
    def completed(self) -> bool:
        return self.state.completed

    def start_new_block_validation(self, block_name: str, evaluate_validity: Optional[PolicyFn] = None) -> None:
        self.state = start_block(self.state, self.evaluate_validity, block_name)
        if evaluate_validity is not None:
            self.evaluate_validity = evaluate_validity
        log.info("block %s started", block_name)

    def add_response_data(self, response_time: float, response: str, is_correct: int) -> None:
        """Record one trial response and publish the updated flags.

        ``response`` is the choice the participant made (``left_arrow``,
        ``button_3``, ...); ``is_correct`` is 1 for a correct answer, else 0.
        """
        self.state, report = record_response(
            self.state, self.evaluate_validity, response_time, response, is_correct
        )
        self._dispatch("response", report)

    def mark_as_completed(self) -> None:
        self.state, report = complete(self.state, self.evaluate_validity)
        self._dispatch("complete", report)

    def calculate_and_update_flags(self) -> ValidityReport:
        """Re-score the current window and publish it without adding data."""
        self.state, report = _publish(self.state, self.evaluate_validity)
        self._dispatch("update", report)
        return report

    def _dispatch(self, event: str, report: ValidityReport) -> None:
        self._step += 1
        self.last_report = report
        row = {"step": self._step, "event": event, **report.to_dict()}
        self.audit_events.append(row)
        _emit_trace(**row)
        self.handle_engagement_flags(*report.callback_args())
