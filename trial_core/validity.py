from __future__ import annotations
import logging
from typing import Any, List, Sequence

from .config import (
    ValidityConfig,
    FLAG_TOO_FAST,
    FLAG_TOO_SLOW,
    FLAG_ACCURACY,
    FLAG_SIMILAR,
    FLAG_INCOMPLETE,
    FLAG_NOT_ENOUGH,
)
from .stats import median, accuracy
from .types import PolicyFn, ValidityResult

log = logging.getLogger(__name__)


def _responses_too_similar(responses: Sequence[str], threshold: int | None) -> bool:
    if not threshold or len(responses) < threshold:
        return False
    tail = list(responses[-threshold:])
    return all(r == tail[0] for r in tail)


def create_evaluate_validity(config: ValidityConfig | None = None, **overrides: Any) -> PolicyFn:
    """Return a pure policy that scores one window of response data.

    ``overrides`` accepts snake_case or camelCase option names and is applied
    on top of ``config`` (or the defaults).

    The returned callable takes ``response_times``, ``responses``, ``correct``
    and ``completed`` and returns a :class:`ValidityResult`. A window is
    reliable when none of its flags is in ``included_reliability_flags``.
    Flags outside the allow-list are only reported when ``report_all_flags``
    is set.
    """

    if config is None:
        cfg = ValidityConfig(**overrides)
    elif overrides:
        explicit = ValidityConfig(**overrides).model_dump(exclude_unset=True)
        cfg = ValidityConfig(**{**config.model_dump(), **explicit})
    else:
        cfg = config
    included = frozenset(cfg.included_reliability_flags)

    def evaluate_validity(
        response_times: Sequence[float] = (),
        responses: Sequence[str] = (),
        correct: Sequence[int] = (),
        completed: bool = False,
    ) -> ValidityResult:
        if len(response_times) < cfg.min_responses_required:
            return ValidityResult([FLAG_NOT_ENOUGH], False)

        flags: List[str] = []
        if response_times:
            med = median(response_times)
            if med <= cfg.response_time_low_threshold:
                flags.append(FLAG_TOO_FAST)
            if med >= cfg.response_time_high_threshold:
                flags.append(FLAG_TOO_SLOW)

        if not completed and FLAG_INCOMPLETE in included:
            flags.append(FLAG_INCOMPLETE)

        if _responses_too_similar(responses, cfg.response_similarity_threshold):
            flags.append(FLAG_SIMILAR)

        # accuracy is not applicable to an empty window
        if correct and accuracy(correct) <= cfg.accuracy_threshold:
            flags.append(FLAG_ACCURACY)

        reported = [f for f in flags if f in included]
        is_reliable = not reported
        if cfg.report_all_flags:
            reported = flags
        log.debug("window n=%d flags=%s reliable=%s", len(response_times), flags, is_reliable)
        return ValidityResult(reported, is_reliable)

    evaluate_validity.config = cfg  # type: ignore[attr-defined]
    return evaluate_validity


def noop_evaluate_validity(**_: Any) -> ValidityResult:
    return ValidityResult([], True)
