from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple


class ValidityResult(NamedTuple):
    flags: List[str]
    is_reliable: bool


# evaluate_validity(response_times=..., responses=..., correct=..., completed=...)
PolicyFn = Callable[..., ValidityResult]
EngagementCallback = Callable[..., None]


@dataclass(frozen=True)
class ResponseRecord:
    response_time_ms: float
    response_label: str
    is_correct: int


@dataclass
class ValidityReport:
    flags: List[str]
    is_reliable: bool
    reliability_by_block: Optional[Dict[str, bool]] = None
    block: Optional[str] = None
    n_responses: int = 0

    def callback_args(self) -> tuple:
        """Positional arguments for ``handle_engagement_flags``.

        Unscoped runs report ``(flags, is_reliable)``; block-scoped runs add
        the per-block verdict map as a third argument.
        """
        if self.reliability_by_block is None:
            return (list(self.flags), self.is_reliable)
        return (list(self.flags), self.is_reliable, dict(self.reliability_by_block))

    def to_dict(self) -> Dict[str, object]:
        return {
            "flags": list(self.flags),
            "is_reliable": self.is_reliable,
            "reliability_by_block": None if self.reliability_by_block is None else dict(self.reliability_by_block),
            "block": self.block,
            "n_responses": self.n_responses,
        }


@dataclass(frozen=True)
class EvaluatorState:
    current_block: Optional[str] = None
    response_times: Tuple[float, ...] = ()
    responses: Tuple[str, ...] = ()
    correct: Tuple[int, ...] = ()
    completed: bool = False
    preserved_flags: Tuple[str, ...] = ()
    reliability_by_block: Dict[str, bool] = field(default_factory=dict)

    @property
    def n_responses(self) -> int:
        return len(self.response_times)

    @property
    def block_scoped(self) -> bool:
        return self.current_block is not None


@dataclass
class AgeData:
    age: Optional[int]
    age_months: Optional[int]
    birth_month: Optional[int]
    birth_year: Optional[int]
