from __future__ import annotations
import os, json, pathlib, logging
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

log = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


FLAG_TOO_FAST = "responseTimeTooFast"
FLAG_TOO_SLOW = "responseTimeTooSlow"
FLAG_ACCURACY = "accuracyTooLow"
FLAG_SIMILAR = "responsesTooSimilar"
FLAG_INCOMPLETE = "incomplete"
FLAG_NOT_ENOUGH = "notEnoughResponses"

RESPONSE_TIME_LOW_THRESHOLD: float = 400
RESPONSE_TIME_HIGH_THRESHOLD: float = 10000
ACCURACY_THRESHOLD: float = 0.2
MIN_RESPONSES_REQUIRED: int = 0
INCLUDED_RELIABILITY_FLAGS: Tuple[str, ...] = (FLAG_TOO_FAST,)
RESPONSE_SIMILARITY_THRESHOLD: Optional[int] = None
REPORT_ALL_FLAGS: bool = False

DEBUG_TRACE: bool = False
TRACE_FIELDS: tuple[str, ...] = (
    "step",
    "event",
    "block",
    "n_responses",
    "flags",
    "is_reliable",
)
# // env overrides for staging/ops; defaults match the jsPsych task defaults.
RESPONSE_TIME_LOW_THRESHOLD = _env_float("RT_LOW_THRESHOLD_MS", RESPONSE_TIME_LOW_THRESHOLD)
RESPONSE_TIME_HIGH_THRESHOLD = _env_float("RT_HIGH_THRESHOLD_MS", RESPONSE_TIME_HIGH_THRESHOLD)
ACCURACY_THRESHOLD = _env_float("ACCURACY_THRESHOLD", ACCURACY_THRESHOLD)
MIN_RESPONSES_REQUIRED = _env_int("MIN_RESPONSES_REQUIRED", MIN_RESPONSES_REQUIRED)
INCLUDED_RELIABILITY_FLAGS = _env_list("INCLUDED_RELIABILITY_FLAGS", INCLUDED_RELIABILITY_FLAGS)
RESPONSE_SIMILARITY_THRESHOLD = _env_int("RESPONSE_SIMILARITY_THRESHOLD", RESPONSE_SIMILARITY_THRESHOLD)
REPORT_ALL_FLAGS = _env_bool("REPORT_ALL_FLAGS", REPORT_ALL_FLAGS)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", False)


class ValidityConfig(BaseModel):
    """Thresholds and allow-list for one validity policy.

    Accepts snake_case field names or the camelCase keys used by the
    experiment JSON configs (``responseTimeLowThreshold`` and so on).
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    response_time_low_threshold: float = Field(default=RESPONSE_TIME_LOW_THRESHOLD, ge=0)
    response_time_high_threshold: float = Field(default=RESPONSE_TIME_HIGH_THRESHOLD, ge=0)
    accuracy_threshold: float = Field(default=ACCURACY_THRESHOLD, ge=0, le=1)
    min_responses_required: int = Field(default=MIN_RESPONSES_REQUIRED, ge=0)
    included_reliability_flags: Tuple[str, ...] = INCLUDED_RELIABILITY_FLAGS
    response_similarity_threshold: Optional[int] = Field(default=RESPONSE_SIMILARITY_THRESHOLD, ge=1)
    report_all_flags: bool = REPORT_ALL_FLAGS


def load_config(path: str = "config.json") -> dict:
    cfg = {}
    p = pathlib.Path(path)
    if p.exists():
        try:
            cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            log.warning("could not read %s, using defaults", p)
            cfg = {}
    if not isinstance(cfg, dict):
        cfg = {}
    return cfg


def load_validity_config(cfg: dict | None = None, path: str = "config.json") -> ValidityConfig:
    """Build a ValidityConfig from the ``validity`` section of a config dict.

    Missing keys fall back to the module defaults (and their env overrides).
    """

    if cfg is None:
        cfg = load_config(path)
    section = cfg.get("validity") or {}
    return ValidityConfig(**section)
