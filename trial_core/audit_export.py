"""Export the evaluator's audit trail.

Each evaluator step (a response, a block switch, a completion) leaves one
event dict behind. The exporters coerce those dicts to a fixed set of columns
so a partial or hand-built event still serializes:

>>> to_json([{"step": "3", "flags": ("incomplete",)}])["events"][0]["step"]
3
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional
import csv
import io
import json


def _as_int(val: Any) -> int:
    try:
        return int(val)
    except (TypeError, ValueError):
        return 0


def _as_text(val: Any) -> str:
    return "" if val is None else str(val)


def _as_flags(val: Any) -> List[str]:
    return [str(f) for f in (val or [])]


def _as_block_map(val: Any) -> Optional[Dict[str, bool]]:
    if val is None:
        return None
    return {str(block): bool(ok) for block, ok in dict(val).items()}


# column -> coercer, in export order
_COLUMNS: Dict[str, Callable[[Any], Any]] = {
    "step": _as_int,
    "event": _as_text,
    "block": _as_text,
    "n_responses": _as_int,
    "flags": _as_flags,
    "is_reliable": bool,
    "reliability_by_block": _as_block_map,
}


def _normalized(events: Iterable[Optional[Dict[str, Any]]]) -> Iterator[Dict[str, Any]]:
    for event in events:
        event = event or {}
        yield {col: coerce(event.get(col)) for col, coerce in _COLUMNS.items()}


def _csv_cells(row: Dict[str, Any]) -> List[Any]:
    by_block = row["reliability_by_block"]
    cells = dict(row)
    cells["flags"] = ";".join(row["flags"])
    cells["reliability_by_block"] = "" if by_block is None else json.dumps(by_block, separators=(",", ":"))
    return [cells[col] for col in _COLUMNS]


def to_json(events: Iterable[Optional[Dict[str, Any]]]) -> Dict[str, Any]:
    return {"events": list(_normalized(events))}


def to_csv(events: Iterable[Optional[Dict[str, Any]]]) -> str:
    """One CSV row per event under a fixed header.

    Flags are joined with ``;``. The per-block verdicts are written as compact
    JSON, or left empty for a run that never started a block.
    """

    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(list(_COLUMNS))
    writer.writerows(_csv_cells(row) for row in _normalized(events))
    return buf.getvalue()


__all__ = ["to_json", "to_csv"]
