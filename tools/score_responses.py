from __future__ import annotations
import argparse, csv, json, logging, sys
from pathlib import Path
from typing import Dict, List, Optional

from trial_core.config import ValidityConfig, load_config, load_validity_config
from trial_core.evaluator import ValidityEvaluator
from trial_core.validity import create_evaluate_validity
from trial_core.audit_export import to_json as audit_to_json, to_csv as audit_to_csv
from trial_core.types import ResponseRecord

log = logging.getLogger(__name__)


def _read_rows(path: Path) -> List[Dict[str, str]]:
    with path.open("r", encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))


_MISSING = {"", "null", "none", "nan"}


def _parse_row(row: Dict[str, str]) -> Optional[ResponseRecord]:
    """Turn one CSV row into a response, or ``None`` if it cannot be scored.

    jsPsych writes an empty (or ``null``) rt when a trial times out, so such
    rows carry no response time and are skipped. A blank ``correct`` counts
    as incorrect.
    """
    raw_rt = (row.get("rt_ms") or "").strip()
    if raw_rt.lower() in _MISSING:
        log.warning("skipping row without a response time: %s", row)
        return None
    try:
        rt = float(raw_rt)
        correct = int(float((row.get("correct") or "").strip() or 0))
    except ValueError:
        log.warning("skipping malformed row: %s", row)
        return None
    return ResponseRecord(rt, row.get("response") or "", correct)


def replay(rows: List[Dict[str, str]], config: ValidityConfig, completed: bool = False) -> ValidityEvaluator:
    """Feed a response log through a fresh evaluator.

    A change in the ``block`` column starts a new block; with ``completed``
    each block (or the unscoped run) is marked completed when its rows end.
    """
    evaluator = ValidityEvaluator(evaluate_validity=create_evaluate_validity(config))
    current: Optional[str] = None
    for row in rows:
        block = (row.get("block") or "").strip() or None
        if block is not None and block != current:
            if completed and current is not None:
                evaluator.mark_as_completed()
            evaluator.start_new_block_validation(block)
            current = block
        record = _parse_row(row)
        if record is None:
            continue
        evaluator.add_response_data(record.response_time_ms, record.response_label, record.is_correct)
    if completed:
        evaluator.mark_as_completed()
    return evaluator


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Score a trial response log for reliability.")
    ap.add_argument("csv", help="CSV with columns block,rt_ms,response,correct")
    ap.add_argument("--config", default="config.json", help="JSON config with a 'validity' section")
    ap.add_argument("--completed", action="store_true", help="mark every block as completed")
    ap.add_argument("--format", choices=("report", "json", "csv"), default="report")
    args = ap.parse_args(argv)

    config = load_validity_config(load_config(args.config))
    evaluator = replay(_read_rows(Path(args.csv)), config, completed=args.completed)

    if args.format == "csv":
        sys.stdout.write(audit_to_csv(evaluator.audit_events))
    elif args.format == "json":
        print(json.dumps(audit_to_json(evaluator.audit_events), indent=2))
    else:
        report = evaluator.last_report
        print(json.dumps(report.to_dict() if report else {}, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
