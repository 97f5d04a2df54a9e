from __future__ import annotations

import json

from tools import build_preload, score_responses

_LOG = """block,rt_ms,response,correct
DEL,600,left_arrow,1
DEL,620,left_arrow,1
DEL,650,right_arrow,1
DEL,710,left_arrow,0
FSM,320,left_arrow,1
FSM,350,left_arrow,1
FSM,310,right_arrow,1
FSM,oops,left_arrow,1
FSM,310,left_arrow,1
"""


def _write_inputs(tmp_path):
    log_path = tmp_path / "responses.csv"
    log_path.write_text(_LOG, encoding="utf-8")
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text(json.dumps({
        "validity": {
            "responseTimeLowThreshold": 500,
            "responseTimeHighThreshold": 800,
            "includedReliabilityFlags": ["responseTimeTooFast", "incomplete"],
            "minResponsesRequired": 4,
        }
    }), encoding="utf-8")
    return log_path, cfg_path


def test_score_responses_reports_final_verdict(tmp_path, capsys):
    log_path, cfg_path = _write_inputs(tmp_path)
    assert score_responses.main([str(log_path), "--config", str(cfg_path), "--completed"]) == 0

    report = json.loads(capsys.readouterr().out)
    assert report["flags"] == ["responseTimeTooFast_FSM"]
    assert report["is_reliable"] is False
    assert report["reliability_by_block"] == {"DEL": True, "FSM": False}
    assert report["n_responses"] == 4, "the malformed row is skipped"


def test_score_responses_without_completion_keeps_incomplete(tmp_path, capsys):
    log_path, cfg_path = _write_inputs(tmp_path)
    score_responses.main([str(log_path), "--config", str(cfg_path), "--format", "json"])

    events = json.loads(capsys.readouterr().out)["events"]
    assert events[-1]["flags"] == ["incomplete", "responseTimeTooFast_FSM", "incomplete"]
    assert all(e["event"] == "response" for e in events)


def test_build_preload_prints_trials(tmp_path, capsys):
    manifest = tmp_path / "assets.json"
    manifest.write_text(json.dumps({"preload": {"intro": {"device": ["go.png"]}}}), encoding="utf-8")

    assert build_preload.main([str(manifest), "https://cdn", "--device", "mobile"]) == 0
    trials = json.loads(capsys.readouterr().out)
    assert trials["intro"]["images"] == ["https://cdn/mobile/go.png"]

    build_preload.main([str(manifest), "https://cdn", "--assets"])
    assets = json.loads(capsys.readouterr().out)
    assert assets["images"] == {"go": "https://cdn/desktop/go.png"}


def test_score_responses_skips_rows_without_response_time(tmp_path, capsys, caplog):
    _, cfg_path = _write_inputs(tmp_path)
    cfg_path.write_text(json.dumps({
        "validity": {
            "responseTimeLowThreshold": 500,
            "includedReliabilityFlags": ["responseTimeTooFast", "incomplete"],
            "minResponsesRequired": 1,
        }
    }), encoding="utf-8")
    log_path = tmp_path / "timeouts.csv"
    log_path.write_text(
        "block,rt_ms,response,correct\nDEL,,,\nDEL,null,,\nDEL,900,left_arrow,1\n",
        encoding="utf-8",
    )

    with caplog.at_level("WARNING", logger=score_responses.__name__):
        score_responses.main([str(log_path), "--config", str(cfg_path), "--completed"])

    report = json.loads(capsys.readouterr().out)
    assert report["flags"] == [], "timed-out trials must not count as 0 ms responses"
    assert report["is_reliable"] is True
    assert report["reliability_by_block"] == {"DEL": True}
    assert report["n_responses"] == 1
    assert sum("without a response time" in r.getMessage() for r in caplog.records) == 2
