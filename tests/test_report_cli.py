from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest
from rich.console import Console

import analytics_report
from console.report import format_gap, format_metric_value, format_score
from feedback_analytics import schemas

ASSESSMENT = {
    "id": "a1",
    "sections": [
        {
            "id": "s1",
            "title": "Building Trust",
            "questions": [
                {"id": "q1", "text": "Admits mistakes", "competencies": [{"id": "c1", "name": "Integrity"}]},
                {"id": "q2", "text": "Shares information openly"},
            ],
        }
    ],
}


@pytest.fixture()
def restore_logging():
    previous_handlers = logging.root.handlers[:]
    previous_level = logging.root.level
    yield
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    for handler in previous_handlers:
        logging.root.addHandler(handler)
    logging.root.setLevel(previous_level)


def recording_console() -> Console:
    return Console(record=True, width=140, color_system=None)


def write_individual_inputs(tmp_path: Path) -> tuple[Path, Path]:
    assessment_path = tmp_path / "assessment.json"
    assessment_path.write_text(json.dumps(ASSESSMENT))
    responses_path = tmp_path / "responses.jsonl"
    responses_path.write_text(
        "\n".join(
            json.dumps(item)
            for item in [
                {"question_id": "q1", "self_rating": 7, "reviewer_ratings": [4, 5]},
                {"question_id": "q2", "self_rating": 3, "reviewer_ratings": [6]},
            ]
        )
    )
    return assessment_path, responses_path


def test_formatters():
    assert format_score(None) == "n/a"
    assert format_score(4.256) == "4.26"
    assert format_gap(1.5) == "+1.50"
    assert format_gap(None) == "n/a"
    metric = schemas.PerformanceMetric(label="Completion Rate", value=66.666)
    assert format_metric_value(metric) == "66.7%"
    no_time = schemas.PerformanceMetric(label="Time to Complete", value=0.0)
    assert format_metric_value(no_time) == "n/a"


def test_individual_report(tmp_path):
    assessment_path, responses_path = write_individual_inputs(tmp_path)
    console = recording_console()

    exit_code = analytics_report.main(
        ["individual", "--assessment", str(assessment_path), "--responses", str(responses_path)],
        console=console,
    )

    output = console.export_text()
    assert exit_code == 0
    assert "Building Trust" in output
    assert "Blind spot" in output
    assert "Hidden strength" in output
    assert "Integrity" in output
    assert "Top strengths" in output


def test_individual_report_json(tmp_path):
    assessment_path, responses_path = write_individual_inputs(tmp_path)
    console = recording_console()

    exit_code = analytics_report.main(
        ["--json", "individual", "--assessment", str(assessment_path), "--responses", str(responses_path)],
        console=console,
    )

    body = json.loads(console.export_text())
    assert exit_code == 0
    assert body["result"]["sections"][0]["questions"][0]["alignment"] == "blind_spot"


def test_organization_report_marks_suppressed_sections(tmp_path):
    result = {
        "sections": [
            {"section_id": "s1", "section_title": "Building Trust", "reviewer_average": 4.5},
        ]
    }
    results_path = tmp_path / "results.json"
    results_path.write_text(json.dumps([result, result]))
    console = recording_console()

    exit_code = analytics_report.main(["organization", str(results_path)], console=console)

    output = console.export_text()
    assert exit_code == 0
    assert "insufficient data" in output

    console = recording_console()
    analytics_report.main(["organization", str(results_path), "--min-cohort", "2"], console=console)
    assert "4.50" in console.export_text()


def test_trends_report(tmp_path):
    records_path = tmp_path / "records.jsonl"
    records_path.write_text(
        json.dumps(
            {
                "status": "completed",
                "started_at": "2024-06-29T10:00:00+00:00",
                "completed_at": "2024-06-29T12:00:00+00:00",
                "total_score": 6,
            }
        )
    )
    console = recording_console()

    exit_code = analytics_report.main(
        ["trends", str(records_path), "--window", "week", "--now", "2024-06-30T12:00:00+00:00"],
        console=console,
    )

    output = console.export_text()
    assert exit_code == 0
    assert "Performance (week)" in output
    assert "Completion Rate" in output
    assert "2 hours" in output


def test_errors_exit_non_zero(tmp_path):
    console = recording_console()

    exit_code = analytics_report.main(["trends", str(tmp_path / "missing.jsonl")], console=console)

    assert exit_code == 1
    assert "Error" in console.export_text()


def test_unknown_window_exits_non_zero(tmp_path):
    records_path = tmp_path / "records.json"
    records_path.write_text("[]")
    console = recording_console()

    exit_code = analytics_report.main(["trends", str(records_path), "--window", "decade"], console=console)

    assert exit_code == 1


def test_individual_report_lists_every_question(tmp_path):
    assessment_path, responses_path = write_individual_inputs(tmp_path)
    responses_path.write_text(
        "\n".join(
            json.dumps(item)
            for item in [
                {"question_id": "q1", "self_rating": 7, "reviewer_ratings": [4, 5]},
                {"question_id": "q2", "self_rating": 3},
            ]
        )
    )
    console = recording_console()

    analytics_report.main(
        ["individual", "--assessment", str(assessment_path), "--responses", str(responses_path)],
        console=console,
    )

    output = console.export_text()
    assert "Admits mistakes" in output
    assert "Shares information openly" in output
    assert "+2.50" in output
    assert "No data" in output


def test_negative_threshold_exits_non_zero(tmp_path):
    assessment_path, responses_path = write_individual_inputs(tmp_path)
    console = recording_console()

    exit_code = analytics_report.main(
        [
            "--json",
            "individual",
            "--assessment",
            str(assessment_path),
            "--responses",
            str(responses_path),
            "--threshold",
            "-1",
        ],
        console=console,
    )

    output = console.export_text()
    assert exit_code == 1
    assert "threshold" in output
    assert "blind_spot" not in output


def test_configured_scale_max_applies_to_cli(tmp_path, restore_logging):
    assessment_path, responses_path = write_individual_inputs(tmp_path)
    config_path = tmp_path / "config.yaml"
    config_path.write_text("scale_max: 5\n")
    console = recording_console()

    analytics_report.main(
        [
            "--config",
            str(config_path),
            "--json",
            "individual",
            "--assessment",
            str(assessment_path),
            "--responses",
            str(responses_path),
        ],
        console=console,
    )

    body = json.loads(console.export_text())
    assert body["result"]["sections"][0]["questions"][0]["self_rating"] == 5.0


def test_negative_cohort_minimum_exits_non_zero(tmp_path):
    results_path = tmp_path / "results.json"
    results_path.write_text("[]")
    console = recording_console()

    exit_code = analytics_report.main(
        ["organization", str(results_path), "--min-cohort", "-3"], console=console
    )

    assert exit_code == 1


def test_distribution_report(tmp_path):
    _, responses_path = write_individual_inputs(tmp_path)
    console = recording_console()

    exit_code = analytics_report.main(
        ["--json", "distribution", str(responses_path), "--scale-max", "5"], console=console
    )

    assert exit_code == 0
    assert json.loads(console.export_text()) == {"1": 0, "2": 0, "3": 0, "4": 1, "5": 2}

    console = recording_console()
    analytics_report.main(["distribution", str(responses_path)], console=console)
    assert "3 ratings" in console.export_text()


def test_trends_report_includes_completion_summary(tmp_path):
    records_path = tmp_path / "records.json"
    records_path.write_text(
        json.dumps([{"status": "completed", "total_score": 6}, {"status": "pending"}])
    )
    console = recording_console()

    analytics_report.main(["trends", str(records_path)], console=console)

    output = console.export_text()
    assert "Completion" in output
    assert "1 of 2" in output
    assert "50.0%" in output
