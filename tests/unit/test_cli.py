import json

from typer.testing import CliRunner

from patterncheck.cli import app


def _write_inputs(tmp_path, patterns, payload):
    flow = tmp_path / "flow.yaml"
    flow.write_text(
        "patterns:\n"
        + "".join(
            f"  - key: {p['key']}\n    type: {p['type']}\n    value: \"{p['value']}\"\n"
            for p in patterns
        )
    )
    data = tmp_path / "payload.json"
    data.write_text(json.dumps(payload))
    return str(flow), str(data)


def _isolate(tmp_path, monkeypatch):
    monkeypatch.setenv("PATTERNCHECK_CONFIG", str(tmp_path / "none.yaml"))
    for name in ("PATTERNCHECK_REPORTER", "PATTERNCHECK_DATABASE_URL", "DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)


def test_run_all_patterns_match(tmp_path, monkeypatch):
    _isolate(tmp_path, monkeypatch)
    flow, payload = _write_inputs(
        tmp_path,
        [{"key": "severity", "type": "equals", "value": "critical"}],
        {"severity": "critical"},
    )

    result = CliRunner().invoke(app, ["run", flow, payload, "--platform", "alertflow"])

    assert result.exit_code == 0, result.stdout
    assert "[running] pattern_check: Checking for patterns" in result.stdout
    assert "Pattern: severity == critical matched. Continue to next step" in result.stdout
    assert '{"success":true}' in result.stdout


def test_run_no_pattern_match_exits_one(tmp_path, monkeypatch):
    _isolate(tmp_path, monkeypatch)
    flow, payload = _write_inputs(
        tmp_path,
        [{"key": "env", "type": "not_equals", "value": "prod"}],
        {"env": "prod"},
    )

    result = CliRunner().invoke(app, ["run", flow, payload])

    assert result.exit_code == 1, result.stdout
    assert "[canceled] pattern_check: Pattern: env != prod matched." in result.stdout
    assert "noPatternMatch" in result.stdout


def test_run_unsupported_platform_exits_two(tmp_path, monkeypatch):
    _isolate(tmp_path, monkeypatch)
    flow, payload = _write_inputs(
        tmp_path, [{"key": "a", "type": "equals", "value": "b"}], {"a": "b"}
    )

    result = CliRunner().invoke(app, ["run", flow, payload, "--platform", "exflow"])

    assert result.exit_code == 2
    assert "not supported" in result.stdout


def test_run_unknown_pattern_type_exits_two(tmp_path, monkeypatch):
    _isolate(tmp_path, monkeypatch)
    flow, payload = _write_inputs(
        tmp_path, [{"key": "a", "type": "regex", "value": "b"}], {"a": "b"}
    )

    result = CliRunner().invoke(app, ["run", flow, payload])

    assert result.exit_code == 2
    assert "Unknown pattern type" in result.stdout


def test_steps_show_reads_sqlite_history(tmp_path, monkeypatch):
    _isolate(tmp_path, monkeypatch)
    monkeypatch.setenv("PATTERNCHECK_DATABASE_URL", f"sqlite://{tmp_path / 'steps.db'}")
    flow, payload = _write_inputs(
        tmp_path, [{"key": "a", "type": "contains", "value": "b"}], {"a": "abc"}
    )

    runner = CliRunner()
    run_result = runner.invoke(app, ["run", flow, payload, "--execution-id", "exec-7"])
    assert run_result.exit_code == 0, run_result.stdout

    result = runner.invoke(app, ["steps", "show", "exec-7"])
    assert result.exit_code == 0, result.stdout
    assert "Checking for patterns" in result.stdout
    assert "Pattern: a contains b matched. Continue to next step" in result.stdout
    assert "[success]" in result.stdout

    missing = runner.invoke(app, ["steps", "show", "unknown"])
    assert missing.exit_code == 1
    assert "No steps recorded" in missing.stdout


def test_describe_prints_metadata(tmp_path, monkeypatch):
    _isolate(tmp_path, monkeypatch)
    result = CliRunner().invoke(app, ["describe"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["action"]["plugin"] == "pattern_check"


def test_run_unknown_reporter_exits_two(tmp_path, monkeypatch):
    _isolate(tmp_path, monkeypatch)
    flow, payload = _write_inputs(
        tmp_path, [{"key": "a", "type": "equals", "value": "b"}], {"a": "b"}
    )

    result = CliRunner().invoke(app, ["run", flow, payload, "--reporter", "kafka"])

    assert result.exit_code == 2
    assert "Unsupported reporter backend" in result.stdout


def test_steps_show_unknown_reporter_exits_two(tmp_path, monkeypatch):
    _isolate(tmp_path, monkeypatch)
    monkeypatch.setenv("PATTERNCHECK_REPORTER", "kafka")

    result = CliRunner().invoke(app, ["steps", "show", "exec-1"])

    assert result.exit_code == 2
    assert "Unsupported reporter backend" in result.stdout


def test_steps_show_without_persistent_reporter_exits_two(tmp_path, monkeypatch):
    _isolate(tmp_path, monkeypatch)

    result = CliRunner().invoke(app, ["steps", "show", "exec-1"])

    assert result.exit_code == 2
    assert "keeps no persistent step history" in result.stdout
    assert "No steps recorded" not in result.stdout
