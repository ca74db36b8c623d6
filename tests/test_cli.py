"""CLI smoke tests (Typer CliRunner, harness stubbed)."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

import clmatbench.harness as harness
from clmatbench.cli import app
from clmatbench.models import ComparisonReport
from clmatbench.outcome import (
    BuildFailure,
    DeviceOperationFailure,
    GenericRuntimeFailure,
    SourceNotFound,
    Success,
)

runner = CliRunner()


@pytest.fixture
def captured_config(monkeypatch):
    seen = {}

    def install(outcome):
        def fake_run(config, **kwargs):
            seen["config"] = config
            return outcome

        monkeypatch.setattr(harness, "run_comparison", fake_run)
        return seen

    for name in ("CLMATBENCH_KERNEL_PATH", "CLMATBENCH_LOG_FILE", "CLMATBENCH_LOG_FORMAT", "CLMATBENCH_DEVICE"):
        monkeypatch.delenv(name, raising=False)
    return install


def test_success_prints_three_lines(captured_config):
    report = ComparisonReport(dimension=512, cpu_time_ms=900.0, gpu_time_ms=3.0, speedup=300.0)
    seen = captured_config(Success(report=report))
    result = runner.invoke(app, [])
    assert result.exit_code == 0, result.output
    for line in report.lines():
        assert line in result.stdout
    assert seen["config"].dimension == 512


def test_kernel_option_reaches_config(captured_config, tmp_path):
    seen = captured_config(SourceNotFound(path=tmp_path / "k.cl", message="Cannot open kernel source: k.cl"))
    result = runner.invoke(app, ["--kernel", str(tmp_path / "k.cl")])
    assert result.exit_code == 1
    assert seen["config"].kernel_path == tmp_path / "k.cl"
    assert "millisec" not in result.stdout


def test_kernel_path_from_env(captured_config, tmp_path, monkeypatch):
    seen = captured_config(GenericRuntimeFailure(message="boom"))
    monkeypatch.setenv("CLMATBENCH_KERNEL_PATH", str(tmp_path / "env.cl"))
    result = runner.invoke(app, [])
    assert result.exit_code == 1
    assert seen["config"].kernel_path == tmp_path / "env.cl"


def test_build_failure_writes_log_and_exits_with_code(captured_config):
    captured_config(BuildFailure(code=-11, logs={"pthread-cpu": "error: expected ';' after expression"}))
    result = runner.invoke(app, ["--log-level", "ERROR"])
    assert result.exit_code == -11
    assert "Build log for device: pthread-cpu" in result.output
    assert "expected ';'" in result.output


def test_device_failure_exit_code(captured_config):
    captured_config(DeviceOperationFailure(code=-5, message="Kernel enqueue failed"))
    result = runner.invoke(app, [])
    assert result.exit_code == -5


def test_bad_device_env_exits_one(captured_config, monkeypatch):
    captured_config(GenericRuntimeFailure(message="unreachable"))
    monkeypatch.setenv("CLMATBENCH_DEVICE", "first")
    result = runner.invoke(app, [])
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output
    assert "CLMATBENCH_DEVICE" in result.output
    assert "ERROR" in result.output


def test_json_log_file(captured_config, tmp_path):
    captured_config(BuildFailure(code=-11, logs={"gfx90a": "error: unknown type name"}))
    log_file = tmp_path / "logs" / "run.jsonl"
    result = runner.invoke(app, ["--log-file", str(log_file), "--log-format", "json"])
    assert result.exit_code == -11
    content = Path(log_file).read_text()
    assert '"level": "ERROR"' in content
    assert "Build log for device: gfx90a" in content
