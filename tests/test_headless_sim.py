import json
import logging
import os

import numpy as np
import pytest

from pintograph.app import run_headless, run_pattern
from pintograph.core.errors import ConfigurationError
from pintograph.core.headless_sim import SweepSettings, sweep
from pintograph.core.linkage import LinkageConfig, evaluate_chain
from pintograph.core.settings import LinkageSettings, save_settings


def make_config(rods):
    return LinkageConfig.from_host(10.0, [3.0, 2.0], [1.0, -1.5], [True, True], rods)


@pytest.mark.parametrize(
    "start,end,step,expected",
    [
        (0.0, 1.0, 0.25, [0.0, 0.25, 0.5, 0.75, 1.0]),
        (0.0, 1.0, 0.3, [0.0, 0.3, 0.6, 0.9]),
        (1.0, 0.0, -0.5, [1.0, 0.5, 0.0]),
        (2.0, 2.0, 0.1, [2.0]),
    ],
)
def test_phases(start, end, step, expected):
    np.testing.assert_allclose(SweepSettings(start, end, step).phases(), expected)


@pytest.mark.parametrize("step", [0.0, float("nan"), float("inf"), -0.1])
def test_bad_step(step):
    with pytest.raises(ConfigurationError):
        SweepSettings(0.0, 1.0, step).phases()


@pytest.mark.parametrize(
    "start,end",
    [(0.0, float("inf")), (float("-inf"), 1.0), (float("nan"), 1.0), (0.0, float("nan"))],
)
def test_bad_range(start, end):
    with pytest.raises(ConfigurationError):
        SweepSettings(start, end, 0.1).phases()


def test_feasible_sweep():
    cfg = make_config([10.0] * 6 + [2.0])
    result = sweep(cfg, 0.0, 1.0, 0.1)
    assert len(result.records) == 11
    assert result.failures == 0
    assert result.trace.shape == (11, 2)
    assert tuple(result.trace[4]) == pytest.approx(evaluate_chain(cfg, 0.4).pen)


def test_infeasible_samples_are_recorded(caplog):
    cfg = make_config([1.0] * 7)
    with caplog.at_level(logging.WARNING, logger="pintograph"):
        result = sweep(cfg, 0.0, 0.5, 0.25)
    assert result.failures == 3
    assert result.trace.shape == (0, 2)
    assert all(r["error"].startswith("H at t=") for r in result.records)
    assert "3 of 3 phases infeasible" in caplog.text


def test_run_headless_saves(tmp_path):
    settings_path = tmp_path / "machine.json"
    save_settings(LinkageSettings(sweep={"start": 0, "end": 1, "step": 0.5}), str(settings_path))
    out = tmp_path / "out"
    assert run_headless(str(settings_path), str(out)) == 0
    last = json.loads((out / "runs" / "last_run.json").read_text(encoding="utf-8"))["path"]
    meta = json.loads(open(os.path.join(last, "run.json"), encoding="utf-8").read())
    assert meta["status"]["kind"] == "sweep"
    assert meta["summary"] == {"records": 3, "ok": 3, "failed": 0}


def test_run_headless_exit_codes(tmp_path):
    infeasible = tmp_path / "short.json"
    save_settings(LinkageSettings(rod_lengths=[1.0] * 7), str(infeasible))
    assert run_headless(str(infeasible), None) == 1

    broken = tmp_path / "broken.json"
    save_settings(LinkageSettings(radii=[3.0]), str(broken))
    assert run_headless(str(broken), None) == 2
    assert run_headless(str(tmp_path / "missing.json"), None) == 2


@pytest.mark.parametrize(
    "payload",
    ['{"radii": 3}', '{"sweep": "fast"}', '{"parameters": [1]}', '{"directions": "CCW"}'],
)
def test_run_headless_rejects_malformed_files(tmp_path, payload):
    path = tmp_path / "odd.json"
    path.write_text(payload, encoding="utf-8")
    assert run_headless(str(path), None) == 2
    assert run_pattern(str(path), 36, None) == 2


def test_run_headless_rejects_nan_sweep(tmp_path):
    path = tmp_path / "nan.json"
    path.write_text('{"sweep": {"start": NaN}}', encoding="utf-8")
    assert run_headless(str(path), None) == 2


def test_run_pattern(tmp_path):
    out = tmp_path / "out"
    assert run_pattern(None, 36, str(out)) == 0
    assert run_pattern(None, 0, None) == 2
    runs = [d for d in os.listdir(out / "runs") if d != "last_run.json"]
    assert len(runs) == 1
    lines = (out / "runs" / runs[0] / "path.csv").read_text(encoding="utf-8").splitlines()
    assert lines[0] == "i,x,y"
    assert len(lines) == 38
