import json
import math

import pytest

from pintograph.core.errors import ConfigurationError
from pintograph.core.linkage import DYNAMIC, STATIC, Direction
from pintograph.core.parameters import ParameterRegistry, eval_expression
from pintograph.core.settings import (
    LinkageSettings,
    load_settings,
    save_settings,
    settings_or_default,
)


def test_eval_expression_with_params():
    val, err = eval_expression("2*L + sqrt(9)", {"L": 1.5})
    assert err is None
    assert val == pytest.approx(6.0)
    val, err = eval_expression("2*pi", {})
    assert val == pytest.approx(2 * math.pi)


@pytest.mark.parametrize(
    "expr,msg",
    [
        ("", "Empty expression"),
        ("   ", "Empty expression"),
        ("2*W", "Unknown symbol(s): W"),
        ("2*(", "Parse error"),
        ("sqrt(-1)", "Eval error"),
    ],
)
def test_eval_expression_errors(expr, msg):
    val, err = eval_expression(expr, {"L": 1.0})
    assert val is None
    assert err.startswith(msg)


def test_registry():
    reg = ParameterRegistry()
    reg.set_param("L", 4)
    reg.set_param("r_1", "2.5")
    assert reg.resolve("L/2") == 2.0
    assert reg.resolve(3) == 3.0
    assert reg.to_list() == [{"name": "L", "value": 4.0}, {"name": "r_1", "value": 2.5}]
    reg.delete_param("L")
    with pytest.raises(ConfigurationError, match="rods\\[0\\]: Unknown symbol"):
        reg.resolve("L", "rods[0]")


@pytest.mark.parametrize("name", ["", "1L", "pi", "sin", "a-b", "two words"])
def test_registry_rejects_bad_names(name):
    with pytest.raises(ConfigurationError):
        ParameterRegistry().set_param(name, 1.0)


@pytest.mark.parametrize("value", [True, None, [1.0], {"x": 1}])
def test_registry_rejects_non_numbers(value):
    with pytest.raises(ConfigurationError):
        ParameterRegistry().resolve(value, "distance")


def test_default_settings_resolve():
    resolved = LinkageSettings().resolve()
    assert resolved.distance == 10.0
    assert resolved.radii == [3.0, 2.0]
    assert resolved.speeds == [1.0, -1.5]
    assert resolved.directions == [Direction.CCW, Direction.CCW]
    assert resolved.rod_lengths == [10.0] * 6 + [0.0]
    assert resolved.variant == DYNAMIC
    assert resolved.runtime == 20.0
    assert resolved.sweep_end == pytest.approx(2 * math.pi)
    inputs = resolved.host_inputs(start=True)
    assert inputs.start and not inputs.reset
    assert inputs.config().variant == DYNAMIC


def test_expressions_in_settings():
    s = LinkageSettings.from_dict(
        {
            "parameters": [{"name": "L", "value": 8}, {"name": "k", "value": 0.5}],
            "distance": "L + 2",
            "rod_lengths": ["L", "L", "k*L", "k*L", "L", "L"],
            "sweep": {"step": "pi/100"},
        }
    )
    resolved = s.resolve()
    assert resolved.distance == 10.0
    assert resolved.rod_lengths == [8.0, 8.0, 4.0, 4.0, 8.0, 8.0]
    assert resolved.variant == STATIC
    assert resolved.sweep_start == 0.0
    assert resolved.sweep_step == pytest.approx(math.pi / 100)


@pytest.mark.parametrize(
    "data",
    [
        {"rod_lengths": [10.0] * 5},
        {"radii": [3.0, 2.0, 1.0]},
        {"directions": ["CCW", "up"]},
        {"runtime": "T"},
        {"rod_lengths": [10.0, 10.0, 10.0, 10.0, 10.0, "-1", 0.0]},
        {"parameters": [{"name": "pi", "value": 3}]},
        {"radii": 3},
        {"speeds": "1, 2"},
        {"directions": "CCW"},
        {"rod_lengths": {"AH": 10}},
        {"sweep": "fast"},
        {"sweep": ["start", 0]},
        {"parameters": [1]},
        {"parameters": {"L": 1}},
        {"directions": [None, "CCW"]},
        {"distance": float("nan")},
    ],
)
def test_bad_settings_rejected(data):
    with pytest.raises(ConfigurationError):
        LinkageSettings.from_dict(data).resolve()


def test_save_and_load(tmp_path):
    path = tmp_path / "machine.json"
    s = LinkageSettings(parameters=[{"name": "L", "value": 12.0}], rod_lengths=["L"] * 6 + [1.0])
    save_settings(s, str(path))
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["rod_lengths"][0] == "L"
    loaded = load_settings(str(path))
    assert loaded.to_dict() == s.to_dict()
    assert loaded.resolve().rod_lengths[0] == 12.0


def test_load_rejects_bad_json(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_settings(str(bad))
    arr = tmp_path / "arr.json"
    arr.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_settings(str(arr))


def test_missing_file_is_os_error(tmp_path):
    with pytest.raises(OSError):
        load_settings(str(tmp_path / "nope.json"))


def test_settings_or_default():
    assert settings_or_default(None).to_dict() == LinkageSettings().to_dict()


def test_load_rejects_wrong_shapes(tmp_path):
    path = tmp_path / "shape.json"
    path.write_text('{"radii": 3}', encoding="utf-8")
    with pytest.raises(ConfigurationError, match="radii"):
        load_settings(str(path))
    path.write_text('{"sweep": "fast"}', encoding="utf-8")
    with pytest.raises(ConfigurationError, match="sweep"):
        load_settings(str(path))


def test_null_fields_fall_back_to_defaults():
    s = LinkageSettings.from_dict({"parameters": None, "radii": None, "sweep": None})
    assert s.parameters == []
    assert s.radii == [3.0, 2.0]
    assert s.sweep == LinkageSettings().sweep
