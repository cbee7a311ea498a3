"""
Tests for the simulate_game command-line script
Run with: pytest tests/test_simulate_game.py -v
"""

import importlib.util
import json
import sys
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "simulate_game.py"


@pytest.fixture
def script():
    module_spec = importlib.util.spec_from_file_location("simulate_game", SCRIPT)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


@pytest.fixture
def request_file(tmp_path):
    path = tmp_path / "game.json"
    path.write_text(json.dumps({
        "home_team": "Kansas City Chiefs",
        "away_team": "Buffalo Bills",
        "home_spread": -2.5,
        "total": 47.5,
        "iterations": 300,
        "seed": 4,
    }))
    return path


def _main(script, monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["simulate_game.py", *map(str, argv)])
    monkeypatch.setattr(script, "load_dotenv", lambda: None)
    script.main()


class TestSimulateGameScript:

    def test_prints_prediction(self, script, request_file, monkeypatch, capsys):
        monkeypatch.delenv("SIM_ITERATIONS", raising=False)
        _main(script, monkeypatch, request_file)
        out = json.loads(capsys.readouterr().out)
        assert out["home_team"] == "Kansas City Chiefs"
        assert out["result"]["iterations"] == 300
        assert out["spread_edge"] is not None

    def test_bad_config_exits_2(self, script, request_file, monkeypatch):
        monkeypatch.setenv("SIM_REGRESSION_FACTOR", "3")
        with pytest.raises(SystemExit) as exc:
            _main(script, monkeypatch, request_file)
        assert exc.value.code == 2

    def test_missing_request_exits_2(self, script, tmp_path, monkeypatch):
        with pytest.raises(SystemExit) as exc:
            _main(script, monkeypatch, tmp_path / "nope.json")
        assert exc.value.code == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
