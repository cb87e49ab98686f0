"""
Tests for configuration loading and precedence.
"""

import json

import pytest

from rvaccel.config import (
    ENV_VARS,
    SimulatorConfig,
    get_config,
    save_config,
    user_config_path,
)


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Empty working directory, private user config dir, no RVACCEL_* variables."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "xdg"))
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return work


def write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


class TestSimulatorConfig:

    def test_defaults(self):
        config = SimulatorConfig()
        assert config.default_board == "pynq-z2"
        assert config.default_operating_point == "performance"
        assert config.max_cycles == 10_000
        assert config.seed_registers == {1: 256}
        assert config.seed_memory == {256: 42}
        assert config.log_level == "WARNING"

    def test_string_keys_converted(self):
        config = SimulatorConfig.from_dict({"seed_registers": {"5": "7"}, "max_cycles": "50"})
        assert config.seed_registers == {5: 7}
        assert config.max_cycles == 50

    def test_invalid_max_cycles(self):
        with pytest.raises(ValueError):
            SimulatorConfig(max_cycles=0)

    def test_unknown_keys_ignored(self):
        assert SimulatorConfig.from_dict({"colour": "blue"}) == SimulatorConfig()

    def test_round_trip(self):
        config = SimulatorConfig(default_board="basys3", seed_memory={512: 9}, log_level="info")
        assert config.log_level == "INFO"
        assert SimulatorConfig.from_dict(json.loads(json.dumps(config.to_dict()))) == config

    def test_reset_seed(self):
        seed = SimulatorConfig(seed_registers={2: 3}).reset_seed
        assert seed.registers == {2: 3}
        assert seed.memory == {256: 42}

    def test_new_session(self):
        config = SimulatorConfig(max_cycles=30, seed_registers={1: 8}, seed_memory={8: 5})
        session = config.new_session("lw x2, 0(x1)")
        assert session.max_cycles == 30
        session.run()
        assert session.state.registers[2] == 5


class TestGetConfig:

    def test_defaults_without_files(self, isolated):
        assert get_config() == SimulatorConfig()

    def test_project_config(self, isolated):
        (isolated / "pyproject.toml").write_text("")
        write_json(isolated / ".rvaccel" / "config.json", {"default_board": "arty-a7"})
        assert get_config().default_board == "arty-a7"

    def test_user_overrides_project(self, isolated):
        (isolated / "pyproject.toml").write_text("")
        write_json(isolated / ".rvaccel" / "config.json",
                   {"default_board": "arty-a7", "max_cycles": 20})
        write_json(user_config_path(), {"default_board": "basys3"})
        config = get_config()
        assert config.default_board == "basys3"
        assert config.max_cycles == 20

    def test_env_overrides_files(self, isolated, monkeypatch):
        write_json(user_config_path(), {"default_board": "basys3"})
        monkeypatch.setenv("RVACCEL_BOARD", "zybo-z7")
        monkeypatch.setenv("RVACCEL_MAX_CYCLES", "99")
        config = get_config()
        assert config.default_board == "zybo-z7"
        assert config.max_cycles == 99

    def test_malformed_file_skipped(self, isolated):
        path = user_config_path()
        path.parent.mkdir(parents=True)
        path.write_text("{not json")
        assert get_config() == SimulatorConfig()

    def test_invalid_values_fall_back(self, isolated, monkeypatch):
        monkeypatch.setenv("RVACCEL_MAX_CYCLES", "-5")
        assert get_config().max_cycles == 10_000

    def test_save_config(self, isolated):
        path = save_config(SimulatorConfig(default_operating_point="balanced"))
        assert path == user_config_path()
        assert get_config().default_operating_point == "balanced"
