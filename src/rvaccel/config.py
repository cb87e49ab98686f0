"""
Simulator Configuration

Defaults used by the command-line tools and PipelineSession: which board
and operating point to estimate for, an optional extra boards file, the
cycle bound for pipeline runs, the reset seed and the log level.

Configuration is loaded from (in order of precedence):
1. Environment variables (RVACCEL_BOARD, RVACCEL_PROFILE, RVACCEL_BOARDS_FILE,
   RVACCEL_MAX_CYCLES, RVACCEL_LOG_LEVEL)
2. User config file (~/.config/rvaccel/config.json)
3. Project config file (.rvaccel/config.json in the project root)
4. Defaults
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from rvaccel.pipeline import (
    DEFAULT_MAX_CYCLES,
    DEFAULT_SEED_MEMORY,
    DEFAULT_SEED_REGISTERS,
    PipelineSession,
    ResetSeed,
)

logger = logging.getLogger(__name__)


CONFIG_DIR_NAME = 'rvaccel'
CONFIG_FILE_NAME = 'config.json'

ENV_VARS = {
    'RVACCEL_BOARD': 'default_board',
    'RVACCEL_PROFILE': 'default_operating_point',
    'RVACCEL_BOARDS_FILE': 'boards_file',
    'RVACCEL_MAX_CYCLES': 'max_cycles',
    'RVACCEL_LOG_LEVEL': 'log_level',
}


@dataclass
class SimulatorConfig:
    """Configuration for the simulator and emulator tools."""

    default_board: str = "pynq-z2"
    """Board id used when --board is not given."""

    default_operating_point: str = "performance"
    """'performance', 'balanced' or 'low_power'."""

    boards_file: Optional[str] = None
    """YAML/JSON file with extra boards, merged over the built-ins."""

    max_cycles: int = DEFAULT_MAX_CYCLES
    """Upper bound on pipeline cycles for one run (guards backward-branch loops)."""

    seed_registers: Dict[int, int] = field(default_factory=lambda: dict(DEFAULT_SEED_REGISTERS))
    seed_memory: Dict[int, int] = field(default_factory=lambda: dict(DEFAULT_SEED_MEMORY))

    log_level: str = "WARNING"

    def __post_init__(self):
        # JSON object keys are always strings
        self.seed_registers = {int(k): int(v) for k, v in self.seed_registers.items()}
        self.seed_memory = {int(k): int(v) for k, v in self.seed_memory.items()}
        self.max_cycles = int(self.max_cycles)
        if self.max_cycles <= 0:
            raise ValueError(f"max_cycles must be positive, got {self.max_cycles}")
        self.log_level = str(self.log_level).upper()

    @property
    def reset_seed(self) -> ResetSeed:
        return ResetSeed(registers=dict(self.seed_registers), memory=dict(self.seed_memory))

    def new_session(self, source: str = "") -> PipelineSession:
        """PipelineSession seeded and bounded by this configuration."""
        return PipelineSession(source, dict(self.seed_registers), dict(self.seed_memory),
                               max_cycles=self.max_cycles)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = asdict(self)
        result['seed_registers'] = {str(k): v for k, v in self.seed_registers.items()}
        result['seed_memory'] = {str(k): v for k, v in self.seed_memory.items()}
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimulatorConfig':
        """Create from dictionary, ignoring unknown keys."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


def _find_project_root() -> Optional[Path]:
    """Find the project root by looking for pyproject.toml or setup.py."""
    current = Path.cwd()
    for parent in [current] + list(current.parents):
        if (parent / 'pyproject.toml').exists() or (parent / 'setup.py').exists():
            return parent
    return None


def _user_config_dir() -> Path:
    if os.name == 'nt':
        return Path(os.environ.get('APPDATA', Path.home() / 'AppData' / 'Roaming'))
    return Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config'))


def user_config_path() -> Path:
    return _user_config_dir() / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def _load_config_file(path: Path) -> Optional[Dict[str, Any]]:
    """Load configuration from a JSON file; unreadable files are skipped."""
    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Ignoring config file %s: %s", path, e)
            return None
        if isinstance(data, dict):
            return data
        logger.warning("Ignoring config file %s: expected a JSON object", path)
    return None


def get_config() -> SimulatorConfig:
    """
    Get the simulator configuration.

    Loads configuration from config files and environment variables,
    with defaults for anything unset. A config that fails validation
    falls back to the defaults.

    Returns:
        SimulatorConfig instance
    """
    config_data: Dict[str, Any] = {}

    # 1. Project config (.rvaccel/config.json)
    project_root = _find_project_root()
    if project_root:
        project_config = _load_config_file(project_root / f'.{CONFIG_DIR_NAME}' / CONFIG_FILE_NAME)
        if project_config:
            config_data.update(project_config)

    # 2. User config (~/.config/rvaccel/config.json)
    user_config = _load_config_file(user_config_path())
    if user_config:
        config_data.update(user_config)

    # 3. Environment variables (highest precedence)
    for env_name, key in ENV_VARS.items():
        value = os.environ.get(env_name)
        if value:
            config_data[key] = value

    try:
        return SimulatorConfig.from_dict(config_data)
    except (TypeError, ValueError) as e:
        logger.warning("Invalid configuration (%s); using defaults", e)
        return SimulatorConfig()


def save_config(config: SimulatorConfig, path: Optional[Path] = None) -> Path:
    """
    Save configuration to a file.

    Args:
        config: Configuration to save
        path: Path to save to (default: user config directory)

    Returns:
        The path written
    """
    if path is None:
        path = user_config_path()
    path = Path(path)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)
    return path
