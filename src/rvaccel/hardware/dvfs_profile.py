"""
DVFS Operating-Point Profiles

A DVFSProfile bundles everything the performance/energy model needs to know
about one board at one operating point: the clocks of the accelerated
RISC-V core and the baseline ARM core, per-instruction cycle and energy
tables for the custom core, static power, and the cache and branch
predictor parameters used for penalty cycles.

Per-instruction costs are held in CostTable, a mapping keyed by Mnemonic
with a mandatory default entry. Looking up a mnemonic the table does not
list returns the default.

Units:
    clocks                      MHz
    energy_per_cycle_*          pJ per cycle
    static_power_*              mW
    dram_energy_per_access_pj   pJ
    *_penalty_cycles            cycles
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union


class Mnemonic(Enum):
    """Instructions understood by the accelerated core's cost model."""
    # Custom NN extensions
    MAC = "mac"
    RELU = "relu"
    CONV2D_3X3 = "conv2d.3x3"
    DWCONV_3X3 = "dwconv.3x3"
    MAXPOOL_2X2 = "maxpool.2x2"
    SIGMOID = "sigmoid"
    TANH = "tanh"

    # Standard single-precision FPU
    FADD_S = "fadd.s"
    FSUB_S = "fsub.s"
    FMUL_S = "fmul.s"
    FDIV_S = "fdiv.s"
    FLW = "flw"
    FSW = "fsw"

    # Integer and control
    LW = "lw"
    SW = "sw"
    BEQ = "beq"
    JAL = "jal"
    ADDI = "addi"
    ADD = "add"
    SUB = "sub"

    @classmethod
    def from_name(cls, name: str) -> Optional['Mnemonic']:
        """Mnemonic for an assembly name (case-insensitive), or None."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


DEFAULT_KEY = "default"

CostKey = Union[Mnemonic, str]


def _key_name(key: CostKey) -> str:
    if isinstance(key, Mnemonic):
        return key.value
    return str(key).strip().lower()


class CostTable(Mapping[str, float]):
    """
    Per-mnemonic cost (cycles or pJ/cycle) with a mandatory default.

    Keys are stored as mnemonic strings so that tables loaded from files may
    carry entries for instructions outside the Mnemonic enum; lookup with
    either a Mnemonic member or a string.
    """

    def __init__(self, entries: Mapping[CostKey, float]):
        values: Dict[str, float] = {}
        for key, value in entries.items():
            name = _key_name(key)
            try:
                number = float(value)
            except (TypeError, ValueError):
                raise ValueError(f"Cost for {name!r} must be a number, got {value!r}")
            if math.isnan(number) or number < 0:
                raise ValueError(f"Cost for {name!r} must be non-negative, got {value!r}")
            values[name] = number
        if DEFAULT_KEY not in values:
            raise ValueError(f"Cost table requires a {DEFAULT_KEY!r} entry")
        self._values = values

    @classmethod
    def from_dict(cls, data: Mapping[str, float]) -> 'CostTable':
        return cls(data)

    def to_dict(self) -> Dict[str, float]:
        return dict(self._values)

    @property
    def default(self) -> float:
        return self._values[DEFAULT_KEY]

    def lookup(self, key: CostKey) -> float:
        """Cost for ``key``, falling back to the default entry."""
        return self._values.get(_key_name(key), self._values[DEFAULT_KEY])

    def with_entry(self, key: CostKey, value: float) -> 'CostTable':
        """Copy of this table with one entry replaced."""
        values = dict(self._values)
        values[_key_name(key)] = value
        return CostTable(values)

    def scaled(self, factor: float) -> 'CostTable':
        return CostTable({k: v * factor for k, v in self._values.items()})

    def __getitem__(self, key: CostKey) -> float:
        return self._values[_key_name(key)]

    def __contains__(self, key) -> bool:
        return _key_name(key) in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other) -> bool:
        if isinstance(other, CostTable):
            return self._values == other._values
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(sorted(self._values.items())))

    def __repr__(self) -> str:
        return f"CostTable({self._values})"


class OperatingPoint(Enum):
    """Named DVFS operating points offered by every built-in board."""
    PERFORMANCE = "performance"
    BALANCED = "balanced"
    LOW_POWER = "low_power"

    @property
    def display_name(self) -> str:
        return {
            OperatingPoint.PERFORMANCE: "Performance",
            OperatingPoint.BALANCED: "Balanced",
            OperatingPoint.LOW_POWER: "Low Power",
        }[self]

    @classmethod
    def from_name(cls, name: Union[str, 'OperatingPoint']) -> 'OperatingPoint':
        """Accepts 'performance', 'Low Power', 'low-power', ... Raises KeyError."""
        if isinstance(name, OperatingPoint):
            return name
        key = str(name).strip().lower().replace(" ", "_").replace("-", "_")
        for point in cls:
            if point.value == key:
                return point
        valid = ", ".join(p.value for p in cls)
        raise KeyError(f"Unknown operating point {name!r} (expected one of: {valid})")


# Fields that must be strictly positive / within [0, 1]
_POSITIVE_FIELDS = ("riscv_clock_mhz", "arm_clock_mhz")
_NON_NEGATIVE_FIELDS = (
    "energy_per_cycle_sw",
    "static_power_hw_mw",
    "static_power_sw_mw",
    "l1_miss_penalty_cycles",
    "dram_energy_per_access_pj",
    "branch_mispredict_penalty_cycles",
)
_FRACTION_FIELDS = ("l1_cache_hit_rate", "branch_predictor_accuracy")


@dataclass(frozen=True)
class DVFSProfile:
    """
    One board at one operating point.

    Invalid values raise ValueError on construction, so a profile that
    exists is always safe to feed to the estimator.
    """
    name: str
    riscv_clock_mhz: float
    arm_clock_mhz: float
    energy_per_cycle_hw: CostTable
    energy_per_cycle_sw: float
    static_power_hw_mw: float
    static_power_sw_mw: float
    l1_cache_hit_rate: float
    l1_miss_penalty_cycles: float
    dram_energy_per_access_pj: float
    branch_predictor_accuracy: float
    branch_mispredict_penalty_cycles: float
    cycles_hw: CostTable
    description: str = ""

    def __post_init__(self):
        if not self.name:
            raise ValueError("Profile name must not be empty")
        for name in _POSITIVE_FIELDS:
            value = getattr(self, name)
            if not _is_number(value) or value <= 0:
                raise ValueError(f"{self.name}: {name} must be > 0, got {value!r}")
        for name in _NON_NEGATIVE_FIELDS:
            value = getattr(self, name)
            if not _is_number(value) or value < 0:
                raise ValueError(f"{self.name}: {name} must be >= 0, got {value!r}")
        for name in _FRACTION_FIELDS:
            value = getattr(self, name)
            if not _is_number(value) or not 0.0 <= value <= 1.0:
                raise ValueError(f"{self.name}: {name} must be in [0, 1], got {value!r}")
        for name in ("energy_per_cycle_hw", "cycles_hw"):
            if not isinstance(getattr(self, name), CostTable):
                raise ValueError(f"{self.name}: {name} must be a CostTable")

    @property
    def clock_ratio(self) -> float:
        """Accelerated core clock relative to the baseline core."""
        return self.riscv_clock_mhz / self.arm_clock_mhz

    def with_changes(self, **changes) -> 'DVFSProfile':
        """Copy with fields replaced (validated again)."""
        return replace(self, **changes)

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "description": self.description,
            "riscv_clock_mhz": self.riscv_clock_mhz,
            "arm_clock_mhz": self.arm_clock_mhz,
            "energy_per_cycle_hw": self.energy_per_cycle_hw.to_dict(),
            "energy_per_cycle_sw": self.energy_per_cycle_sw,
            "static_power_hw_mw": self.static_power_hw_mw,
            "static_power_sw_mw": self.static_power_sw_mw,
            "l1_cache_hit_rate": self.l1_cache_hit_rate,
            "l1_miss_penalty_cycles": self.l1_miss_penalty_cycles,
            "dram_energy_per_access_pj": self.dram_energy_per_access_pj,
            "branch_predictor_accuracy": self.branch_predictor_accuracy,
            "branch_mispredict_penalty_cycles": self.branch_mispredict_penalty_cycles,
            "cycles_hw": self.cycles_hw.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> 'DVFSProfile':
        """Build from a to_dict()-style mapping. Missing fields raise ValueError."""
        missing = [name for name in PROFILE_FIELDS if name not in data]
        if missing:
            label = data.get("name", "<unnamed>")
            raise ValueError(f"Profile {label!r} is missing field(s): {', '.join(missing)}")
        kwargs = {name: data[name] for name in PROFILE_FIELDS}
        kwargs["name"] = str(kwargs["name"])
        for name in ("energy_per_cycle_hw", "cycles_hw"):
            table = kwargs[name]
            if not isinstance(table, Mapping):
                raise ValueError(f"Profile {kwargs['name']!r}: {name} must be a mapping")
            kwargs[name] = CostTable.from_dict(table)
        for name in PROFILE_FIELDS:
            if name in ("name", "energy_per_cycle_hw", "cycles_hw"):
                continue
            kwargs[name] = _to_float(kwargs["name"], name, kwargs[name])
        return cls(description=str(data.get("description", "")), **kwargs)


PROFILE_FIELDS: Tuple[str, ...] = tuple(
    f for f in DVFSProfile.__dataclass_fields__ if f != "description"
)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)


def _to_float(profile: str, name: str, value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Profile {profile!r}: {name} must be a number, got {value!r}")
