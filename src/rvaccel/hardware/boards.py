"""
Built-in FPGA Board Presets

Four development boards, each offered at three DVFS operating points. The
soft RISC-V core with the NN extensions runs in fabric; the baseline is the
board's hard ARM core (Zynq) or a soft core clocked like one (Artix).

Usage:
    from rvaccel.hardware import get_board, get_profile, OperatingPoint

    board = get_board("pynq-z2")
    profile = get_profile("pynq-z2", OperatingPoint.BALANCED)
    profile.riscv_clock_mhz   # 100
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Union

from .dvfs_profile import CostTable, DVFSProfile, OperatingPoint


@dataclass(frozen=True)
class Board:
    """A development board and its operating points."""
    board_id: str
    name: str
    fpga: str
    profiles: Mapping[OperatingPoint, DVFSProfile] = field(default_factory=dict)

    def __post_init__(self):
        if not self.board_id:
            raise ValueError("Board id must not be empty")
        if not self.profiles:
            raise ValueError(f"Board {self.board_id!r} defines no operating points")

    def profile(self, point: Union[OperatingPoint, str]) -> DVFSProfile:
        point = OperatingPoint.from_name(point)
        if point not in self.profiles:
            available = ", ".join(p.value for p in self.profiles)
            raise KeyError(f"Board {self.board_id!r} has no {point.value!r} profile "
                           f"(available: {available})")
        return self.profiles[point]

    @property
    def operating_points(self) -> List[OperatingPoint]:
        return [p for p in OperatingPoint if p in self.profiles]


# ---------------------------------------------------------------------------
# Cycle tables for the accelerated core. Zynq parts share one table and
# Artix parts another; only the slower Artix fabric changes the multi-cycle
# units.
# ---------------------------------------------------------------------------

ZYNQ_CYCLES = CostTable({
    "mac": 1, "relu": 1, "sigmoid": 4, "tanh": 4,
    "conv2d.3x3": 3, "dwconv.3x3": 3, "maxpool.2x2": 2,
    "fadd.s": 2, "fsub.s": 2, "fmul.s": 3, "fdiv.s": 12,
    "flw": 2, "fsw": 1, "lw": 2, "sw": 1,
    "beq": 1, "jal": 1, "addi": 1, "add": 1, "sub": 1,
    "default": 1,
})

ARTIX_CYCLES = CostTable({
    "mac": 1, "relu": 1, "sigmoid": 5, "tanh": 5,
    "conv2d.3x3": 4, "dwconv.3x3": 4, "maxpool.2x2": 3,
    "fadd.s": 3, "fsub.s": 3, "fmul.s": 4, "fdiv.s": 14,
    "flw": 3, "fsw": 2, "lw": 3, "sw": 2,
    "beq": 1, "jal": 1, "addi": 1, "add": 1, "sub": 1,
    "default": 1,
})

# Order of the positional energy rows below
_ENERGY_KEYS = (
    "mac", "relu", "conv2d.3x3", "dwconv.3x3", "maxpool.2x2", "sigmoid", "tanh",
    "fadd.s", "fsub.s", "fmul.s", "fdiv.s", "flw", "fsw", "lw", "sw",
    "beq", "jal", "addi", "default",
)


def _energy(*values: float) -> CostTable:
    """pJ/cycle table from a row in _ENERGY_KEYS order."""
    if len(values) != len(_ENERGY_KEYS):
        raise ValueError(f"Expected {len(_ENERGY_KEYS)} energy values, got {len(values)}")
    return CostTable(dict(zip(_ENERGY_KEYS, values)))


def _profile(name, cycles, energy, sw_energy, static_hw, static_sw, hit_rate,
             miss_penalty, dram_pj, predictor, mispredict, riscv_mhz, arm_mhz) -> DVFSProfile:
    return DVFSProfile(
        name=name,
        riscv_clock_mhz=riscv_mhz,
        arm_clock_mhz=arm_mhz,
        energy_per_cycle_hw=energy,
        energy_per_cycle_sw=sw_energy,
        static_power_hw_mw=static_hw,
        static_power_sw_mw=static_sw,
        l1_cache_hit_rate=hit_rate,
        l1_miss_penalty_cycles=miss_penalty,
        dram_energy_per_access_pj=dram_pj,
        branch_predictor_accuracy=predictor,
        branch_mispredict_penalty_cycles=mispredict,
        cycles_hw=cycles,
    )


# =============================================================================
# PYNQ-Z2 / Zybo Z7-20 (Xilinx Zynq-7000, ARM Cortex-A9 baseline)
# =============================================================================

def _zynq_profiles() -> Dict[OperatingPoint, DVFSProfile]:
    return {
        OperatingPoint.PERFORMANCE: _profile(
            "Performance", ZYNQ_CYCLES,
            _energy(4.7, 1.6, 13, 10.3, 6, 23, 23, 1.2, 1.2, 3.9, 16,
                    7.8, 7.8, 6.2, 6.2, 0.78, 0.94, 0.62, 0.78),
            sw_energy=29, static_hw=150, static_sw=250, hit_rate=0.98,
            miss_penalty=40, dram_pj=650, predictor=0.92, mispredict=3,
            riscv_mhz=125, arm_mhz=780,
        ),
        OperatingPoint.BALANCED: _profile(
            "Balanced", ZYNQ_CYCLES,
            _energy(3, 1, 8.33, 6.67, 4, 15, 15, 0.8, 0.8, 2.5, 10,
                    5, 5, 4, 4, 0.5, 0.6, 0.4, 0.5),
            sw_energy=20, static_hw=100, static_sw=180, hit_rate=0.97,
            miss_penalty=42, dram_pj=680, predictor=0.90, mispredict=3,
            riscv_mhz=100, arm_mhz=650,
        ),
        OperatingPoint.LOW_POWER: _profile(
            "Low Power", ZYNQ_CYCLES,
            _energy(1.7, 0.56, 4.67, 3.67, 2.25, 8.4, 8.4, 0.45, 0.45, 1.4, 5.6,
                    2.8, 2.8, 2.2, 2.2, 0.28, 0.34, 0.22, 0.28),
            sw_energy=13, static_hw=70, static_sw=120, hit_rate=0.96,
            miss_penalty=45, dram_pj=720, predictor=0.88, mispredict=3,
            riscv_mhz=75, arm_mhz=520,
        ),
    }


# =============================================================================
# Arty A7-100T (Xilinx Artix-7)
# =============================================================================

def _arty_profiles() -> Dict[OperatingPoint, DVFSProfile]:
    return {
        OperatingPoint.PERFORMANCE: _profile(
            "Performance", ARTIX_CYCLES,
            _energy(3.7, 1.2, 10.3, 8.33, 4.95, 19, 19, 0.99, 0.99, 3.1, 12,
                    6.2, 6.2, 5, 5, 0.62, 0.75, 0.5, 0.62),
            sw_energy=23, static_hw=120, static_sw=180, hit_rate=0.96,
            miss_penalty=50, dram_pj=800, predictor=0.90, mispredict=4,
            riscv_mhz=125, arm_mhz=500,
        ),
        OperatingPoint.BALANCED: _profile(
            "Balanced", ARTIX_CYCLES,
            _energy(2.4, 0.8, 6.67, 5.33, 3.2, 12, 12, 0.64, 0.64, 2, 8,
                    4, 4, 3.2, 3.2, 0.4, 0.48, 0.32, 0.4),
            sw_energy=16, static_hw=80, static_sw=130, hit_rate=0.95,
            miss_penalty=52, dram_pj=840, predictor=0.88, mispredict=4,
            riscv_mhz=100, arm_mhz=400,
        ),
        OperatingPoint.LOW_POWER: _profile(
            "Low Power", ARTIX_CYCLES,
            _energy(1.3, 0.45, 3.67, 3, 1.8, 6.7, 6.7, 0.36, 0.36, 1.1, 4.5,
                    2.2, 2.2, 1.8, 1.8, 0.22, 0.27, 0.18, 0.22),
            sw_energy=10, static_hw=50, static_sw=90, hit_rate=0.94,
            miss_penalty=55, dram_pj=880, predictor=0.85, mispredict=4,
            riscv_mhz=75, arm_mhz=320,
        ),
    }


# =============================================================================
# Basys 3 (Xilinx Artix-7, smaller part)
# =============================================================================

def _basys3_profiles() -> Dict[OperatingPoint, DVFSProfile]:
    return {
        OperatingPoint.PERFORMANCE: _profile(
            "Performance", ARTIX_CYCLES,
            _energy(3.3, 1.1, 9.33, 7.33, 4.4, 17, 17, 0.88, 0.88, 2.8, 11,
                    5.5, 5.5, 4.4, 4.4, 0.55, 0.66, 0.44, 0.55),
            sw_energy=20, static_hw=110, static_sw=170, hit_rate=0.96,
            miss_penalty=50, dram_pj=800, predictor=0.90, mispredict=4,
            riscv_mhz=125, arm_mhz=500,
        ),
        OperatingPoint.BALANCED: _profile(
            "Balanced", ARTIX_CYCLES,
            _energy(2.1, 0.7, 6, 4.67, 2.8, 11, 11, 0.56, 0.56, 1.8, 7,
                    3.5, 3.5, 2.8, 2.8, 0.35, 0.42, 0.28, 0.35),
            sw_energy=14, static_hw=75, static_sw=120, hit_rate=0.95,
            miss_penalty=52, dram_pj=840, predictor=0.88, mispredict=4,
            riscv_mhz=100, arm_mhz=400,
        ),
        OperatingPoint.LOW_POWER: _profile(
            "Low Power", ARTIX_CYCLES,
            _energy(1.2, 0.39, 3.27, 2.6, 1.55, 5.9, 5.9, 0.31, 0.31, 0.98, 3.9,
                    2, 2, 1.6, 1.6, 0.2, 0.24, 0.16, 0.2),
            sw_energy=9, static_hw=45, static_sw=80, hit_rate=0.94,
            miss_penalty=55, dram_pj=880, predictor=0.85, mispredict=4,
            riscv_mhz=75, arm_mhz=320,
        ),
    }


PYNQ_Z2 = Board("pynq-z2", "PYNQ-Z2", "Xilinx Zynq-7000", _zynq_profiles())
ARTY_A7_100T = Board("arty-a7", "Arty A7-100T", "Xilinx Artix-7", _arty_profiles())
BASYS_3 = Board("basys3", "Basys 3", "Xilinx Artix-7", _basys3_profiles())
ZYBO_Z7_20 = Board("zybo-z7", "Zybo Z7-20", "Xilinx Zynq-7000", _zynq_profiles())

BOARDS: Dict[str, Board] = {
    board.board_id: board
    for board in (PYNQ_Z2, ARTY_A7_100T, BASYS_3, ZYBO_Z7_20)
}

DEFAULT_BOARD_ID = PYNQ_Z2.board_id


def _catalog(extra: Optional[Mapping[str, Board]]) -> Dict[str, Board]:
    catalog = dict(BOARDS)
    if extra:
        catalog.update(extra)
    return catalog


def get_board(board_id: str, extra: Optional[Mapping[str, Board]] = None) -> Board:
    """
    Look up a board by id (case-insensitive).

    ``extra`` boards (e.g. from load_boards()) take precedence over the
    built-ins. Raises KeyError naming the valid ids.
    """
    catalog = _catalog(extra)
    key = board_id.strip().lower()
    for candidate_id, board in catalog.items():
        if candidate_id.lower() == key:
            return board
    valid = ", ".join(sorted(catalog))
    raise KeyError(f"Unknown board {board_id!r} (available: {valid})")


def get_profile(
    board_id: str,
    point: Union[OperatingPoint, str] = OperatingPoint.PERFORMANCE,
    extra: Optional[Mapping[str, Board]] = None,
) -> DVFSProfile:
    return get_board(board_id, extra).profile(point)


def list_boards(extra: Optional[Mapping[str, Board]] = None) -> List[Board]:
    """All known boards, built-ins first, then extras in file order."""
    return list(_catalog(extra).values())
