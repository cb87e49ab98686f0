"""
Board and DVFS Profiles

Per-board, per-operating-point parameters consumed by the performance and
energy model, with the built-in FPGA boards and a YAML/JSON loader for
additional ones.
"""

from .dvfs_profile import (
    Mnemonic,
    CostTable,
    OperatingPoint,
    DVFSProfile,
    PROFILE_FIELDS,
)

from .boards import (
    Board,
    BOARDS,
    DEFAULT_BOARD_ID,
    PYNQ_Z2,
    ARTY_A7_100T,
    BASYS_3,
    ZYBO_Z7_20,
    ZYNQ_CYCLES,
    ARTIX_CYCLES,
    get_board,
    get_profile,
    list_boards,
)

from .profile_loader import (
    board_to_dict,
    board_from_dict,
    load_boards,
    save_boards,
)

__all__ = [
    'Mnemonic',
    'CostTable',
    'OperatingPoint',
    'DVFSProfile',
    'PROFILE_FIELDS',
    # Boards
    'Board',
    'BOARDS',
    'DEFAULT_BOARD_ID',
    'PYNQ_Z2',
    'ARTY_A7_100T',
    'BASYS_3',
    'ZYBO_Z7_20',
    'ZYNQ_CYCLES',
    'ARTIX_CYCLES',
    'get_board',
    'get_profile',
    'list_boards',
    # Files
    'board_to_dict',
    'board_from_dict',
    'load_boards',
    'save_boards',
]
