"""
Board Profile Files

Extra boards can be described in YAML or JSON and used anywhere a built-in
board id is accepted. The document is either a list of boards or a mapping
with a ``boards`` list:

    boards:
      - id: my-board
        name: My Board
        fpga: Xilinx Artix-7
        profiles:
          performance:
            riscv_clock_mhz: 150
            arm_clock_mhz: 500
            energy_per_cycle_hw: {mac: 4.0, default: 0.7}
            energy_per_cycle_sw: 25
            ...
            cycles_hw: {mac: 1, default: 1}

Profile entries use the DVFSProfile.to_dict() field names; a profile's
``name`` defaults to the operating point's display name.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

from rvaccel.documents import load_document, save_document

from .boards import Board
from .dvfs_profile import DVFSProfile, OperatingPoint

logger = logging.getLogger(__name__)


def board_to_dict(board: Board) -> Dict[str, Any]:
    return {
        "id": board.board_id,
        "name": board.name,
        "fpga": board.fpga,
        "profiles": {
            point.value: profile.to_dict()
            for point, profile in board.profiles.items()
        },
    }


def board_from_dict(data: Mapping[str, Any]) -> Board:
    """
    Build a Board from its dict form.

    Raises:
        ValueError: if a required field is missing or a value is invalid
    """
    if not isinstance(data, Mapping):
        raise ValueError(f"Board entry must be a mapping, got {type(data).__name__}")
    for key in ("id", "profiles"):
        if key not in data:
            raise ValueError(f"Board entry is missing field {key!r}")

    board_id = str(data["id"])
    raw_profiles = data["profiles"]
    if not isinstance(raw_profiles, Mapping) or not raw_profiles:
        raise ValueError(f"Board {board_id!r}: 'profiles' must be a non-empty mapping")

    profiles: Dict[OperatingPoint, DVFSProfile] = {}
    for point_name, raw in raw_profiles.items():
        try:
            point = OperatingPoint.from_name(point_name)
        except KeyError as e:
            raise ValueError(f"Board {board_id!r}: {e.args[0]}") from e
        if not isinstance(raw, Mapping):
            raise ValueError(f"Board {board_id!r}: profile {point_name!r} must be a mapping")
        entry = dict(raw)
        entry.setdefault("name", point.display_name)
        try:
            profiles[point] = DVFSProfile.from_dict(entry)
        except ValueError as e:
            raise ValueError(f"Board {board_id!r}, {point.value}: {e}") from e

    return Board(
        board_id=board_id,
        name=str(data.get("name", board_id)),
        fpga=str(data.get("fpga", "")),
        profiles=profiles,
    )


def boards_from_document(document: Any) -> Dict[str, Board]:
    if isinstance(document, Mapping):
        if "boards" not in document:
            raise ValueError("Board document must be a list or contain a 'boards' list")
        document = document["boards"]
    if not isinstance(document, list):
        raise ValueError("'boards' must be a list")

    boards: Dict[str, Board] = {}
    for entry in document:
        board = board_from_dict(entry)
        if board.board_id in boards:
            raise ValueError(f"Duplicate board id {board.board_id!r}")
        boards[board.board_id] = board
    return boards


def load_boards(path: Union[str, Path]) -> Dict[str, Board]:
    """
    Load boards from a YAML or JSON file, keyed by board id.

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if the document is malformed
    """
    boards = boards_from_document(load_document(path))
    logger.info("Loaded %d board(s) from %s", len(boards), path)
    return boards


def save_boards(boards: Union[Mapping[str, Board], List[Board]], path: Union[str, Path]) -> None:
    if isinstance(boards, Mapping):
        boards = list(boards.values())
    save_document({"boards": [board_to_dict(b) for b in boards]}, path)
