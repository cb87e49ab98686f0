"""
Dynamic Instruction Mix

An InstructionMix is a histogram of how many times each mnemonic executes
in a workload. It is the only workload input to the performance model.

Usage:
    from rvaccel.estimation import InstructionMix, DEFAULT_INSTRUCTION_MIX

    mix = DEFAULT_INSTRUCTION_MIX.with_count("conv2d.3x3", 100_000)
    mix.total                      # dynamic instruction count
    InstructionMix.from_file("workloads/mobilenet.yaml")
"""

import numbers
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

from rvaccel.documents import load_document, save_document
from rvaccel.hardware import Mnemonic


class InstructionMix(Mapping[str, int]):
    """
    Immutable mnemonic -> dynamic count mapping.

    Keys are lowercased mnemonic strings (a Mnemonic member is accepted
    wherever a string is). Counts must be non-negative integers; unknown
    mnemonics are allowed and are costed with the profile's default entry.
    """

    def __init__(self, counts: Optional[Mapping[Union[str, Mnemonic], int]] = None):
        values: Dict[str, int] = {}
        for key, count in (counts or {}).items():
            name = key.value if isinstance(key, Mnemonic) else str(key).strip().lower()
            if isinstance(count, bool) or not isinstance(count, numbers.Real):
                raise ValueError(f"Count for {name!r} must be an integer, got {count!r}")
            if count < 0:
                raise ValueError(f"Count for {name!r} must be non-negative, got {count}")
            if int(count) != count:
                raise ValueError(f"Count for {name!r} must be an integer, got {count}")
            values[name] = values.get(name, 0) + int(count)
        self._counts = values

    @classmethod
    def from_dict(cls, data: Mapping) -> 'InstructionMix':
        """Accepts a flat mapping or one with an ``instructions`` mapping."""
        if not isinstance(data, Mapping):
            raise ValueError(f"Instruction mix must be a mapping, got {type(data).__name__}")
        if "instructions" in data:
            data = data["instructions"]
            if not isinstance(data, Mapping):
                raise ValueError("'instructions' must be a mapping of mnemonic -> count")
        return cls(data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'InstructionMix':
        """Load a mix from YAML or JSON. Raises ValueError on a bad document."""
        return cls.from_dict(load_document(path))

    def save(self, path: Union[str, Path]) -> None:
        save_document({"instructions": self.to_dict()}, path)

    def to_dict(self) -> Dict[str, int]:
        return dict(self._counts)

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def with_count(self, key: Union[str, Mnemonic], count: int) -> 'InstructionMix':
        counts = dict(self._counts)
        name = key.value if isinstance(key, Mnemonic) else str(key).strip().lower()
        counts[name] = count
        return InstructionMix(counts)

    def nonzero(self) -> List[Tuple[str, int]]:
        return [(k, v) for k, v in self._counts.items() if v > 0]

    def category_totals(self) -> Dict[str, int]:
        """Counts summed per INSTRUCTION_CATEGORIES group; the rest under 'Other'."""
        totals = {category: 0 for category in INSTRUCTION_CATEGORIES}
        other = 0
        for name, count in self._counts.items():
            category = category_of(name)
            if category is None:
                other += count
            else:
                totals[category] += count
        if other:
            totals["Other"] = other
        return totals

    def __getitem__(self, key: Union[str, Mnemonic]) -> int:
        name = key.value if isinstance(key, Mnemonic) else str(key).strip().lower()
        return self._counts[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __eq__(self, other) -> bool:
        if isinstance(other, InstructionMix):
            return self._counts == other._counts
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(sorted(self._counts.items())))

    def __repr__(self) -> str:
        return f"InstructionMix(total={self.total}, entries={len(self)})"


INSTRUCTION_CATEGORIES: Dict[str, List[str]] = {
    "Custom NN": ["mac", "relu", "conv2d.3x3", "dwconv.3x3", "maxpool.2x2", "sigmoid", "tanh"],
    "Standard FPU": ["fadd.s", "fsub.s", "fmul.s", "fdiv.s", "flw", "fsw"],
    "Integer & Control": ["lw", "sw", "beq", "jal", "addi", "add", "sub"],
}


def category_of(mnemonic: str):
    """Category name for a mnemonic, or None if it is not in any group."""
    for category, members in INSTRUCTION_CATEGORIES.items():
        if mnemonic in members:
            return category
    return None


# A small CNN inference kernel: MAC-dominated with FP support code
DEFAULT_INSTRUCTION_MIX = InstructionMix({
    "mac": 1_300_000,
    "relu": 250_000,
    "conv2d.3x3": 50_000,
    "dwconv.3x3": 25_000,
    "maxpool.2x2": 15_000,
    "sigmoid": 0,
    "tanh": 0,
    "fadd.s": 200_000,
    "fsub.s": 50_000,
    "fmul.s": 300_000,
    "fdiv.s": 1_000,
    "flw": 400_000,
    "fsw": 200_000,
    "lw": 100_000,
    "sw": 50_000,
    "beq": 150_000,
    "jal": 20_000,
    "addi": 250_000,
    "add": 100_000,
    "sub": 50_000,
    "default": 0,
})
