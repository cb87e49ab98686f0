"""
Tests for InstructionMix parsing, validation and grouping.
"""

import numpy as np
import pytest

from rvaccel.estimation import DEFAULT_INSTRUCTION_MIX, InstructionMix, category_of
from rvaccel.hardware import Mnemonic


class TestInstructionMix:

    def test_default_mix(self):
        assert DEFAULT_INSTRUCTION_MIX.total == 3_511_000
        assert DEFAULT_INSTRUCTION_MIX["mac"] == 1_300_000
        assert DEFAULT_INSTRUCTION_MIX[Mnemonic.CONV2D_3X3] == 50_000

    def test_keys_lowercased_and_merged(self):
        mix = InstructionMix({"MAC": 2, "mac": 3, Mnemonic.RELU: 1})
        assert mix.to_dict() == {"mac": 5, "relu": 1}

    def test_numpy_integers_accepted(self):
        mix = InstructionMix({"mac": np.int64(7)})
        assert mix["mac"] == 7
        assert isinstance(mix["mac"], int)

    @pytest.mark.parametrize("count", [-1, 1.5, "10", True, None])
    def test_invalid_counts(self, count):
        with pytest.raises(ValueError):
            InstructionMix({"mac": count})

    def test_integral_float_accepted(self):
        assert InstructionMix({"mac": 4.0})["mac"] == 4

    def test_empty(self):
        mix = InstructionMix()
        assert mix.total == 0
        assert len(mix) == 0

    def test_with_count_copies(self):
        mix = InstructionMix({"mac": 1})
        updated = mix.with_count(Mnemonic.MAC, 10)
        assert updated["mac"] == 10
        assert mix["mac"] == 1

    def test_nonzero(self):
        mix = InstructionMix({"mac": 1, "relu": 0})
        assert mix.nonzero() == [("mac", 1)]

    def test_equality_and_hash(self):
        a = InstructionMix({"mac": 1, "relu": 2})
        b = InstructionMix({"relu": 2, "mac": 1})
        assert a == b
        assert hash(a) == hash(b)


class TestCategories:

    def test_category_of(self):
        assert category_of("conv2d.3x3") == "Custom NN"
        assert category_of("fmul.s") == "Standard FPU"
        assert category_of("jal") == "Integer & Control"
        assert category_of("vadd") is None

    def test_category_totals(self):
        totals = DEFAULT_INSTRUCTION_MIX.category_totals()
        assert totals["Custom NN"] == 1_640_000
        assert totals["Standard FPU"] == 1_151_000
        assert totals["Integer & Control"] == 720_000
        assert "Other" not in totals

    def test_unknown_goes_to_other(self):
        totals = InstructionMix({"vadd": 5, "mac": 1}).category_totals()
        assert totals["Other"] == 5
        assert totals["Custom NN"] == 1


class TestMixFiles:

    def test_yaml_with_instructions_key(self, tmp_path):
        path = tmp_path / "mix.yaml"
        path.write_text("instructions:\n  mac: 100\n  relu: 20\n")
        assert InstructionMix.from_file(path) == InstructionMix({"mac": 100, "relu": 20})

    def test_flat_json(self, tmp_path):
        path = tmp_path / "mix.json"
        path.write_text('{"conv2d.3x3": 10}')
        assert InstructionMix.from_file(path)["conv2d.3x3"] == 10

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "mix.yaml"
        DEFAULT_INSTRUCTION_MIX.save(path)
        assert InstructionMix.from_file(path) == DEFAULT_INSTRUCTION_MIX

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "mix.yaml"
        path.write_text("- mac\n- relu\n")
        with pytest.raises(ValueError):
            InstructionMix.from_file(path)

    def test_bad_instructions_value(self):
        with pytest.raises(ValueError, match="instructions"):
            InstructionMix.from_dict({"instructions": [1, 2]})
