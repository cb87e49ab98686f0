"""
Tests for cost tables and DVFS profile validation.
"""

import math

import pytest

from rvaccel.hardware import CostTable, DVFSProfile, Mnemonic, OperatingPoint, get_profile


def make_profile(**overrides):
    fields = dict(
        name="Test",
        riscv_clock_mhz=100.0,
        arm_clock_mhz=100.0,
        energy_per_cycle_hw=CostTable({"mac": 2.0, "default": 1.0}),
        energy_per_cycle_sw=10.0,
        static_power_hw_mw=50.0,
        static_power_sw_mw=80.0,
        l1_cache_hit_rate=0.95,
        l1_miss_penalty_cycles=40.0,
        dram_energy_per_access_pj=600.0,
        branch_predictor_accuracy=0.9,
        branch_mispredict_penalty_cycles=3.0,
        cycles_hw=CostTable({"mac": 1, "default": 1}),
    )
    fields.update(overrides)
    return DVFSProfile(**fields)


class TestMnemonic:

    def test_twenty_mnemonics(self):
        assert len(Mnemonic) == 20

    def test_from_name(self):
        assert Mnemonic.from_name("conv2d.3x3") == Mnemonic.CONV2D_3X3
        assert Mnemonic.from_name("FADD.S") == Mnemonic.FADD_S
        assert Mnemonic.from_name("vadd") is None


class TestCostTable:

    def test_default_required(self):
        with pytest.raises(ValueError, match="default"):
            CostTable({"mac": 1})

    def test_lookup_by_enum_and_string(self):
        table = CostTable({"mac": 3, "default": 1})
        assert table.lookup(Mnemonic.MAC) == 3
        assert table.lookup("mac") == 3
        assert table.lookup("MAC") == 3

    def test_unknown_falls_back_to_default(self):
        table = CostTable({"mac": 3, "default": 1.5})
        assert table.lookup("relu") == 1.5
        assert table.lookup("not-an-instruction") == 1.5
        assert table.default == 1.5

    def test_negative_and_non_numeric_rejected(self):
        with pytest.raises(ValueError):
            CostTable({"mac": -1, "default": 1})
        with pytest.raises(ValueError):
            CostTable({"mac": "fast", "default": 1})
        with pytest.raises(ValueError):
            CostTable({"default": math.nan})

    def test_with_entry_copies(self):
        table = CostTable({"mac": 1, "default": 1})
        updated = table.with_entry(Mnemonic.MAC, 4)
        assert updated.lookup("mac") == 4
        assert table.lookup("mac") == 1

    def test_round_trip(self):
        table = CostTable({Mnemonic.RELU: 2, "default": 1})
        assert CostTable.from_dict(table.to_dict()) == table
        assert "relu" in table
        assert Mnemonic.RELU in table
        assert len(table) == 2


class TestOperatingPoint:

    @pytest.mark.parametrize("name,expected", [
        ("performance", OperatingPoint.PERFORMANCE),
        ("Balanced", OperatingPoint.BALANCED),
        ("Low Power", OperatingPoint.LOW_POWER),
        ("low-power", OperatingPoint.LOW_POWER),
        (OperatingPoint.BALANCED, OperatingPoint.BALANCED),
    ])
    def test_from_name(self, name, expected):
        assert OperatingPoint.from_name(name) == expected

    def test_unknown(self):
        with pytest.raises(KeyError):
            OperatingPoint.from_name("turbo")


class TestDVFSProfileValidation:

    def test_valid(self):
        profile = make_profile()
        assert profile.clock_ratio == 1.0

    @pytest.mark.parametrize("field,value", [
        ("riscv_clock_mhz", 0.0),
        ("arm_clock_mhz", -100.0),
        ("l1_cache_hit_rate", 1.5),
        ("l1_cache_hit_rate", -0.1),
        ("branch_predictor_accuracy", 2.0),
        ("static_power_hw_mw", -1.0),
        ("energy_per_cycle_sw", math.nan),
        ("l1_miss_penalty_cycles", -5.0),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValueError, match=field):
            make_profile(**{field: value})

    def test_cost_tables_required(self):
        with pytest.raises(ValueError):
            make_profile(cycles_hw={"default": 1})

    def test_empty_name(self):
        with pytest.raises(ValueError):
            make_profile(name="")

    def test_with_changes_revalidates(self):
        profile = make_profile()
        assert profile.with_changes(riscv_clock_mhz=200.0).riscv_clock_mhz == 200.0
        with pytest.raises(ValueError):
            profile.with_changes(l1_cache_hit_rate=3.0)

    def test_dict_round_trip(self):
        profile = get_profile("arty-a7", "balanced")
        assert DVFSProfile.from_dict(profile.to_dict()) == profile

    def test_from_dict_missing_field(self):
        data = make_profile().to_dict()
        del data["arm_clock_mhz"]
        with pytest.raises(ValueError, match="arm_clock_mhz"):
            DVFSProfile.from_dict(data)

    def test_from_dict_non_numeric(self):
        data = make_profile().to_dict()
        data["riscv_clock_mhz"] = "fast"
        with pytest.raises(ValueError, match="riscv_clock_mhz"):
            DVFSProfile.from_dict(data)
