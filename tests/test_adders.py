"""Tests for the adder trace generators."""

import pytest
from tcsim.adders import (
    ADDER_GENERATORS,
    ADDER_TYPES,
    generate_carry_bypass_steps,
    generate_carry_save_steps,
    generate_carry_select_steps,
    generate_parallel_prefix_steps,
    generate_ripple_carry_steps,
    generate_steps,
    prefix_levels,
    ripple_add,
)


class TestAllAdders:
    """Properties shared by every two-operand adder."""

    @pytest.mark.parametrize("adder_type", ["ripple", "bypass", "select", "prefix"])
    def test_final_step_matches_sum(self, adder_type):
        """Final result equals a + b for all 4-bit operands."""
        generator = ADDER_GENERATORS[adder_type]
        for a in range(16):
            for b in range(16):
                steps = generator(a, b)
                final = steps[-1]
                assert final.is_final
                assert final.result == a + b
                assert final.values["carry_out"] == int(a + b >= 16)

    @pytest.mark.parametrize("adder_type", ["ripple", "bypass", "select", "prefix"])
    def test_carry_in_is_added(self, adder_type):
        """A carry-in of 1 adds one to the result."""
        generator = ADDER_GENERATORS[adder_type]
        for a, b in [(0, 0), (7, 8), (15, 15), (9, 6)]:
            assert generator(a, b, 1)[-1].result == a + b + 1

    @pytest.mark.parametrize("adder_type", ["ripple", "bypass", "select", "prefix"])
    def test_only_last_step_is_final(self, adder_type):
        """Exactly one final step, at the end."""
        steps = ADDER_GENERATORS[adder_type](7, 9)
        assert [s.is_final for s in steps].count(True) == 1
        assert steps[-1].is_final

    def test_registry_lists_all_types(self):
        """Every registry entry is dispatchable."""
        ids = [t["id"] for t in ADDER_TYPES]
        assert ids == ["ripple", "bypass", "select", "prefix", "wallace"]


class TestRippleCarry:
    """Ripple-carry adder tests."""

    def test_ripple_add_helper(self):
        """LSB-first sums and carries."""
        sums, carries = ripple_add([1, 1, 1, 0], [1, 0, 0, 1], 0)
        assert sums == [0, 0, 0, 0]
        assert carries == [0, 1, 1, 1, 1]

    def test_step_sequence(self):
        """Start, four stages and the result."""
        steps = generate_ripple_carry_steps(7, 9)
        assert len(steps) == 6
        assert steps[0].title == "Start"
        assert steps[1].title == "Half adder (bit 0)"
        assert steps[2].title == "Full adder 1"
        assert steps[-1].title == "Result"

    def test_no_half_adder_with_carry_in(self):
        """Stage 0 is a full adder when a carry-in is present."""
        steps = generate_ripple_carry_steps(7, 9, 1)
        assert steps[1].title == "Full adder 0"

    def test_carries_grow_one_per_stage(self):
        """Each stage snapshot holds the carries computed so far."""
        steps = generate_ripple_carry_steps(7, 9)
        assert [len(s.values["carries"]) for s in steps[1:5]] == [2, 3, 4, 5]
        assert steps[1].values["computed"] == [0]
        assert steps[4].values["current_bit"] == 3

    def test_result_bits(self):
        """Result is shown as a 5-bit value."""
        final = generate_ripple_carry_steps(7, 9)[-1]
        assert final.values["result_bits"] == "10000"
        assert final.values["carry_out"] == 1


class TestCarryBypass:
    """Carry-bypass adder tests."""

    @pytest.mark.parametrize("cin", [0, 1])
    def test_bypass_active_when_all_propagate(self, cin):
        """a XOR b = 1111 activates the bypass and c4 equals c0."""
        for a in range(16):
            b = a ^ 0b1111
            steps = generate_carry_bypass_steps(a, b, cin)
            check = steps[2]
            assert check.values["bypass_active"] is True
            assert check.values["bypass_carry"] == cin
            assert check.active_components == ["bypass-path"]
            assert steps[-1].values["carry_out"] == cin

    def test_bypass_inactive(self):
        """Any zero propagate bit keeps the ripple path."""
        steps = generate_carry_bypass_steps(7, 9)
        check = steps[2]
        assert check.values["propagate"] == [0, 1, 1, 1]
        assert check.values["bypass_active"] is False
        assert check.values["bypass_carry"] is None
        assert check.active_components == ["ripple-path"]

    def test_step_count(self):
        """Intro, propagate, check, four bits and result."""
        assert len(generate_carry_bypass_steps(3, 4)) == 8


class TestCarrySelect:
    """Carry-select adder tests."""

    def test_branches_precompute_both_carries(self):
        """Branch 0 and branch 1 equal a+b and a+b+1."""
        for a in range(16):
            for b in range(16):
                steps = generate_carry_select_steps(a, b)
                r0 = steps[1].values["result0"]
                r1 = steps[2].values["result1"]
                assert r0["result"] + (r0["cout"] << 4) == a + b
                assert r1["result"] + (r1["cout"] << 4) == a + b + 1

    def test_mux_selects_by_carry_in(self):
        """The MUX step names the branch picked by c_in."""
        mux = generate_carry_select_steps(11, 6, 1)[3]
        assert mux.values["selected"] == 1
        assert "adder-block-1" in mux.active_components


class TestParallelPrefix:
    """Parallel-prefix adder tests."""

    def test_example_carries(self):
        """13 + 7 carries every position."""
        steps = generate_parallel_prefix_steps(13, 7)
        carries = next(s for s in steps if s.title == "Compute carries")
        assert carries.values["carries"] == [0, 1, 1, 1, 1]
        assert steps[-1].result == 20

    def test_four_bit_levels(self):
        """Four bits need two levels."""
        steps = generate_parallel_prefix_steps(13, 7)
        assert len(steps) == 7
        assert steps[2].title == "Prefix level 1"
        assert set(steps[2].values["groups"]) == {"1:0", "3:2"}
        assert steps[3].title == "Prefix level 2"
        assert set(steps[3].values["groups"]) == {"1:0", "3:2", "2:0", "3:0"}
        assert steps[3].active_components == ["prefix-level-2"]
        assert steps[-1].values["depth"] == 2

    def test_eight_bit_width(self):
        """Eight bits need three levels and still add correctly."""
        for a in range(0, 256, 7):
            for b in range(0, 256, 11):
                steps = generate_parallel_prefix_steps(a, b, width=8)
                assert steps[-1].result == a + b
        assert generate_parallel_prefix_steps(200, 100, width=8)[-1].values["depth"] == 3

    @pytest.mark.parametrize("width,depth", [(2, 1), (3, 2), (4, 2), (5, 3), (8, 3), (16, 4)])
    def test_depth_is_log2(self, width, depth):
        """Level count is ceil(log2(width))."""
        spans, levels = prefix_levels([0] * width, [1] * width)
        assert len(levels) == depth
        assert [s.lo for s in spans] == [0] * width

    def test_group_signals(self):
        """Group generate combines the lower generate through propagate."""
        spans, _ = prefix_levels([1, 0, 0, 0], [0, 1, 1, 0])
        assert [s.g for s in spans] == [1, 1, 1, 0]
        assert [s.p for s in spans] == [0, 0, 0, 0]


class TestCarrySave:
    """Carry-save (Wallace) adder tests."""

    def test_identity_for_all_operands(self):
        """S + CV equals a + b + c for every 4-bit triple."""
        for a in range(16):
            for b in range(16):
                for c in range(16):
                    steps = generate_carry_save_steps(a, b, c)
                    csa = steps[2].values
                    assert csa["sum_value"] + csa["carry_value"] == a + b + c
                    assert csa["sum_value"] == a ^ b ^ c
                    final = steps[-1]
                    assert final.result == a + b + c
                    assert final.values["verified"] is True

    def test_example(self):
        """7 + 9 + 5 reduces to 11 and 10."""
        csa = generate_carry_save_steps(7, 9, 5)[2].values
        assert csa["sum_bits"] == [1, 0, 1, 1]
        assert csa["carry_bits"] == [0, 1, 0, 1]
        assert csa["sum_value"] == 11
        assert csa["carry_value"] == 10

    def test_step_sequence(self):
        """Intro, principle, CSA layer, intermediate, final add, result."""
        titles = [s.title for s in generate_carry_save_steps(1, 2, 3)]
        assert titles[2] == "Compute CSA layer"
        assert titles[-2] == "Final addition"
        assert len(titles) == 6


class TestDispatch:
    """generate_steps dispatch tests."""

    def test_wallace_uses_third_operand(self):
        """The wallace type adds c."""
        assert generate_steps("wallace", 7, 9, c=5)[-1].result == 21

    def test_unknown_type_falls_back_to_ripple(self):
        """Unknown identifiers produce a ripple-carry trace."""
        steps = generate_steps("quantum", 3, 4)
        assert steps[0].title == "Start"
        assert steps[-1].result == 7

    def test_cin_is_forwarded(self):
        """cin reaches the two-operand generators."""
        assert generate_steps("prefix", 3, 4, cin=1)[-1].result == 8
