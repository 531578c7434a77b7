"""Tests for the Hack machine state."""

from tcsim.machine import MachineState, get_changes, is_halted, normalize, to_word


class TestNormalize:
    """16-bit coercion tests."""

    def test_normalize(self):
        """Values wrap into the signed 16-bit range."""
        assert normalize(32767) == 32767
        assert normalize(32768) == -32768
        assert normalize(65535) == -1
        assert normalize(65536) == 0
        assert normalize(-1) == -1

    def test_to_word(self):
        """Stored patterns are unsigned."""
        assert to_word(-1) == 65535
        assert to_word(70000) == 70000 - 65536


class TestMachineState:
    """MachineState tests."""

    def test_initial_state(self):
        """Fresh state is all zero."""
        state = MachineState.create()
        assert (state.A, state.D, state.pc) == (0, 0, 0)
        assert state.ram == {}

    def test_unset_memory_reads_zero(self):
        """Unwritten RAM cells read as 0."""
        assert MachineState().read(1234) == 0

    def test_with_ram(self):
        """Initial RAM is masked to 16 bits."""
        state = MachineState.with_ram({0: 5, "3": -1})
        assert state.read(0) == 5
        assert state.read(3) == 65535
        assert state.signed(state.read(3)) == -1

    def test_m_is_ram_at_a(self):
        """M aliases RAM[A]."""
        state = MachineState.with_ram({7: 42})
        state.A = 7
        assert state.M == 42

    def test_clone_is_independent(self):
        """Writing to a clone leaves the original untouched."""
        state = MachineState.with_ram({0: 1})
        copy = state.clone()
        copy.write(0, 9)
        copy.A = 3
        assert state.read(0) == 1
        assert state.A == 0

    def test_get_state(self):
        """RAM keys are strings in address order."""
        state = MachineState.with_ram({5: 1, 2: 3})
        state.pc = 4
        assert state.get_state() == {"A": 0, "D": 0, "PC": 4, "RAM": {"2": 3, "5": 1}}

    def test_from_dict_roundtrip(self):
        """from_dict accepts the get_state form."""
        state = MachineState(A=3, D=65535, ram={1: 2}, pc=7)
        assert MachineState.from_dict(state.get_state()) == state

    def test_halted(self):
        """Halted once PC reaches the instruction count."""
        state = MachineState(pc=3)
        assert is_halted(state, 3)
        assert not is_halted(state, 4)
        assert MachineState().is_halted(0)


class TestChanges:
    """get_changes tests."""

    def test_register_and_memory_changes(self):
        """Only differing cells are reported."""
        old = MachineState.with_ram({0: 1, 1: 2})
        new = old.clone()
        new.D = 5
        new.pc = 1
        new.write(1, 3)
        new.write(9, 0)
        assert get_changes(old, new) == [
            {"register": "D", "from": 0, "to": 5},
            {"register": "PC", "from": 0, "to": 1},
            {"register": "RAM[1]", "from": 2, "to": 3},
        ]

    def test_no_changes(self):
        """Identical snapshots produce no changes."""
        state = MachineState.with_ram({0: 1})
        assert get_changes(state, state.clone()) == []
