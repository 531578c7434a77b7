"""Tests for the FastAPI endpoints."""

import pytest
from fastapi.testclient import TestClient

from tcsim.examples import ADDITION
from web.app import MAX_PROGRAM_SIZE, app


@pytest.fixture
def client():
    return TestClient(app)


class TestToolEndpoints:
    """Generator endpoints."""

    def test_tools(self, client):
        """The registry lists every tool and adder type."""
        data = client.get("/api/tools").json()
        assert {t["id"] for t in data["tools"]} == {
            "adder", "division", "hack", "float", "normalform", "twoscomplement",
        }
        assert len(data["adder_types"]) == 5

    def test_adder(self, client):
        """Adder steps are serialised with camelCase flags."""
        response = client.post("/api/adder", json={"adder_type": "prefix", "a": 13, "b": 7})
        assert response.status_code == 200
        steps = response.json()["steps"]
        assert steps[-1]["isFinal"] is True
        assert steps[-1]["result"] == 20

    def test_adder_rejects_wide_operand(self, client):
        """Operands are limited to 4 bits."""
        response = client.post("/api/adder", json={"a": 16, "b": 1})
        assert response.status_code == 422

    def test_division(self, client):
        """Division returns the trace."""
        steps = client.post(
            "/api/division",
            json={"dividend": 11, "divisor": 3, "bit_width": 4, "method": "non-restoring"},
        ).json()["steps"]
        assert steps[-1]["values"]["quotient"] == 3

    def test_division_by_zero_is_an_error_step(self, client):
        """Divisor 0 yields a single error step, not an HTTP error."""
        response = client.post("/api/division", json={"dividend": 5, "divisor": 0})
        assert response.status_code == 200
        steps = response.json()["steps"]
        assert len(steps) == 1
        assert steps[0]["type"] == "error"

    def test_twos_complement(self, client):
        """Conversion and addition endpoints."""
        steps = client.post("/api/twos-complement/convert", json={"decimal": -5, "bit_width": 4}).json()["steps"]
        assert steps[-1]["values"]["binary"] == "1011"
        steps = client.post("/api/twos-complement/add", json={"x": 5, "y": 4, "bit_width": 4}).json()["steps"]
        assert steps[-1]["values"]["overflow"] is True

    def test_twos_complement_table(self, client):
        """Full table for supported widths only."""
        assert len(client.get("/api/twos-complement/table/4").json()["rows"]) == 16
        assert client.get("/api/twos-complement/table/5").status_code == 400

    def test_normal_form(self, client):
        """Both forms are returned for a table."""
        data = client.post("/api/normal-form", json={"num_vars": 2, "outputs": [0, 1, 0, 1]}).json()
        assert data["dnf"] == "¬x₁·x₀ + x₁·x₀"
        assert data["knf"] == "(x₁+x₀) · (¬x₁+x₀)"
        assert len(data["table"]) == 4

    def test_normal_form_bad_outputs(self, client):
        """Output lists must match the table size."""
        response = client.post("/api/normal-form", json={"num_vars": 2, "outputs": [0, 1]})
        assert response.status_code == 400

    def test_float(self, client):
        """IEEE-754 encoding."""
        data = client.post("/api/float", json={"value": "13.75"}).json()
        assert data["hex"] == "0x415C0000"
        assert data["biased_exponent"] == 130

    @pytest.mark.parametrize("value", ["inf", "1e39", "abc"])
    def test_float_non_finite(self, client, value):
        """Non-finite results still serialise."""
        response = client.post("/api/float", json={"value": value})
        assert response.status_code == 200


class TestHackEndpoints:
    """Hack machine endpoints."""

    def test_examples(self, client):
        """Bundled examples are listed."""
        examples = client.get("/api/hack/examples").json()["examples"]
        assert len(examples) == 3

    def test_run(self, client):
        """Run the addition example."""
        data = client.post(
            "/api/hack/run",
            json={"program": ADDITION, "initial_ram": {"0": 10, "1": 25}, "trace_watch": [2]},
        ).json()
        assert data["status"] == "ok"
        assert data["final_state"]["RAM"]["2"] == 35

    def test_run_parse_error(self, client):
        """Parse errors are reported in the body."""
        data = client.post("/api/hack/run", json={"program": "@"}).json()
        assert data["status"] == "error"
        assert data["error"]["type"] == "InvalidAddress"

    def test_run_invalid_ram_key(self, client):
        """RAM keys must be integers."""
        response = client.post("/api/hack/run", json={"program": "@1", "initial_ram": {"x": 1}})
        assert response.status_code == 400

    def test_program_too_large(self, client):
        """Oversized programs are rejected."""
        program = "@1\n" * (MAX_PROGRAM_SIZE // 3 + 1)
        response = client.post("/api/hack/run", json={"program": program})
        assert response.status_code == 400

    def test_step(self, client):
        """One step returns the new state, changes and an explanation."""
        data = client.post(
            "/api/hack/step",
            json={"program": ADDITION, "initial_ram": {"0": 10, "1": 25}},
        ).json()
        assert data["status"] == "ok"
        assert data["state"]["PC"] == 1
        assert data["explanation"]["title"] == "A-instruction"
        assert data["halted"] is False

        data = client.post("/api/hack/step", json={"program": ADDITION, "state": data["state"]}).json()
        assert data["state"]["D"] == 10
        assert {"register": "D", "from": 0, "to": 10} in data["changes"]

    def test_step_when_halted(self, client):
        """Stepping a halted machine reports halted without changes."""
        data = client.post(
            "/api/hack/step",
            json={"program": "@1", "state": {"A": 1, "D": 0, "PC": 1, "RAM": {}}},
        ).json()
        assert data["halted"] is True
        assert data["changes"] == []

    def test_step_with_negative_pc(self, client):
        """A negative PC is reported as an error instead of running the last instruction."""
        data = client.post(
            "/api/hack/step",
            json={"program": "@1\n@2\n@3", "state": {"A": 0, "D": 0, "PC": -1, "RAM": {}}},
        ).json()
        assert data["status"] == "error"
        assert data["error"]["type"] == "NoInstruction"
        assert data["error"]["pc"] == -1
