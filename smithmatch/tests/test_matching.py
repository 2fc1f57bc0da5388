"""
Tests for matching network synthesis.

Validates against textbook results:
1. L-section Q = sqrt(Rmax/Rmin − 1) and closure on the source impedance
2. Pi and T networks land on the source for a chosen Q
3. Quarter-wave impedance sqrt(Rs·Rl), with reactance cancellation
4. Single-stub enumeration order and the already-matched no-op
5. Degenerate inputs return no candidates
"""

import math
from dataclasses import FrozenInstanceError

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from smithmatch.components import ComponentKind, Connection
from smithmatch.matching import (
    MatchingCalculator,
    MatchingElement,
    MatchingSolution,
    MatchingTopology,
    calculate_all,
    l_section,
    network_q,
    pi_network,
    quarter_wave,
    single_stub,
    t_network,
)
from smithmatch.trace import MatchingTrace

F = 1e9


def _land(solution: MatchingSolution, source_z: complex, load_z: complex) -> complex:
    """Final impedance after replaying a solution from the load."""
    trace = MatchingTrace(source_z=source_z, load_z=load_z, z0=50.0, frequency=F)
    trace.apply_solution(solution)
    return trace.current_impedance()


class TestLSection:
    """Test two-element L-section synthesis."""

    def test_q_step_up(self):
        """Rs=50, Rl=200 → Q = sqrt(3)."""
        solutions = l_section(50 + 0j, 200 + 0j, F)
        assert len(solutions) == 2
        for sol in solutions:
            assert sol.network_q() == pytest.approx(math.sqrt(3.0), rel=1e-12)

    def test_closure_step_up(self):
        """Either candidate moves 200 Ω onto 50 Ω."""
        for sol in l_section(50 + 0j, 200 + 0j, F):
            z = _land(sol, 50 + 0j, 200 + 0j)
            assert z.real == pytest.approx(50.0, rel=1e-6)
            assert z.imag == pytest.approx(0.0, abs=50.0 * 1e-6)

    def test_closure_step_down(self):
        """Rs > Rl uses the shunt-at-source topology and still lands."""
        solutions = l_section(200 + 0j, 50 + 0j, F)
        assert len(solutions) == 2
        for sol in solutions:
            assert sol.topology == MatchingTopology.L_SECTION
            assert sol.elements[0].connection == Connection.SHUNT
            z = _land(sol, 200 + 0j, 50 + 0j)
            assert z.real == pytest.approx(200.0, rel=1e-6)
            assert z.imag == pytest.approx(0.0, abs=200.0 * 1e-6)

    def test_complex_load_closure(self):
        for source_z, load_z in [(50 + 0j, 10 - 15j), (50 + 0j, 20 + 40j)]:
            for sol in l_section(source_z, load_z, F):
                z = _land(sol, source_z, load_z)
                assert z.real == pytest.approx(source_z.real, rel=1e-6)
                assert z.imag == pytest.approx(source_z.imag, abs=1e-4)

    def test_reversed_topology(self):
        """Rs < Rl puts the series element on the source side."""
        sol = l_section(50 + 0j, 200 + 0j, F)[0]
        assert sol.topology == MatchingTopology.L_SECTION_REVERSED
        assert sol.elements[0].connection == Connection.SERIES
        assert sol.elements[1].connection == Connection.SHUNT

    def test_sign_branches(self):
        """+Q branch is series L / shunt C, −Q branch is series C / shunt L."""
        plus, minus = l_section(50 + 0j, 200 + 0j, F)
        assert plus.elements[0].kind == ComponentKind.INDUCTOR
        assert plus.elements[1].kind == ComponentKind.CAPACITOR
        assert minus.elements[0].kind == ComponentKind.CAPACITOR
        assert minus.elements[1].kind == ComponentKind.INDUCTOR

    def test_known_values(self):
        """50 → 200 Ω at 1 GHz: L = 50√3/ω, C = (√3/200)/ω."""
        w = 2 * math.pi * F
        plus = l_section(50 + 0j, 200 + 0j, F)[0]
        assert plus.elements[0].value == pytest.approx(50 * math.sqrt(3) / w)
        assert plus.elements[1].value == pytest.approx(math.sqrt(3) / 200 / w)

    def test_equal_resistance_cancels_reactance(self):
        solutions = l_section(50 + 0j, 50 + 30j, F)
        assert len(solutions) == 1
        assert len(solutions[0].elements) == 1
        assert solutions[0].elements[0].kind == ComponentKind.CAPACITOR
        z = _land(solutions[0], 50 + 0j, 50 + 30j)
        assert z == pytest.approx(50 + 0j)

    def test_already_matched(self):
        assert l_section(50 + 0j, 50 + 0j, F) == []

    def test_non_positive_resistance(self):
        assert l_section(50 + 0j, 0 + 10j, F) == []
        assert l_section(-5 + 0j, 50 + 0j, F) == []


class TestPiT:
    """Test three-element networks via the virtual resistor."""

    @pytest.mark.parametrize('synth', [pi_network, t_network])
    def test_closure(self, synth):
        """Rs=50, Rl=200, Q=2 lands on 50 Ω from the load."""
        solutions = synth(50 + 0j, 200 + 0j, F, 2.0)
        assert len(solutions) == 1
        z = _land(solutions[0], 50 + 0j, 200 + 0j)
        assert z.real == pytest.approx(50.0, rel=1e-6)
        assert z.imag == pytest.approx(0.0, abs=50.0 * 1e-6)

    def test_pi_structure(self):
        sol = pi_network(50 + 0j, 200 + 0j, F, 2.0)[0]
        assert sol.topology == MatchingTopology.PI_NETWORK
        kinds = [(e.kind, e.connection) for e in sol.elements]
        assert kinds == [
            (ComponentKind.CAPACITOR, Connection.SHUNT),
            (ComponentKind.INDUCTOR, Connection.SERIES),
            (ComponentKind.CAPACITOR, Connection.SHUNT),
        ]

    def test_t_structure(self):
        sol = t_network(50 + 0j, 200 + 0j, F, 2.0)[0]
        assert sol.topology == MatchingTopology.T_NETWORK
        kinds = [(e.kind, e.connection) for e in sol.elements]
        assert kinds == [
            (ComponentKind.INDUCTOR, Connection.SERIES),
            (ComponentKind.CAPACITOR, Connection.SHUNT),
            (ComponentKind.INDUCTOR, Connection.SERIES),
        ]

    def test_pi_virtual_resistor(self):
        """Rvirt = 50/(1+4) = 10 Ω → source-side B = 2/50."""
        w = 2 * math.pi * F
        sol = pi_network(50 + 0j, 200 + 0j, F, 2.0)[0]
        assert sol.elements[0].value == pytest.approx((2.0 / 50.0) / w)

    def test_higher_q_closure(self):
        for synth in (pi_network, t_network):
            sol = synth(75 + 0j, 12.5 + 0j, F, 5.0)[0]
            z = _land(sol, 75 + 0j, 12.5 + 0j)
            assert z.real == pytest.approx(75.0, rel=1e-6)

    def test_invalid_resistance(self):
        assert pi_network(50 + 0j, -1 + 0j, F) == []
        assert t_network(0j, 50 + 0j, F) == []


class TestQuarterWave:
    """Test λ/4 transformer synthesis."""

    def test_impedance(self):
        """Rs=50, Rl=100 → Z_qw = sqrt(5000) ≈ 70.7107 Ω."""
        solutions = quarter_wave(50 + 0j, 100 + 0j, F)
        assert len(solutions) == 1
        line = solutions[0].elements[0]
        assert line.kind == ComponentKind.TRANSMISSION_LINE
        assert line.line_z0 == pytest.approx(math.sqrt(5000.0))
        assert line.line_z0 == pytest.approx(70.7107, abs=1e-4)

    def test_length_is_quarter_wave(self):
        line = quarter_wave(50 + 0j, 100 + 0j, F)[0].elements[0]
        assert line.value == pytest.approx(3e8 / F / 4.0)

    def test_closure(self):
        sol = quarter_wave(50 + 0j, 100 + 0j, F)[0]
        z = _land(sol, 50 + 0j, 100 + 0j)
        assert z.real == pytest.approx(50.0, rel=1e-6)
        assert z.imag == pytest.approx(0.0, abs=1e-4)

    def test_reactance_cancellation(self):
        """A complex load gets a series element at the load, then the line."""
        sol = quarter_wave(50 + 0j, 100 + 40j, F)[0]
        assert len(sol.elements) == 2
        cancel = sol.elements[1]
        assert cancel.kind == ComponentKind.CAPACITOR
        assert cancel.connection == Connection.SERIES
        z = _land(sol, 50 + 0j, 100 + 40j)
        assert z.real == pytest.approx(50.0, rel=1e-6)
        assert z.imag == pytest.approx(0.0, abs=1e-4)

    def test_zero_frequency(self):
        assert quarter_wave(50 + 0j, 100 + 0j, 0.0) == []


class TestSingleStub:
    """Test single-stub enumeration."""

    def test_matched_load_no_solutions(self):
        """A load equal to Z0 needs no stub."""
        assert single_stub(50 + 0j, 50 + 0j, F, 50.0) == []

    def test_four_candidates_in_order(self):
        solutions = single_stub(50 + 0j, 25 - 30j, F, 50.0)
        assert len(solutions) == 4
        assert [s.topology for s in solutions] == [
            MatchingTopology.SINGLE_STUB_OPEN,
            MatchingTopology.SINGLE_STUB_SHORT,
            MatchingTopology.SINGLE_STUB_OPEN,
            MatchingTopology.SINGLE_STUB_SHORT,
        ]

    def test_lengths_within_half_wave(self):
        wavelength = 3e8 / F
        for sol in single_stub(50 + 0j, 100 + 50j, F, 50.0):
            stub, line = sol.elements
            assert stub.connection == Connection.SHUNT
            assert line.kind == ComponentKind.TRANSMISSION_LINE
            assert 0.0 <= line.value < wavelength / 2
            assert 0.0 <= stub.value < wavelength / 2
            assert stub.line_z0 == 50.0

    def test_shared_distance_per_root(self):
        """Open and short candidates for one root share the line distance."""
        solutions = single_stub(50 + 0j, 25 - 30j, F, 50.0)
        assert solutions[0].elements[1].value == solutions[1].elements[1].value
        assert solutions[2].elements[1].value == solutions[3].elements[1].value

    def test_unit_conductance_double_root(self):
        """g = 1 yields the same distance twice; no de-duplication."""
        # Z = 50/(1 + 0.5j) → y = 1 + 0.5j
        solutions = single_stub(50 + 0j, 50 / (1 + 0.5j), F, 50.0)
        assert len(solutions) == 4
        assert solutions[0].elements[1].value == pytest.approx(solutions[2].elements[1].value)

    def test_degenerate(self):
        assert single_stub(50 + 0j, 0 + 20j, F) == []
        assert single_stub(50 + 0j, 25 + 0j, 0.0) == []


class TestCalculateAll:
    """Test the aggregate and the calculator facade."""

    def test_lumped_set(self):
        solutions = calculate_all(50 + 0j, 200 + 0j, F)
        topologies = [s.topology for s in solutions]
        assert topologies == [
            MatchingTopology.L_SECTION_REVERSED,
            MatchingTopology.L_SECTION_REVERSED,
            MatchingTopology.PI_NETWORK,
            MatchingTopology.T_NETWORK,
        ]

    def test_calculator(self):
        calc = MatchingCalculator(source_z=50 + 0j, load_z=200 + 0j, frequency=F)
        assert len(calc.calculate_l_section()) == 2
        assert len(calc.calculate_all()) == 4
        assert len(calc.calculate_quarter_wave()) == 1
        assert len(calc.calculate_single_stub()) == 4
        calc.load_z = 50 + 0j
        assert calc.calculate_l_section() == []


class TestSolution:
    """Test solution metadata and export helpers."""

    def test_network_q_function(self):
        assert network_q(50 + 0j, 200 + 0j) == pytest.approx(math.sqrt(3.0))
        assert network_q(50 + 0j, 0j) == 0.0

    def test_label_and_count(self):
        sol = pi_network(50 + 0j, 200 + 0j, F)[0]
        assert sol.label == "Pi-Network"
        assert sol.element_count == 3
        assert sol.valid

    def test_describe(self):
        sol = pi_network(50 + 0j, 200 + 0j, F)[0]
        text = sol.describe()
        assert text.startswith("Pi-Network: Shunt ")
        assert text.count("→") == 2
        assert "pF" in text and "nH" in text

    def test_elements_from_load(self):
        sol = l_section(50 + 0j, 200 + 0j, F)[0]
        assert sol.elements_from_load() == list(reversed(sol.elements))

    def test_netlist_entries(self):
        sol = t_network(50 + 0j, 200 + 0j, F)[0]
        names = [entry[0] for entry in sol.netlist_entries()]
        assert names == ['L1', 'C2', 'L3']

    def test_solution_is_immutable(self):
        sol = l_section(50 + 0j, 200 + 0j, F)[0]
        with pytest.raises(FrozenInstanceError):
            sol.valid = False

    def test_element_value_string(self):
        elem = MatchingElement(ComponentKind.TRANSMISSION_LINE, Connection.SERIES, 0.075, line_z0=70.71)
        assert elem.value_string() == "75.00 mm (Z0=70.7 Ω)"
