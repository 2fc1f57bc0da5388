"""
Tests for the matching topology registry.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from smithmatch.matching import MatchingTopology
from smithmatch.topology import (
    TOPOLOGIES,
    calculate_topology,
    default_topology_names,
    get_topology,
    list_topologies,
)


class TestRegistry:
    """Test lookups and listings."""

    def test_all_routines_registered(self):
        assert set(TOPOLOGIES) == {'l_section', 'pi_network', 't_network', 'single_stub', 'quarter_wave'}

    def test_get_topology(self):
        topo = get_topology('pi_network')
        assert topo.label == 'Pi-Network'
        assert topo.element_count == 3
        assert topo.category == 'lumped'

    def test_unknown_topology_raises(self):
        with pytest.raises(ValueError):
            get_topology('double_stub')

    def test_filter_by_category(self):
        distributed = list_topologies('distributed')
        assert {t['name'] for t in distributed} == {'single_stub', 'quarter_wave'}
        assert len(list_topologies()) == len(TOPOLOGIES)

    def test_listing_fields(self):
        entry = list_topologies('lumped')[0]
        assert set(entry) == {'name', 'label', 'description', 'category', 'element_count', 'include_in_all'}

    def test_default_set_is_lumped(self):
        assert default_topology_names() == ['l_section', 'pi_network', 't_network']


class TestCalculate:
    """Test dispatch through the registry."""

    def test_l_section(self):
        solutions = calculate_topology('l_section', {
            'source_z': 50 + 0j, 'load_z': 200 + 0j, 'frequency': 1e9,
        })
        assert len(solutions) == 2

    def test_source_defaults_to_z0(self):
        solutions = calculate_topology('quarter_wave', {'load_z': 100, 'frequency': 1e9, 'z0': 50.0})
        assert solutions[0].source_z == 50 + 0j

    def test_target_q_passed_through(self):
        low = calculate_topology('pi_network', {'load_z': 200, 'frequency': 1e9, 'target_q': 2.0})[0]
        high = calculate_topology('pi_network', {'load_z': 200, 'frequency': 1e9, 'target_q': 5.0})[0]
        assert high.elements[0].value > low.elements[0].value

    def test_single_stub(self):
        solutions = calculate_topology('single_stub', {'load_z': 25 - 30j, 'frequency': 2.4e9})
        assert [s.topology for s in solutions][:2] == [
            MatchingTopology.SINGLE_STUB_OPEN,
            MatchingTopology.SINGLE_STUB_SHORT,
        ]
