"""
Matching topology definitions.

Each topology names a synthesis routine, the number of elements it produces
and whether it is built from lumped L/C parts or transmission-line sections.
calculate_topology() dispatches a parameter dict to the routine:

    {'source_z': 50+0j, 'load_z': 200+0j, 'frequency': 1e9,
     'z0': 50.0, 'target_q': 2.0}

Only 'load_z' and 'frequency' are required.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from smithmatch.impedance import DEFAULT_Z0
from smithmatch.matching import (
    DEFAULT_TARGET_Q,
    MatchingSolution,
    l_section,
    pi_network,
    quarter_wave,
    single_stub,
    t_network,
)


@dataclass
class TopologyDefinition:
    """A synthesis routine and what it produces."""
    name: str
    label: str
    description: str
    element_count: int
    calculate: Callable  # Function(params) → List[MatchingSolution]
    category: str = 'lumped'
    include_in_all: bool = True


def _source(params: Dict) -> complex:
    return complex(params.get('source_z', complex(params.get('z0', DEFAULT_Z0), 0.0)))


def _calc_l_section(params: Dict) -> List[MatchingSolution]:
    return l_section(_source(params), complex(params['load_z']), params['frequency'])


def _calc_pi(params: Dict) -> List[MatchingSolution]:
    return pi_network(
        _source(params), complex(params['load_z']), params['frequency'],
        params.get('target_q', DEFAULT_TARGET_Q),
    )


def _calc_t(params: Dict) -> List[MatchingSolution]:
    return t_network(
        _source(params), complex(params['load_z']), params['frequency'],
        params.get('target_q', DEFAULT_TARGET_Q),
    )


def _calc_single_stub(params: Dict) -> List[MatchingSolution]:
    return single_stub(
        _source(params), complex(params['load_z']), params['frequency'],
        params.get('z0', DEFAULT_Z0),
    )


def _calc_quarter_wave(params: Dict) -> List[MatchingSolution]:
    return quarter_wave(_source(params), complex(params['load_z']), params['frequency'])


TOPOLOGIES: Dict[str, TopologyDefinition] = {
    'l_section': TopologyDefinition(
        name='l_section',
        label='L-Section',
        description='Series + shunt reactance, two sign branches, Q set by Rs/Rl',
        element_count=2,
        calculate=_calc_l_section,
    ),
    'pi_network': TopologyDefinition(
        name='pi_network',
        label='Pi-Network',
        description='Shunt C, series L, shunt C; Q chosen via a virtual resistor below both ports',
        element_count=3,
        calculate=_calc_pi,
    ),
    't_network': TopologyDefinition(
        name='t_network',
        label='T-Network',
        description='Series L, shunt C, series L; Q chosen via a virtual resistor above both ports',
        element_count=3,
        calculate=_calc_t,
    ),
    'single_stub': TopologyDefinition(
        name='single_stub',
        label='Single Stub',
        description='Line section plus open or short shunt stub, up to four candidates',
        element_count=2,
        calculate=_calc_single_stub,
        category='distributed',
        include_in_all=False,
    ),
    'quarter_wave': TopologyDefinition(
        name='quarter_wave',
        label='Quarter-Wave Transformer',
        description='λ/4 line of impedance sqrt(Rs·Rl), series reactance cancellation for complex loads',
        element_count=2,
        calculate=_calc_quarter_wave,
        category='distributed',
        include_in_all=False,
    ),
}


def get_topology(name: str) -> TopologyDefinition:
    """Get a topology definition by name."""
    if name not in TOPOLOGIES:
        raise ValueError(f"Unknown topology '{name}'. Available: {list(TOPOLOGIES.keys())}")
    return TOPOLOGIES[name]


def default_topology_names() -> List[str]:
    """Names run when no topology is requested explicitly."""
    return [name for name, topo in TOPOLOGIES.items() if topo.include_in_all]


def list_topologies(category: Optional[str] = None) -> List[Dict]:
    """List all available topologies, optionally filtered by category."""
    result = []
    for name, topo in TOPOLOGIES.items():
        if category and topo.category != category:
            continue
        result.append({
            'name': topo.name,
            'label': topo.label,
            'description': topo.description,
            'category': topo.category,
            'element_count': topo.element_count,
            'include_in_all': topo.include_in_all,
        })
    return result


def calculate_topology(name: str, params: Dict) -> List[MatchingSolution]:
    """Run the synthesis routine for a topology with the given parameters."""
    topo = get_topology(name)
    return topo.calculate(params)
