"""
SmithMatch Compute Engine

Core computation library for Smith chart transforms, component value
extraction, impedance matching network synthesis and trajectory generation.

All math is deterministic and single-frequency; no state is persisted.
"""

from smithmatch.impedance import (
    Impedance,
    Admittance,
    ReflectionCoefficient,
    impedance_to_gamma,
    gamma_to_impedance,
    gamma_to_vswr,
)
from smithmatch.components import ComponentKind, Connection, ComponentValue, classify, format_value
from smithmatch.matching import MatchingTopology, MatchingElement, MatchingSolution, MatchingCalculator, calculate_all
from smithmatch.topology import TopologyDefinition, get_topology, list_topologies, calculate_topology
from smithmatch.trace import LocusType, TracePoint, TraceSegment, MatchingTrace, overlay_points

__version__ = "0.1.0"
