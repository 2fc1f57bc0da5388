"""
Impedance matching network synthesis.

Computes component values that transform a load impedance onto a source
impedance at a single frequency:

    L-section       two elements, Q fixed by Rs/Rl:  Q = sqrt(Rmax/Rmin − 1)
    Pi-network      shunt C → series L → shunt C, virtual resistor
                    Rvirt = min(Rs, Rl) / (1 + Q²)
    T-network       series L → shunt C → series L, virtual resistor
                    Rvirt = max(Rs, Rl) · (1 + Q²)
    Single stub     line section of length d plus an open or short shunt stub
    Quarter-wave    λ/4 line of impedance sqrt(Rs·Rl), with a series element
                    cancelling any load reactance first

Elements of a solution are listed in signal-path order, from the source port
toward the load. To replay a solution onto the load (e.g. to draw its
trajectory), walk them with MatchingSolution.elements_from_load().

Degenerate inputs (non-positive resistances, zero frequency for the
distributed topologies, an already matched load) yield an empty list, never
an exception.

References:
- Pozar, "Microwave Engineering" (4th ed.), ch. 5
- Bowick, "RF Circuit Design" (2nd ed.), ch. 4
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from smithmatch.components import (
    ComponentKind,
    Connection,
    LINE_KINDS,
    component_name,
    format_value,
    reactance_to_capacitance,
    reactance_to_inductance,
    susceptance_to_capacitance,
    susceptance_to_inductance,
)
from smithmatch.impedance import (
    DEFAULT_Z0,
    EPSILON,
    MATCH_TOLERANCE,
    SPEED_OF_LIGHT,
)

logger = logging.getLogger(__name__)

DEFAULT_TARGET_Q = 2.0


class MatchingTopology(str, Enum):
    L_SECTION = "l_section"
    L_SECTION_REVERSED = "l_section_reversed"
    PI_NETWORK = "pi_network"
    T_NETWORK = "t_network"
    SINGLE_STUB_OPEN = "single_stub_open"
    SINGLE_STUB_SHORT = "single_stub_short"
    QUARTER_WAVE = "quarter_wave"


TOPOLOGY_LABELS = {
    MatchingTopology.L_SECTION: "L-Section",
    MatchingTopology.L_SECTION_REVERSED: "L-Section (Reversed)",
    MatchingTopology.PI_NETWORK: "Pi-Network",
    MatchingTopology.T_NETWORK: "T-Network",
    MatchingTopology.SINGLE_STUB_OPEN: "Single Stub (Open)",
    MatchingTopology.SINGLE_STUB_SHORT: "Single Stub (Short)",
    MatchingTopology.QUARTER_WAVE: "Quarter-Wave Transformer",
}


@dataclass(frozen=True)
class MatchingElement:
    """
    One element of a matching network.

    value is in base units: Ω/H/F for lumped kinds, metres of physical length
    for transmission lines and stubs. line_z0 is the characteristic impedance
    of a line element and None for lumped ones.
    """
    kind: ComponentKind
    connection: Connection
    value: float
    label: str = ''
    line_z0: Optional[float] = None

    def value_string(self) -> str:
        text = format_value(self.kind, self.value, precision=2)
        if self.kind in LINE_KINDS and self.line_z0 is not None:
            text += f" (Z0={self.line_z0:.1f} Ω)"
        return text

    def as_tuple(self) -> Tuple[ComponentKind, Connection, float]:
        return self.kind, self.connection, self.value


@dataclass(frozen=True)
class MatchingSolution:
    """A synthesized candidate network. Immutable once produced."""
    topology: MatchingTopology
    elements: Tuple[MatchingElement, ...]
    frequency: float
    source_z: complex
    load_z: complex
    valid: bool = True
    description: str = ''

    @property
    def label(self) -> str:
        return TOPOLOGY_LABELS[self.topology]

    @property
    def element_count(self) -> int:
        return len(self.elements)

    def network_q(self) -> float:
        """Loaded Q implied by the resistance transformation ratio."""
        return network_q(self.source_z, self.load_z)

    def elements_from_load(self) -> List[MatchingElement]:
        """Elements in the order they are added when starting at the load."""
        return list(reversed(self.elements))

    def netlist_entries(self) -> List[Tuple[str, ComponentKind, Connection, float]]:
        """(name, kind, connection, value) per element, named by position."""
        entries = []
        for position, elem in enumerate(self.elements, start=1):
            if elem.kind == ComponentKind.NONE:
                continue
            entries.append((component_name(elem.kind, position), elem.kind, elem.connection, elem.value))
        return entries

    def describe(self) -> str:
        """Human-readable summary, e.g. 'Pi-Network: Shunt 1.27 pF → Series ...'."""
        if not self.valid:
            return "Invalid solution"
        parts = []
        for elem in self.elements:
            conn = 'Series' if elem.connection == Connection.SERIES else 'Shunt'
            parts.append(f"{conn} {elem.label or elem.value_string()}")
        return f"{self.label}: " + " → ".join(parts)


def network_q(source_z: complex, load_z: complex) -> float:
    """Q = sqrt(max(Rs, Rl)/min(Rs, Rl) − 1); 0 for non-positive resistances."""
    rs = source_z.real
    rl = load_z.real
    if rs <= 0 or rl <= 0:
        return 0.0
    return math.sqrt(max(rs, rl) / min(rs, rl) - 1.0)


def _sqrt_ratio(ratio: float) -> float:
    # sqrt(ratio − 1), clipped at zero to absorb rounding at ratio ≈ 1
    return math.sqrt(max(ratio - 1.0, 0.0))


def _series_element(x: float, freq_hz: float) -> MatchingElement:
    # X > 0 is an inductor (X = ωL), otherwise a capacitor
    if x > 0:
        return MatchingElement(ComponentKind.INDUCTOR, Connection.SERIES, reactance_to_inductance(x, freq_hz))
    return MatchingElement(ComponentKind.CAPACITOR, Connection.SERIES, reactance_to_capacitance(x, freq_hz))


def _shunt_element(b: float, freq_hz: float) -> MatchingElement:
    # B > 0 is a capacitor (B = ωC), otherwise an inductor
    if b > 0:
        return MatchingElement(ComponentKind.CAPACITOR, Connection.SHUNT, susceptance_to_capacitance(b, freq_hz))
    return MatchingElement(ComponentKind.INDUCTOR, Connection.SHUNT, susceptance_to_inductance(b, freq_hz))


def _resistances_valid(source_z: complex, load_z: complex, topology: str) -> bool:
    if source_z.real <= 0 or load_z.real <= 0:
        logger.debug(
            "%s: no solution for non-positive resistance (Rs=%g, Rl=%g)",
            topology, source_z.real, load_z.real,
        )
        return False
    return True


def _wavelength(frequency: float, topology: str) -> Optional[float]:
    if frequency < EPSILON:
        logger.debug("%s: wavelength undefined at f=%g Hz", topology, frequency)
        return None
    return SPEED_OF_LIGHT / frequency


def _fold_half_wave(length: float, wavelength: float) -> float:
    # Line lengths repeat every λ/2; bring negatives into [0, λ/2)
    if length < 0:
        length += wavelength / 2.0
    return length


def l_section(source_z: complex, load_z: complex, frequency: float) -> List[MatchingSolution]:
    """
    Two-element L-section candidates.

    Rs > Rl: shunt element on the source side, series element toward the
    load. Rs < Rl: series element on the source side, shunt element across
    the load. Each case has two sign branches (±Q). Equal resistances only
    need the reactance difference cancelled by one series element, and no
    element at all when the reactances already agree.
    """
    if not _resistances_valid(source_z, load_z, 'l_section'):
        return []

    rs, xs = source_z.real, source_z.imag
    rl, xl = load_z.real, load_z.imag

    def make(x_series: float, b_shunt: float, shunt_first: bool) -> MatchingSolution:
        series = _series_element(x_series, frequency)
        shunt = _shunt_element(b_shunt, frequency)
        return MatchingSolution(
            topology=MatchingTopology.L_SECTION if shunt_first else MatchingTopology.L_SECTION_REVERSED,
            elements=(shunt, series) if shunt_first else (series, shunt),
            frequency=frequency,
            source_z=source_z,
            load_z=load_z,
        )

    if abs(rs - rl) < EPSILON:
        if abs(xl - xs) <= EPSILON:
            logger.debug("l_section: load already matches source reactance")
            return []
        x_cancel = -(xl - xs)
        return [MatchingSolution(
            topology=MatchingTopology.L_SECTION,
            elements=(_series_element(x_cancel, frequency),),
            frequency=frequency,
            source_z=source_z,
            load_z=load_z,
            description="Series reactance cancellation",
        )]

    if rs > rl:
        q = _sqrt_ratio(rs / rl)
        return [
            make(q * rl - xl, q / rs, True),
            make(-q * rl - xl, -q / rs, True),
        ]

    q = _sqrt_ratio(rl / rs)
    return [
        make(q * rs - xs, q / rl, False),
        make(-q * rs - xs, -q / rl, False),
    ]


def pi_network(
    source_z: complex,
    load_z: complex,
    frequency: float,
    target_q: float = DEFAULT_TARGET_Q,
) -> List[MatchingSolution]:
    """
    Pi-network (shunt C, series L, shunt C) via the virtual resistor method.

    Each side is an L-section down to Rvirt = min(Rs, Rl)/(1 + Q²):
        Qi = sqrt(Ri/Rvirt − 1),  Bi = Qi/Ri,  Xi = Qi·Rvirt
    The two series reactances merge into one inductor.
    """
    if not _resistances_valid(source_z, load_z, 'pi_network'):
        return []

    rs = source_z.real
    rl = load_z.real
    r_virt = min(rs, rl) / (1.0 + target_q * target_q)

    q1 = _sqrt_ratio(rs / r_virt)
    b1 = q1 / rs
    x1 = q1 * r_virt

    q2 = _sqrt_ratio(rl / r_virt)
    b2 = q2 / rl
    x2 = q2 * r_virt

    elements = (
        MatchingElement(ComponentKind.CAPACITOR, Connection.SHUNT, susceptance_to_capacitance(b1, frequency)),
        MatchingElement(ComponentKind.INDUCTOR, Connection.SERIES, reactance_to_inductance(x1 + x2, frequency)),
        MatchingElement(ComponentKind.CAPACITOR, Connection.SHUNT, susceptance_to_capacitance(b2, frequency)),
    )
    return [MatchingSolution(
        topology=MatchingTopology.PI_NETWORK,
        elements=elements,
        frequency=frequency,
        source_z=source_z,
        load_z=load_z,
        description=f"Pi-network, Q={target_q:g}, Rvirt={r_virt:.2f} Ω",
    )]


def t_network(
    source_z: complex,
    load_z: complex,
    frequency: float,
    target_q: float = DEFAULT_TARGET_Q,
) -> List[MatchingSolution]:
    """
    T-network (series L, shunt C, series L), dual of the Pi-network.

    Each side is an L-section up to Rvirt = max(Rs, Rl)·(1 + Q²):
        Qi = sqrt(Rvirt/Ri − 1),  Xi = Qi·Ri,  Bi = Qi/Rvirt
    The two shunt susceptances merge into one capacitor.
    """
    if not _resistances_valid(source_z, load_z, 't_network'):
        return []

    rs = source_z.real
    rl = load_z.real
    r_virt = max(rs, rl) * (1.0 + target_q * target_q)

    q1 = _sqrt_ratio(r_virt / rs)
    x1 = q1 * rs
    b1 = q1 / r_virt

    q2 = _sqrt_ratio(r_virt / rl)
    x2 = q2 * rl
    b2 = q2 / r_virt

    elements = (
        MatchingElement(ComponentKind.INDUCTOR, Connection.SERIES, reactance_to_inductance(x1, frequency)),
        MatchingElement(ComponentKind.CAPACITOR, Connection.SHUNT, susceptance_to_capacitance(b1 + b2, frequency)),
        MatchingElement(ComponentKind.INDUCTOR, Connection.SERIES, reactance_to_inductance(x2, frequency)),
    )
    return [MatchingSolution(
        topology=MatchingTopology.T_NETWORK,
        elements=elements,
        frequency=frequency,
        source_z=source_z,
        load_z=load_z,
        description=f"T-network, Q={target_q:g}, Rvirt={r_virt:.2f} Ω",
    )]


def single_stub(
    source_z: complex,
    load_z: complex,
    frequency: float,
    z0: float = DEFAULT_Z0,
) -> List[MatchingSolution]:
    """
    Single shunt-stub candidates.

    With the normalized load admittance yL = g + jb, the line position
    t = tan(βd) comes from

        t = (b ± sqrt(g·((1 − g)² + b²))) / (g − 1)        (g ≠ 1)
        t = −b / 2                                          (g = 1, double root)

    For each root the stub cancels the remaining susceptance B = −Im(y_in)
    with either an open stub (l = atan(B)/β) or a short stub
    (l = −atan(1/B)/β), both folded into [0, λ/2).

    Returns up to four solutions in enumeration order (root 1 open, root 1
    short, root 2 open, root 2 short). Roots are not de-duplicated and
    candidates are not ranked.
    """
    if not _resistances_valid(source_z, load_z, 'single_stub'):
        return []
    wavelength = _wavelength(frequency, 'single_stub')
    if wavelength is None:
        return []

    y_l = 1.0 / (load_z / z0)
    g = y_l.real
    b = y_l.imag

    if abs(g - 1.0) < MATCH_TOLERANCE and abs(b) < MATCH_TOLERANCE:
        logger.debug("single_stub: load already matched to Z0=%g", z0)
        return []

    beta = 2.0 * math.pi / wavelength

    if abs(g - 1.0) < MATCH_TOLERANCE:
        roots = (-b / 2.0, -b / 2.0)
    else:
        root = math.sqrt(g * ((1.0 - g) ** 2 + b * b))
        roots = ((b + root) / (g - 1.0), (b - root) / (g - 1.0))

    solutions = []
    for t in roots:
        d = _fold_half_wave(math.atan(t) / beta, wavelength)

        y_in = (y_l + 1j * t) / (1.0 + 1j * t * y_l)
        b_stub = -y_in.imag

        l_open = _fold_half_wave(math.atan(b_stub) / beta, wavelength)
        if abs(b_stub) < EPSILON:
            # 1/B → ±∞, atan → ∓π/2; both fold to λ/4
            l_short = wavelength / 4.0
        else:
            l_short = _fold_half_wave(-math.atan(1.0 / b_stub) / beta, wavelength)

        line = MatchingElement(
            ComponentKind.TRANSMISSION_LINE, Connection.SERIES, d,
            label=f"TL: {d * 1000:.2f} mm", line_z0=z0,
        )
        for kind, length, topology, name in (
            (ComponentKind.OPEN_STUB, l_open, MatchingTopology.SINGLE_STUB_OPEN, 'Open'),
            (ComponentKind.SHORT_STUB, l_short, MatchingTopology.SINGLE_STUB_SHORT, 'Short'),
        ):
            stub = MatchingElement(
                kind, Connection.SHUNT, length,
                label=f"{name} Stub: {length * 1000:.2f} mm", line_z0=z0,
            )
            solutions.append(MatchingSolution(
                topology=topology,
                elements=(stub, line),
                frequency=frequency,
                source_z=source_z,
                load_z=load_z,
                description=f"{name} stub at d={d * 1000:.2f}mm, l={length * 1000:.2f}mm",
            ))

    return solutions


def quarter_wave(source_z: complex, load_z: complex, frequency: float) -> List[MatchingSolution]:
    """
    Quarter-wave transformer of impedance Z_qw = sqrt(Rs·Rl) and length λ/4.

    A purely resistive load (|Xl| < 1e-10) gets the line alone. Otherwise a
    series L or C first cancels the load reactance, using the L-section sign
    rule, and the line transforms the remaining Rl.
    """
    if not _resistances_valid(source_z, load_z, 'quarter_wave'):
        return []
    wavelength = _wavelength(frequency, 'quarter_wave')
    if wavelength is None:
        return []

    rs = source_z.real
    rl = load_z.real
    xl = load_z.imag

    z_qw = math.sqrt(rs * rl)
    length = wavelength / 4.0
    line = MatchingElement(
        ComponentKind.TRANSMISSION_LINE, Connection.SERIES, length,
        label=f"λ/4 TL: Z0={z_qw:.1f}Ω, L={length * 1000:.2f}mm", line_z0=z_qw,
    )

    if abs(xl) < MATCH_TOLERANCE:
        elements = (line,)
        description = f"Quarter-wave transformer Z0={z_qw:.1f}Ω"
    else:
        cancel = _series_element(-xl, frequency)
        prefix = 'L' if cancel.kind == ComponentKind.INDUCTOR else 'C'
        cancel = MatchingElement(
            cancel.kind, cancel.connection, cancel.value,
            label=f"{prefix}: {format_value(cancel.kind, cancel.value, precision=2)}",
        )
        elements = (line, cancel)
        description = "λ/4 transformer with reactance cancellation"

    return [MatchingSolution(
        topology=MatchingTopology.QUARTER_WAVE,
        elements=elements,
        frequency=frequency,
        source_z=source_z,
        load_z=load_z,
        description=description,
    )]


def calculate_all(
    source_z: complex,
    load_z: complex,
    frequency: float,
    target_q: float = DEFAULT_TARGET_Q,
) -> List[MatchingSolution]:
    """
    Lumped candidates: L-section, then Pi, then T.

    Stub and quarter-wave designs are opt-in; they depend on wavelength and
    are not always wanted.
    """
    return (
        l_section(source_z, load_z, frequency)
        + pi_network(source_z, load_z, frequency, target_q)
        + t_network(source_z, load_z, frequency, target_q)
    )


@dataclass
class MatchingCalculator:
    """Holds one design point (source, load, frequency, Z0) for repeated synthesis."""
    source_z: complex = complex(DEFAULT_Z0, 0.0)
    load_z: complex = complex(DEFAULT_Z0, 0.0)
    frequency: float = 1e9
    z0: float = DEFAULT_Z0

    def calculate_l_section(self) -> List[MatchingSolution]:
        return l_section(self.source_z, self.load_z, self.frequency)

    def calculate_pi_network(self, target_q: float = DEFAULT_TARGET_Q) -> List[MatchingSolution]:
        return pi_network(self.source_z, self.load_z, self.frequency, target_q)

    def calculate_t_network(self, target_q: float = DEFAULT_TARGET_Q) -> List[MatchingSolution]:
        return t_network(self.source_z, self.load_z, self.frequency, target_q)

    def calculate_single_stub(self) -> List[MatchingSolution]:
        return single_stub(self.source_z, self.load_z, self.frequency, self.z0)

    def calculate_quarter_wave(self) -> List[MatchingSolution]:
        return quarter_wave(self.source_z, self.load_z, self.frequency)

    def calculate_all(self, target_q: float = DEFAULT_TARGET_Q) -> List[MatchingSolution]:
        return calculate_all(self.source_z, self.load_z, self.frequency, target_q)
