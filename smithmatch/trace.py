"""
Impedance trajectory generation.

A MatchingTrace starts at the load impedance and records one TraceSegment per
added element. Each segment samples the locus the impedance travels along as
the element's value sweeps from zero to its final value:

    series L / C      constant-R circle    X → X + ΔX
    series R          constant-X arc       R → R + ΔR     (R > 0)
    shunt L / C       constant-G circle    B → B + ΔB     (on Y = 1/Z)
    shunt R           constant-B arc       G → G + 1/R    (G > 0)
    series line       constant-|Γ| rotation toward the generator
    open/short stub   constant-G circle, B from the stub input susceptance

Segment k always starts where segment k−1 ends (the load for k = 0). Editing
a value recomputes that segment and everything after it.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from smithmatch.components import (
    ComponentKind,
    Connection,
    LINE_KINDS,
    MIN_COMPONENT_VALUE,
    TWO_PI,
    component_name,
    format_value,
)
from smithmatch.impedance import (
    DEFAULT_Z0,
    EPSILON,
    HIGH_IMPEDANCE,
    SPEED_OF_LIGHT,
    gammas_to_impedances,
    impedance_to_admittance,
    impedance_to_gamma,
)
from smithmatch.matching import MatchingSolution

logger = logging.getLogger(__name__)

DEFAULT_NUM_POINTS = 50
# Stand-ins for samples that would cross to zero or negative resistance/conductance
MIN_RESISTANCE = 1e-3
MIN_CONDUCTANCE = 1e-3

_LABEL_PREFIXES = {
    ComponentKind.RESISTOR: 'R',
    ComponentKind.INDUCTOR: 'L',
    ComponentKind.CAPACITOR: 'C',
    ComponentKind.TRANSMISSION_LINE: 'TL',
    ComponentKind.OPEN_STUB: 'Open stub',
    ComponentKind.SHORT_STUB: 'Short stub',
}


class LocusType(str, Enum):
    CONSTANT_R = "constant_r"
    CONSTANT_X = "constant_x"
    CONSTANT_G = "constant_g"
    CONSTANT_B = "constant_b"
    OTHER = "other"


@dataclass(frozen=True)
class TracePoint:
    gamma: complex
    impedance: complex
    frequency: float


@dataclass
class TraceSegment:
    """
    The sampled path of one element.

    index is the segment's position in its trace; renderers key colours off
    it. value and line_z0 are kept so the segment can be rebuilt after an
    upstream edit.
    """
    points: List[TracePoint]
    locus: LocusType
    kind: ComponentKind
    connection: Connection
    value: float
    label: str = ''
    index: int = 0
    line_z0: Optional[float] = None

    @property
    def start_point(self) -> TracePoint:
        return self.points[0]

    @property
    def end_point(self) -> TracePoint:
        return self.points[-1]

    @property
    def gammas(self) -> np.ndarray:
        return np.array([p.gamma for p in self.points], dtype=complex)

    @property
    def impedances(self) -> np.ndarray:
        return np.array([p.impedance for p in self.points], dtype=complex)

    def as_tuple(self) -> Tuple[ComponentKind, Connection, float]:
        return self.kind, self.connection, self.value


def element_label(kind: ComponentKind, connection: Connection, value: float) -> str:
    """Display label, e.g. 'L = 7.96 nH' or 'C = 1.27 pF (shunt)'."""
    if kind == ComponentKind.NONE:
        return ''
    label = f"{_LABEL_PREFIXES[kind]} = {format_value(kind, value, precision=2)}"
    if connection == Connection.SHUNT:
        label += ' (shunt)'
    return label


def _invert(values: np.ndarray) -> np.ndarray:
    # Element-wise 1/v with the open-circuit sentinel near zero
    degenerate = np.abs(values) < EPSILON
    safe = np.where(degenerate, 1.0, values)
    return np.where(degenerate, complex(HIGH_IMPEDANCE, 0.0), 1.0 / safe)


class MatchingTrace:
    """
    Stepwise impedance path from a load through a chain of elements.

    Usage:
        trace = MatchingTrace(source_z=50, load_z=200, z0=50, frequency=1e9)
        trace.add_element(ComponentKind.CAPACITOR, Connection.SHUNT, 1.378e-12)
        trace.add_element(ComponentKind.INDUCTOR, Connection.SERIES, 13.78e-9)
        trace.current_impedance()   # ≈ 50 + 0j
    """

    def __init__(
        self,
        source_z: complex = complex(DEFAULT_Z0, 0.0),
        load_z: complex = complex(DEFAULT_Z0, 0.0),
        z0: float = DEFAULT_Z0,
        frequency: float = 1e9,
        num_points: int = DEFAULT_NUM_POINTS,
    ):
        self.source_z = complex(source_z)
        self.load_z = complex(load_z)
        self.z0 = z0
        self.frequency = frequency
        self.num_points = max(int(num_points), 2)
        self._segments: List[TraceSegment] = []

    # --- Queries ---

    @property
    def segments(self) -> List[TraceSegment]:
        return list(self._segments)

    @property
    def num_segments(self) -> int:
        return len(self._segments)

    def segment(self, index: int) -> TraceSegment:
        if not 0 <= index < len(self._segments):
            raise IndexError(f"Segment index {index} out of range (0..{len(self._segments) - 1})")
        return self._segments[index]

    def current_impedance(self) -> complex:
        if not self._segments:
            return self.load_z
        return self._segments[-1].end_point.impedance

    def current_gamma(self) -> complex:
        return impedance_to_gamma(self.current_impedance(), self.z0)

    def is_matched(self, tolerance: float = 1e-6) -> bool:
        """True when the trace ends within a relative tolerance of the source impedance."""
        scale = max(abs(self.source_z), 1.0)
        return abs(self.current_impedance() - self.source_z) <= tolerance * scale

    def element_tuples(self) -> List[Tuple[ComponentKind, Connection, float]]:
        """(kind, connection, base-SI value) per segment, load side first."""
        return [seg.as_tuple() for seg in self._segments]

    def netlist_entries(self) -> List[Tuple[str, ComponentKind, Connection, float]]:
        """(name, kind, connection, value) per segment, named R1/L2/... by position."""
        return [
            (component_name(seg.kind, seg.index + 1), seg.kind, seg.connection, seg.value)
            for seg in self._segments
            if seg.kind != ComponentKind.NONE
        ]

    # --- Segment construction ---

    def _points(self, impedances: np.ndarray) -> List[TracePoint]:
        gammas = (impedances - self.z0) / (impedances + self.z0)
        return [
            TracePoint(complex(g), complex(z), self.frequency)
            for g, z in zip(gammas, impedances)
        ]

    def _sweep(self) -> np.ndarray:
        return np.linspace(0.0, 1.0, self.num_points)

    def _constant_r_arc(self, start_z: complex, delta_x: float) -> List[TracePoint]:
        x = start_z.imag + self._sweep() * delta_x
        return self._points(start_z.real + 1j * x)

    def _constant_x_arc(self, start_z: complex, delta_r: float) -> List[TracePoint]:
        r = start_z.real + self._sweep() * delta_r
        r = np.where(r <= 0, MIN_RESISTANCE, r)
        return self._points(r + 1j * start_z.imag)

    def _constant_g_arc(self, start_y: complex, delta_b: float) -> List[TracePoint]:
        b = start_y.imag + self._sweep() * delta_b
        return self._points(_invert(start_y.real + 1j * b))

    def _constant_b_arc(self, start_y: complex, delta_g: float) -> List[TracePoint]:
        g = start_y.real + self._sweep() * delta_g
        g = np.where(g <= 0, MIN_CONDUCTANCE, g)
        return self._points(_invert(g + 1j * start_y.imag))

    def _line_rotation(self, start_z: complex, length: float, line_z0: float) -> List[TracePoint]:
        # Z(ℓ) = Zc · (ZL + j·Zc·tan βℓ) / (Zc + j·ZL·tan βℓ)
        beta = TWO_PI * self.frequency / SPEED_OF_LIGHT
        t = np.tan(beta * self._sweep() * length)
        num = start_z + 1j * line_z0 * t
        den = line_z0 + 1j * start_z * t
        degenerate = np.abs(den) < EPSILON
        z = np.where(degenerate, complex(HIGH_IMPEDANCE, 0.0), line_z0 * num / np.where(degenerate, 1.0, den))
        return self._points(z)

    def _stub_susceptance(self, kind: ComponentKind, length: float, line_z0: float) -> float:
        beta = TWO_PI * self.frequency / SPEED_OF_LIGHT
        t = math.tan(beta * length)
        if kind == ComponentKind.OPEN_STUB:
            return t / line_z0
        # Short stub: B = −1/(Zc·tan βl); a zero-length short is a short circuit
        if abs(t) < EPSILON:
            return -HIGH_IMPEDANCE
        return -1.0 / (line_z0 * t)

    def _build_segment(
        self,
        kind: ComponentKind,
        connection: Connection,
        value: float,
        start_z: complex,
        index: int,
        line_z0: Optional[float] = None,
    ) -> TraceSegment:
        w = TWO_PI * self.frequency
        z_line = line_z0 if line_z0 is not None else self.z0

        if kind == ComponentKind.NONE:
            points = self._points(np.array([start_z], dtype=complex))
            locus = LocusType.OTHER
        elif connection == Connection.SERIES:
            if kind == ComponentKind.INDUCTOR:
                locus = LocusType.CONSTANT_R
                points = self._constant_r_arc(start_z, w * value)
            elif kind == ComponentKind.CAPACITOR:
                locus = LocusType.CONSTANT_R
                delta_x = -1.0 / (w * value) if value > MIN_COMPONENT_VALUE and w > 0 else 0.0
                points = self._constant_r_arc(start_z, delta_x)
            elif kind == ComponentKind.RESISTOR:
                locus = LocusType.CONSTANT_X
                points = self._constant_x_arc(start_z, value)
            elif kind == ComponentKind.TRANSMISSION_LINE:
                locus = LocusType.OTHER
                points = self._line_rotation(start_z, value, z_line)
            elif kind in LINE_KINDS:
                raise ValueError(f"{kind.value} must be connected in shunt")
            else:
                raise ValueError(f"Unhandled component kind: {kind!r}")
        elif connection == Connection.SHUNT:
            start_y = impedance_to_admittance(start_z)
            if kind == ComponentKind.CAPACITOR:
                locus = LocusType.CONSTANT_G
                points = self._constant_g_arc(start_y, w * value)
            elif kind == ComponentKind.INDUCTOR:
                locus = LocusType.CONSTANT_G
                delta_b = -1.0 / (w * value) if value > MIN_COMPONENT_VALUE and w > 0 else 0.0
                points = self._constant_g_arc(start_y, delta_b)
            elif kind == ComponentKind.RESISTOR:
                locus = LocusType.CONSTANT_B
                delta_g = 1.0 / value if value > MIN_COMPONENT_VALUE else 0.0
                points = self._constant_b_arc(start_y, delta_g)
            elif kind in (ComponentKind.OPEN_STUB, ComponentKind.SHORT_STUB):
                locus = LocusType.CONSTANT_G
                points = self._constant_g_arc(start_y, self._stub_susceptance(kind, value, z_line))
            elif kind == ComponentKind.TRANSMISSION_LINE:
                raise ValueError("transmission_line must be connected in series")
            else:
                raise ValueError(f"Unhandled component kind: {kind!r}")
        else:
            raise ValueError(f"Unhandled connection: {connection!r}")

        return TraceSegment(
            points=points,
            locus=locus,
            kind=kind,
            connection=connection,
            value=value,
            label=element_label(kind, connection, value),
            index=index,
            line_z0=line_z0 if kind in LINE_KINDS else None,
        )

    def calculate_series_element(
        self, kind: ComponentKind, value: float, line_z0: Optional[float] = None,
    ) -> TraceSegment:
        """Segment a series element would add at the end of the trace, without adding it."""
        return self._build_segment(
            kind, Connection.SERIES, value, self.current_impedance(), len(self._segments), line_z0,
        )

    def calculate_shunt_element(
        self, kind: ComponentKind, value: float, line_z0: Optional[float] = None,
    ) -> TraceSegment:
        """Segment a shunt element would add at the end of the trace, without adding it."""
        return self._build_segment(
            kind, Connection.SHUNT, value, self.current_impedance(), len(self._segments), line_z0,
        )

    # --- Mutation ---

    def add_segment(self, segment: TraceSegment) -> TraceSegment:
        """
        Append a previously calculated segment.

        The segment is rebuilt from the current impedance, so one calculated
        before later elements were added still chains onto the end.
        """
        rebuilt = self._build_segment(
            segment.kind, segment.connection, segment.value,
            self.current_impedance(), len(self._segments), segment.line_z0,
        )
        self._segments.append(rebuilt)
        return rebuilt

    def add_element(
        self,
        kind: ComponentKind,
        connection: Connection,
        value: float,
        line_z0: Optional[float] = None,
    ) -> TraceSegment:
        """Build the segment for an element at the current impedance and append it."""
        kind = ComponentKind(kind)
        connection = Connection(connection)
        segment = self._build_segment(
            kind, connection, value, self.current_impedance(), len(self._segments), line_z0,
        )
        self._segments.append(segment)
        return segment

    def _start_of(self, index: int) -> complex:
        if index == 0:
            return self.load_z
        return self._segments[index - 1].end_point.impedance

    def update_segment_value(self, index: int, value: float):
        """
        Change segment index's value and recompute it and every later segment.

        Out-of-range indices are ignored with a warning.
        """
        if not 0 <= index < len(self._segments):
            logger.warning(
                "Ignoring value update for segment %d; trace has %d segments",
                index, len(self._segments),
            )
            return

        for i in range(index, len(self._segments)):
            seg = self._segments[i]
            new_value = value if i == index else seg.value
            self._segments[i] = self._build_segment(
                seg.kind, seg.connection, new_value, self._start_of(i), i, seg.line_z0,
            )

    def remove_last_segment(self):
        if self._segments:
            self._segments.pop()

    def remove_segment(self, index: int):
        """Remove one segment and replay the ones after it from its start."""
        if not 0 <= index < len(self._segments):
            logger.warning(
                "Ignoring removal of segment %d; trace has %d segments",
                index, len(self._segments),
            )
            return

        replay = [
            (seg.kind, seg.connection, seg.value, seg.line_z0)
            for seg in self._segments[index + 1:]
        ]
        del self._segments[index:]
        for kind, connection, value, line_z0 in replay:
            self.add_element(kind, connection, value, line_z0)

    def clear(self):
        self._segments = []

    def apply_solution(self, solution: MatchingSolution):
        """Clear the trace and replay a synthesized network starting at the load."""
        self.clear()
        for elem in solution.elements_from_load():
            self.add_element(elem.kind, elem.connection, elem.value, elem.line_z0)


def overlay_points(
    frequencies: Sequence[float],
    gammas: Sequence[complex],
    z0: float = DEFAULT_Z0,
) -> List[TracePoint]:
    """
    Turn measured (frequency, Γ) samples into trace points for display.

    Args:
        frequencies: Sample frequencies (Hz).
        gammas: Complex reflection coefficients, same length.
        z0: Reference impedance the samples were measured against.
    """
    freqs = np.asarray(frequencies, dtype=float)
    gammas = np.asarray(gammas, dtype=complex)
    if freqs.shape != gammas.shape:
        raise ValueError(
            f"frequencies and gammas must have the same shape, got {freqs.shape} and {gammas.shape}"
        )
    impedances = gammas_to_impedances(gammas, z0)
    return [
        TracePoint(complex(g), complex(z), float(f))
        for f, g, z in zip(freqs, gammas, impedances)
    ]
