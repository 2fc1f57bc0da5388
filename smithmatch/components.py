"""
Component value extraction and formatting.

Turns a reactance or susceptance at a frequency into a physical inductor or
capacitor value, and back:

    X_L = 2πfL           X_C = −1/(2πfC)
    B_L = −1/(2πfL)      B_C = 2πfC

Values are always stored in base SI units (Ω, H, F, or metres for line
lengths). Unit-prefix scaling is derived for display and never fed back into
a calculation.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from smithmatch.impedance import EPSILON, HIGH_IMPEDANCE

TWO_PI = 2.0 * math.pi

# Component values below this are treated as absent (0 F, 0 H)
MIN_COMPONENT_VALUE = 1e-18


class ComponentKind(str, Enum):
    RESISTOR = "resistor"
    INDUCTOR = "inductor"
    CAPACITOR = "capacitor"
    TRANSMISSION_LINE = "transmission_line"
    OPEN_STUB = "open_stub"
    SHORT_STUB = "short_stub"
    NONE = "none"


class Connection(str, Enum):
    SERIES = "series"
    SHUNT = "shunt"


LINE_KINDS = (
    ComponentKind.TRANSMISSION_LINE,
    ComponentKind.OPEN_STUB,
    ComponentKind.SHORT_STUB,
)


def _unhandled(kind: ComponentKind):
    raise ValueError(f"Unhandled component kind: {kind!r}")


# Prefix ladders per kind: (threshold, multiplier, prefix), checked top-down.
# The last rung is the catch-all for anything smaller.
_PREFIX_LADDERS = {
    ComponentKind.RESISTOR: [
        (1e6, 1e-6, 'M'),
        (1e3, 1e-3, 'k'),
        (0.0, 1.0, ''),
    ],
    ComponentKind.INDUCTOR: [
        (1e-3, 1e3, 'm'),
        (1e-6, 1e6, 'µ'),
        (1e-9, 1e9, 'n'),
        (0.0, 1e12, 'p'),
    ],
    ComponentKind.CAPACITOR: [
        (1e-6, 1e6, 'µ'),
        (1e-9, 1e9, 'n'),
        (1e-12, 1e12, 'p'),
        (0.0, 1e15, 'f'),
    ],
}


def _scale(kind: ComponentKind, value: float) -> Tuple[float, str]:
    if kind in _PREFIX_LADDERS:
        abs_value = abs(value)
        for threshold, multiplier, prefix in _PREFIX_LADDERS[kind]:
            if abs_value >= threshold:
                return value * multiplier, prefix
    if kind in LINE_KINDS:
        return value * 1e3, 'm'
    if kind == ComponentKind.NONE:
        return value, ''
    _unhandled(kind)


def scaled_value(kind: ComponentKind, value: float) -> float:
    """Value expressed in the prefixed unit, e.g. 4.7e-9 F → 4.7 (nF)."""
    return _scale(kind, value)[0]


def unit_prefix(kind: ComponentKind, value: float) -> str:
    """SI prefix matching scaled_value()."""
    return _scale(kind, value)[1]


def unit_symbol(kind: ComponentKind) -> str:
    if kind == ComponentKind.RESISTOR:
        return 'Ω'
    if kind == ComponentKind.INDUCTOR:
        return 'H'
    if kind == ComponentKind.CAPACITOR:
        return 'F'
    if kind in LINE_KINDS:
        return 'm'
    if kind == ComponentKind.NONE:
        return ''
    _unhandled(kind)


def format_value(kind: ComponentKind, value: float, precision: int = 3) -> str:
    """
    Format a base-unit value with its kind's prefix ladder.

    Examples:
        format_value(RESISTOR, 4700)      → '4.700 kΩ'
        format_value(INDUCTOR, 7.96e-9)   → '7.960 nH'
        format_value(CAPACITOR, 1.5e-12)  → '1.500 pF'
        format_value(OPEN_STUB, 0.0125)   → '12.500 mm'
    """
    if kind == ComponentKind.NONE:
        return f"{value:g}"
    scaled, prefix = _scale(kind, value)
    return f"{scaled:.{precision}f} {prefix}{unit_symbol(kind)}"


_NAME_PREFIXES = {
    ComponentKind.RESISTOR: 'R',
    ComponentKind.INDUCTOR: 'L',
    ComponentKind.CAPACITOR: 'C',
    ComponentKind.TRANSMISSION_LINE: 'TL',
    ComponentKind.OPEN_STUB: 'OS',
    ComponentKind.SHORT_STUB: 'SS',
}


def component_name(kind: ComponentKind, position: int) -> str:
    """Canonical reference designator (R3, L1, TL2). Empty for NONE."""
    if kind == ComponentKind.NONE:
        return ''
    if kind not in _NAME_PREFIXES:
        _unhandled(kind)
    return f"{_NAME_PREFIXES[kind]}{position}"


@dataclass(frozen=True)
class ComponentValue:
    """A physical component value in base SI units at a frequency."""
    kind: ComponentKind = ComponentKind.NONE
    value: float = 0.0
    frequency: float = 1e9

    @property
    def scaled_value(self) -> float:
        return scaled_value(self.kind, self.value)

    @property
    def unit_prefix(self) -> str:
        return unit_prefix(self.kind, self.value)

    @property
    def unit(self) -> str:
        return unit_symbol(self.kind)

    def value_with_unit(self, precision: int = 3) -> str:
        return format_value(self.kind, self.value, precision)

    def is_none(self) -> bool:
        return self.kind == ComponentKind.NONE


# --- Reactance / susceptance → component ---

def calculate_resistance(r: float) -> ComponentValue:
    return ComponentValue(ComponentKind.RESISTOR, r, 0.0)


def calculate_inductance(x: float, freq_hz: float) -> ComponentValue:
    """L = X / (2πf); zero at DC."""
    if freq_hz < EPSILON:
        return ComponentValue(ComponentKind.INDUCTOR, 0.0, freq_hz)
    return ComponentValue(ComponentKind.INDUCTOR, x / (TWO_PI * freq_hz), freq_hz)


def calculate_capacitance(x: float, freq_hz: float) -> ComponentValue:
    """C = −1 / (2πfX); zero at DC or for vanishing reactance."""
    if freq_hz < EPSILON or abs(x) < EPSILON:
        return ComponentValue(ComponentKind.CAPACITOR, 0.0, freq_hz)
    return ComponentValue(ComponentKind.CAPACITOR, -1.0 / (TWO_PI * freq_hz * x), freq_hz)


def classify(z: complex, freq_hz: float) -> ComponentValue:
    """
    Classify a complex impedance as a single R, L or C.

    Pure resistance when |X| is below epsilon, otherwise the reactance sign
    decides: X > 0 is an inductor, X < 0 a capacitor.
    """
    x = z.imag
    if abs(x) < EPSILON:
        return calculate_resistance(z.real)
    if x > 0:
        return calculate_inductance(x, freq_hz)
    return calculate_capacitance(x, freq_hz)


def reactance_to_inductance(x: float, freq_hz: float) -> float:
    if freq_hz < EPSILON:
        return 0.0
    return x / (TWO_PI * freq_hz)


def reactance_to_capacitance(x: float, freq_hz: float) -> float:
    if freq_hz < EPSILON or abs(x) < EPSILON:
        return 0.0
    return -1.0 / (TWO_PI * freq_hz * x)


def susceptance_to_capacitance(b: float, freq_hz: float) -> float:
    if freq_hz < EPSILON:
        return 0.0
    return b / (TWO_PI * freq_hz)


def susceptance_to_inductance(b: float, freq_hz: float) -> float:
    if freq_hz < EPSILON or abs(b) < EPSILON:
        return 0.0
    return -1.0 / (TWO_PI * freq_hz * b)


# --- Component → reactance / susceptance ---

def inductor_reactance(l_henry: float, freq_hz: float) -> float:
    return TWO_PI * freq_hz * l_henry


def capacitor_reactance(c_farad: float, freq_hz: float) -> float:
    if c_farad < MIN_COMPONENT_VALUE or freq_hz < EPSILON:
        return -HIGH_IMPEDANCE
    return -1.0 / (TWO_PI * freq_hz * c_farad)


def inductor_susceptance(l_henry: float, freq_hz: float) -> float:
    if l_henry < MIN_COMPONENT_VALUE or freq_hz < EPSILON:
        return -HIGH_IMPEDANCE
    return -1.0 / (TWO_PI * freq_hz * l_henry)


def capacitor_susceptance(c_farad: float, freq_hz: float) -> float:
    return TWO_PI * freq_hz * c_farad


def kind_from_reactance(x: float) -> ComponentKind:
    """Inductor for X > 0, capacitor for X < 0, NONE inside epsilon."""
    if abs(x) < EPSILON:
        return ComponentKind.NONE
    return ComponentKind.INDUCTOR if x > 0 else ComponentKind.CAPACITOR


def kind_from_susceptance(b: float) -> ComponentKind:
    """Capacitor for B > 0, inductor for B < 0, NONE inside epsilon."""
    if abs(b) < EPSILON:
        return ComponentKind.NONE
    return ComponentKind.CAPACITOR if b > 0 else ComponentKind.INDUCTOR


def series_component_for(z_current: complex, z_target: complex, freq_hz: float) -> ComponentValue:
    """
    Series L or C that moves z_current to z_target's reactance.

    Only the imaginary parts matter: a series reactive element slides along
    the constant-R circle. Returns an empty ComponentValue when no element is
    needed.
    """
    delta_x = z_target.imag - z_current.imag
    if abs(delta_x) < EPSILON:
        return ComponentValue()
    if delta_x > 0:
        return calculate_inductance(delta_x, freq_hz)
    return calculate_capacitance(delta_x, freq_hz)


def shunt_component_for(y_current: complex, y_target: complex, freq_hz: float) -> ComponentValue:
    """
    Shunt L or C that moves y_current to y_target's susceptance.

    Sign convention: positive Δsusceptance is a capacitor (B = ωC), negative
    an inductor (B = −1/ωL). Every shunt branch in the synthesizer relies on
    this.
    """
    delta_b = y_target.imag - y_current.imag
    if abs(delta_b) < EPSILON:
        return ComponentValue()
    if delta_b > 0:
        return ComponentValue(ComponentKind.CAPACITOR, susceptance_to_capacitance(delta_b, freq_hz), freq_hz)
    return ComponentValue(ComponentKind.INDUCTOR, susceptance_to_inductance(delta_b, freq_hz), freq_hz)


def element_reactance(kind: ComponentKind, value: float, freq_hz: float) -> float:
    """Series reactance contributed by a lumped element (0 for R and lines)."""
    if kind == ComponentKind.INDUCTOR:
        return inductor_reactance(value, freq_hz)
    if kind == ComponentKind.CAPACITOR:
        return capacitor_reactance(value, freq_hz)
    if kind == ComponentKind.RESISTOR or kind == ComponentKind.NONE or kind in LINE_KINDS:
        return 0.0
    _unhandled(kind)


def element_susceptance(kind: ComponentKind, value: float, freq_hz: float) -> float:
    """Shunt susceptance contributed by a lumped element (0 for R and lines)."""
    if kind == ComponentKind.INDUCTOR:
        return inductor_susceptance(value, freq_hz)
    if kind == ComponentKind.CAPACITOR:
        return capacitor_susceptance(value, freq_hz)
    if kind == ComponentKind.RESISTOR or kind == ComponentKind.NONE or kind in LINE_KINDS:
        return 0.0
    _unhandled(kind)
