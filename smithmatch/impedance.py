"""
Smith chart coordinate transforms.

Conversions between the reflection coefficient (Γ), impedance (Z) and
admittance (Y) domains, plus the circle geometry of the constant-R, X, G and B
loci drawn on a Smith chart.

    Γ = (Z − Z0) / (Z + Z0)          Z = Z0 · (1 + Γ) / (1 − Γ)
    Γ = (Y0 − Y) / (Y0 + Y)          Y = Y0 · (1 − Γ) / (1 + Γ)

    VSWR = (1 + |Γ|) / (1 − |Γ|)
    RL   = 20·log10(|Γ|)             (reported as a negative dB value)

Nothing here raises on degenerate input. Divisions that would blow up return
documented sentinels instead (see the module constants below); callers treat
a sentinel as "no result".
"""

import cmath
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

# Zero tests on reactance, susceptance, |Γ| etc.
EPSILON = 1e-12
# Looser tolerance for "already matched" / "purely resistive" decisions
MATCH_TOLERANCE = 1e-10

# Sentinels
HIGH_IMPEDANCE = 1e12
VSWR_MAX = 1e6
RETURN_LOSS_FLOOR_DB = -200.0
MISMATCH_LOSS_FLOOR_DB = -100.0

DEFAULT_Z0 = 50.0
SPEED_OF_LIGHT = 3e8  # m/s, free-space propagation for stub / λ/4 lengths


def impedance_to_gamma(z: complex, z0: float = DEFAULT_Z0) -> complex:
    """Reflection coefficient of impedance z against reference z0."""
    return (z - z0) / (z + z0)


def gamma_to_impedance(gamma: complex, z0: float = DEFAULT_Z0) -> complex:
    """
    Impedance seen at reflection coefficient gamma.

    Returns the open-circuit sentinel (1e12 + 0j) when Γ sits on the
    right-hand edge of the chart, where 1 − Γ vanishes.
    """
    if abs(1.0 - gamma) < EPSILON:
        return complex(HIGH_IMPEDANCE, 0.0)
    return z0 * (1.0 + gamma) / (1.0 - gamma)


def admittance_to_gamma(y: complex, y0: float = 1.0 / DEFAULT_Z0) -> complex:
    """Reflection coefficient of admittance y against reference y0."""
    return (y0 - y) / (y0 + y)


def gamma_to_admittance(gamma: complex, y0: float = 1.0 / DEFAULT_Z0) -> complex:
    """Admittance seen at gamma; sentinel (1e12 + 0j) at the short-circuit point."""
    if abs(1.0 + gamma) < EPSILON:
        return complex(HIGH_IMPEDANCE, 0.0)
    return y0 * (1.0 - gamma) / (1.0 + gamma)


def normalized_z_to_gamma(zn: complex) -> complex:
    """Γ of a normalized impedance (z / Z0)."""
    return (zn - 1.0) / (zn + 1.0)


def gamma_to_normalized_z(gamma: complex) -> complex:
    """Normalized impedance at gamma, guarded like gamma_to_impedance."""
    if abs(1.0 - gamma) < EPSILON:
        return complex(HIGH_IMPEDANCE, 0.0)
    return (1.0 + gamma) / (1.0 - gamma)


def impedance_to_admittance(z: complex) -> complex:
    """1/Z, with the 1e12 sentinel for a (near) short circuit."""
    if abs(z) < EPSILON:
        return complex(HIGH_IMPEDANCE, 0.0)
    return 1.0 / z


def admittance_to_impedance(y: complex) -> complex:
    """1/Y, with the 1e12 sentinel for a (near) open circuit."""
    if abs(y) < EPSILON:
        return complex(HIGH_IMPEDANCE, 0.0)
    return 1.0 / y


def gammas_to_impedances(gammas: np.ndarray, z0: float = DEFAULT_Z0) -> np.ndarray:
    """
    Vectorized gamma_to_impedance for sampled data (e.g. S11 sweeps).

    Args:
        gammas: Complex array of reflection coefficients.
        z0: Reference impedance (Ohms).

    Returns:
        Complex impedance array, same shape as gammas. Samples at Γ ≈ 1
        carry the 1e12 sentinel.
    """
    gammas = np.asarray(gammas, dtype=complex)
    denom = 1.0 - gammas
    degenerate = np.abs(denom) < EPSILON
    safe_denom = np.where(degenerate, 1.0, denom)
    z = z0 * (1.0 + gammas) / safe_denom
    return np.where(degenerate, complex(HIGH_IMPEDANCE, 0.0), z)


# --- Chart geometry ---
#
# All centers are in the Γ plane. Constant-X / constant-B loci are arcs of
# circles whose radius goes to infinity as the value goes to zero; the real
# axis is represented by a huge radius rather than inf.

def constant_r_circle(r: float) -> Tuple[complex, float]:
    """Center and radius of the normalized constant-resistance circle."""
    return complex(r / (r + 1.0), 0.0), 1.0 / (r + 1.0)


def constant_x_arc(x: float) -> Tuple[complex, float]:
    """Center and radius of the normalized constant-reactance arc."""
    if abs(x) < EPSILON:
        return complex(0.0, HIGH_IMPEDANCE), HIGH_IMPEDANCE
    return complex(1.0, 1.0 / x), 1.0 / abs(x)


def constant_g_circle(g: float) -> Tuple[complex, float]:
    """Center and radius of the normalized constant-conductance circle."""
    return complex(-g / (g + 1.0), 0.0), 1.0 / (g + 1.0)


def constant_b_arc(b: float) -> Tuple[complex, float]:
    """Center and radius of the normalized constant-susceptance arc."""
    if abs(b) < EPSILON:
        return complex(0.0, -HIGH_IMPEDANCE), HIGH_IMPEDANCE
    return complex(-1.0, -1.0 / b), 1.0 / abs(b)


def q_circle(q: float) -> Tuple[complex, complex, float]:
    """
    Constant-Q loci (Q = |X| / R).

    Returns (upper_center, lower_center, radius): two circles centered at
    (0, ±1/Q) with radius sqrt(1 + 1/Q²).
    """
    inv_q = 1.0 / q
    return complex(0.0, inv_q), complex(0.0, -inv_q), math.sqrt(1.0 + inv_q * inv_q)


# --- Scalar figures of merit ---

def gamma_to_vswr(gamma_mag: float) -> float:
    """VSWR from |Γ|, saturating at VSWR_MAX for a total reflection."""
    if gamma_mag >= 1.0:
        return VSWR_MAX
    if gamma_mag < 0.0:
        gamma_mag = 0.0
    return (1.0 + gamma_mag) / (1.0 - gamma_mag)


def vswr_to_gamma(vswr: float) -> float:
    """|Γ| from VSWR; values below 1 are clamped to a perfect match."""
    if vswr < 1.0:
        vswr = 1.0
    return (vswr - 1.0) / (vswr + 1.0)


def gamma_to_return_loss(gamma: complex) -> float:
    """Return loss in dB (negative), floored at -200 dB for a perfect match."""
    mag = abs(gamma)
    if mag < EPSILON:
        return RETURN_LOSS_FLOOR_DB
    return 20.0 * math.log10(mag)


def gamma_to_mismatch_loss(gamma: complex) -> float:
    """Mismatch loss 10·log10(1 − |Γ|²) in dB, floored at -100 dB."""
    mag2 = abs(gamma) ** 2
    if mag2 >= 1.0:
        return MISMATCH_LOSS_FLOOR_DB
    return 10.0 * math.log10(1.0 - mag2)


def gamma_phase_degrees(gamma: complex) -> float:
    return math.degrees(cmath.phase(gamma))


def is_inside_unit_circle(gamma: complex) -> bool:
    return abs(gamma) <= 1.0


# --- Plane mapping ---
#
# Rendering convention shared with the chart painter: Γ imaginary axis points
# up, screen y grows downward.

def gamma_to_plane(
    gamma: complex,
    center: Tuple[float, float],
    radius: float,
) -> Tuple[float, float]:
    """Map Γ onto a chart of given center and radius (plane units)."""
    cx, cy = center
    return cx + gamma.real * radius, cy - gamma.imag * radius


def plane_to_gamma(
    point: Tuple[float, float],
    center: Tuple[float, float],
    radius: float,
) -> complex:
    """Inverse of gamma_to_plane."""
    px, py = point
    cx, cy = center
    return complex((px - cx) / radius, -(py - cy) / radius)


# --- Value types ---

def _rect_string(value: complex, precision: int, unit: str = '') -> str:
    sign = '+' if value.imag >= 0 else '-'
    text = f"{value.real:.{precision}f} {sign} j{abs(value.imag):.{precision}f}"
    return f"{text} {unit}" if unit else text


@dataclass(frozen=True)
class Impedance:
    """Complex impedance Z = R + jX against a reference z0."""
    value: complex
    z0: float = DEFAULT_Z0

    @property
    def resistance(self) -> float:
        return self.value.real

    @property
    def reactance(self) -> float:
        return self.value.imag

    @property
    def normalized(self) -> complex:
        return self.value / self.z0

    @property
    def normalized_r(self) -> float:
        return self.value.real / self.z0

    @property
    def normalized_x(self) -> float:
        return self.value.imag / self.z0

    @property
    def magnitude(self) -> float:
        return abs(self.value)

    @property
    def phase_radians(self) -> float:
        return cmath.phase(self.value)

    @property
    def phase_degrees(self) -> float:
        return math.degrees(cmath.phase(self.value))

    def to_admittance(self) -> 'Admittance':
        return Admittance(impedance_to_admittance(self.value), 1.0 / self.z0)

    def to_gamma(self) -> 'ReflectionCoefficient':
        return ReflectionCoefficient(impedance_to_gamma(self.value, self.z0), self.z0)

    def to_normalized_string(self) -> str:
        return _rect_string(self.normalized, 3)

    def __str__(self) -> str:
        return _rect_string(self.value, 2, 'Ω')


@dataclass(frozen=True)
class Admittance:
    """Complex admittance Y = G + jB against a reference y0."""
    value: complex
    y0: float = 1.0 / DEFAULT_Z0

    @property
    def conductance(self) -> float:
        return self.value.real

    @property
    def susceptance(self) -> float:
        return self.value.imag

    @property
    def normalized(self) -> complex:
        return self.value / self.y0

    @property
    def normalized_g(self) -> float:
        return self.value.real / self.y0

    @property
    def normalized_b(self) -> float:
        return self.value.imag / self.y0

    def to_impedance(self) -> Impedance:
        return Impedance(admittance_to_impedance(self.value), 1.0 / self.y0)

    def to_gamma(self) -> 'ReflectionCoefficient':
        return ReflectionCoefficient(admittance_to_gamma(self.value, self.y0), 1.0 / self.y0)

    def __str__(self) -> str:
        sign = '+' if self.value.imag >= 0 else '-'
        return f"{self.value.real:.3e} {sign} j{abs(self.value.imag):.3e} S"


@dataclass(frozen=True)
class ReflectionCoefficient:
    """
    Reflection coefficient Γ against reference z0.

    Passivity (|Γ| ≤ 1) is reported by is_passive() but never enforced;
    active or measured data may legitimately fall outside the unit circle.
    """
    gamma: complex
    z0: float = DEFAULT_Z0

    @property
    def magnitude(self) -> float:
        return abs(self.gamma)

    @property
    def phase_radians(self) -> float:
        return cmath.phase(self.gamma)

    @property
    def phase_degrees(self) -> float:
        return gamma_phase_degrees(self.gamma)

    def vswr(self) -> float:
        return gamma_to_vswr(self.magnitude)

    def return_loss_db(self) -> float:
        return gamma_to_return_loss(self.gamma)

    def mismatch_loss_db(self) -> float:
        return gamma_to_mismatch_loss(self.gamma)

    def to_impedance(self) -> Impedance:
        return Impedance(gamma_to_impedance(self.gamma, self.z0), self.z0)

    def to_admittance(self) -> Admittance:
        y0 = 1.0 / self.z0
        return Admittance(gamma_to_admittance(self.gamma, y0), y0)

    def is_passive(self) -> bool:
        return is_inside_unit_circle(self.gamma)

    def to_rect_string(self) -> str:
        return f"Γ = {_rect_string(self.gamma, 4)}"

    def to_polar_string(self) -> str:
        return f"|Γ| = {self.magnitude:.4f}  ∠{self.phase_degrees:.1f}°"
