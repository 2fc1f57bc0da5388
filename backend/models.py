"""Pydantic models for SmithMatch API requests and responses."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from backend.config import DEFAULT_Z0


# --- Enums ---

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


# --- Shared ---

class ComplexValue(BaseModel):
    """A complex number as real and imaginary parts."""
    real: float = 0.0
    imag: float = 0.0

    def to_complex(self) -> complex:
        return complex(self.real, self.imag)

    @classmethod
    def from_complex(cls, value: complex) -> "ComplexValue":
        return cls(real=value.real, imag=value.imag)


# --- Conversion ---

class ConvertRequest(BaseModel):
    impedance: ComplexValue
    z0: float = Field(DEFAULT_Z0, gt=0, description="Reference impedance (Ohms)")


class ConvertResponse(BaseModel):
    gamma: ComplexValue
    gamma_magnitude: float
    gamma_phase_deg: float
    vswr: float
    return_loss_db: float
    mismatch_loss_db: float
    admittance: ComplexValue
    normalized_impedance: ComplexValue
    impedance_display: str
    gamma_display: str


class ClassifyRequest(BaseModel):
    impedance: ComplexValue
    frequency: float = Field(..., gt=0, description="Frequency (Hz)")


class ClassifyResponse(BaseModel):
    kind: ComponentKind
    value: float
    unit: str
    display: str


# --- Matching ---

class MatchRequest(BaseModel):
    source: ComplexValue = Field(default_factory=lambda: ComplexValue(real=DEFAULT_Z0))
    load: ComplexValue
    frequency: float = Field(..., gt=0, description="Frequency (Hz)")
    z0: float = Field(DEFAULT_Z0, gt=0, description="Reference / line impedance (Ohms)")
    target_q: float = Field(2.0, gt=0, description="Loaded Q for Pi and T networks")
    topologies: Optional[List[str]] = Field(None, description="Topology names; default is the lumped set")


class NetworkElement(BaseModel):
    name: str
    kind: ComponentKind
    connection: Connection
    value: float
    display: str
    line_z0: Optional[float] = None


class MatchSolution(BaseModel):
    topology: str
    label: str
    elements: List[NetworkElement]
    q: float
    description: str
    summary: str


class MatchResponse(BaseModel):
    solutions: List[MatchSolution]


class TopologyInfo(BaseModel):
    name: str
    label: str
    description: str
    category: str
    element_count: int
    include_in_all: bool


class TopologyListResponse(BaseModel):
    topologies: List[TopologyInfo]


# --- Trace ---

class TraceElement(BaseModel):
    kind: ComponentKind
    connection: Connection
    value: float = Field(..., description="Base SI value (Ω, H, F, or metres for lines)")
    line_z0: Optional[float] = Field(None, gt=0)


class SegmentEdit(BaseModel):
    index: int = Field(..., ge=0)
    value: float


class TraceRequest(BaseModel):
    source: ComplexValue = Field(default_factory=lambda: ComplexValue(real=DEFAULT_Z0))
    load: ComplexValue
    frequency: float = Field(..., gt=0, description="Frequency (Hz)")
    z0: float = Field(DEFAULT_Z0, gt=0)
    elements: List[TraceElement] = []
    edit: Optional[SegmentEdit] = None


class TracePointOut(BaseModel):
    gamma: ComplexValue
    impedance: ComplexValue


class TraceSegmentOut(BaseModel):
    index: int
    kind: ComponentKind
    connection: Connection
    value: float
    locus: str
    label: str
    points: List[TracePointOut]
    line_z0: Optional[float] = None


class TraceResponse(BaseModel):
    segments: List[TraceSegmentOut]
    final_impedance: ComplexValue
    final_gamma: ComplexValue
    vswr: float
    matched: bool
