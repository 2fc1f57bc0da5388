"""Conversion routes: impedance → Γ, figures of merit, component classification."""

import logging

from fastapi import APIRouter, HTTPException

from backend.models import (
    ClassifyRequest,
    ClassifyResponse,
    ComplexValue,
    ConvertRequest,
    ConvertResponse,
)
from smithmatch.components import classify
from smithmatch.impedance import Impedance

router = APIRouter()

logger = logging.getLogger(__name__)


@router.post("/convert", response_model=ConvertResponse)
async def convert_impedance(request: ConvertRequest):
    """Reflection coefficient, VSWR and losses of an impedance against z0."""
    try:
        z = Impedance(request.impedance.to_complex(), request.z0)
        rc = z.to_gamma()
        return ConvertResponse(
            gamma=ComplexValue.from_complex(rc.gamma),
            gamma_magnitude=rc.magnitude,
            gamma_phase_deg=rc.phase_degrees,
            vswr=rc.vswr(),
            return_loss_db=rc.return_loss_db(),
            mismatch_loss_db=rc.mismatch_loss_db(),
            admittance=ComplexValue.from_complex(z.to_admittance().value),
            normalized_impedance=ComplexValue.from_complex(z.normalized),
            impedance_display=str(z),
            gamma_display=rc.to_polar_string(),
        )
    except Exception:
        logger.error("Impedance conversion failed", exc_info=True)
        raise HTTPException(status_code=400, detail="Impedance conversion failed. Check the impedance and z0 values.")


@router.post("/classify", response_model=ClassifyResponse)
async def classify_impedance(request: ClassifyRequest):
    """Single R, L or C equivalent of an impedance at a frequency."""
    comp = classify(request.impedance.to_complex(), request.frequency)
    return ClassifyResponse(
        kind=comp.kind.value,
        value=comp.value,
        unit=comp.unit,
        display=comp.value_with_unit(2),
    )
