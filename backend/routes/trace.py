"""Trace route: element chain → impedance trajectory on the chart."""

import logging

from fastapi import APIRouter, HTTPException

from backend.config import ARC_POINTS
from backend.models import (
    ComplexValue,
    TracePointOut,
    TraceRequest,
    TraceResponse,
    TraceSegmentOut,
)
from smithmatch.components import ComponentKind, Connection
from smithmatch.impedance import gamma_to_vswr
from smithmatch.trace import MatchingTrace

router = APIRouter()

logger = logging.getLogger(__name__)


@router.post("/trace", response_model=TraceResponse)
async def build_trace(request: TraceRequest):
    """Walk the elements outward from the load, optionally editing one value afterwards."""
    trace = MatchingTrace(
        source_z=request.source.to_complex(),
        load_z=request.load.to_complex(),
        z0=request.z0,
        frequency=request.frequency,
        num_points=ARC_POINTS,
    )
    try:
        for elem in request.elements:
            trace.add_element(
                ComponentKind(elem.kind.value),
                Connection(elem.connection.value),
                elem.value,
                elem.line_z0,
            )
        if request.edit is not None:
            trace.update_segment_value(request.edit.index, request.edit.value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.error("Trace generation failed", exc_info=True)
        raise HTTPException(status_code=400, detail="Trace generation failed. Check the element values.")

    segments = [
        TraceSegmentOut(
            index=seg.index,
            kind=seg.kind.value,
            connection=seg.connection.value,
            value=seg.value,
            locus=seg.locus.value,
            label=seg.label,
            line_z0=seg.line_z0,
            points=[
                TracePointOut(
                    gamma=ComplexValue.from_complex(p.gamma),
                    impedance=ComplexValue.from_complex(p.impedance),
                )
                for p in seg.points
            ],
        )
        for seg in trace.segments
    ]

    gamma = trace.current_gamma()
    return TraceResponse(
        segments=segments,
        final_impedance=ComplexValue.from_complex(trace.current_impedance()),
        final_gamma=ComplexValue.from_complex(gamma),
        vswr=gamma_to_vswr(abs(gamma)),
        matched=trace.is_matched(),
    )
