"""Matching routes: synthesize candidate networks and list topologies."""

import logging

from fastapi import APIRouter, HTTPException

from backend.models import (
    MatchRequest,
    MatchResponse,
    MatchSolution,
    NetworkElement,
    TopologyInfo,
    TopologyListResponse,
)
from smithmatch.components import component_name
from smithmatch.matching import MatchingSolution
from smithmatch.topology import calculate_topology, default_topology_names, list_topologies

router = APIRouter()

logger = logging.getLogger(__name__)


def _solution_out(solution: MatchingSolution) -> MatchSolution:
    elements = [
        NetworkElement(
            name=component_name(elem.kind, position),
            kind=elem.kind.value,
            connection=elem.connection.value,
            value=elem.value,
            display=elem.label or elem.value_string(),
            line_z0=elem.line_z0,
        )
        for position, elem in enumerate(solution.elements, start=1)
    ]
    return MatchSolution(
        topology=solution.topology.value,
        label=solution.label,
        elements=elements,
        q=solution.network_q(),
        description=solution.description,
        summary=solution.describe(),
    )


@router.post("/match", response_model=MatchResponse)
async def match_impedance(request: MatchRequest):
    """Synthesize matching networks from the load to the source impedance."""
    names = request.topologies or default_topology_names()
    params = {
        'source_z': request.source.to_complex(),
        'load_z': request.load.to_complex(),
        'frequency': request.frequency,
        'z0': request.z0,
        'target_q': request.target_q,
    }
    try:
        solutions = []
        for name in names:
            solutions.extend(calculate_topology(name, params))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.error("Matching synthesis failed", exc_info=True)
        raise HTTPException(status_code=400, detail="Matching synthesis failed. Check the source, load and frequency.")

    return MatchResponse(solutions=[_solution_out(s) for s in solutions])


@router.get("/topologies", response_model=TopologyListResponse)
async def get_topologies():
    """All registered matching topologies."""
    return TopologyListResponse(topologies=[TopologyInfo(**t) for t in list_topologies()])
