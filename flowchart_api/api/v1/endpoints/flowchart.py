import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from flowchart_api.schemas.flowchart import ErrorResult, FlowchartRequest, FlowchartResult
from flowchart_api.services.completion_client import CompletionClient, get_completion_client
from flowchart_api.services.flowchart_service import generate_flowchart

logger = logging.getLogger(__name__)

router = APIRouter()

FLOWCHART_PATH = "/api/generate-flowchart"


@router.options(FLOWCHART_PATH, include_in_schema=False)
async def flowchart_preflight():
    """CORS pre-flight: empty 200, headers come from the CORS middleware."""
    return Response(status_code=200)


@router.post(
    FLOWCHART_PATH,
    tags=["Flowchart"],
    summary="Structure hypotheses and findings into flowchart nodes",
    responses={
        200: {"model": FlowchartResult},
        400: {"model": ErrorResult},
        405: {"model": ErrorResult},
        500: {"model": ErrorResult},
    },
)
async def create_flowchart(
    request: FlowchartRequest,
    client: CompletionClient = Depends(get_completion_client),
):
    """
    1. Validate the hypotheses list (non-empty)
    2. Build the extraction prompt
    3. Call the completion service once
    4. Return the parsed ``{"nodes": [...]}`` object unchanged
    """
    data = await generate_flowchart(request.hypotheses, client)
    return JSONResponse(status_code=200, content=data)
