"""Aether asset pipeline endpoints: upload, orchestrate and compute."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, Field

from ...domain.errors import DependencyError, MissingCredentialsError, ValidationError
from ...domain.models.asset import AnchorResult, InferenceResult, RoutingDecision
from ...domain.services.asset_pipeline_service import AssetPipelineService
from ...infrastructure.dependencies import get_asset_pipeline_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["aether"])


class OrchestrateRequest(BaseModel):
    """Webhook event received by the orchestration hub."""

    event: Optional[str] = Field(None, description="Event type, FILE_ANCHORED")
    cid: Optional[str] = Field(None, description="Anchored asset identifier")
    metadata: Optional[Dict[str, Any]] = Field(None, description="Routing metadata")


class ComputeRequest(BaseModel):
    """Request model for the compute step."""

    cid: Optional[str] = Field(None, description="Anchored asset identifier")
    original_name: Optional[str] = Field(None, description="Uploaded file name")


class ComputeResponse(BaseModel):
    """Response model for the compute step."""

    success: bool = True
    result: InferenceResult


@router.post("/upload", response_model=AnchorResult)
async def upload_asset(
    background_tasks: BackgroundTasks,
    file: Optional[UploadFile] = File(None),
    pipeline: AssetPipelineService = Depends(get_asset_pipeline_service),
) -> AnchorResult:
    """Anchor an uploaded file and announce it to the orchestrator.

    The orchestration event fires after the response is sent.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")

    try:
        content = await file.read()
        result = await pipeline.anchor_file(content, file.filename or "upload")
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except MissingCredentialsError as e:
        logger.error(f"❌ Upload misconfigured: {e}")
        raise HTTPException(status_code=500, detail="Server configuration error")
    except DependencyError as e:
        logger.error(f"❌ Upload failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to process Filecoin ingestion.")
    except Exception as e:
        logger.error(f"❌ Upload error: {type(e).__name__}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to process Filecoin ingestion.")

    background_tasks.add_task(pipeline.dispatch_orchestration, result.cid, file.filename or "upload")
    return result


@router.post("/orchestrate", response_model=RoutingDecision)
async def orchestrate(
    request: OrchestrateRequest,
    pipeline: AssetPipelineService = Depends(get_asset_pipeline_service),
) -> RoutingDecision:
    """Route an anchor event to the compute node."""
    try:
        return await pipeline.route_event(request.event, request.cid, request.metadata)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"❌ Routing error: {type(e).__name__}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to route event.")


@router.post("/compute", response_model=ComputeResponse)
async def compute(
    request: ComputeRequest,
    pipeline: AssetPipelineService = Depends(get_asset_pipeline_service),
) -> ComputeResponse:
    """Retrieve an anchored asset and produce its integrity report."""
    try:
        result = await pipeline.compute(request.cid, request.original_name)
        return ComputeResponse(result=result)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"❌ Compute error: {type(e).__name__}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to execute privacy-preserving compute.")
