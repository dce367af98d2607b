"""
Spatial Join API Endpoints
"""
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List, Union
import logging

from yieldmap.pipelines.spatial_join.pipeline import SpatialJoinPipeline

logger = logging.getLogger(__name__)
router = APIRouter()


class GeometryRecordIn(BaseModel):
    """One parsed shape: flat point stream plus zero-based part offsets"""
    key: Union[int, str]
    points: List[List[float]]
    parts: List[int] = []


class JoinOptions(BaseModel):
    normalize_keys: Optional[str] = None
    max_workers: Optional[int] = Field(default=None, ge=1)
    crs: Optional[str] = None


class SpatialJoinRequest(BaseModel):
    rows: List[Dict[str, Any]]
    records: List[GeometryRecordIn]
    key_field: Optional[str] = None
    options: JoinOptions = JoinOptions()


_ERROR_STATUS = {
    "no_match": 422,
    "invalid_input": status.HTTP_400_BAD_REQUEST,
}


@router.post("/join")
async def join_attributes(request: SpatialJoinRequest) -> Dict[str, Any]:
    """
    Join attribute rows onto geometry records and return a GeoJSON FeatureCollection
    """
    try:
        pipeline = SpatialJoinPipeline(key_field=request.key_field)
        result = pipeline.process(
            request.rows,
            [r.model_dump() for r in request.records],
            request.options.model_dump(),
        )
    except Exception as e:
        logger.error(f"Spatial join failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Spatial join failed: {str(e)}"
        )

    if not result["success"]:
        raise HTTPException(
            status_code=_ERROR_STATUS.get(result.get("error_type"), status.HTTP_500_INTERNAL_SERVER_ERROR),
            detail=result["error"],
        )

    return {
        "status": "success",
        "geojson": result["geojson"],
        "metadata": result["metadata"],
    }


@router.get("/options")
async def get_join_options() -> Dict[str, Any]:
    """
    Get available spatial join options
    """
    pipeline = SpatialJoinPipeline()
    return {
        "status": "success",
        "options": pipeline.get_available_options()
    }
