"""
FastAPI backend for Footpaths.

This provides REST API endpoints for segmenting recorded movement into
walking and faster-than-walking segments, and for decorating walking
segments with routed walking paths.
"""

from fastapi import FastAPI, UploadFile, File, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Dict, Iterator, List, Optional, Any
import logging
import io
import sys
import os

# Add parent directory to path to import our modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.settings import (
    APP_NAME, APP_VERSION, APP_DESCRIPTION, MAX_UPLOAD_SIZE_BYTES,
    SegmentConfig, RoutingConfig, UIConfig, configure_logging
)

# Initialize logging
configure_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=f"{APP_NAME} API",
    description=APP_DESCRIPTION,
    version=APP_VERSION
)

# Add CORS middleware for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",  # Frontend dev server
        "http://localhost:3001",  # Frontend dev server (alt port)
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Import our services
from core.models.fix import Fix
from core.models.segment import Segment
from core.segments import SegmentationParams
from core.validation import ValidationError
from services.segmentation_service import analyze_fixes, analyze_track_file, SegmentationAnalysisResult
from services.routing_service import RoutingService, get_routing_service


# Pydantic models for API requests/responses
class FixModel(BaseModel):
    latitude: float
    longitude: float
    timestamp: int


class SegmentationParameters(BaseModel):
    record_delay: float = SegmentConfig.RECORD_DELAY
    stationary_radius: float = SegmentConfig.STATIONARY_RADIUS
    max_stationary_radius: float = SegmentConfig.MAX_STATIONARY_RADIUS
    min_segment_length: float = SegmentConfig.MIN_SEGMENT_LENGTH
    walking_speed_threshold: float = SegmentConfig.WALKING_SPEED_THRESHOLD
    min_leg_length: float = SegmentConfig.MIN_LEG_LENGTH

    def to_params(self) -> SegmentationParams:
        return SegmentationParams(
            record_delay=self.record_delay,
            stationary_radius=self.stationary_radius,
            max_stationary_radius=self.max_stationary_radius,
            min_segment_length=self.min_segment_length,
            walking_speed_threshold=self.walking_speed_threshold,
            min_leg_length=self.min_leg_length
        )


class SegmentFixesRequest(BaseModel):
    fixes: List[FixModel]
    parameters: SegmentationParameters = Field(default_factory=SegmentationParameters)

    def to_fixes(self) -> List[Fix]:
        return [Fix(latitude=f.latitude, longitude=f.longitude, timestamp=f.timestamp) for f in self.fixes]


class SegmentationResponse(BaseModel):
    walking_segments: List[Dict[str, Any]]
    faster_segments: List[Dict[str, Any]]
    stops: List[Dict[str, Any]]
    track_summary: Dict[str, Any]
    parameters: Dict[str, float]


class WalkingRoutesResponse(BaseModel):
    walking_segments: List[Dict[str, Any]]
    routes: List[Optional[Dict[str, Any]]]


def routing_service() -> Iterator[RoutingService]:
    """Routing client for one request; its HTTP session is closed afterwards."""
    service = get_routing_service()
    try:
        yield service
    finally:
        service.close()


def _segment_payload(segment: Segment) -> Dict[str, Any]:
    """Serialize a segment with its coordinates for rendering."""
    payload = segment.to_dict()
    payload['coordinates'] = [[fix.latitude, fix.longitude] for fix in segment.fixes]
    return payload


def _build_response(result: SegmentationAnalysisResult) -> SegmentationResponse:
    return SegmentationResponse(
        walking_segments=[_segment_payload(s) for s in result.walking_segments],
        faster_segments=[_segment_payload(s) for s in result.faster_segments],
        stops=[stop.to_dict() for stop in result.stops],
        track_summary=result.summary(),
        parameters=result.params.to_dict()
    )


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": f"{APP_NAME} API",
        "version": APP_VERSION,
        "endpoints": {
            "POST /api/segment-track": "Segment a GPX or CSV track file",
            "POST /api/segment-fixes": "Segment a JSON list of fixes",
            "POST /api/walking-routes": "Routed walking paths for the walking segments of a fix list",
            "GET /api/config": "Default configuration values",
            "GET /api/health": "Health check endpoint"
        }
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "footpaths-api"}


@app.get("/api/config")
async def get_config():
    """Get default configuration values."""
    return {
        "defaults": SegmentConfig.as_dict(),
        "ranges": {
            "record_delay": {"min": 30, "max": 1800, "step": 10},
            "stationary_radius": {"min": 5, "max": 100, "step": 1},
            "max_stationary_radius": {"min": 5, "max": 150, "step": 1},
            "min_segment_length": {"min": 50, "max": 2000, "step": 50},
            "walking_speed_threshold": {"min": 0.5, "max": 4.0, "step": 0.1},
            "min_leg_length": {"min": 0, "max": 200, "step": 5}
        },
        "ui": UIConfig.as_dict(),
        "routing": RoutingConfig.as_dict()
    }


@app.post("/api/segment-track", response_model=SegmentationResponse)
async def segment_track(
    file: UploadFile = File(...),
    record_delay: float = SegmentConfig.RECORD_DELAY,
    stationary_radius: float = SegmentConfig.STATIONARY_RADIUS,
    max_stationary_radius: float = SegmentConfig.MAX_STATIONARY_RADIUS,
    min_segment_length: float = SegmentConfig.MIN_SEGMENT_LENGTH,
    walking_speed_threshold: float = SegmentConfig.WALKING_SPEED_THRESHOLD,
    min_leg_length: float = SegmentConfig.MIN_LEG_LENGTH
):
    """
    Segment a GPX track or a CSV location export.

    Args:
        file: GPX file, or CSV with latitude, longitude, timestamp columns
        record_delay: Minimum dwell time in seconds
        stationary_radius: Stop confirmation radius in meters
        max_stationary_radius: Stop scan radius in meters
        min_segment_length: Minimum segment length in meters
        walking_speed_threshold: Walking speed threshold in m/s
        min_leg_length: Minimum walking leg length in meters

    Returns:
        Walking and faster segments, stops and a track summary
    """
    try:
        # Validate file type
        if not file.filename or not file.filename.lower().endswith(('.gpx', '.csv')):
            raise HTTPException(status_code=400, detail="Only GPX or CSV files are allowed")

        content = await file.read()

        if len(content) > MAX_UPLOAD_SIZE_BYTES:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum size is 50MB, received {len(content) / 1024 / 1024:.1f}MB"
            )

        if not content.strip():
            raise HTTPException(status_code=400, detail="File appears to be empty")

        try:
            text = content.decode('utf-8')
        except UnicodeDecodeError:
            raise HTTPException(status_code=400, detail="File is not valid UTF-8 text")

        params = SegmentationParameters(
            record_delay=record_delay,
            stationary_radius=stationary_radius,
            max_stationary_radius=max_stationary_radius,
            min_segment_length=min_segment_length,
            walking_speed_threshold=walking_speed_threshold,
            min_leg_length=min_leg_length
        ).to_params()

        logger.info(f"Processing file: {file.filename}")
        result = analyze_track_file(io.StringIO(text), filename=file.filename, params=params)

        return _build_response(result)

    except HTTPException:
        raise
    except ValidationError as e:
        logger.warning(f"Rejected track {file.filename}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error segmenting track: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error segmenting track: {str(e)}")


@app.post("/api/segment-fixes", response_model=SegmentationResponse)
async def segment_fix_list(request: SegmentFixesRequest):
    """
    Segment a list of fixes supplied as JSON.

    Args:
        request: Fixes in time order plus optional threshold overrides

    Returns:
        Walking and faster segments, stops and a track summary
    """
    try:
        result = analyze_fixes(
            request.to_fixes(),
            filename="request",
            params=request.parameters.to_params()
        )
        return _build_response(result)

    except ValidationError as e:
        logger.warning(f"Rejected fix list: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error segmenting fixes: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error segmenting fixes: {str(e)}")


@app.post("/api/walking-routes", response_model=WalkingRoutesResponse)
def walking_routes(
    request: SegmentFixesRequest,
    routing: RoutingService = Depends(routing_service)
):
    """
    Segment a fix list and look up a routed walking path for each walking segment.

    Route lookups block on the provider, so this runs in the threadpool.

    Returns:
        Walking segments and one route (or null) per segment
    """
    if not routing.is_configured:
        raise HTTPException(
            status_code=503,
            detail=f"Routing is not configured (set {RoutingConfig.API_KEY_ENV})"
        )

    try:
        result = analyze_fixes(
            request.to_fixes(),
            filename="request",
            params=request.parameters.to_params()
        )
        routes = routing.fetch_walking_routes(result.walking_segments)

        return WalkingRoutesResponse(
            walking_segments=[_segment_payload(s) for s in result.walking_segments],
            routes=[route.to_dict() if route is not None else None for route in routes]
        )

    except ValidationError as e:
        logger.warning(f"Rejected fix list: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error fetching walking routes: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error fetching walking routes: {str(e)}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
