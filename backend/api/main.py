"""
FastAPI backend for Fleet History.

This provides REST API endpoints for ingesting vehicle positions, generating
trips from them, and browsing a vehicle's trip history.
"""

from fastapi import FastAPI, UploadFile, File, HTTPException, Depends, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Any
from datetime import datetime
import logging
import io
import sys
import os

# Add parent directory to path to import our modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.settings import (
    APP_NAME, APP_VERSION, APP_DESCRIPTION, SERVICE_NAME, LOGGING_CONFIG,
    ApiConfig, SegmentationConfig, ALL_STATUSES_LABEL
)

# Initialize logging
logging.basicConfig(level=LOGGING_CONFIG["level"], format=LOGGING_CONFIG["format"])
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
    allow_origins=ApiConfig.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Import our services
from api.auth import Caller, get_caller, require_vehicle
from core.calculations import ensure_utc
from core.constants import MIN_GPX_FILE_SIZE_BYTES
from core.filtering import validate_filter_params
from core.gpx import load_gpx_positions
from core.models.position import RawPosition
from core.models.trip import TripStatus
from core.validation import ValidationError, validate_file_upload
from services.history_service import (
    get_history_service, format_trip_summary, format_trip_details
)
from services.trip_store import get_position_store


# Pydantic models for API requests/responses
class PositionIn(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    timestamp: datetime


class PositionBatch(BaseModel):
    license_plate: str = ""
    positions: List[PositionIn]


class IngestResponse(BaseModel):
    vehicle_id: str
    stored: int
    total: int


class GenerateResponse(BaseModel):
    message: str
    trips: List[str]
    replaced: int
    discarded_samples: int
    summary: Dict[str, Any]


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": f"{APP_NAME} API",
        "version": APP_VERSION,
        "endpoints": {
            "POST /api/positions": "Store a batch of positions for the caller's vehicle",
            "POST /api/positions/upload-gpx": "Store positions from a GPX file",
            "GET /api/historique": "List the caller's trips",
            "GET /api/historique/filter": "List trips filtered by period and status",
            "GET /api/historique/{trip_id}": "Trip details",
            "POST /api/historique/generate": "Generate trips from stored positions",
            "GET /api/health": "Health check endpoint"
        }
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": SERVICE_NAME}


@app.get("/api/config")
async def get_config():
    """Get default configuration values."""
    return {
        "defaults": SegmentationConfig.as_dict(),
        "ranges": {
            "stationary_threshold": {"min": 1, "max": SegmentationConfig.MAX_STATIONARY_THRESHOLD, "step": 1}
        },
        "periods": list(ApiConfig.PERIODS),
        "statuses": [ALL_STATUSES_LABEL] + [s.value for s in TripStatus]
    }


@app.post("/api/positions", response_model=IngestResponse, status_code=201)
async def ingest_positions(batch: PositionBatch, caller: Caller = Depends(get_caller)):
    """
    Store a batch of position samples for the caller's vehicle.

    Timestamps without a timezone are taken to be UTC.
    """
    vehicle_id = require_vehicle(caller)

    positions = [
        RawPosition(
            vehicle_id=vehicle_id,
            license_plate=batch.license_plate,
            latitude=p.lat,
            longitude=p.lon,
            timestamp=ensure_utc(p.timestamp)
        )
        for p in batch.positions
    ]

    store = get_position_store()
    stored = store.add_many(positions)
    logger.info(f"Stored {stored} positions for vehicle {vehicle_id}")

    return IngestResponse(vehicle_id=vehicle_id, stored=stored, total=store.count(vehicle_id))


@app.post("/api/positions/upload-gpx", response_model=IngestResponse, status_code=201)
async def upload_gpx_positions(
    file: UploadFile = File(...),
    license_plate: str = "",
    caller: Caller = Depends(get_caller)
):
    """
    Store positions from a GPX track file for the caller's vehicle.

    Args:
        file: GPX file with timestamped track points
        license_plate: Plate to record on the positions

    Returns:
        Number of positions stored and the vehicle's new total
    """
    vehicle_id = require_vehicle(caller)

    try:
        content = await file.read()
        validate_file_upload(file.filename, len(content))

        if len(content) < MIN_GPX_FILE_SIZE_BYTES:
            raise HTTPException(status_code=400, detail="File appears to be empty or corrupted")

        logger.info(f"Processing file: {file.filename}")
        positions = load_gpx_positions(io.BytesIO(content), vehicle_id, license_plate)

        store = get_position_store()
        stored = store.add_many(positions)

        return IngestResponse(vehicle_id=vehicle_id, stored=stored, total=store.count(vehicle_id))

    except HTTPException:
        raise
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error importing GPX positions: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error importing GPX positions: {str(e)}")


@app.get("/api/historique")
async def list_trips(caller: Caller = Depends(get_caller)):
    """Get all trips of the caller's vehicle, most recent first."""
    vehicle_id = require_vehicle(caller)

    try:
        trips = get_history_service().list_trips(vehicle_id)
        return [format_trip_summary(trip) for trip in trips]
    except Exception as e:
        logger.error(f"Error fetching trips: {str(e)}")
        raise HTTPException(status_code=500, detail="Error fetching trips")


@app.get("/api/historique/filter")
async def filter_trips(
    period: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    caller: Caller = Depends(get_caller)
):
    """
    Get the caller's trips filtered by period and status.

    Args:
        period: 'today', 'week', 'month' or 'year'
        status: Trip status, or 'All'

    Returns:
        Matching trips in summary form, most recent first
    """
    vehicle_id = require_vehicle(caller)

    is_valid, error = validate_filter_params(period=period, status=status)
    if not is_valid:
        raise HTTPException(status_code=400, detail=error)

    try:
        trips = get_history_service().filter_trips(vehicle_id, period=period, status=status)
        return [format_trip_summary(trip) for trip in trips]
    except Exception as e:
        logger.error(f"Error fetching filtered trips: {str(e)}")
        raise HTTPException(status_code=500, detail="Error fetching filtered trips")


@app.post("/api/historique/generate", response_model=GenerateResponse, status_code=201)
async def generate_trips(
    stationary_threshold: Optional[float] = None,
    replace: Optional[bool] = None,
    caller: Caller = Depends(get_caller)
):
    """
    Generate trips from the caller's stored positions.

    Only drivers with an assigned vehicle may generate trips.

    Args:
        stationary_threshold: Gap in minutes that ends a trip (default 10)
        replace: Delete previously generated trips first (default true)

    Returns:
        Ids of the generated trips and a distribution summary
    """
    if not caller.vehicle_id or not caller.is_driver:
        raise HTTPException(status_code=403, detail="You are not allowed to generate trips")

    try:
        result = get_history_service().generate_trips(
            caller.vehicle_id,
            stationary_threshold_minutes=stationary_threshold,
            replace=replace
        )
    except Exception as e:
        logger.error(f"Error generating trips: {str(e)}")
        raise HTTPException(status_code=500, detail="Error generating trips")

    if not result.ok:
        raise HTTPException(status_code=400, detail=str(result.error))

    return GenerateResponse(
        message=f"{len(result.trip_ids)} trips generated successfully",
        trips=result.trip_ids,
        replaced=result.replaced,
        discarded_samples=result.discarded_samples,
        summary=result.summary
    )


@app.get("/api/historique/{trip_id}")
async def get_trip(trip_id: str, caller: Caller = Depends(get_caller)):
    """Get the details of one of the caller's trips."""
    vehicle_id = require_vehicle(caller)

    trip = get_history_service().get_trip(vehicle_id, trip_id)
    if trip is None:
        raise HTTPException(status_code=404, detail="Trip not found")

    return format_trip_details(trip)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=ApiConfig.HOST, port=ApiConfig.PORT)
