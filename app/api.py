"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import (
    ChartResponse,
    CurrentReadingResponse,
    IngestResponse,
    ReadingsIngest,
    ReadingsPageResponse,
    SensorRecord,
    SensorSettingsUpdate,
)
from services.dashboard import DashboardService, build_default_dashboard

router = APIRouter()


def get_dashboard() -> DashboardService:
    return build_default_dashboard()


def _not_found(exc: KeyError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=exc.args[0] if exc.args else "Not found.",
    )


@router.get(
    "/sensors",
    response_model=List[SensorRecord],
    summary="List registered sensors.",
)
async def list_sensors(
    dashboard: DashboardService = Depends(get_dashboard),
) -> List[SensorRecord]:
    return dashboard.list_sensors()


@router.post(
    "/sensors",
    status_code=status.HTTP_201_CREATED,
    response_model=SensorRecord,
    summary="Register or replace a sensor.",
)
async def register_sensor(
    sensor: SensorRecord,
    dashboard: DashboardService = Depends(get_dashboard),
) -> SensorRecord:
    try:
        return dashboard.register_sensor(sensor)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.get(
    "/dashboard",
    response_model=List[CurrentReadingResponse],
    summary="Current cards for every registered sensor kind.",
)
async def dashboard_overview(
    dashboard: DashboardService = Depends(get_dashboard),
) -> List[CurrentReadingResponse]:
    return dashboard.overview()


@router.get(
    "/sensors/{sensor_type}",
    response_model=SensorRecord,
    summary="Fetch the sensor configured for a sensor type.",
)
async def get_sensor(
    sensor_type: str,
    dashboard: DashboardService = Depends(get_dashboard),
) -> SensorRecord:
    try:
        return dashboard.get_sensor(sensor_type)
    except KeyError as exc:
        raise _not_found(exc) from exc


@router.put(
    "/sensors/{sensor_type}/settings",
    response_model=SensorRecord,
    summary="Replace sensor settings and its threshold bands.",
)
async def update_settings(
    sensor_type: str,
    update: SensorSettingsUpdate,
    dashboard: DashboardService = Depends(get_dashboard),
) -> SensorRecord:
    try:
        return dashboard.update_settings(sensor_type, update)
    except KeyError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.post(
    "/sensors/{sensor_type}/readings",
    status_code=status.HTTP_201_CREATED,
    response_model=IngestResponse,
    summary="Append readings for a sensor.",
)
async def ingest_readings(
    sensor_type: str,
    payload: ReadingsIngest,
    dashboard: DashboardService = Depends(get_dashboard),
) -> IngestResponse:
    try:
        return dashboard.ingest(sensor_type, payload.readings)
    except KeyError as exc:
        raise _not_found(exc) from exc


@router.get(
    "/sensors/{sensor_type}/current",
    response_model=CurrentReadingResponse,
    summary="Latest reading and its threshold band.",
)
async def current_reading(
    sensor_type: str,
    dashboard: DashboardService = Depends(get_dashboard),
) -> CurrentReadingResponse:
    try:
        return dashboard.current(sensor_type)
    except KeyError as exc:
        raise _not_found(exc) from exc


@router.get(
    "/sensors/{sensor_type}/chart",
    response_model=ChartResponse,
    summary="Readings averaged into calendar buckets.",
)
async def chart(
    sensor_type: str,
    granularity: Optional[str] = Query(
        None, description="hourly, daily, weekly, monthly or yearly."
    ),
    dashboard: DashboardService = Depends(get_dashboard),
) -> ChartResponse:
    try:
        return dashboard.chart(sensor_type, granularity)
    except KeyError as exc:
        raise _not_found(exc) from exc


@router.get(
    "/sensors/{sensor_type}/readings",
    response_model=ReadingsPageResponse,
    summary="One page of the readings table.",
)
async def readings_page(
    sensor_type: str,
    page: int = Query(1, description="1-based page number; clamped into range."),
    dashboard: DashboardService = Depends(get_dashboard),
) -> ReadingsPageResponse:
    try:
        return dashboard.readings_page(sensor_type, page)
    except KeyError as exc:
        raise _not_found(exc) from exc


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
