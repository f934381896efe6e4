# -*- coding: utf-8 -*-
"""
FastAPI entry point exposing route safety scoring and live navigation alerts.
"""

from __future__ import annotations

import logging
import time
from typing import List

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from algorithms.safety.geo import Coordinate
from algorithms.safety.hotspots import AccidentHotspot, reason_label

from .core.config import get_config
from .core.exceptions import InvalidCoordinatesException, NoRouteFoundException, ShieldNavException
from .schemas.navigation import MuteRequest, NavigationStartRequest, NavigationState, PositionPayload
from .schemas.routes import (
    HotspotPoint,
    HotspotResponse,
    PlaceSearchResponse,
    RouteRequest,
    RouteResponse,
    ScoreRequest,
    ScoreResponse,
)
from .schemas.system import HotspotStoreStatus
from .services.navigation_service import NavigationService, get_navigation_service
from .services.routing_service import RoutingService, get_routing_service

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging() -> logging.Logger:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    logger = logging.getLogger("uvicorn.error")
    logger.setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logger.info("Logging configured at INFO level")
    return logger


logger = configure_logging()

app = FastAPI(title="ShieldNav Safety API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().get("backend.cors_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ShieldNavException)
async def shieldnav_exception_handler(request: Request, exc: ShieldNavException):
    """Handle custom ShieldNav exceptions."""
    logger.error(f"ShieldNavException: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error_type": exc.__class__.__name__},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle ValueError exceptions."""
    logger.error(f"ValueError: {str(exc)}")
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "error_type": "ValueError"},
    )


@app.get("/health", tags=["meta"])
def health() -> dict:
    return {"status": "ok"}


def _hotspot_points(hotspots: List[AccidentHotspot]) -> List[HotspotPoint]:
    return [
        HotspotPoint(
            id=hotspot.id,
            lat=hotspot.lat,
            lng=hotspot.lng,
            risk_level=hotspot.risk_level,
            primary_reason=hotspot.primary_reason,
            reason_label=reason_label(hotspot.primary_reason),
            description=hotspot.description,
            city=hotspot.city,
            state=hotspot.state,
            weather_sensitive=hotspot.weather_sensitive,
            time_sensitive=hotspot.time_sensitive,
        )
        for hotspot in hotspots
    ]


@app.get("/hotspots", response_model=HotspotResponse, tags=["meta"])
def hotspots(service: RoutingService = Depends(get_routing_service)) -> HotspotResponse:
    points = _hotspot_points(list(service.hotspot_snapshot()))
    logger.info("GET /hotspots -> %d points", len(points))
    return HotspotResponse(points=points)


def _store_status(service: RoutingService) -> HotspotStoreStatus:
    store = service.hotspots
    return HotspotStoreStatus(
        path=str(store.path),
        records=len(store.snapshot()),
        last_error=store.last_error,
    )


@app.get("/system/hotspots", response_model=HotspotStoreStatus, tags=["meta"])
def hotspot_store_status(service: RoutingService = Depends(get_routing_service)) -> HotspotStoreStatus:
    return _store_status(service)


@app.post("/system/hotspots/refresh", response_model=HotspotStoreStatus, tags=["meta"])
def hotspot_store_refresh(service: RoutingService = Depends(get_routing_service)) -> HotspotStoreStatus:
    start = time.perf_counter()
    records = service.hotspots.refresh()
    duration = (time.perf_counter() - start) * 1000
    logger.info("POST /system/hotspots/refresh -> %d records (%.1f ms)", len(records), duration)
    return _store_status(service)


@app.get("/places/search", response_model=PlaceSearchResponse, tags=["places"])
def place_search(q: str = "", service: RoutingService = Depends(get_routing_service)) -> PlaceSearchResponse:
    start = time.perf_counter()
    results = service.geocoder.search(q)
    duration = (time.perf_counter() - start) * 1000
    logger.info("GET /places/search -> %d results (%.1f ms)", len(results), duration)
    return PlaceSearchResponse(results=results)


@app.post("/routes/options", response_model=RouteResponse, tags=["routes"])
def route_options(
    payload: RouteRequest,
    service: RoutingService = Depends(get_routing_service),
) -> RouteResponse:
    """
    Score the provider's candidate routes and label safest, balanced and fastest.
    """
    start = time.perf_counter()
    origin = payload.origin
    destination = payload.destination
    if (origin.lat, origin.lng) == (destination.lat, destination.lng):
        raise InvalidCoordinatesException(
            destination.lat, destination.lng, "Origin and destination are the same point"
        )

    try:
        response = service.compute_routes(payload)
    except ShieldNavException:
        raise
    except Exception as exc:
        logger.exception("Route search failed")
        raise NoRouteFoundException(
            (origin.lat, origin.lng),
            (destination.lat, destination.lng),
        ) from exc

    duration = (time.perf_counter() - start) * 1000
    logger.info(
        "POST /routes/options -> %d options, %d hotspots known, night=%s in %.1f ms",
        len(response.routes),
        response.total_hotspots,
        response.is_night,
        duration,
    )
    return response


@app.post("/routes/score", response_model=ScoreResponse, tags=["routes"])
def route_score(
    payload: ScoreRequest,
    service: RoutingService = Depends(get_routing_service),
) -> ScoreResponse:
    start = time.perf_counter()
    result = service.score_route(payload)
    duration = (time.perf_counter() - start) * 1000
    logger.info(
        "POST /routes/score -> score=%d, %d hotspots in %.1f ms",
        result.safety_score,
        len(result.hotspots_crossed),
        duration,
    )
    return result


@app.post("/navigation/sessions", response_model=NavigationState, tags=["navigation"])
def navigation_start(
    payload: NavigationStartRequest,
    service: NavigationService = Depends(get_navigation_service),
) -> NavigationState:
    destination = None
    if payload.destination is not None:
        destination = Coordinate(payload.destination.lat, payload.destination.lng)
    session_id = service.start(destination)
    return service.state(session_id)


@app.post("/navigation/sessions/{session_id}/positions", response_model=NavigationState, tags=["navigation"])
def navigation_position(
    session_id: str,
    payload: PositionPayload,
    service: NavigationService = Depends(get_navigation_service),
) -> NavigationState:
    state = service.update_position(session_id, payload)
    if state.alert is not None:
        logger.info("Session %s alert -> %s", session_id, state.alert.hotspot_id)
    return state


@app.post("/navigation/sessions/{session_id}/mute", response_model=NavigationState, tags=["navigation"])
def navigation_mute(
    session_id: str,
    payload: MuteRequest,
    service: NavigationService = Depends(get_navigation_service),
) -> NavigationState:
    return service.set_muted(session_id, payload.muted)


@app.post("/navigation/sessions/{session_id}/dismiss", response_model=NavigationState, tags=["navigation"])
def navigation_dismiss(
    session_id: str,
    service: NavigationService = Depends(get_navigation_service),
) -> NavigationState:
    return service.dismiss(session_id)


@app.delete("/navigation/sessions/{session_id}", tags=["navigation"])
def navigation_end(
    session_id: str,
    service: NavigationService = Depends(get_navigation_service),
) -> dict:
    service.end(session_id)
    return {"session_id": session_id, "status": "ended"}
