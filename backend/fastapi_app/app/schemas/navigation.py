# -*- coding: utf-8 -*-
from __future__ import annotations

from pydantic import BaseModel, Field

from .routes import RoutePoint


class NavigationStartRequest(BaseModel):
    destination: RoutePoint | None = None


class PositionPayload(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    heading_degrees: float | None = None
    speed_kmh: float | None = Field(None, ge=0.0)


class MuteRequest(BaseModel):
    muted: bool


class AlertEventResponse(BaseModel):
    hotspot_id: str
    reason_label: str
    message: str
    speech_text: str
    display_duration_ms: int


class NavigationState(BaseModel):
    session_id: str
    muted: bool
    alerted_hotspots: int
    alert: AlertEventResponse | None = None
    current_alert: AlertEventResponse | None = None
    remaining_km: float | None = None
    eta_minutes: float | None = None
