# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field


class RoutePoint(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class HotspotPoint(BaseModel):
    id: str
    lat: float
    lng: float
    risk_level: str
    primary_reason: str
    reason_label: str
    description: str | None = None
    city: str | None = None
    state: str | None = None
    weather_sensitive: bool = False
    time_sensitive: bool = False


class HotspotResponse(BaseModel):
    points: List[HotspotPoint]


class PlaceResult(BaseModel):
    lat: float
    lng: float
    name: str
    display_name: str


class PlaceSearchResponse(BaseModel):
    results: List[PlaceResult]


class WeatherInfo(BaseModel):
    main: str
    description: str = ""


class RouteRequest(BaseModel):
    origin: RoutePoint
    destination: RoutePoint
    departure_hour: float | None = Field(None, ge=0.0, lt=24.0)
    client_id: str | None = None


class RouteOptionResponse(BaseModel):
    id: str
    classification: Literal["safest", "balanced", "fastest"]
    duration: str
    distance: str
    safety_score: int = Field(..., ge=0, le=100)
    safety_level: Literal["safe", "caution", "danger"]
    hotspots_crossed: int
    explanations: List[str]
    geometry: List[RoutePoint]


class RouteResponse(BaseModel):
    routes: List[RouteOptionResponse]
    total_hotspots: int
    is_night: bool
    weather: WeatherInfo | None = None


class ScoreRequest(BaseModel):
    geometry: List[RoutePoint]
    weather: WeatherInfo | None = None
    is_night: bool | None = None


class RiskFactorResponse(BaseModel):
    reason: str
    impact: float


class ScoreResponse(BaseModel):
    safety_score: int = Field(..., ge=0, le=100)
    safety_level: Literal["safe", "caution", "danger"]
    hotspots_crossed: List[str]
    explanations: List[str]
    risk_factors: List[RiskFactorResponse]
