# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import List, Sequence, Tuple

from algorithms.safety import classifier, geo, hotspot_store, scoring
from algorithms.safety.classifier import CandidateRoute, RouteOption, ScoredRoute
from algorithms.safety.geo import Coordinate, SamplingConfig
from algorithms.safety.hotspots import AccidentHotspot
from algorithms.safety.proximity import ProximityConfig
from algorithms.safety.scoring import ScoringConfig, WeatherCondition

from ..core.config import Config, get_config
from ..core.exceptions import (
    ConfigurationException,
    NoRouteFoundException,
    ProviderUnavailableException,
    StaleSearchException,
)
from ..schemas.routes import (
    RiskFactorResponse,
    RouteOptionResponse,
    RoutePoint,
    RouteRequest,
    RouteResponse,
    ScoreRequest,
    ScoreResponse,
    WeatherInfo,
)
from .providers import DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT, GeocodingClient, RoutingClient, WeatherClient

logger = logging.getLogger(__name__)
PROJECT_ROOT = Path(__file__).resolve().parents[4]
ANONYMOUS_CLIENT = "anonymous"
MAX_TRACKED_CLIENTS = 1000


def _resolve_path(value: str | None) -> Path:
    if not value:
        return hotspot_store.HOTSPOTS_PATH
    path = Path(value)
    return path if path.is_absolute() else PROJECT_ROOT / path


def build_hotspot_store(config: Config) -> hotspot_store.HotspotStore:
    settings = config.hotspots
    refresh_minutes = float(settings.get("refresh_minutes", 30))
    return hotspot_store.HotspotStore(
        path=_resolve_path(settings.get("path")),
        refresh_interval_s=refresh_minutes * 60,
    )


def build_provider_clients(config: Config) -> Tuple[GeocodingClient, RoutingClient, WeatherClient]:
    providers = config.providers
    common = {
        "timeout_s": float(providers.get("timeout_s", DEFAULT_TIMEOUT_S)),
        "user_agent": str(providers.get("user_agent", DEFAULT_USER_AGENT)),
    }
    geocoding = providers.get("geocoding", {})
    routing = providers.get("routing", {})
    weather = providers.get("weather", {})
    return (
        GeocodingClient(
            geocoding.get("base_url", "https://nominatim.openstreetmap.org"),
            country_codes=geocoding.get("country_codes"),
            limit=int(geocoding.get("limit", 5)),
            **common,
        ),
        RoutingClient(
            routing.get("base_url", "https://router.project-osrm.org"),
            profile=routing.get("profile", "driving"),
            alternatives=int(routing.get("alternatives", 3)),
            **common,
        ),
        WeatherClient(
            weather.get("base_url", "https://api.openweathermap.org"),
            api_key=config.get("providers.weather.api_key"),
            **common,
        ),
    )


def _to_points(path: Sequence[Coordinate]) -> List[RoutePoint]:
    return [RoutePoint(lat=point.lat, lng=point.lng) for point in path]


def _option_response(option: RouteOption) -> RouteOptionResponse:
    return RouteOptionResponse(
        id=option.id,
        classification=option.classification,
        duration=option.duration_display,
        distance=option.distance_display,
        safety_score=option.safety_score,
        safety_level=option.safety_level,
        hotspots_crossed=option.hotspots_crossed,
        explanations=list(option.explanations),
        geometry=_to_points(option.geometry),
    )


class RoutingService:
    def __init__(self, config: Config | None = None) -> None:
        self.config = config or get_config()
        try:
            self.sampling = SamplingConfig.from_dict(self.config.sampling)
            self.scoring = ScoringConfig.from_dict(self.config.scoring)
            self.proximity = ProximityConfig.from_dict(self.config.proximity)
        except (TypeError, ValueError) as exc:
            raise ConfigurationException(str(exc)) from exc
        self.hotspots = build_hotspot_store(self.config)
        self.geocoder, self.router, self.weather = build_provider_clients(self.config)
        self._search_lock = Lock()
        self.max_tracked_clients = max(1, int(self.config.get("backend.max_tracked_clients", MAX_TRACKED_CLIENTS)))
        self._generations: OrderedDict[str, int] = OrderedDict()
        logger.info(
            "Initializing RoutingService (sampling=%s, route radius=%.2f km, floor=%.0f)",
            self.sampling.strategy,
            self.proximity.route_radius_km,
            self.scoring.score_floor,
        )

    def _begin_search(self, client_id: str) -> int:
        with self._search_lock:
            generation = self._generations.pop(client_id, 0) + 1
            self._generations[client_id] = generation
            # least recently searching clients are forgotten first
            while len(self._generations) > self.max_tracked_clients:
                self._generations.popitem(last=False)
            return generation

    def _is_current(self, client_id: str, generation: int) -> bool:
        with self._search_lock:
            return self._generations.get(client_id) == generation

    def hotspot_snapshot(self) -> Tuple[AccidentHotspot, ...]:
        return self.hotspots.snapshot()

    def fetch_weather(self, point: Coordinate | None) -> WeatherCondition | None:
        if point is None:
            return None
        try:
            return self.weather.current(point)
        except ProviderUnavailableException as exc:
            logger.warning("Weather degraded, scoring without it: %s", exc.message)
            return None

    def fetch_candidates(self, origin: Coordinate, destination: Coordinate) -> List[CandidateRoute]:
        try:
            return self.router.routes(origin, destination)
        except ProviderUnavailableException as exc:
            logger.warning("Routing provider failed: %s", exc.message)
            return []

    def night_for(self, departure_hour: float | None) -> bool:
        if departure_hour is None:
            return scoring.is_night_time(datetime.now(), self.scoring)
        return scoring.is_night(departure_hour, self.scoring.night_start_hour, self.scoring.night_end_hour)

    def analyze(
        self,
        path: Sequence[Coordinate],
        hotspots: Sequence[AccidentHotspot],
        weather: WeatherCondition | None,
        night: bool,
    ) -> scoring.RouteAnalysis:
        return scoring.analyze_route(
            path,
            hotspots,
            weather=weather,
            night=night,
            config=self.scoring,
            sampling=self.sampling,
            radius_km=self.proximity.route_radius_km,
        )

    def compute_routes(self, payload: RouteRequest) -> RouteResponse:
        client_id = payload.client_id or ANONYMOUS_CLIENT
        generation = self._begin_search(client_id)
        origin = Coordinate(payload.origin.lat, payload.origin.lng)
        destination = Coordinate(payload.destination.lat, payload.destination.lng)

        logger.info(
            "Computing routes:\n"
            "  Origin: (%.5f, %.5f)\n"
            "  Destination: (%.5f, %.5f)\n"
            "  Client: %s (search #%d)",
            origin.lat,
            origin.lng,
            destination.lat,
            destination.lng,
            client_id,
            generation,
        )

        candidates = self.fetch_candidates(origin, destination)
        if not candidates:
            raise NoRouteFoundException((origin.lat, origin.lng), (destination.lat, destination.lng))

        hotspots = self.hotspot_snapshot()
        weather = self.fetch_weather(geo.midpoint(candidates[0].geometry))
        night = self.night_for(payload.departure_hour)

        scored = [
            ScoredRoute(route=candidate, analysis=self.analyze(candidate.geometry, hotspots, weather, night))
            for candidate in candidates
        ]
        for item in scored:
            logger.info(
                "  - %s: %.1f km, %.1f min, score %.1f, %d hotspots",
                item.id,
                item.route.distance_m / 1000,
                item.duration_s / 60,
                item.score,
                len(item.analysis.hotspots_crossed),
            )

        if not self._is_current(client_id, generation):
            logger.info("Discarding superseded search #%d for client %s", generation, client_id)
            raise StaleSearchException(client_id)

        options = classifier.build_route_options(scored, total_hotspots=len(hotspots))
        return RouteResponse(
            routes=[_option_response(option) for option in options],
            total_hotspots=len(hotspots),
            is_night=night,
            weather=WeatherInfo(main=weather.main, description=weather.description) if weather else None,
        )

    def score_route(self, payload: ScoreRequest) -> ScoreResponse:
        path = [Coordinate(point.lat, point.lng) for point in payload.geometry]
        weather = WeatherCondition(payload.weather.main, payload.weather.description) if payload.weather else None
        night = payload.is_night if payload.is_night is not None else self.night_for(None)
        analysis = self.analyze(path, self.hotspot_snapshot(), weather, night)
        safety = analysis.safety
        return ScoreResponse(
            safety_score=safety.display_score,
            safety_level=safety.level,
            hotspots_crossed=[hotspot.id for hotspot in analysis.hotspots_crossed],
            explanations=list(safety.explanations),
            risk_factors=[
                RiskFactorResponse(reason=factor.reason, impact=round(factor.impact, 2))
                for factor in safety.risk_factors
            ],
        )


@lru_cache(maxsize=1)
def get_routing_service() -> RoutingService:
    return RoutingService()
