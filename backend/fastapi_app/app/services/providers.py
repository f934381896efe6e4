# -*- coding: utf-8 -*-
"""
HTTP clients for the geocoding, routing and weather providers.

Provider responses are mapped here into the core value types; nothing past
this module sees a provider-specific payload.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import requests

from algorithms.safety.classifier import CandidateRoute
from algorithms.safety.geo import Coordinate
from algorithms.safety.scoring import WeatherCondition

from ..core.exceptions import ProviderUnavailableException
from ..schemas.routes import PlaceResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 5.0
DEFAULT_USER_AGENT = "ShieldNav/0.1"


class _ProviderClient:
    name = "provider"

    def __init__(
        self,
        base_url: str,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        user_agent: str = DEFAULT_USER_AGENT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", user_agent)

    def _get_json(self, path: str, params: Dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout_s)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise ProviderUnavailableException(self.name, str(exc)) from exc


class GeocodingClient(_ProviderClient):
    name = "geocoding"

    def __init__(self, base_url: str, country_codes: str | None = None, limit: int = 5, **kwargs) -> None:
        super().__init__(base_url, **kwargs)
        self.country_codes = country_codes
        self.limit = limit

    def search(self, query: str, limit: int | None = None) -> List[PlaceResult]:
        if not query or not query.strip():
            return []
        params: Dict[str, Any] = {"q": query.strip(), "format": "json", "limit": limit or self.limit}
        if self.country_codes:
            params["countrycodes"] = self.country_codes
        try:
            data = self._get_json("/search", params=params)
        except ProviderUnavailableException as exc:
            logger.warning("Place search degraded: %s", exc.message)
            return []
        results: List[PlaceResult] = []
        for item in data or []:
            try:
                display_name = str(item.get("display_name") or "")
                results.append(
                    PlaceResult(
                        lat=float(item["lat"]),
                        lng=float(item["lon"]),
                        name=display_name.split(",")[0].strip() or display_name,
                        display_name=display_name,
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed place result: %s", item)
        return results


class RoutingClient(_ProviderClient):
    name = "routing"

    def __init__(self, base_url: str, profile: str = "driving", alternatives: int = 3, **kwargs) -> None:
        super().__init__(base_url, **kwargs)
        self.profile = profile
        self.alternatives = alternatives

    def routes(self, origin: Coordinate, destination: Coordinate) -> List[CandidateRoute]:
        path = f"/route/v1/{self.profile}/{origin.lng},{origin.lat};{destination.lng},{destination.lat}"
        params = {"overview": "full", "geometries": "geojson", "alternatives": self.alternatives}
        data = self._get_json(path, params=params)
        if not isinstance(data, dict) or data.get("code") != "Ok":
            return []
        candidates: List[CandidateRoute] = []
        for idx, route in enumerate(data.get("routes") or []):
            try:
                coords = (route.get("geometry") or {}).get("coordinates") or []
                # OSRM returns [lng, lat]
                geometry = tuple(Coordinate(float(lat), float(lng)) for lng, lat, *_ in coords)
                candidate = CandidateRoute(
                    id=f"osrm-route-{idx}",
                    geometry=geometry,
                    distance_m=float(route.get("distance") or 0.0),
                    duration_s=float(route.get("duration") or 0.0),
                )
            except (AttributeError, TypeError, ValueError):
                logger.warning("Skipping malformed route %d from routing provider", idx)
                continue
            candidates.append(candidate)
        return candidates


class WeatherClient(_ProviderClient):
    name = "weather"

    def __init__(self, base_url: str, api_key: str | None = None, **kwargs) -> None:
        super().__init__(base_url, **kwargs)
        self.api_key = api_key

    def current(self, point: Coordinate) -> WeatherCondition | None:
        if not self.api_key:
            return None
        params = {"lat": point.lat, "lon": point.lng, "appid": self.api_key, "units": "metric"}
        data = self._get_json("/data/2.5/weather", params=params)
        entries = data.get("weather") if isinstance(data, dict) else None
        if not isinstance(entries, list) or not entries or not isinstance(entries[0], dict):
            if data:
                logger.warning("Ignoring unexpected weather payload: %.200r", data)
            return None
        main = str(entries[0].get("main") or "").strip()
        if not main:
            return None
        return WeatherCondition(main=main, description=str(entries[0].get("description") or ""))
