# -*- coding: utf-8 -*-
"""
Hotspot proximity matching for sampled routes and single positions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence, Set

from .geo import Coordinate, distance_km
from .hotspots import AccidentHotspot

ROUTE_RADIUS_KM = 0.5
ALERT_RADIUS_KM = 2.0


@dataclass(frozen=True)
class ProximityConfig:
    # route_radius_km: batch scoring ("crossed"); alert_radius_km: advance warning while driving
    route_radius_km: float = ROUTE_RADIUS_KM
    alert_radius_km: float = ALERT_RADIUS_KM

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "ProximityConfig":
        data = data or {}
        return cls(
            route_radius_km=float(data.get("route_radius_km", ROUTE_RADIUS_KM)),
            alert_radius_km=float(data.get("alert_radius_km", ALERT_RADIUS_KM)),
        )


def is_near(point: Coordinate, hotspot: AccidentHotspot, radius_km: float) -> bool:
    return distance_km(point, hotspot.location) <= radius_km


def find_nearby(
    points: Sequence[Coordinate],
    hotspots: Iterable[AccidentHotspot],
    radius_km: float = ROUTE_RADIUS_KM,
) -> List[AccidentHotspot]:
    """
    Hotspots within ``radius_km`` of at least one point, in discovery order.

    A hotspot is never tested again once matched; each id appears at most once.
    """
    candidates = list(hotspots)
    matched: Set[str] = set()
    result: List[AccidentHotspot] = []
    for point in points:
        for hotspot in candidates:
            if hotspot.id in matched:
                continue
            if is_near(point, hotspot, radius_km):
                matched.add(hotspot.id)
                result.append(hotspot)
    return result
