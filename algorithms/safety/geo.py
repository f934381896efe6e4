# -*- coding: utf-8 -*-
"""
Geospatial primitives: great-circle distance and route sampling.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

EARTH_RADIUS_KM = 6371.0

SAMPLING_DISTANCE = "distance"
SAMPLING_STRIDE = "stride"


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(frozen=True)
class SamplingConfig:
    strategy: str = SAMPLING_DISTANCE
    interval_km: float = 2.0
    stride: int = 10

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "SamplingConfig":
        data = data or {}
        strategy = str(data.get("strategy", SAMPLING_DISTANCE)).lower()
        if strategy not in {SAMPLING_DISTANCE, SAMPLING_STRIDE}:
            raise ValueError(f"Unsupported sampling strategy: {strategy}")
        return cls(
            strategy=strategy,
            interval_km=float(data.get("interval_km", 2.0)),
            stride=max(1, int(data.get("stride", 10))),
        )


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])
    dlon = lon2 - lon1
    dlat = lat2 - lat1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.asin(min(1.0, math.sqrt(a)))
    return EARTH_RADIUS_KM * c


def distance_km(a: Coordinate, b: Coordinate) -> float:
    return haversine_km(a.lat, a.lng, b.lat, b.lng)


def sample_route(path: Sequence[Coordinate], interval_km: float = 2.0) -> List[Coordinate]:
    """
    Reduce a dense polyline to points roughly ``interval_km`` apart.

    The first and last vertices are always kept. The accumulator resets each
    time a sample is emitted, so spacing is measured along the path and not as
    straight-line distance from the previous sample.
    """
    if not path:
        return []
    samples: List[Coordinate] = [path[0]]
    accumulated = 0.0
    for idx in range(1, len(path)):
        accumulated += distance_km(path[idx - 1], path[idx])
        if accumulated >= interval_km:
            samples.append(path[idx])
            accumulated = 0.0
    last = path[-1]
    if len(path) > 1 and samples[-1] is not last:
        samples.append(last)
    return samples


def sample_every_nth(path: Sequence[Coordinate], stride: int = 10) -> List[Coordinate]:
    """Fixed-stride sampler for provider paths with near-uniform vertex spacing."""
    if not path:
        return []
    stride = max(1, int(stride))
    samples = list(path[::stride])
    if len(path) > 1 and (len(path) - 1) % stride != 0:
        samples.append(path[-1])
    return samples


def sample_points(path: Sequence[Coordinate], config: SamplingConfig | None = None) -> List[Coordinate]:
    config = config or SamplingConfig()
    if config.strategy == SAMPLING_STRIDE:
        return sample_every_nth(path, config.stride)
    return sample_route(path, config.interval_km)


def midpoint(path: Sequence[Coordinate]) -> Coordinate | None:
    """Middle vertex of the path, used as the representative weather query point."""
    if not path:
        return None
    return path[len(path) // 2]
