#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Fetches live routes between two points and prints the safest/balanced/fastest labels.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add the project root to the path
root_dir = Path(__file__).parent.parent.parent
sys.path.insert(0, str(root_dir))

from backend.fastapi_app.app.core.exceptions import ShieldNavException
from backend.fastapi_app.app.schemas.routes import RoutePoint, RouteRequest
from backend.fastapi_app.app.services.routing_service import RoutingService

# Vijayawada bus stand -> Guntur
DEFAULT_ORIGIN = (16.5062, 80.6480)
DEFAULT_DESTINATION = (16.3067, 80.4365)


def parse_point(value: str):
    lat, lng = (float(part) for part in value.split(","))
    return lat, lng


def run(origin, destination, departure_hour) -> int:
    print("=" * 80)
    print("Route comparison")
    print("=" * 80)
    print(f"   Origin: {origin}")
    print(f"   Destination: {destination}")
    if departure_hour is not None:
        print(f"   Departure hour: {departure_hour}")

    service = RoutingService()
    request = RouteRequest(
        origin=RoutePoint(lat=origin[0], lng=origin[1]),
        destination=RoutePoint(lat=destination[0], lng=destination[1]),
        departure_hour=departure_hour,
    )
    try:
        response = service.compute_routes(request)
    except ShieldNavException as exc:
        print(f"\n❌ {exc.message}")
        return 1

    weather = response.weather.main if response.weather else "unknown"
    print(f"\n   Known hotspots: {response.total_hotspots} | night: {response.is_night} | weather: {weather}")
    for option in response.routes:
        print("\n" + "─" * 80)
        print(f"{option.classification.upper()}: {option.id}")
        print("─" * 80)
        print(f"✓ {option.duration}, {option.distance}")
        print(f"✓ Score {option.safety_score} ({option.safety_level}), {option.hotspots_crossed} hotspots crossed")
        for text in option.explanations:
            print(f"   • {text}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--origin", type=parse_point, default=DEFAULT_ORIGIN, help="lat,lng")
    parser.add_argument("--destination", type=parse_point, default=DEFAULT_DESTINATION, help="lat,lng")
    parser.add_argument("--hour", type=float, default=None, help="Departure hour (0-23)")
    args = parser.parse_args()
    logging.basicConfig(level=logging.WARNING)
    sys.exit(run(args.origin, args.destination, args.hour))


if __name__ == "__main__":
    main()
