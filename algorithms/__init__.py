# -*- coding: utf-8 -*-
"""
Algorithms package for ShieldNav.

Holds the pure safety core shared by the FastAPI backend and the developer
scripts: geospatial sampling, hotspot matching, contextual risk scoring, route
classification and the live alert state machine.
"""

__all__ = [
    "safety",
]
