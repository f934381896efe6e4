# -*- coding: utf-8 -*-
"""
Loads accident hotspots from the CSV store and keeps a refreshed snapshot.
"""

from __future__ import annotations

import logging
import threading
import time
from functools import lru_cache
from pathlib import Path
from typing import Callable, Tuple

import numpy as np
import pandas as pd

from .geo import Coordinate
from .hotspots import AccidentHotspot

logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).resolve().parents[2]
RAW_DIR = ROOT_DIR / "data" / "raw"
HOTSPOTS_PATH = RAW_DIR / "accident_hotspots.csv"

REFRESH_INTERVAL_S = 30 * 60
REQUIRED_COLUMNS = {"id", "lat", "lng", "risk_level", "primary_reason"}
_TRUE_VALUES = {"true", "1", "yes", "y", "t"}


def _file_signature(path: Path) -> float:
    try:
        return path.stat().st_mtime
    except FileNotFoundError:
        return 0.0


def data_version(path: Path | None = None) -> float:
    """Modification stamp used to invalidate cached snapshots."""
    return _file_signature(Path(path) if path else HOTSPOTS_PATH)


def _clean_string(value) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if not cleaned or cleaned.lower() == "nan":
        return None
    return cleaned


def _as_bool(value) -> bool:
    if value is None:
        return False
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, float) and np.isnan(value):
        return False
    return str(value).strip().lower() in _TRUE_VALUES


def _prepare_dataframe(df: pd.DataFrame) -> pd.DataFrame:
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Hotspot file is missing required columns: {sorted(missing)}")
    df = df.copy()
    df["lat"] = pd.to_numeric(df["lat"], errors="coerce")
    df["lng"] = pd.to_numeric(df["lng"], errors="coerce")
    df = df.dropna(subset=["id", "lat", "lng"])
    df = df[df["lat"].between(-90, 90) & df["lng"].between(-180, 180)].copy()
    df["id"] = df["id"].astype(str).str.strip()
    df["risk_level"] = df["risk_level"].astype(str).str.strip().str.lower()
    df["primary_reason"] = df["primary_reason"].astype(str).str.strip().str.lower()
    for column in ("weather_sensitive", "time_sensitive"):
        if column not in df.columns:
            df[column] = False
        df[column] = df[column].apply(_as_bool)
    for column in ("description", "city", "state"):
        if column not in df.columns:
            df[column] = None
    df = df.drop_duplicates(subset=["id"], keep="first")
    return df.reset_index(drop=True)


def _to_hotspot(row: pd.Series) -> AccidentHotspot:
    return AccidentHotspot(
        id=row["id"],
        location=Coordinate(float(row["lat"]), float(row["lng"])),
        risk_level=row["risk_level"],
        primary_reason=row["primary_reason"],
        description=_clean_string(row.get("description")),
        city=_clean_string(row.get("city")),
        state=_clean_string(row.get("state")),
        weather_sensitive=bool(row["weather_sensitive"]),
        time_sensitive=bool(row["time_sensitive"]),
    )


def load_hotspots(path: Path | None = None) -> Tuple[AccidentHotspot, ...]:
    csv_path = Path(path) if path else HOTSPOTS_PATH
    return _load_hotspots(str(csv_path), _file_signature(csv_path))


@lru_cache(maxsize=4)
def _load_hotspots(path_str: str, signature: float) -> Tuple[AccidentHotspot, ...]:
    csv_path = Path(path_str)
    if not csv_path.exists():
        raise FileNotFoundError(f"Hotspot file not found: {csv_path}")
    df = _prepare_dataframe(pd.read_csv(csv_path))
    return tuple(_to_hotspot(row) for _, row in df.iterrows())


class HotspotStore:
    """
    Read-only hotspot snapshot, refreshed on a slow cadence.

    A failed refresh keeps the previous snapshot; with nothing loaded yet the
    snapshot is empty, which scoring treats as "no known risk".
    """

    def __init__(
        self,
        path: Path | None = None,
        refresh_interval_s: float = REFRESH_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.path = Path(path) if path else HOTSPOTS_PATH
        self.refresh_interval_s = refresh_interval_s
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: Tuple[AccidentHotspot, ...] = ()
        self._signature: float | None = None
        self._loaded_at: float | None = None
        self.last_error: str | None = None

    @property
    def loaded_at(self) -> float | None:
        return self._loaded_at

    def _is_stale(self) -> bool:
        if self._loaded_at is None:
            return True
        if self._clock() - self._loaded_at >= self.refresh_interval_s:
            return True
        return data_version(self.path) != self._signature

    def refresh(self) -> Tuple[AccidentHotspot, ...]:
        with self._lock:
            signature = data_version(self.path)
            try:
                self._snapshot = load_hotspots(self.path)
                self.last_error = None
                logger.info("Hotspot snapshot loaded: %d records from %s", len(self._snapshot), self.path)
            except (OSError, ValueError, pd.errors.ParserError) as exc:
                self.last_error = str(exc)
                logger.warning("Hotspot store unavailable, keeping %d cached records: %s", len(self._snapshot), exc)
            self._signature = signature
            self._loaded_at = self._clock()
            return self._snapshot

    def snapshot(self) -> Tuple[AccidentHotspot, ...]:
        if self._is_stale():
            return self.refresh()
        return self._snapshot
