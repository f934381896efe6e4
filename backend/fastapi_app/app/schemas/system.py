# -*- coding: utf-8 -*-
from __future__ import annotations

from pydantic import BaseModel


class HotspotStoreStatus(BaseModel):
    path: str
    records: int
    last_error: str | None = None
