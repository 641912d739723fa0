"""FastAPI service surface and runtime state helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Dict, Optional

from fastapi import FastAPI, HTTPException, Query

from .datatypes import ResolvedConfig
from .finder import DefaultFinder

app = FastAPI(title="tzlocate", version="0.1.0")

Longitude = Annotated[float, Query(ge=-180.0, le=180.0, description="Longitude in degrees")]
Latitude = Annotated[float, Query(ge=-90.0, le=90.0, description="Latitude in degrees")]


@dataclass
class ServiceState:
    """Holds the finder that answers API requests."""

    finder: Optional[DefaultFinder] = None
    config: Optional[ResolvedConfig] = None

    def set_finder(self, finder: DefaultFinder) -> None:
        self.finder = finder

    def set_config(self, config: ResolvedConfig) -> None:
        self.config = config


def attach_state(state: ServiceState) -> None:
    """Attach the runtime state to the FastAPI app."""

    app.state.runtime = state


def get_state() -> Optional[ServiceState]:
    """Return the attached runtime state if available."""

    return getattr(app.state, "runtime", None)


def _require_finder() -> DefaultFinder:
    state = get_state()
    if state is None or state.finder is None:
        raise HTTPException(status_code=503, detail="Finder not initialised")
    return state.finder


@app.get("/healthz")
async def healthz() -> dict[str, object]:
    """Report whether a finder is loaded."""

    state = get_state()
    if state is None or state.finder is None:
        return {"status": "initializing"}
    return {
        "status": "ok",
        "data_version": state.finder.data_version(),
        "regions": len(state.finder.exact),
        "tiles": len(state.finder.fuzzy),
    }


@app.get("/tz")
def timezone_at(lng: Longitude, lat: Latitude) -> dict[str, object]:
    """Return the best timezone for a coordinate."""

    name = _require_finder().resolve_one(lng, lat)
    if name is None:
        raise HTTPException(status_code=404, detail=f"No timezone found at ({lng}, {lat})")
    return {"lng": lng, "lat": lat, "timezone": name}


@app.get("/tz/all")
def timezones_at(lng: Longitude, lat: Latitude) -> dict[str, object]:
    """Return every timezone matching at the resolving probe."""

    return {"lng": lng, "lat": lat, "timezones": _require_finder().resolve_all(lng, lat)}


@app.get("/timezones")
def timezone_names() -> dict[str, object]:
    return {"timezones": _require_finder().list_region_names()}


@app.get("/version")
def version() -> Dict[str, object]:
    """Describe the snapshots backing the finder."""

    finder = _require_finder()
    return {
        "data_version": finder.data_version(),
        "reduced": finder.exact.reduced,
        "agg_zoom": finder.fuzzy.agg_zoom,
        "idx_zoom": finder.fuzzy.idx_zoom,
    }
