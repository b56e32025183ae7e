"""
Read-only HTTP surface: entity lists, the last exported schedule and the
static front end.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .config import SchedulerConfig
from .data_loader import DataBundle
from .export import read_schedule

logger = logging.getLogger(__name__)


def _rows(df: pd.DataFrame) -> List[Dict[str, Any]]:
    return df.to_dict(orient="records")


def create_app(bundle: DataBundle, cfg: SchedulerConfig) -> FastAPI:
    app = FastAPI(title="Smart Scheduler")
    output_path = Path(cfg.output_file)

    @app.get("/api/options")
    def options() -> Dict[str, List[Dict[str, Any]]]:
        return {
            "groups": _rows(bundle.groups),
            "teachers": _rows(bundle.teachers),
            "rooms": _rows(bundle.rooms),
            "subjects": _rows(bundle.subjects),
        }

    @app.get("/api/schedule")
    def schedule() -> List[Dict[str, str]]:
        return read_schedule(output_path)

    # Mounted last so the API routes take precedence
    static_dir = Path(cfg.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")
    else:
        logger.warning("Static directory %s not found, serving the API only", static_dir)

    return app
