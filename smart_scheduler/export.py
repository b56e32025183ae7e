# smart_scheduler/export.py
import logging
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .model import OUTPUT_COLUMNS, Schedule

logger = logging.getLogger(__name__)


def schedule_to_dataframe(schedule: Schedule) -> pd.DataFrame:
    return pd.DataFrame(schedule.rows(), columns=OUTPUT_COLUMNS)


def export_schedule(schedule: Optional[Schedule], path) -> Optional[Path]:
    """Writes one row per occupied slot; returns None when there is nothing to write."""
    out = Path(path)
    if schedule is None or not schedule.placements:
        if out.exists():
            # Older rows must not be served as the current timetable
            out.unlink()
            logger.warning("Nothing to export; removed stale %s", out)
        else:
            logger.warning("Nothing to export.")
        return None
    if out.parent != Path("."):
        out.parent.mkdir(parents=True, exist_ok=True)
    df = schedule_to_dataframe(schedule)
    df.to_csv(out, index=False)
    logger.info("Schedule saved to %s with %d rows", out, len(df))
    return out


def read_schedule(path) -> List[Dict[str, str]]:
    """Re-parses a previously exported table; values come back as strings."""
    p = Path(path)
    if not p.exists():
        return []
    df = pd.read_csv(p, dtype=str, keep_default_na=False)
    return df.to_dict(orient="records")
