# smart_scheduler/data_loader.py
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd

from .catalog import Catalog
from .config import SchedulerConfig
from .model import (
    Registration,
    Room,
    StudentGroup,
    Subject,
    Teacher,
    TeachingAssignment,
    TimeSlot,
)

logger = logging.getLogger(__name__)

TABLE_FILES = {
    "teachers": "teacher.csv",
    "rooms": "room.csv",
    "groups": "student_group.csv",
    "subjects": "subject.csv",
    "teach": "teach.csv",
    "register": "register.csv",
    "timeslot": "timeslot.csv",
}

TIMESLOT_COLUMNS = ["timeslot_id", "day", "period", "start", "end"]


@dataclass(frozen=True)
class DataBundle:
    teachers: pd.DataFrame
    rooms: pd.DataFrame
    groups: pd.DataFrame
    subjects: pd.DataFrame
    teach: pd.DataFrame
    register: pd.DataFrame
    timeslot: pd.DataFrame


def clean_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Strips headers (including a UTF-8 BOM) and every string cell."""
    df = df.copy()
    df.columns = [str(c).replace("\ufeff", "").strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df


def load_csv(path) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        logger.error("File not found: %s", path)
        return pd.DataFrame()
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    return clean_frame(df)


def generate_standard_timeslots(cfg: SchedulerConfig) -> pd.DataFrame:
    rows = []
    slot_id = 1
    for day in cfg.days:
        for period in range(1, cfg.periods_per_day + 1):
            start_hour = cfg.first_period_hour + period - 1
            rows.append(
                {
                    "timeslot_id": str(slot_id),
                    "day": day,
                    "period": str(period),
                    "start": f"{start_hour:02d}:00",
                    "end": f"{start_hour + 1:02d}:00",
                }
            )
            slot_id += 1
    return pd.DataFrame(rows, columns=TIMESLOT_COLUMNS)


def _has_last_period(df: pd.DataFrame, cfg: SchedulerConfig) -> bool:
    if df.empty or "period" not in df.columns:
        return False
    periods = pd.to_numeric(df["period"], errors="coerce")
    return bool((periods == cfg.periods_per_day).any())


def load_data(data_dir: str, cfg: SchedulerConfig) -> DataBundle:
    base = Path(data_dir)
    logger.info("Loading data from %s", base)
    frames = {key: load_csv(base / name) for key, name in TABLE_FILES.items()}

    # An explicit calendar is only trusted when it covers the full day
    if not _has_last_period(frames["timeslot"], cfg):
        logger.info("Using the standard %dx%d time-slot grid", len(cfg.days), cfg.periods_per_day)
        frames["timeslot"] = generate_standard_timeslots(cfg)

    bundle = DataBundle(**frames)
    logger.info(
        "Loaded teachers=%d subjects=%d registrations=%d rooms=%d timeslots=%d",
        len(bundle.teachers),
        len(bundle.subjects),
        len(bundle.register),
        len(bundle.rooms),
        len(bundle.timeslot),
    )
    if bundle.register.empty:
        logger.warning("register.csv is empty")
    _log_leaders(bundle, cfg)
    return bundle


def _log_leaders(bundle: DataBundle, cfg: SchedulerConfig) -> None:
    names = {}
    if {"teacher_id", "teacher_name"} <= set(bundle.teachers.columns):
        names = dict(zip(bundle.teachers["teacher_id"], bundle.teachers["teacher_name"]))
    for tid in cfg.leader_ids:
        logger.info(
            "Leader %s (%s) blocked on %s period %d",
            tid,
            names.get(tid, "unknown"),
            cfg.leader_day,
            cfg.leader_period,
        )


def _records(df: pd.DataFrame, required: List[str]) -> List[dict]:
    if df.empty or any(c not in df.columns for c in required):
        if not df.empty:
            logger.error("Table is missing columns %s, ignoring it", required)
        return []
    return df.to_dict(orient="records")


def _to_number(value) -> Optional[float]:
    """Finite number or None; "inf" and "1e400" count as invalid."""
    if value is None:
        return None
    num = pd.to_numeric(value, errors="coerce")
    if pd.isna(num) or not np.isfinite(num):
        return None
    return num


def _to_int(value) -> int:
    num = _to_number(value)
    return 0 if num is None else int(num)


def build_catalog(bundle: DataBundle) -> Catalog:
    teachers = [
        Teacher(r["teacher_id"], r.get("teacher_name", ""))
        for r in _records(bundle.teachers, ["teacher_id"])
    ]
    rooms = [Room(r["room_id"], r.get("room_type", "")) for r in _records(bundle.rooms, ["room_id"])]
    groups = [
        StudentGroup(r["group_id"], r.get("group_name", ""))
        for r in _records(bundle.groups, ["group_id"])
    ]
    subjects = [
        Subject(
            subject_id=r["subject_id"],
            subject_name=r.get("subject_name", ""),
            theory=_to_int(r.get("theory")),
            practice=_to_int(r.get("practice")),
        )
        for r in _records(bundle.subjects, ["subject_id"])
    ]
    teach = [
        TeachingAssignment(r["teacher_id"], r["subject_id"])
        for r in _records(bundle.teach, ["teacher_id", "subject_id"])
    ]
    registrations = [
        Registration(r["group_id"], r["subject_id"])
        for r in _records(bundle.register, ["group_id", "subject_id"])
    ]

    timeslots = []
    for r in _records(bundle.timeslot, ["timeslot_id", "day", "period"]):
        period = _to_number(r["period"])
        if period is None:
            logger.warning("Dropping timeslot %s with invalid period %r", r["timeslot_id"], r["period"])
            continue
        timeslots.append(
            TimeSlot(
                slot_id=str(r["timeslot_id"]),
                day=r["day"],
                period=int(period),
                start=r.get("start", ""),
                end=r.get("end", ""),
            )
        )

    return Catalog(
        teachers=tuple(teachers),
        rooms=tuple(rooms),
        groups=tuple(groups),
        subjects=tuple(subjects),
        teach=tuple(teach),
        registrations=tuple(registrations),
        timeslots=tuple(timeslots),
    )
