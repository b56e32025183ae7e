# smart_scheduler/evaluation.py
from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np
import pandas as pd

from .catalog import Catalog
from .config import SchedulerConfig
from .conflicts import ResourceKind
from .model import Placement, Schedule, SessionKind


@dataclass
class EvaluationResult:
    conflicts: int
    unplaced: int
    group_clashes: int
    room_clashes: int
    teacher_clashes: int
    lunch_violations: int
    leader_violations: int
    contiguity_violations: int
    overflow_slots: int
    room_type_mismatches: int = 0
    occupancy: Dict[ResourceKind, np.ndarray] = field(repr=False, default_factory=dict)
    violations: List[str] = field(default_factory=list)

    @property
    def hard_ok(self) -> bool:
        return (
            self.group_clashes == 0
            and self.room_clashes == 0
            and self.teacher_clashes == 0
            and self.lunch_violations == 0
            and self.leader_violations == 0
            and self.contiguity_violations == 0
        )


def _resource_id(p: Placement, kind: ResourceKind) -> str:
    if kind == ResourceKind.TEACHER:
        return p.teacher_id
    if kind == ResourceKind.ROOM:
        return p.room_id
    return p.group_id


def _index(schedule: Schedule, kind: ResourceKind) -> Dict[str, int]:
    ids = sorted({_resource_id(p, kind) for p in schedule.placements})
    return {rid: i for i, rid in enumerate(ids)}


def occupancy_counts(
    schedule: Schedule, cfg: SchedulerConfig, kind: ResourceKind, include_forced: bool = False
):
    """Matrix [resource, day, period] counting how often each cell is booked."""
    index = _index(schedule, kind)
    day_idx = {d: i for i, d in enumerate(cfg.days)}
    counts = np.zeros((len(index), len(cfg.days), cfg.periods_per_day + 1), dtype=int)
    for p in schedule.placements:
        if p.is_conflict and not include_forced:
            continue
        r = index[_resource_id(p, kind)]
        for s in p.slots:
            if s.day in day_idx and 0 < s.period <= cfg.periods_per_day:
                counts[r, day_idx[s.day], s.period] += 1
    return index, counts


def _is_contiguous(p: Placement) -> bool:
    days = {s.day for s in p.slots}
    periods = [s.period for s in p.slots]
    return len(days) <= 1 and all(b == a + 1 for a, b in zip(periods, periods[1:]))


def evaluate(schedule: Schedule, catalog: Catalog, cfg: SchedulerConfig) -> EvaluationResult:
    violations: List[str] = []
    occupancy: Dict[ResourceKind, np.ndarray] = {}
    clashes: Dict[ResourceKind, int] = {}

    # Forced placements are known conflicts; only the rest must be clash-free
    for kind in ResourceKind:
        index, counts = occupancy_counts(schedule, cfg, kind)
        occupancy[kind] = counts
        clashes[kind] = int(np.clip(counts - 1, 0, None).sum())
        if clashes[kind]:
            reverse = {i: rid for rid, i in index.items()}
            for r, d, per in zip(*np.nonzero(counts > 1)):
                violations.append(f"{kind.value} {reverse[r]} double-booked on {cfg.days[d]} P{per}")

    room_types = {r.room_id: r.is_theory for r in catalog.rooms}
    lunch = leader = broken = overflow = mismatched = 0
    for p in schedule.placements:
        wants_theory = p.kind == SessionKind.THEORY
        if p.room_id in room_types and room_types[p.room_id] != wants_theory:
            mismatched += 1
        if not _is_contiguous(p):
            broken += 1
            violations.append(f"{p.group_id}/{p.subject_id} is not a contiguous run")
        for s in p.slots:
            if s.period == cfg.lunch_period:
                lunch += 1
                violations.append(f"{p.group_id}/{p.subject_id} placed in lunch period on {s.day}")
            if s.day == cfg.leader_day and s.period == cfg.leader_period and p.teacher_id in cfg.leader_ids:
                leader += 1
                violations.append(f"leader {p.teacher_id} teaches during the meeting block")
            if s.period > cfg.priority_max_period:
                overflow += 1

    return EvaluationResult(
        conflicts=schedule.conflict_count,
        unplaced=len(schedule.unplaced),
        group_clashes=clashes[ResourceKind.GROUP],
        room_clashes=clashes[ResourceKind.ROOM],
        teacher_clashes=clashes[ResourceKind.TEACHER],
        lunch_violations=lunch,
        leader_violations=leader,
        contiguity_violations=broken,
        overflow_slots=overflow,
        room_type_mismatches=mismatched,
        occupancy=occupancy,
        violations=violations,
    )


def occupancy_matrix(
    schedule: Schedule, cfg: SchedulerConfig, kind: ResourceKind, resource_id: str
) -> pd.DataFrame:
    """Period x day view of one resource, forced placements included."""
    index, counts = occupancy_counts(schedule, cfg, kind, include_forced=True)
    periods = list(range(1, cfg.periods_per_day + 1))
    if resource_id not in index:
        data = np.zeros((len(periods), len(cfg.days)), dtype=int)
    else:
        data = counts[index[resource_id], :, 1:].T
    return pd.DataFrame(data, index=periods, columns=cfg.days)
