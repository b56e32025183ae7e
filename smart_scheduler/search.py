"""
Contiguous slot search.

A run is `length` consecutive periods on one day. Validity of every slot is
checked in a fixed order: the period window, the lunch period, contiguity
with the previous slot, the leaders' meeting block and finally occupancy in
the attempt's conflict tracker.
"""
import random
from typing import List, Mapping, Optional, Sequence

from .config import SchedulerConfig
from .conflicts import ConflictTracker
from .model import TimeSlot


def is_leader_blocked(slot: TimeSlot, teacher_id: str, cfg: SchedulerConfig) -> bool:
    return (
        slot.day == cfg.leader_day
        and slot.period == cfg.leader_period
        and teacher_id in cfg.leader_ids
    )


def can_place(
    slot: TimeSlot,
    teacher_id: str,
    room_id: str,
    group_id: str,
    tracker: ConflictTracker,
    cfg: SchedulerConfig,
) -> bool:
    if is_leader_blocked(slot, teacher_id, cfg):
        return False
    return tracker.is_free(teacher_id, room_id, group_id, slot.slot_id)


def window_at(
    day_slots: Sequence[TimeSlot],
    start: int,
    length: int,
    tracker: ConflictTracker,
    teacher_id: str,
    room_id: str,
    group_id: str,
    max_period: int,
    cfg: SchedulerConfig,
) -> Optional[List[TimeSlot]]:
    run: List[TimeSlot] = []
    for k in range(length):
        s = day_slots[start + k]
        if s.period > max_period:
            return None
        if s.period == cfg.lunch_period:
            return None
        if k > 0 and s.period != run[-1].period + 1:
            return None
        if not can_place(s, teacher_id, room_id, group_id, tracker, cfg):
            return None
        run.append(s)
    return run


def find_run(
    length: int,
    slots_by_day: Mapping[str, Sequence[TimeSlot]],
    tracker: ConflictTracker,
    teacher_id: str,
    room_id: str,
    group_id: str,
    max_period: int,
    rng: random.Random,
    cfg: SchedulerConfig,
) -> Optional[List[TimeSlot]]:
    """First-fit search for `length` contiguous free periods.

    Days are visited in a shuffled order so repeated calls do not pile the
    same subjects onto one weekday; within a day, earlier periods win.
    Returns None when no day has a valid window.
    """
    if length < 1:
        return None

    days = list(cfg.days)
    rng.shuffle(days)

    for day in days:
        day_slots = sorted(slots_by_day.get(day, ()), key=lambda s: s.period)
        for start in range(len(day_slots) - length + 1):
            run = window_at(
                day_slots, start, length, tracker, teacher_id, room_id, group_id, max_period, cfg
            )
            if run is not None:
                return run
    return None
