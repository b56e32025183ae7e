# smart_scheduler/placement.py
import logging
import random
from typing import List, Optional, Sequence

from .catalog import Catalog
from .config import SchedulerConfig
from .conflicts import ConflictTracker
from .jobs import expand_jobs
from .model import (
    UNKNOWN_ROOM,
    UNKNOWN_TEACHER,
    Job,
    Placement,
    Schedule,
    SessionKind,
    SlotAssignment,
    TimeSlot,
)
from .search import find_run

logger = logging.getLogger(__name__)


class PlacementStrategy:
    """Places jobs one by one: priority window, full window, then forced."""

    def __init__(self, catalog: Catalog, cfg: SchedulerConfig):
        self.catalog = catalog
        self.cfg = cfg

    def pick_teacher(self, job: Job) -> str:
        eligible = self.catalog.eligible_teachers.get(job.subject_id, ())
        if eligible:
            return eligible[0]
        if self.catalog.teachers:
            return self.catalog.teachers[0].teacher_id
        return UNKNOWN_TEACHER

    def pick_room(self, job: Job, rng: random.Random) -> str:
        if job.kind == SessionKind.THEORY:
            rooms = self.catalog.theory_rooms
        else:
            rooms = self.catalog.practice_rooms
        # Any room beats no room when the category is missing
        if not rooms:
            rooms = self.catalog.rooms
        if not rooms:
            return UNKNOWN_ROOM
        return rng.choice(rooms).room_id

    def _search(self, job, tracker, teacher, room, max_period, rng) -> Optional[List[TimeSlot]]:
        return find_run(
            job.length,
            self.catalog.slots_by_day,
            tracker,
            teacher,
            room,
            job.group_id,
            max_period,
            rng,
            self.cfg,
        )

    def place_job(
        self, job: Job, tracker: ConflictTracker, rng: random.Random
    ) -> Optional[Placement]:
        """None when not even a forced run exists."""
        teacher = self.pick_teacher(job)
        room = self.pick_room(job, rng)

        slots = self._search(job, tracker, teacher, room, self.cfg.priority_max_period, rng)
        if slots is None:
            slots = self._search(job, tracker, teacher, room, self.cfg.max_period, rng)

        forced = False
        if slots is None:
            # Double booking tolerated; lunch, contiguity and the leader block still apply
            forced = True
            slots = self._search(job, ConflictTracker(), teacher, room, self.cfg.max_period, rng)

        if slots is None:
            return None

        if not forced:
            tracker.occupy_run(teacher, room, job.group_id, slots)

        placement = Placement(
            group_id=job.group_id,
            subject_id=job.subject_id,
            teacher_id=teacher,
            room_id=room,
            kind=job.kind,
            slots=tuple(SlotAssignment(s.slot_id, s.day, s.period) for s in slots),
            is_conflict=forced,
        )
        return placement

    def place(self, jobs: Sequence[Job], rng: random.Random) -> Schedule:
        tracker = ConflictTracker()
        schedule = Schedule(count_unplaced=self.cfg.unplaced_policy == "count")
        for job in jobs:
            placement = self.place_job(job, tracker, rng)
            if placement is None:
                schedule.unplaced.append(job)
                continue
            if placement.is_conflict:
                schedule.conflict_count += 1
            schedule.placements.append(placement)
        if schedule.unplaced:
            logger.debug("%d job(s) had no feasible run", len(schedule.unplaced))
        return schedule


def run_attempt(catalog: Catalog, cfg: SchedulerConfig, seed: Optional[int] = None) -> Schedule:
    """One full pass: expand registrations into jobs and place them all."""
    rng = random.Random(seed)
    expansion = expand_jobs(catalog)
    schedule = PlacementStrategy(catalog, cfg).place(expansion.jobs, rng)
    schedule.skipped_registrations = expansion.skipped
    schedule.seed = seed
    return schedule
