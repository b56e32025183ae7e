# smart_scheduler/catalog.py
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

from .errors import MissingDataError
from .model import (
    Registration,
    Room,
    StudentGroup,
    Subject,
    Teacher,
    TeachingAssignment,
    TimeSlot,
)


@dataclass(frozen=True)
class Catalog:
    """Read-only entity tables plus the lookups the scheduler needs.

    Built once after loading and shared by every attempt; nothing here is
    mutated afterwards.
    """

    teachers: Tuple[Teacher, ...] = ()
    rooms: Tuple[Room, ...] = ()
    groups: Tuple[StudentGroup, ...] = ()
    subjects: Tuple[Subject, ...] = ()
    teach: Tuple[TeachingAssignment, ...] = ()
    registrations: Tuple[Registration, ...] = ()
    timeslots: Tuple[TimeSlot, ...] = ()

    subjects_by_id: Mapping[str, Subject] = field(init=False, repr=False)
    eligible_teachers: Mapping[str, Tuple[str, ...]] = field(init=False, repr=False)
    slots_by_day: Mapping[str, Tuple[TimeSlot, ...]] = field(init=False, repr=False)
    theory_rooms: Tuple[Room, ...] = field(init=False, repr=False)
    practice_rooms: Tuple[Room, ...] = field(init=False, repr=False)
    teacher_names: Mapping[str, str] = field(init=False, repr=False)

    def __post_init__(self):
        # First record wins on duplicate subject ids
        subjects: Dict[str, Subject] = {}
        for s in self.subjects:
            subjects.setdefault(s.subject_id, s)

        eligible: Dict[str, List[str]] = {}
        for t in self.teach:
            ids = eligible.setdefault(t.subject_id, [])
            if t.teacher_id not in ids:
                ids.append(t.teacher_id)

        by_day: Dict[str, List[TimeSlot]] = {}
        for slot in self.timeslots:
            by_day.setdefault(slot.day, []).append(slot)

        object.__setattr__(self, "subjects_by_id", MappingProxyType(subjects))
        object.__setattr__(
            self, "eligible_teachers", MappingProxyType({k: tuple(v) for k, v in eligible.items()})
        )
        object.__setattr__(
            self,
            "slots_by_day",
            MappingProxyType({d: tuple(sorted(v, key=lambda s: s.period)) for d, v in by_day.items()}),
        )
        object.__setattr__(self, "theory_rooms", tuple(r for r in self.rooms if r.is_theory))
        object.__setattr__(self, "practice_rooms", tuple(r for r in self.rooms if not r.is_theory))
        object.__setattr__(
            self, "teacher_names", MappingProxyType({t.teacher_id: t.teacher_name for t in self.teachers})
        )

    def require_essentials(self) -> None:
        missing = []
        if not self.registrations:
            missing.append("registrations")
        if not self.subjects:
            missing.append("subjects")
        if missing:
            raise MissingDataError(f"Missing required data: {', '.join(missing)}")
