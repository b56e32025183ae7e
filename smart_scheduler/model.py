# smart_scheduler/model.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

UNKNOWN_TEACHER = "T_UNK"
UNKNOWN_ROOM = "R_UNK"
THEORY_ROOM_TYPE = "Theory"

OUTPUT_COLUMNS = ["group_id", "timeslot_id", "day", "period", "subject_id", "teacher_id", "room_id"]


class SessionKind(str, Enum):
    THEORY = "Theory"
    PRACTICE = "Practice"


@dataclass(frozen=True)
class Teacher:
    teacher_id: str
    teacher_name: str = ""


@dataclass(frozen=True)
class Room:
    room_id: str
    room_type: str = ""

    @property
    def is_theory(self) -> bool:
        return self.room_type == THEORY_ROOM_TYPE


@dataclass(frozen=True)
class StudentGroup:
    group_id: str
    group_name: str = ""


@dataclass(frozen=True)
class Subject:
    subject_id: str
    subject_name: str
    theory: int = 0     # periods of 1 hour each
    practice: int = 0   # one contiguous block


@dataclass(frozen=True)
class TeachingAssignment:
    teacher_id: str
    subject_id: str


@dataclass(frozen=True)
class Registration:
    group_id: str
    subject_id: str


@dataclass(frozen=True)
class TimeSlot:
    slot_id: str
    day: str
    period: int
    start: str = ""
    end: str = ""


@dataclass(frozen=True)
class Job:
    group_id: str
    subject_id: str
    kind: SessionKind
    length: int
    subject_name: str = ""


@dataclass(frozen=True)
class SlotAssignment:
    slot_id: str
    day: str
    period: int


@dataclass(frozen=True)
class Placement:
    group_id: str
    subject_id: str
    teacher_id: str
    room_id: str
    kind: SessionKind
    slots: Tuple[SlotAssignment, ...]
    is_conflict: bool = False

    def rows(self) -> List[Dict[str, object]]:
        return [
            {
                "group_id": self.group_id,
                "timeslot_id": s.slot_id,
                "day": s.day,
                "period": s.period,
                "subject_id": self.subject_id,
                "teacher_id": self.teacher_id,
                "room_id": self.room_id,
            }
            for s in self.slots
        ]


@dataclass
class Schedule:
    placements: List[Placement] = field(default_factory=list)
    conflict_count: int = 0
    unplaced: List[Job] = field(default_factory=list)
    skipped_registrations: int = 0
    count_unplaced: bool = False
    seed: Optional[int] = None

    @property
    def score(self) -> int:
        """Value minimised by the restart search."""
        if self.count_unplaced:
            return self.conflict_count + len(self.unplaced)
        return self.conflict_count

    def rows(self) -> List[Dict[str, object]]:
        out: List[Dict[str, object]] = []
        for p in self.placements:
            out.extend(p.rows())
        return out
