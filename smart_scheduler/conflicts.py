# smart_scheduler/conflicts.py
from enum import Enum
from typing import Dict, Iterable, Set, Tuple


class ResourceKind(str, Enum):
    TEACHER = "teacher"
    ROOM = "room"
    GROUP = "group"


class ConflictTracker:
    """Occupancy of (resource, slot) pairs for a single attempt.

    Only grows; a new attempt starts from a new tracker.
    """

    def __init__(self):
        self._used: Dict[ResourceKind, Set[Tuple[str, str]]] = {k: set() for k in ResourceKind}

    def _bucket(self, kind) -> Set[Tuple[str, str]]:
        try:
            return self._used[ResourceKind(kind)]
        except ValueError:
            raise ValueError(f"Unknown resource kind: {kind!r}") from None

    def occupied(self, kind, resource_id: str, slot_id: str) -> bool:
        return (resource_id, slot_id) in self._bucket(kind)

    def occupy(self, kind, resource_id: str, slot_id: str) -> None:
        self._bucket(kind).add((resource_id, slot_id))

    def is_free(self, teacher_id: str, room_id: str, group_id: str, slot_id: str) -> bool:
        return not (
            self.occupied(ResourceKind.TEACHER, teacher_id, slot_id)
            or self.occupied(ResourceKind.ROOM, room_id, slot_id)
            or self.occupied(ResourceKind.GROUP, group_id, slot_id)
        )

    def occupy_run(
        self,
        teacher_id: str,
        room_id: str,
        group_id: str,
        slots: Iterable,
    ) -> None:
        for s in slots:
            sid = getattr(s, "slot_id", s)
            self.occupy(ResourceKind.TEACHER, teacher_id, sid)
            self.occupy(ResourceKind.ROOM, room_id, sid)
            self.occupy(ResourceKind.GROUP, group_id, sid)

    def __len__(self) -> int:
        return sum(len(v) for v in self._used.values())
