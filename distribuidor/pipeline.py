# distribuidor/pipeline.py
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .allocation import allocate, valid_rooms
from .config import DistributionConfig
from .extraction import Grid, extract_students
from .mixing import make_rng, mix
from .model import DistributionResult, Room, Student


class DistributionStatus(Enum):
    OK = "ok"
    NO_STUDENTS = "no_students"
    NO_ROOMS = "no_rooms"


STATUS_MESSAGES = {
    DistributionStatus.NO_STUDENTS: "No se encontraron alumnos en las hojas seleccionadas.",
    DistributionStatus.NO_ROOMS: "Configure al menos una sala con nombre y asientos.",
}


@dataclass(frozen=True)
class DistributionOutcome:
    status: DistributionStatus
    result: Optional[DistributionResult] = None
    students: List[Student] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is DistributionStatus.OK

    @property
    def message(self) -> str:
        if self.ok:
            n_rooms = len(self.result.assignments)
            return f"{len(self.students)} alumnos distribuidos en {n_rooms} sala(s)."
        return STATUS_MESSAGES[self.status]


def distribute(
    sheets: Mapping[str, Grid],
    selected: Iterable[str],
    rooms: Sequence[Room],
    rng: Optional[random.Random] = None,
    cfg: Optional[DistributionConfig] = None,
) -> DistributionOutcome:
    """Extrae, mezcla y reparte. Sin alumnos o sin salas válidas no se mezcla nada."""
    cfg = cfg or DistributionConfig()
    students = extract_students(sheets, selected, cfg)
    if not students:
        return DistributionOutcome(DistributionStatus.NO_STUDENTS)

    usable = valid_rooms(rooms)
    if not usable:
        return DistributionOutcome(DistributionStatus.NO_ROOMS, students=students)

    rng = rng if rng is not None else make_rng(cfg.seed)
    result = allocate(mix(students, rng), usable)
    return DistributionOutcome(DistributionStatus.OK, result=result, students=students)


def capacity_summary(total_students: int, rooms: Iterable[Room]) -> Dict[str, int]:
    total_seats = sum(r.capacity for r in rooms)
    return {
        "total_students": total_students,
        "total_seats": total_seats,
        "missing_seats": max(0, total_students - total_seats),
    }
