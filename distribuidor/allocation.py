# distribuidor/allocation.py
from typing import Iterable, List, Sequence

import numpy as np

from .model import DistributionResult, Room, RoomAssignment, Student


def valid_rooms(rooms: Iterable[Room]) -> List[Room]:
    """Sólo salas con nombre y al menos un asiento llegan al reparto."""
    return [r for r in rooms if r.is_valid]


def allocate(students: Sequence[Student], rooms: Sequence[Room]) -> DistributionResult:
    """
    Llena las salas en el orden configurado, cada una hasta su capacidad,
    avanzando un único cursor sobre la lista mezclada. Los alumnos que no
    caben quedan fuera (unallocated_count).
    """
    ends = np.cumsum([r.capacity for r in rooms], dtype=np.int64)
    n = len(students)
    assignments: List[RoomAssignment] = []
    start = 0
    for room, end in zip(rooms, ends):
        stop = min(int(end), n)
        assignments.append(RoomAssignment(room=room, occupants=tuple(students[start:stop])))
        start = stop
    return DistributionResult(assignments=tuple(assignments), total_students=n)
