import random
from collections import deque
from typing import Deque, Dict, List, Optional, Sequence, TypeVar

from .model import Student

T = TypeVar("T")


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Generador sembrado para pruebas; sin semilla usa la entropía del sistema."""
    if seed is None:
        return random.SystemRandom()
    return random.Random(seed)


def interleave_by_group(students: Sequence[Student]) -> List[Student]:
    """
    Intercala por turma: en cada ronda toma el siguiente alumno de cada turma
    que aún tenga alumnos, en el orden en que aparecieron las turmas.
    """
    queues: Dict[str, Deque[Student]] = {}
    for s in students:
        queues.setdefault(s.group, deque()).append(s)

    out: List[Student] = []
    while len(out) < len(students):
        for q in queues.values():
            if q:
                out.append(q.popleft())
    return out


def fisher_yates_shuffle(items: Sequence[T], rng: random.Random) -> List[T]:
    """Barajado uniforme de i = n-1 hasta 1, intercambiando con j en [0, i]."""
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = rng.randint(0, i)
        out[i], out[j] = out[j], out[i]
    return out


def mix(students: Sequence[Student], rng: Optional[random.Random] = None) -> List[Student]:
    rng = rng if rng is not None else make_rng()
    return fisher_yates_shuffle(interleave_by_group(students), rng)
