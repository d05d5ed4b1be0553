# distribuidor/model.py
from dataclasses import dataclass
from typing import Any, Tuple


@dataclass(frozen=True)
class Student:
    name: str
    group: str          # turma / sala de prova de origem


@dataclass(frozen=True)
class Room:
    name: str           # etiqueta y clave de distribución
    capacity: int

    @classmethod
    def from_values(cls, name: Any, seats: Any) -> "Room":
        """
        Normaliza la entrada del operador. Los asientos deben ser un entero >= 0;
        se aceptan cadenas numéricas ("30") y floats enteros (30.0).
        """
        label = "" if name is None else str(name).strip()
        return cls(name=label, capacity=_to_seats(seats, label))

    @property
    def is_valid(self) -> bool:
        return bool(self.name) and self.capacity > 0


def _to_seats(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Asientos inválidos para la sala '{label}': {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Asientos inválidos para la sala '{label}': {value!r}")
        value = int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            value = int(text)
        except ValueError:
            raise ValueError(f"Asientos inválidos para la sala '{label}': {value!r}") from None
    if value is None:
        return 0
    try:
        seats = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Asientos inválidos para la sala '{label}': {value!r}") from None
    if seats < 0:
        raise ValueError(f"La sala '{label}' no puede tener asientos negativos ({seats})")
    return seats


@dataclass(frozen=True)
class RoomAssignment:
    room: Room
    occupants: Tuple[Student, ...]

    @property
    def free_seats(self) -> int:
        return self.room.capacity - len(self.occupants)


@dataclass(frozen=True)
class DistributionResult:
    assignments: Tuple[RoomAssignment, ...]
    total_students: int

    @property
    def allocated_count(self) -> int:
        return sum(len(a.occupants) for a in self.assignments)

    @property
    def unallocated_count(self) -> int:
        return max(0, self.total_students - self.allocated_count)

    @property
    def total_capacity(self) -> int:
        return sum(a.room.capacity for a in self.assignments)
