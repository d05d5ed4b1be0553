"""
Configuración de la distribución de alumnos.

Se carga desde YAML para que los parámetros de lectura de las planillas,
las salas por defecto y la semilla queden reproducibles.
"""
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .model import Room


@dataclass
class DistributionConfig:
    # Lectura de planillas
    group_marker: str = "PROVA"
    name_column: int = 1
    data_start_row: int = 3
    min_rows: int = 4

    # Mezcla
    seed: Optional[int] = None

    # Valores por defecto para la línea de comandos
    sheets: List[str] = field(default_factory=list)
    rooms: List[Dict[str, Any]] = field(default_factory=list)

    # Exportación
    sheet_prefix: str = "Sala "
    export_columns: List[str] = field(default_factory=lambda: ["Name", "Group"])
    output_file: str = "Distribuicao_Alunos.xlsx"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DistributionConfig":
        merged = asdict(cls())
        for k, v in data.items():
            if k in merged:
                merged[k] = v
        return cls(**merged)

    def __post_init__(self):
        if len(self.export_columns) != 2:
            raise ValueError("export_columns debe tener exactamente dos nombres (alumno, turma)")
        if self.name_column < 0 or self.data_start_row < 0 or self.min_rows < 0:
            raise ValueError("name_column, data_start_row y min_rows no pueden ser negativos")

    def default_rooms(self) -> List[Room]:
        return parse_rooms(self.rooms)


def _load_yaml(path: Path) -> Any:
    if not path.exists():
        return {}
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def load_config(path: str = "config.yaml") -> DistributionConfig:
    data = _load_yaml(Path(path))
    if not isinstance(data, dict):
        raise ValueError(f"{path} debe contener un objeto mapeo")
    return DistributionConfig.from_dict(data)


def parse_rooms(items: List[Dict[str, Any]]) -> List[Room]:
    """Convierte registros {name, seats} (o {name, capacity}) en salas, en el mismo orden."""
    rooms: List[Room] = []
    for rec in items or []:
        if not isinstance(rec, dict):
            raise ValueError(f"Sala inválida: {rec!r}")
        seats = rec.get("seats", rec.get("capacity", 0))
        rooms.append(Room.from_values(rec.get("name"), seats))
    return rooms


def parse_room_spec(spec: str) -> Room:
    """
    Formato NOMBRE:ASIENTOS usado en la línea de comandos. Se corta en el
    último ':' para permitir nombres con ':' ("Bloco A:1:30" -> "Bloco A:1", 30).
    """
    name, sep, seats = spec.rpartition(":")
    if not sep:
        raise ValueError(f"Sala '{spec}' debe tener el formato NOMBRE:ASIENTOS")
    return Room.from_values(name, seats)
