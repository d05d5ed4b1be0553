# distribuidor/extraction.py
from typing import Any, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from .config import DistributionConfig
from .model import Student

Grid = Sequence[Sequence[Any]]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def cell_text(value: Any) -> str:
    """Texto recortado de una celda; vacío si la celda no tiene valor."""
    if _is_empty(value):
        return ""
    # 6.0 leído de Excel es la turma "6"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _cell(row: Optional[Sequence[Any]], idx: int) -> Any:
    if row is None or idx < 0 or idx >= len(row):
        return None
    return row[idx]


def find_group_column(header: Optional[Sequence[Any]], marker: str = "PROVA") -> int:
    """Índice de la primera celda de texto que contiene el marcador, o -1."""
    if not header:
        return -1
    needle = marker.upper()
    for idx, value in enumerate(header):
        if isinstance(value, str) and needle in value.upper():
            return idx
    return -1


def extract_sheet(
    grid: Grid,
    sheet_name: str,
    cfg: Optional[DistributionConfig] = None,
) -> List[Student]:
    cfg = cfg or DistributionConfig()
    rows = list(grid) if grid is not None else []
    if len(rows) < cfg.min_rows:
        return []

    group_col = find_group_column(rows[0], cfg.group_marker)
    out: List[Student] = []
    for row in rows[cfg.data_start_row:]:
        raw_name = _cell(row, cfg.name_column)
        # El nombre sólo se acepta como texto
        if not isinstance(raw_name, str) or not raw_name.strip():
            continue
        if group_col == -1:
            out.append(Student(name=raw_name.strip(), group=sheet_name))
            continue
        group = cell_text(_cell(row, group_col))
        if group:
            out.append(Student(name=raw_name.strip(), group=group))
    return out


def extract_students(
    sheets: Mapping[str, Grid],
    selected_names: Iterable[str],
    cfg: Optional[DistributionConfig] = None,
) -> List[Student]:
    """
    Lee los alumnos de las hojas seleccionadas, en el orden de selección.
    Hojas ausentes o sin el formato esperado no producen registros.
    """
    students: List[Student] = []
    for name in selected_names:
        if name not in sheets:
            continue
        students.extend(extract_sheet(sheets[name], name, cfg))
    return students
