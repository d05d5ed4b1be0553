# distribuidor/export.py
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .config import DistributionConfig
from .model import DistributionResult, RoomAssignment

Table = Tuple[str, List[Dict[str, str]]]


def table_sheet_name(assignment: RoomAssignment, cfg: Optional[DistributionConfig] = None) -> str:
    cfg = cfg or DistributionConfig()
    return f"{cfg.sheet_prefix}{assignment.room.name}"


def to_tables(result: DistributionResult, cfg: Optional[DistributionConfig] = None) -> List[Table]:
    """Una tabla por sala (incluso vacía) con filas {Name, Group} en orden de ocupación."""
    cfg = cfg or DistributionConfig()
    name_col, group_col = cfg.export_columns
    tables: List[Table] = []
    for a in result.assignments:
        rows = [{name_col: s.name, group_col: s.group} for s in a.occupants]
        tables.append((table_sheet_name(a, cfg), rows))
    return tables


def tables_to_dataframes(
    tables: Sequence[Table],
    columns: Optional[Sequence[str]] = None,
) -> List[Tuple[str, pd.DataFrame]]:
    """
    Las columnas salen del primer registro; una tabla vacía usa `columns`
    para conservar la cabecera.
    """
    frames: List[Tuple[str, pd.DataFrame]] = []
    for name, rows in tables:
        cols = list(rows[0].keys()) if rows else list(columns or [])
        frames.append((name, pd.DataFrame(rows, columns=cols)))
    return frames
