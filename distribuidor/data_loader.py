# distribuidor/data_loader.py
import io
import re
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Sequence, Union

import pandas as pd

from .export import Table, tables_to_dataframes

Source = Union[bytes, bytearray, str, Path, BinaryIO]

SUPPORTED_EXTENSIONS = (".xlsx", ".xls", ".csv")
_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")
_MAX_SHEET_NAME = 31


def _frame_to_grid(df: pd.DataFrame) -> List[List[Any]]:
    # Celdas vacías (NaN) pasan a None; el resto conserva el valor leído
    df = df.astype(object)
    return df.where(pd.notna(df), None).values.tolist()


def _as_buffer(source: Source) -> Union[io.BytesIO, BinaryIO, str, Path]:
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(bytes(source))
    return source


def decode_workbook(source: Source, filename: Optional[str] = None) -> Dict[str, List[List[Any]]]:
    """
    Decodifica un libro (.xlsx, .xls o .csv) en {hoja: filas}, leyendo
    posicionalmente (sin cabecera) y en el orden de hojas del archivo.
    """
    if filename is None:
        if isinstance(source, (str, Path)):
            filename = str(source)
        else:
            filename = getattr(source, "name", "") or ""
    ext = Path(filename).suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"Formato de archivo no soportado: {filename or '(sin nombre)'}")

    buf = _as_buffer(source)
    # Sólo la celda vacía es ausencia: "NA", "N/A" o "null" son texto válido
    try:
        if ext == ".csv":
            df = pd.read_csv(buf, header=None, dtype=object, keep_default_na=False,
                             na_values=[""], skip_blank_lines=False)
            return {Path(filename).stem: _frame_to_grid(df)}
        engine = "openpyxl" if ext == ".xlsx" else "xlrd"
        frames = pd.read_excel(buf, sheet_name=None, header=None, dtype=object, engine=engine,
                               keep_default_na=False, na_values=[""])
    except Exception as e:
        raise ValueError(f"Error leyendo el archivo {filename}: {e}") from e
    return {str(name): _frame_to_grid(df) for name, df in frames.items()}


def safe_sheet_names(names: Sequence[str]) -> List[str]:
    """Ajusta los nombres a las reglas de Excel (31 caracteres, sin []:*?/\\, únicos)."""
    out: List[str] = []
    used = set()
    for raw in names:
        base = _INVALID_SHEET_CHARS.sub("_", str(raw)).strip() or "Sala"
        base = base[:_MAX_SHEET_NAME]
        candidate = base
        n = 2
        while candidate.lower() in used:
            suffix = f" ({n})"
            candidate = base[:_MAX_SHEET_NAME - len(suffix)] + suffix
            n += 1
        used.add(candidate.lower())
        out.append(candidate)
    return out


def encode_tables(tables: Sequence[Table], columns: Optional[Sequence[str]] = None) -> bytes:
    """Una hoja por tabla, con fila de cabecera; devuelve los bytes del .xlsx."""
    frames = tables_to_dataframes(tables, columns)
    names = safe_sheet_names([name for name, _ in frames])
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        if not frames:
            # openpyxl exige al menos una hoja visible
            pd.DataFrame(columns=list(columns or [])).to_excel(writer, index=False, sheet_name="Sala")
        for sheet, (_, df) in zip(names, frames):
            df.to_excel(writer, index=False, sheet_name=sheet)
    return output.getvalue()
