import argparse
import sys
import time
from pathlib import Path
from typing import List

from distribuidor.config import DistributionConfig, load_config, parse_room_spec
from distribuidor.data_loader import decode_workbook, encode_tables
from distribuidor.export import to_tables
from distribuidor.mixing import make_rng
from distribuidor.model import DistributionResult, Room
from distribuidor.pipeline import capacity_summary, distribute


def resolve_rooms(room_specs: List[str], cfg: DistributionConfig) -> List[Room]:
    if room_specs:
        return [parse_room_spec(s) for s in room_specs]
    return cfg.default_rooms()


def resolve_sheets(sheet_args: List[str], cfg: DistributionConfig, available: List[str]) -> List[str]:
    if sheet_args:
        return sheet_args
    if cfg.sheets:
        return list(cfg.sheets)
    return available


def print_distribution(result: DistributionResult):
    print("\n" + "=" * 60)
    print(f"{'SALA':<30} {'OCUPADOS':>12} {'LIBRES':>8}")
    print("=" * 60)
    for a in result.assignments:
        ocupados = f"{len(a.occupants)}/{a.room.capacity}"
        print(f"{a.room.name:<30} {ocupados:>12} {a.free_seats:>8}")
    print("=" * 60)
    print(f"Total: {result.total_students} | Asignados: {result.allocated_count} | "
          f"Sin sala: {result.unallocated_count} | Lugares: {result.total_capacity}")
    if result.unallocated_count > 0:
        print(f"ATENCIÓN: {result.unallocated_count} alumno(s) sin asiento por falta de lugares.")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Distribución aleatoria y balanceada de alumnos en salas")
    parser.add_argument("--config", default="config.yaml", help="Ruta al archivo de configuración")
    parser.add_argument("--input", required=True, help="Planilla de alumnos (.xlsx, .xls o .csv)")
    parser.add_argument("--sheet", action="append", default=[], help="Hoja a usar (repetible)")
    parser.add_argument("--room", action="append", default=[], help="Sala en formato NOMBRE:ASIENTOS (repetible)")
    parser.add_argument("--seed", type=int, default=None, help="Semilla de la mezcla")
    parser.add_argument("--output", default=None, help="Archivo .xlsx de salida")
    parser.add_argument("--list-sheets", action="store_true", help="Sólo lista las hojas del archivo")
    args = parser.parse_args(argv)

    try:
        cfg = load_config(args.config)
        print(f"Leyendo {args.input}...")
        sheets = decode_workbook(args.input)
        if args.list_sheets:
            for name in sheets:
                print(name)
            return 0
        rooms = resolve_rooms(args.room, cfg)
        selected = resolve_sheets(args.sheet, cfg, list(sheets))
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    seed = args.seed if args.seed is not None else cfg.seed
    print(f"Hojas: {', '.join(selected) or '(ninguna)'} | Salas: {len(rooms)}")

    start = time.perf_counter()
    outcome = distribute(sheets, selected, rooms, rng=make_rng(seed), cfg=cfg)
    elapsed = time.perf_counter() - start
    if not outcome.ok:
        print(f"Error: {outcome.message}", file=sys.stderr)
        return 1

    summary = capacity_summary(len(outcome.students), rooms)
    print(f"Alumnos: {summary['total_students']} | Asientos: {summary['total_seats']} | "
          f"Tiempo: {elapsed:.3f}s")
    print_distribution(outcome.result)

    out_path = Path(args.output or cfg.output_file)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(encode_tables(to_tables(outcome.result, cfg), cfg.export_columns))
    print(f"Se guardó la distribución en {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
