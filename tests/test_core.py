import random
import unittest
from collections import Counter
from unittest import mock

from distribuidor.allocation import allocate, valid_rooms
from distribuidor.config import DistributionConfig
from distribuidor.export import to_tables
from distribuidor.extraction import cell_text, extract_students, find_group_column
from distribuidor.mixing import fisher_yates_shuffle, interleave_by_group, make_rng, mix
from distribuidor.model import Room, Student
from distribuidor.pipeline import DistributionStatus, capacity_summary, distribute


class IdentityRng:
    """randint(0, i) -> i: el barajado no mueve nada."""

    def randint(self, a, b):
        return b


class FirstIndexRng:
    def randint(self, a, b):
        return a


def class_sheet(rows, header=("Nº", "ALUNO", "SÉRIE", "Prova P6")):
    return [list(header), ["meta"], [None, None, None, None]] + [None if r is None else list(r) for r in rows]


def students(*pairs):
    return [Student(n, g) for n, g in pairs]


class ExtractionTests(unittest.TestCase):
    def test_group_column_from_header(self):
        grid = class_sheet([
            (1, "  Ana  ", "6A", " 6º A "),
            (2, "Bruno", "6A", "6º B"),
        ])
        out = extract_students({"6A": grid}, ["6A"])
        self.assertEqual(out, [Student("Ana", "6º A"), Student("Bruno", "6º B")])

    def test_fallback_uses_sheet_name(self):
        grid = [["Nº", "ALUNO"], ["x"], ["y"], [1, "Ana"], [2, "Bruno"], [3, None]]
        out = extract_students({"7B": grid}, ["7B"])
        self.assertEqual([s.name for s in out], ["Ana", "Bruno"])
        self.assertTrue(all(s.group == "7B" for s in out))

    def test_short_sheet_is_skipped(self):
        grid = [["Nº", "ALUNO", "PROVA"], ["x", "Ana", "1"], ["y", "Bia", "1"]]
        self.assertEqual(extract_students({"S": grid}, ["S"]), [])

    def test_header_rows_are_never_data(self):
        grid = [["Nº", "Ana"], [1, "Bia"], [2, "Caio"], [3, "Davi"]]
        out = extract_students({"S": grid}, ["S"])
        self.assertEqual(out, [Student("Davi", "S")])

    def test_rows_missing_name_or_group_are_skipped(self):
        grid = class_sheet([
            (1, "Ana", None, None),
            (2, None, None, "6A"),
            (3, "   ", None, "6A"),
            (4, "Caio", None, "   "),
            (5, 123, None, "6A"),
            (6, "Davi", None, "6A"),
        ])
        out = extract_students({"S": grid}, ["S"])
        self.assertEqual(out, [Student("Davi", "6A")])

    def test_numeric_group_is_stringified(self):
        grid = class_sheet([(1, "Ana", None, 6), (2, "Bia", None, 7.0), (3, "Caio", None, 0)])
        out = extract_students({"S": grid}, ["S"])
        self.assertEqual([s.group for s in out], ["6", "7", "0"])

    def test_short_rows_and_none_rows(self):
        grid = class_sheet([(1,), None, (2, "Bia", None, "6A")])
        out = extract_students({"S": grid}, ["S"])
        self.assertEqual(out, [Student("Bia", "6A")])

    def test_order_follows_selection_and_missing_sheets_are_ignored(self):
        sheets = {
            "A": class_sheet([(1, "Ana", None, "A")]),
            "B": class_sheet([(1, "Bia", None, "B")]),
        }
        out = extract_students(sheets, ["B", "ZZ", "A"])
        self.assertEqual([s.name for s in out], ["Bia", "Ana"])

    def test_empty_selection(self):
        sheets = {"A": class_sheet([(1, "Ana", None, "A")])}
        self.assertEqual(extract_students(sheets, []), [])

    def test_find_group_column(self):
        self.assertEqual(find_group_column(["x", 5, "prova p6", "PROVA"]), 2)
        self.assertEqual(find_group_column(["x", None]), -1)
        self.assertEqual(find_group_column([]), -1)
        self.assertEqual(find_group_column(["SALA"], marker="sala"), 0)

    def test_custom_layout_from_config(self):
        cfg = DistributionConfig(group_marker="TURMA", name_column=0, data_start_row=1, min_rows=2)
        grid = [["Nome", "Turma"], ["Ana", "8A"]]
        self.assertEqual(extract_students({"S": grid}, ["S"], cfg), [Student("Ana", "8A")])

    def test_cell_text(self):
        self.assertEqual(cell_text(None), "")
        self.assertEqual(cell_text(float("nan")), "")
        self.assertEqual(cell_text(6.0), "6")
        self.assertEqual(cell_text(6.5), "6.5")
        self.assertEqual(cell_text("  x "), "x")


class MixingTests(unittest.TestCase):
    def test_round_robin_with_exhausted_group(self):
        a1, a2, a3, b1 = students(("a1", "A"), ("a2", "A"), ("a3", "A"), ("b1", "B"))
        self.assertEqual(interleave_by_group([a1, a2, a3, b1]), [a1, b1, a2, a3])

    def test_round_robin_uses_first_encounter_order(self):
        data = students(("b1", "B"), ("a1", "A"), ("b2", "B"), ("c1", "C"), ("a2", "A"))
        out = interleave_by_group(data)
        self.assertEqual([s.name for s in out], ["b1", "a1", "c1", "b2", "a2"])

    def test_identity_rng_leaves_interleave(self):
        data = students(("s1", "X"), ("s2", "X"), ("s3", "X"), ("s4", "Y"), ("s5", "Y"))
        out = mix(data, IdentityRng())
        self.assertEqual([s.name for s in out], ["s1", "s4", "s2", "s5", "s3"])

    def test_fisher_yates_swaps_from_the_end(self):
        self.assertEqual(fisher_yates_shuffle([1, 2, 3], FirstIndexRng()), [2, 3, 1])
        self.assertEqual(fisher_yates_shuffle([], FirstIndexRng()), [])
        self.assertEqual(fisher_yates_shuffle([1], FirstIndexRng()), [1])

    def test_shuffle_does_not_mutate_input(self):
        data = [1, 2, 3, 4]
        fisher_yates_shuffle(data, random.Random(3))
        self.assertEqual(data, [1, 2, 3, 4])

    def test_mix_is_a_permutation(self):
        rng = random.Random(11)
        for n in (0, 1, 2, 7, 40):
            data = [Student(f"s{i % 5}", f"G{i % 3}") for i in range(n)]
            out = mix(data, rng)
            self.assertEqual(len(out), n)
            self.assertEqual(Counter(out), Counter(data))

    def test_seeded_mix_is_reproducible(self):
        data = [Student(f"s{i}", f"G{i % 4}") for i in range(30)]
        self.assertEqual(mix(data, make_rng(42)), mix(data, make_rng(42)))

    def test_make_rng(self):
        self.assertIsInstance(make_rng(), random.SystemRandom)
        self.assertNotIsInstance(make_rng(1), random.SystemRandom)


class AllocationTests(unittest.TestCase):
    def test_insufficient_capacity(self):
        data = [Student(f"s{i}", "A") for i in range(10)]
        res = allocate(data, [Room("101", 4)])
        self.assertEqual(len(res.assignments[0].occupants), 4)
        self.assertEqual(res.unallocated_count, 6)
        self.assertEqual(res.total_students, 10)

    def test_rooms_fill_in_order(self):
        data = [Student(f"s{i}", "A") for i in range(5)]
        res = allocate(data, [Room("R1", 3), Room("R2", 3)])
        self.assertEqual([len(a.occupants) for a in res.assignments], [3, 2])
        self.assertEqual(res.assignments[0].occupants, tuple(data[:3]))
        self.assertEqual(res.assignments[1].occupants, tuple(data[3:]))
        self.assertEqual(res.unallocated_count, 0)
        self.assertEqual(res.assignments[1].free_seats, 1)

    def test_later_rooms_may_be_empty(self):
        data = [Student(f"s{i}", "A") for i in range(3)]
        res = allocate(data, [Room("R1", 2), Room("R2", 2), Room("R3", 2)])
        self.assertEqual([len(a.occupants) for a in res.assignments], [2, 1, 0])
        self.assertEqual(res.total_capacity, 6)
        self.assertEqual(res.allocated_count, 3)

    def test_capacity_and_order_invariants(self):
        rng = random.Random(5)
        for _ in range(25):
            data = [Student(f"s{i}", "A") for i in range(rng.randint(0, 40))]
            rooms = [Room(f"R{k}", rng.randint(1, 12)) for k in range(rng.randint(1, 5))]
            res = allocate(data, rooms)
            placed = [s for a in res.assignments for s in a.occupants]
            for a in res.assignments:
                self.assertLessEqual(len(a.occupants), a.room.capacity)
            self.assertEqual(len(placed), min(len(data), sum(r.capacity for r in rooms)))
            self.assertEqual(placed, data[:len(placed)])
            self.assertEqual(res.allocated_count + res.unallocated_count, len(data))

    def test_no_rooms(self):
        res = allocate([Student("a", "A")], [])
        self.assertEqual(res.assignments, ())
        self.assertEqual(res.unallocated_count, 1)

    def test_valid_rooms(self):
        rooms = [Room("101", 30), Room("", 10), Room("102", 0), Room("103", 1)]
        self.assertEqual([r.name for r in valid_rooms(rooms)], ["101", "103"])


class RoomTests(unittest.TestCase):
    def test_from_values_normalizes(self):
        self.assertEqual(Room.from_values(" 101 ", "30"), Room("101", 30))
        self.assertEqual(Room.from_values("102", 25.0), Room("102", 25))
        self.assertEqual(Room.from_values(None, None), Room("", 0))
        self.assertEqual(Room.from_values("103", ""), Room("103", 0))

    def test_from_values_rejects_bad_seats(self):
        for bad in (-1, "-3", "abc", 2.5, True, [3]):
            with self.assertRaises(ValueError):
                Room.from_values("101", bad)


class ExportTests(unittest.TestCase):
    def test_one_table_per_room_including_empty(self):
        data = students(("Ana", "6A"), ("Bia", "6B"))
        res = allocate(data, [Room("101", 2), Room("102", 5)])
        tables = to_tables(res)
        self.assertEqual([name for name, _ in tables], ["Sala 101", "Sala 102"])
        self.assertEqual(tables[0][1], [{"Name": "Ana", "Group": "6A"}, {"Name": "Bia", "Group": "6B"}])
        self.assertEqual(list(tables[0][1][0].keys()), ["Name", "Group"])
        self.assertEqual(tables[1][1], [])

    def test_custom_columns_and_prefix(self):
        cfg = DistributionConfig(sheet_prefix="", export_columns=["Nome", "Turma"])
        res = allocate(students(("Ana", "6A")), [Room("Lab", 1)])
        self.assertEqual(to_tables(res, cfg), [("Lab", [{"Nome": "Ana", "Turma": "6A"}])])


class PipelineTests(unittest.TestCase):
    def setUp(self):
        self.sheets = {
            "Turmas": class_sheet([
                (1, "s1", None, "X"),
                (2, "s2", None, "X"),
                (3, "s3", None, "X"),
                (4, "s4", None, "Y"),
                (5, "s5", None, "Y"),
            ])
        }
        self.rooms = [Room("R1", 3), Room("R2", 3)]

    def test_end_to_end(self):
        outcome = distribute(self.sheets, ["Turmas"], self.rooms, rng=random.Random(1))
        self.assertTrue(outcome.ok)
        res = outcome.result
        self.assertEqual([len(a.occupants) for a in res.assignments], [3, 2])
        self.assertEqual(res.unallocated_count, 0)
        placed = [s.name for a in res.assignments for s in a.occupants]
        self.assertEqual(sorted(placed), ["s1", "s2", "s3", "s4", "s5"])

    def test_end_to_end_without_shuffle(self):
        outcome = distribute(self.sheets, ["Turmas"], self.rooms, rng=IdentityRng())
        names = [[s.name for s in a.occupants] for a in outcome.result.assignments]
        self.assertEqual(names, [["s1", "s4", "s2"], ["s5", "s3"]])

    def test_empty_selection_does_not_run_pipeline(self):
        with mock.patch("distribuidor.pipeline.mix") as mixer, \
                mock.patch("distribuidor.pipeline.allocate") as allocator:
            outcome = distribute(self.sheets, [], self.rooms)
        self.assertEqual(outcome.status, DistributionStatus.NO_STUDENTS)
        self.assertIsNone(outcome.result)
        mixer.assert_not_called()
        allocator.assert_not_called()

    def test_no_valid_rooms(self):
        outcome = distribute(self.sheets, ["Turmas"], [Room("", 10), Room("101", 0)])
        self.assertEqual(outcome.status, DistributionStatus.NO_ROOMS)
        self.assertEqual(len(outcome.students), 5)
        self.assertIn("sala", outcome.message)

    def test_invalid_rooms_are_dropped_before_allocation(self):
        rooms = [Room("", 10), Room("R1", 2), Room("R0", 0)]
        outcome = distribute(self.sheets, ["Turmas"], rooms, rng=random.Random(2))
        self.assertEqual([a.room.name for a in outcome.result.assignments], ["R1"])
        self.assertEqual(outcome.result.unallocated_count, 3)

    def test_seed_from_config(self):
        cfg = DistributionConfig(seed=9)
        first = distribute(self.sheets, ["Turmas"], self.rooms, cfg=cfg)
        second = distribute(self.sheets, ["Turmas"], self.rooms, cfg=cfg)
        self.assertEqual(first.result, second.result)

    def test_capacity_summary(self):
        rooms = [Room("101", 10), Room("", 5)]
        self.assertEqual(
            capacity_summary(18, rooms),
            {"total_students": 18, "total_seats": 15, "missing_seats": 3},
        )
        self.assertEqual(capacity_summary(4, rooms)["missing_seats"], 0)


if __name__ == "__main__":
    unittest.main()
