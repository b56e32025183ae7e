import tempfile
import unittest
from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path

import run
from smart_scheduler.config import SchedulerConfig, load_config
from smart_scheduler.data_loader import build_catalog, generate_standard_timeslots, load_csv, load_data
from smart_scheduler.export import export_schedule, read_schedule
from smart_scheduler.jobs import expand_jobs
from smart_scheduler.model import Schedule, TimeSlot
from smart_scheduler.placement import run_attempt
from smart_scheduler.search import is_leader_blocked

from tests.factories import SAMPLE_FILES, write_data


class DataLoaderTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)
        self.cfg = SchedulerConfig()

    def tearDown(self):
        self.tmp.cleanup()

    def test_headers_and_cells_are_trimmed(self):
        path = self.dir / "teacher.csv"
        path.write_text("\ufeff teacher_id , teacher_name \n T01 ,  Prajit \n", encoding="utf-8")
        df = load_csv(path)
        self.assertEqual(list(df.columns), ["teacher_id", "teacher_name"])
        self.assertEqual(df.iloc[0].tolist(), ["T01", "Prajit"])

    def test_missing_file_is_empty(self):
        self.assertTrue(load_csv(self.dir / "nope.csv").empty)

    def test_standard_grid(self):
        df = generate_standard_timeslots(self.cfg)
        self.assertEqual(len(df), 60)
        self.assertEqual(df.iloc[0].tolist(), ["1", "Mon", "1", "08:00", "09:00"])
        self.assertEqual(df.iloc[59].tolist(), ["60", "Fri", "12", "19:00", "20:00"])

    def test_grid_synthesised_without_calendar(self):
        write_data(self.dir)
        bundle = load_data(str(self.dir), self.cfg)
        self.assertEqual(len(bundle.timeslot), 60)

    def test_short_calendar_is_replaced(self):
        write_data(self.dir)
        (self.dir / "timeslot.csv").write_text("timeslot_id,day,period\n1,Mon,1\n2,Mon,2\n")
        self.assertEqual(len(load_data(str(self.dir), self.cfg).timeslot), 60)

    def test_full_calendar_is_kept(self):
        write_data(self.dir)
        rows = "".join(f"M{p},Mon,{p}\n" for p in range(1, 13))
        (self.dir / "timeslot.csv").write_text("timeslot_id,day,period\n" + rows)
        catalog = build_catalog(load_data(str(self.dir), self.cfg))
        self.assertEqual(len(catalog.timeslots), 12)
        self.assertEqual([s.period for s in catalog.slots_by_day["Mon"]], list(range(1, 13)))

    def test_infinite_numbers_are_invalid(self):
        files = dict(SAMPLE_FILES)
        files["subject.csv"] = "subject_id,subject_name,theory,practice\nS1,Maths,inf,1e400\nS2,Lab,0,2\n"
        write_data(self.dir, files)
        rows = "".join(f"M{p},Mon,{p}\n" for p in range(1, 13))
        (self.dir / "timeslot.csv").write_text("timeslot_id,day,period\n" + rows + "BAD,Tue,inf\n")
        catalog = build_catalog(load_data(str(self.dir), self.cfg))
        self.assertEqual(catalog.subjects_by_id["S1"].theory, 0)
        self.assertEqual(catalog.subjects_by_id["S1"].practice, 0)
        self.assertEqual(len(catalog.timeslots), 12)
        self.assertNotIn("BAD", [s.slot_id for s in catalog.timeslots])

    def test_catalog_from_files(self):
        write_data(self.dir)
        catalog = build_catalog(load_data(str(self.dir), self.cfg))
        self.assertEqual(catalog.subjects_by_id["S2"].theory, 0)
        self.assertEqual(catalog.subjects_by_id["S2"].practice, 2)
        self.assertEqual(catalog.eligible_teachers["S1"], ("T02",))
        self.assertEqual([r.room_id for r in catalog.theory_rooms], ["R1"])
        expansion = expand_jobs(catalog)
        self.assertEqual(expansion.skipped, 1)
        self.assertEqual(sorted(j.length for j in expansion.jobs), [1, 1, 2])


class ExportTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_empty_schedule_is_not_written(self):
        out = self.dir / "output.csv"
        self.assertIsNone(export_schedule(Schedule(), out))
        self.assertFalse(out.exists())
        self.assertEqual(read_schedule(out), [])

    def test_empty_schedule_removes_previous_output(self):
        out = self.dir / "output.csv"
        out.write_text("group_id,timeslot_id,day,period,subject_id,teacher_id,room_id\nG1,1,Mon,1,S1,T02,R1\n")
        self.assertIsNone(export_schedule(Schedule(), out))
        self.assertFalse(out.exists())
        self.assertEqual(read_schedule(out), [])

    def test_written_table(self):
        write_data(self.dir)
        cfg = SchedulerConfig(seed=1)
        catalog = build_catalog(load_data(str(self.dir), cfg))
        schedule = run_attempt(catalog, cfg, seed=1)
        out = export_schedule(schedule, self.dir / "out" / "output.csv")
        lines = out.read_text().splitlines()
        self.assertEqual(lines[0], "group_id,timeslot_id,day,period,subject_id,teacher_id,room_id")
        self.assertEqual(len(lines) - 1, 4)
        rows = read_schedule(out)
        self.assertEqual(rows[0]["group_id"], "G1")
        self.assertIsInstance(rows[0]["period"], str)


class ConfigTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_defaults_without_file(self):
        cfg = load_config(str(self.dir / "missing.yaml"))
        self.assertEqual(cfg.attempts, 50)
        self.assertEqual(cfg.leader_day, "Tue")
        self.assertIn("T17", cfg.leader_ids)

    def test_yaml_overrides(self):
        path = self.dir / "config.yaml"
        path.write_text("attempts: 7\nleader_ids: [T99]\nunknown_key: 1\n")
        cfg = load_config(str(path))
        self.assertEqual(cfg.attempts, 7)
        self.assertEqual(cfg.leader_ids, ["T99"])
        self.assertEqual(cfg.priority_max_period, 8)

    def test_quoted_periods_become_integers(self):
        path = self.dir / "config.yaml"
        path.write_text('leader_period: "8"\nlunch_period: "5"\nmax_period: "12"\nseed: "3"\n')
        cfg = load_config(str(path))
        self.assertEqual(cfg.leader_period, 8)
        self.assertEqual(cfg.lunch_period, 5)
        self.assertEqual(cfg.max_period, 12)
        self.assertEqual(cfg.seed, 3)
        slot = TimeSlot("x", "Tue", 8)
        self.assertTrue(is_leader_blocked(slot, "T01", cfg))

    def test_priority_window_within_max_period(self):
        with self.assertRaises(ValueError):
            SchedulerConfig(priority_max_period=10, max_period=9)

    def test_invalid_values(self):
        path = self.dir / "config.yaml"
        path.write_text("- a\n- b\n")
        with self.assertRaises(ValueError):
            load_config(str(path))
        with self.assertRaises(ValueError):
            SchedulerConfig(unplaced_policy="ignore")
        with self.assertRaises(ValueError):
            SchedulerConfig(attempts=0)


class RunScriptTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_end_to_end(self):
        write_data(self.dir)
        out = self.dir / "output.csv"
        argv = [
            "--config", str(self.dir / "none.yaml"),
            "--data_dir", str(self.dir),
            "--output", str(out),
            "--attempts", "3",
            "--seed", "5",
        ]
        with redirect_stdout(StringIO()) as buf:
            code = run.main(argv)
        self.assertEqual(code, 0)
        self.assertTrue(out.exists())
        self.assertIn("Forced conflicts: 0", buf.getvalue())

    def test_missing_registrations_stop_the_run(self):
        files = dict(SAMPLE_FILES)
        files["register.csv"] = "group_id,subject_id\n"
        write_data(self.dir, files)
        out = self.dir / "output.csv"
        argv = ["--config", str(self.dir / "none.yaml"), "--data_dir", str(self.dir), "--output", str(out)]
        with redirect_stdout(StringIO()):
            code = run.main(argv)
        self.assertEqual(code, 1)
        self.assertFalse(out.exists())


if __name__ == "__main__":
    unittest.main()
