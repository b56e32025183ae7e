import unittest

from smart_scheduler.config import SchedulerConfig
from smart_scheduler.errors import MissingDataError
from smart_scheduler.optimizer import RestartOptimizer

from tests.factories import busy_catalog, make_catalog, slots_for


def overloaded_catalog():
    # Four usable periods for six single-period jobs of one group: two always forced
    subjects = [(f"S{i}", f"Subject {i}", 1, 0) for i in range(6)]
    return make_catalog(
        subjects,
        [("G1", s[0]) for s in subjects],
        teach=[("T02", s[0]) for s in subjects],
        timeslots=slots_for([("Mon", p) for p in range(1, 6)]),
    )


class RestartOptimizerTests(unittest.TestCase):
    def test_stops_at_first_zero(self):
        catalog = make_catalog([("S1", "Maths", 2, 0)], [("G1", "S1")], teach=[("T02", "S1")])
        result = RestartOptimizer(catalog, SchedulerConfig(seed=1)).run()
        self.assertEqual(result.attempts_run, 1)
        self.assertEqual(result.best.conflict_count, 0)
        self.assertEqual(result.best_attempt, 0)

    def test_best_never_worse_than_any_attempt(self):
        result = RestartOptimizer(overloaded_catalog(), SchedulerConfig(seed=2, attempts=5)).run()
        self.assertEqual(result.attempts_run, 5)
        scores = [h["score"] for h in result.history]
        self.assertEqual(result.best.score, min(scores))
        self.assertEqual(result.best.conflict_count, 2)
        # ties keep the first minimal attempt
        self.assertEqual(result.best_attempt, scores.index(min(scores)))
        self.assertEqual([h["best_score"] for h in result.history], [2] * 5)

    def test_seeded_runs_repeat(self):
        cfg = SchedulerConfig(seed=42, attempts=3)
        a = RestartOptimizer(busy_catalog(), cfg).run()
        b = RestartOptimizer(busy_catalog(), cfg).run()
        self.assertEqual(a.best.rows(), b.best.rows())
        self.assertEqual(a.best.seed, b.best.seed)

    def test_threaded_matches_sequential(self):
        sequential = RestartOptimizer(overloaded_catalog(), SchedulerConfig(seed=9, attempts=6)).run()
        threaded = RestartOptimizer(overloaded_catalog(), SchedulerConfig(seed=9, attempts=6, workers=3)).run()
        self.assertEqual(sequential.best_attempt, threaded.best_attempt)
        self.assertEqual(sequential.best.rows(), threaded.best.rows())
        self.assertEqual(sequential.history, threaded.history)

    def test_threaded_early_stop(self):
        catalog = make_catalog([("S1", "Maths", 1, 0)], [("G1", "S1")], teach=[("T02", "S1")])
        result = RestartOptimizer(catalog, SchedulerConfig(seed=3, attempts=20, workers=4)).run()
        self.assertEqual(result.attempts_run, 1)
        self.assertEqual(result.best.score, 0)

    def test_missing_essentials(self):
        with self.assertRaises(MissingDataError):
            RestartOptimizer(make_catalog([("S1", "A", 1, 0)], []), SchedulerConfig()).run()
        with self.assertRaises(MissingDataError):
            RestartOptimizer(make_catalog([], [("G1", "S1")]), SchedulerConfig()).run()

    def test_skipped_registrations_reported(self):
        catalog = make_catalog([("S1", "A", 1, 0)], [("G1", "S1"), ("G1", "NOPE")], teach=[("T02", "S1")])
        result = RestartOptimizer(catalog, SchedulerConfig(seed=5)).run()
        self.assertEqual(result.best.skipped_registrations, 1)
        self.assertEqual(len(result.best.placements), 1)


if __name__ == "__main__":
    unittest.main()
