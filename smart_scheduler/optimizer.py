"""
Restart search.

Every attempt is a full, independent scheduling pass with its own random
generator and its own conflict tracker. The attempt with the lowest score is
kept (first one on ties) and the search stops as soon as an attempt scores
zero.
"""
import logging
import random
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .catalog import Catalog
from .config import SchedulerConfig
from .model import Schedule
from .placement import run_attempt

logger = logging.getLogger(__name__)


@dataclass
class OptimizationResult:
    best: Schedule
    best_attempt: int
    attempts_run: int
    history: List[Dict] = field(default_factory=list)


class RestartOptimizer:
    def __init__(self, catalog: Catalog, cfg: SchedulerConfig):
        self.catalog = catalog
        self.cfg = cfg
        self.history: List[Dict] = []

    def attempt_seeds(self) -> List[int]:
        # Seeds are fixed up front so sequential and threaded runs agree
        master = random.Random(self.cfg.seed)
        return [master.randrange(2 ** 32) for _ in range(self.cfg.attempts)]

    def run(self) -> OptimizationResult:
        self.catalog.require_essentials()
        self.history = []
        seeds = self.attempt_seeds()
        logger.info(
            "Optimizing: %d attempts, priority periods 1-%d, leaders blocked on %s P%d",
            len(seeds),
            self.cfg.priority_max_period,
            self.cfg.leader_day,
            self.cfg.leader_period,
        )

        if self.cfg.workers > 1:
            result = self._run_threaded(seeds)
        else:
            result = self._run_sequential(seeds)

        best = result.best
        if best.skipped_registrations:
            logger.warning(
                "Skipped %d registration(s) whose subject id is unknown",
                best.skipped_registrations,
            )
        if best.unplaced:
            logger.warning("%d job(s) could not be placed at all", len(best.unplaced))
        logger.info(
            "Best result: %d conflict(s) after %d attempt(s)", best.conflict_count, result.attempts_run
        )
        return result

    def _record(self, idx: int, schedule: Schedule, best: Optional[Schedule]) -> None:
        best_score = schedule.score if best is None else min(best.score, schedule.score)
        self.history.append(
            {
                "attempt": idx,
                "conflicts": schedule.conflict_count,
                "unplaced": len(schedule.unplaced),
                "score": schedule.score,
                "best_score": best_score,
            }
        )
        logger.debug("Attempt %d: score=%d", idx, schedule.score)

    def _accept(self, idx: int, schedule: Schedule, best: Optional[Schedule], best_idx: int):
        self._record(idx, schedule, best)
        if best is None or schedule.score < best.score:
            return schedule, idx
        return best, best_idx

    def _run_sequential(self, seeds: List[int]) -> OptimizationResult:
        best: Optional[Schedule] = None
        best_idx = -1
        for idx, seed in enumerate(seeds):
            schedule = run_attempt(self.catalog, self.cfg, seed)
            best, best_idx = self._accept(idx, schedule, best, best_idx)
            if best.score == 0:
                break
        return OptimizationResult(best, best_idx, len(self.history), list(self.history))

    def _run_threaded(self, seeds: List[int]) -> OptimizationResult:
        stop = threading.Event()

        def work(seed: int) -> Optional[Schedule]:
            if stop.is_set():
                return None
            return run_attempt(self.catalog, self.cfg, seed)

        best: Optional[Schedule] = None
        best_idx = -1
        with ThreadPoolExecutor(max_workers=self.cfg.workers) as pool:
            futures = [pool.submit(work, seed) for seed in seeds]
            # Consumed in attempt order: the lowest-indexed zero wins
            for idx, fut in enumerate(futures):
                schedule = fut.result()
                best, best_idx = self._accept(idx, schedule, best, best_idx)
                if best.score == 0:
                    stop.set()
                    for pending in futures[idx + 1:]:
                        pending.cancel()
                    break
        return OptimizationResult(best, best_idx, len(self.history), list(self.history))
