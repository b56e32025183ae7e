import argparse
import logging
import sys
import time
from dataclasses import asdict

from smart_scheduler.config import SchedulerConfig, load_config
from smart_scheduler.data_loader import build_catalog, load_data
from smart_scheduler.errors import MissingDataError
from smart_scheduler.evaluation import EvaluationResult, evaluate
from smart_scheduler.export import export_schedule
from smart_scheduler.optimizer import OptimizationResult, RestartOptimizer


def apply_overrides(cfg: SchedulerConfig, args: argparse.Namespace) -> SchedulerConfig:
    overrides = {
        "data_dir": args.data_dir,
        "output_file": args.output,
        "attempts": args.attempts,
        "seed": args.seed,
        "workers": args.workers,
    }
    merged = asdict(cfg)
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return SchedulerConfig.from_dict(merged)


def print_summary(result: OptimizationResult, eval_res: EvaluationResult, elapsed: float):
    best = result.best
    print("\n--- BEST SCHEDULE ---")
    print(
        f"Attempts: {result.attempts_run} | Best attempt: {result.best_attempt} | "
        f"Time: {elapsed:.2f}s"
    )
    print(f"Placements: {len(best.placements)} | Slots: {len(best.rows())}")
    print(f"Forced conflicts: {best.conflict_count} | Unplaced jobs: {len(best.unplaced)}")
    print(f"Skipped registrations: {best.skipped_registrations}")
    print(
        f"Clashes group={eval_res.group_clashes} room={eval_res.room_clashes} "
        f"teacher={eval_res.teacher_clashes} | Periods after priority window: {eval_res.overflow_slots}"
    )
    for job in best.unplaced[:10]:
        print(f"  unplaced: {job.group_id} {job.subject_id} ({job.kind.value}, {job.length} periods)")


def serve(bundle, cfg: SchedulerConfig):
    import uvicorn

    from smart_scheduler.server import create_app

    print(f"Server running at http://{cfg.host}:{cfg.port}")
    uvicorn.run(create_app(bundle, cfg), host=cfg.host, port=cfg.port)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Weekly timetable scheduling with restarts")
    parser.add_argument("--config", default="config.yaml", help="Path to the YAML configuration")
    parser.add_argument("--data_dir", default=None, help="Directory holding the input CSV files")
    parser.add_argument("--output", default=None, help="Output CSV path")
    parser.add_argument("--attempts", type=int, default=None, help="Number of restart attempts")
    parser.add_argument("--seed", type=int, default=None, help="Master random seed")
    parser.add_argument("--workers", type=int, default=None, help="Threads used for attempts")
    parser.add_argument("--serve", action="store_true", help="Serve the API after scheduling")
    args = parser.parse_args(argv)

    cfg = apply_overrides(load_config(args.config), args)
    logging.basicConfig(
        level=getattr(logging, str(cfg.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    bundle = load_data(cfg.data_dir, cfg)
    catalog = build_catalog(bundle)

    start = time.perf_counter()
    try:
        result = RestartOptimizer(catalog, cfg).run()
    except MissingDataError as exc:
        print(f"STOP: {exc}. Check the file names in {cfg.data_dir}.", file=sys.stderr)
        return 1
    elapsed = time.perf_counter() - start

    eval_res = evaluate(result.best, catalog, cfg)
    print_summary(result, eval_res, elapsed)
    export_schedule(result.best, cfg.output_file)

    if args.serve:
        serve(bundle, cfg)
    return 0


if __name__ == "__main__":
    sys.exit(main())
