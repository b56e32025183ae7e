"""
Scheduler configuration.

Defaults describe the standard week (5 days x 12 periods, lunch in period 5,
leaders' meeting on Tuesday period 8). A YAML file can override any field so
runs stay reproducible.
"""
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


DEFAULT_DAYS: List[str] = ["Mon", "Tue", "Wed", "Thu", "Fri"]

# Heads of department who meet every Tuesday, period 8.
DEFAULT_LEADER_IDS: List[str] = ["T01", "T03", "T06", "T08", "T09", "T10", "T11", "T17"]

UNPLACED_POLICIES = ("drop", "count")


@dataclass
class SchedulerConfig:
    # Weekly grid
    days: List[str] = field(default_factory=lambda: list(DEFAULT_DAYS))
    periods_per_day: int = 12
    first_period_hour: int = 8
    lunch_period: int = 5
    priority_max_period: int = 8
    max_period: int = 12

    # Leaders' meeting block
    leader_ids: List[str] = field(default_factory=lambda: list(DEFAULT_LEADER_IDS))
    leader_day: str = "Tue"
    leader_period: int = 8

    # Restart search
    attempts: int = 50
    seed: Optional[int] = None
    workers: int = 1
    unplaced_policy: str = "drop"  # "drop" | "count"

    # I/O
    data_dir: str = "data"
    output_file: str = "output.csv"
    static_dir: str = "public"
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SchedulerConfig":
        merged = asdict(cls())
        for k, v in data.items():
            if k in merged:
                merged[k] = v
        return cls(**merged)

    def __post_init__(self):
        for name in ("periods_per_day", "first_period_hour", "lunch_period",
                     "priority_max_period", "max_period", "leader_period",
                     "attempts", "workers", "port"):
            setattr(self, name, int(getattr(self, name)))
        if self.seed is not None:
            self.seed = int(self.seed)
        if self.attempts < 1:
            raise ValueError("attempts must be >= 1")
        if self.workers < 1:
            raise ValueError("workers must be >= 1")
        if self.unplaced_policy not in UNPLACED_POLICIES:
            raise ValueError(f"unplaced_policy must be one of {UNPLACED_POLICIES}")
        if self.priority_max_period > self.max_period:
            raise ValueError("priority_max_period must be <= max_period")
        self.leader_ids = [str(t) for t in self.leader_ids]


def load_config(path: str = "config.yaml") -> SchedulerConfig:
    cfg_path = Path(path)
    if not cfg_path.exists():
        return SchedulerConfig()
    data = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping")
    return SchedulerConfig.from_dict(data)
