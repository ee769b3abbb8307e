from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, List

from .match import RoundStats

REPORT_COLUMNS: List[str] = list(RoundStats.model_fields)


def write_report(path: str | Path, rounds: Iterable[RoundStats]) -> Path:
    """Write one CSV row per round, with a header, creating parent folders."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=REPORT_COLUMNS)
        writer.writeheader()
        for stats in rounds:
            writer.writerow(stats.model_dump())
    return path
