"""CSV reader for the demo batch file."""

import csv
from pathlib import Path
from typing import Any

from batch_ledger.config import SEED_BATCHES_PATH


def load_seed_batches(csv_path: Path | None = None) -> list[dict[str, Any]]:
    """Rows of seed_batches.csv keyed by header (name, mfg, exp, quantity, ...). Missing file -> []."""
    path = Path(csv_path or SEED_BATCHES_PATH)
    if not path.is_file():
        return []
    with path.open(encoding="utf-8", newline="") as fh:
        return [dict(row) for row in csv.DictReader(fh)]
