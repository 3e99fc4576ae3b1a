from __future__ import annotations

from datetime import datetime, timezone


def utc_run_id() -> str:
    """Sortable UTC run directory name; microseconds keep back-to-back runs apart."""
    return datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S-%f")
