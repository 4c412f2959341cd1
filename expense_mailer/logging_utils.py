from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path


def setup_logging(level: str, command: str, logs_dir: Path = Path("logs")) -> Path:
    """Log to stderr and to logs/<command>-<timestamp>.log."""
    logs_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_file = logs_dir / f"{command}-{ts}.log"

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setFormatter(formatter)
    root.addHandler(fh)

    sh = logging.StreamHandler()
    sh.setFormatter(formatter)
    root.addHandler(sh)

    return log_file
