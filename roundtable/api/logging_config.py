"""Centralized logging configuration module"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

# Whether already initialized
_initialized = False

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 10 * 1024 * 1024


def rotate_logs(logs_dir: Path, base_name: str = "server.log", keep_count: int = 3):
    """Manually rotate log files (keep latest N files)"""
    current_log = logs_dir / base_name

    # If current log doesn't exist or is small, no need to rotate
    if not current_log.exists() or current_log.stat().st_size < MAX_LOG_BYTES:
        return

    # Delete oldest backup
    oldest = logs_dir / f"{base_name}.{keep_count}"
    if oldest.exists():
        oldest.unlink()

    # Shift existing backups
    for i in range(keep_count - 1, 0, -1):
        old_file = logs_dir / f"{base_name}.{i}"
        new_file = logs_dir / f"{base_name}.{i + 1}"
        if old_file.exists():
            old_file.rename(new_file)

    current_log.rename(logs_dir / f"{base_name}.1")


def setup_logging(level: str = "INFO", logs_dir: Optional[Path] = None):
    """Configure console and file logging for the server and CLI"""
    global _initialized

    if _initialized:
        return

    logs_dir = Path(logs_dir or "logs")
    logs_dir.mkdir(parents=True, exist_ok=True)
    rotate_logs(logs_dir)

    log_file = logs_dir / "server.log"

    # Write session separator
    with open(log_file, "a", encoding="utf-8") as f:
        f.write("\n" + "=" * 100 + "\n")
        f.write(f"Server started at: {datetime.now().strftime(LOG_DATE_FORMAT)}\n")
        f.write("=" * 100 + "\n\n")

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)

    level_value = getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(
        level=level_value,
        handlers=[console_handler, file_handler],
        force=True,
    )

    logging.getLogger("roundtable").setLevel(level_value)
    logging.getLogger("llm_interactions").setLevel(logging.INFO)

    # Reduce log level for third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    _initialized = True

    logging.getLogger(__name__).info(
        f"Logging initialized: {log_file.absolute()} (rotation: 10MB per file, keep 3 backups)"
    )
