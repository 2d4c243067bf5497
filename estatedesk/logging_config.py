"""Logging for console processes, configured from the ``logging`` settings section.

``logging.levels`` tunes individual loggers, e.g. ``estatedesk.search: DEBUG``
to trace compiled filters and requests, or ``httpx: WARNING``.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Any, Mapping

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level(name: Any, default: int = logging.INFO) -> int:
    value = logging.getLevelName(str(name).upper())
    return value if isinstance(value, int) else default


def _file_handler(project_root: Path, cfg: Mapping[str, Any]) -> logging.Handler | None:
    log_file = cfg.get("file")
    if not log_file:
        return None
    log_path = Path(log_file)
    if not log_path.is_absolute():
        log_path = project_root / log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=int(cfg.get("max_bytes", 10 * 1024 * 1024)),
        backupCount=int(cfg.get("backup_count", 3)),
        encoding="utf-8",
    )


def apply_logger_levels(levels: Mapping[str, Any] | None) -> dict[str, int]:
    """Set per-logger levels from a {logger name: level name} mapping. Returns what was applied."""
    applied: dict[str, int] = {}
    for name, level_name in (levels or {}).items():
        level = _level(level_name, default=logging.NOTSET)
        if level == logging.NOTSET:
            continue
        logging.getLogger(name).setLevel(level)
        applied[name] = level
    return applied


def setup_logging(project_root: Path, settings: dict[str, Any]) -> None:
    """Configure the root logger from settings["logging"].

    Installs a rotating file handler when ``file`` is set and a console
    handler when ``log_to_console`` is true (or when there is no file, so
    nothing is lost). Existing root handlers are replaced.
    """
    cfg = settings.get("logging", {})
    level = _level(cfg.get("level", "INFO"))
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = []
    file_handler = _file_handler(project_root, cfg)
    if file_handler is not None:
        handlers.append(file_handler)
    if cfg.get("log_to_console", False) or file_handler is None:
        handlers.append(logging.StreamHandler())

    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers[:]:
        root.removeHandler(h)
    for h in handlers:
        h.setFormatter(formatter)
        root.addHandler(h)
    apply_logger_levels(cfg.get("levels"))
