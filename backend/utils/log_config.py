import logging
import os
from pathlib import Path


ROOT_DIR = Path(__file__).resolve().parents[2]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Loggers that share the creative studio log file
CREATIVE_STUDIO_LOGGERS = (
    "operators.pack_operator",
    "operators.pack_jobs",
    "agent.creative_studio",
    "handlers.pack_handler",
)


def _attach_file_handler(
    logger_name: str,
    log_file_path: Path,
    level_name: str | None = None,
) -> None:
    logger_level = (level_name or LOG_LEVEL).upper()
    logger_level_value = getattr(logging, logger_level, logging.INFO)
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
    file_handler.setLevel(logger_level_value)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    target_logger = logging.getLogger(logger_name)
    if not any(
        isinstance(handler, logging.FileHandler)
        and getattr(handler, "baseFilename", None) == str(log_file_path)
        for handler in target_logger.handlers
    ):
        target_logger.addHandler(file_handler)
    target_logger.setLevel(logger_level_value)


def configure_logging(extra_loggers: tuple[str, ...] = ()) -> None:
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

    log_file = os.getenv("CREATIVE_STUDIO_LOG_FILE", "backend/log/creative_studio.log").strip()
    log_level = os.getenv("CREATIVE_STUDIO_LOG_LEVEL", "INFO").strip()
    if not log_file:
        return

    log_path = Path(log_file)
    if not log_path.is_absolute():
        log_path = ROOT_DIR / log_path
    for name in CREATIVE_STUDIO_LOGGERS + extra_loggers:
        _attach_file_handler(name, log_path, level_name=log_level)
