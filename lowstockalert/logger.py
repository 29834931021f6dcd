import logging
import sys
from logging.handlers import RotatingFileHandler


def setup_logger(name: str = "lowstockalert", log_level="INFO", log_file=None) -> logging.Logger:
    """
    Attach a console handler, and a rotating file handler when ``log_file`` is
    given, to the package logger. Safe to call more than once.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    if logger.handlers:
        return logger

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"  # 5 MB
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
