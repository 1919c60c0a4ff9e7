"""
logging_config.py — Logging setup for the order pipeline and the mock payment service.

Order log lines carry an "[Order: <id>]" prefix; the format adds the process ID
so entries from the mock service and the pipeline can be told apart in one file.
"""

import logging
import os
import sys

LOG_FILE = os.environ.get("LOG_FILE", "order_pricing.log")
LOG_FORMAT = '%(asctime)s - %(levelname)s - [PID:%(process)d] - %(message)s'


def setup_logging(log_file: str = LOG_FILE, level: int = logging.INFO):
    """
    Routes the root logger to LOG_FILE and stdout, replacing any earlier handlers.
    httpx/httpcore request logging is limited to warnings.
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stdout)
        ],
        force=True
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name):
    return logging.getLogger(name)
