import logging
import sys
import os

ROOT_LOGGER = "scriptreel"
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        set_level(os.getenv("LOG_LEVEL", "DEBUG"))
    return root


def set_level(level: str):
    """scriptreel.* 전체 로그 레벨 변경 (알 수 없는 값은 DEBUG)."""
    logging.getLogger(ROOT_LOGGER).setLevel(getattr(logging, level.upper(), logging.DEBUG))


def get_logger(name: str) -> logging.Logger:
    """scriptreel.<name> 로거. 핸들러는 scriptreel 루트에 한 번만 붙는다."""
    _configure_root()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
