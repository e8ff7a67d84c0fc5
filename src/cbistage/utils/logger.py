# logger.py
import logging
import sys
import os
from typing import Dict, Optional

import colorlog

from .. import constants

CONSOLE_FORMAT = '[%(levelname).4s] %(name)s: %(message)s'
FILE_FORMAT = '%(asctime)s [%(levelname).4s] %(name)s: %(message)s'


def parse_levels(spec: Optional[str]) -> Dict[str, str]:
    """
    Parse 'name=LEVEL,name=LEVEL' into a mapping, skipping malformed pairs.

    Example: "plan=DEBUG,cbistage.io=INFO" -> {"plan": "DEBUG", "cbistage.io": "INFO"}
    """
    levels: Dict[str, str] = {}
    for pair in (spec or "").split(','):
        pair = pair.strip()
        if '=' not in pair:
            continue
        name, lvl = pair.split('=', 1)
        levels[name.strip()] = lvl.strip().upper()
    return levels


def setup_logger(debug: bool = False, module_levels: Optional[Dict[str, str]] = None, log_file: Optional[str] = None):
    """
    Configures the root logger: colored console output on a terminal, plain
    otherwise, and an optional log file.

    Args:
        debug: Enable debug logging level
        module_levels: Per-module log levels, defaults to CBISTAGE_LOG_LEVELS
        log_file: Optional path to a log file
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    # configure handlers once, later calls only adjust levels
    if not root.handlers:
        console_handler = logging.StreamHandler(sys.stderr)
        # https://no-color.org/
        if sys.stderr.isatty() and not os.environ.get("NO_COLOR"):
            console_handler.setFormatter(colorlog.ColoredFormatter(
                '%(log_color)s[%(levelname).4s]%(reset)s %(cyan)s%(name)s%(reset)s: %(message)s',
                log_colors={
                    'DEBUG': 'cyan',
                    'INFO': 'green',
                    'WARNING': 'yellow',
                    'ERROR': 'red',
                    'CRITICAL': 'red,bg_white',
                },
                reset=True,
                style='%'
            ))
        else:
            console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        root.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
            root.addHandler(file_handler)
            logging.info(f"Logging to file: {log_file}")

    if module_levels is None:
        module_levels = parse_levels(os.environ.get(constants.LOG_LEVELS_ENV))
    apply_module_levels(module_levels)


def apply_module_levels(module_levels: Dict[str, str]):
    """Set per-module logger levels; unknown level names are reported and skipped"""
    for name, lvl_str in module_levels.items():
        lvl = logging.getLevelName(lvl_str.upper())
        if not isinstance(lvl, int):
            logging.warning(f"Ignoring unknown log level '{lvl_str}' for '{name}'.")
            continue
        logging.getLogger(normalize_module_name(name)).setLevel(lvl)


def normalize_module_name(name: str) -> str:
    """
    Expand short aliases ('plan' -> 'cbistage.planner'), strip a trailing
    '.*' and prefix known top-level modules with 'cbistage.'.
    """
    if name in constants.LOG_ALIAS_MAP:
        return constants.LOG_ALIAS_MAP[name]
    if name.endswith('.*'):
        name = name[:-2]
    if not name.startswith('cbistage.') and name.split('.', 1)[0] in constants.KNOWN_TOP_MODULES:
        name = f'cbistage.{name}'
    return name
