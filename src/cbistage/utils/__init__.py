"""
CBI Stage Utils Module

- logger: Logging setup and configuration
- util: Name conversion for manifest keys

Usage:
    from cbistage.utils import setup_logger, to_camel
"""

from .logger import setup_logger, parse_levels, normalize_module_name
from .util import to_camel

__all__ = [
    'setup_logger',
    'parse_levels',
    'normalize_module_name',
    'to_camel',
]
