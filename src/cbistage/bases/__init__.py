"""
CBI Stage Bases Module

This module contains the concrete staging strategies.

Classes:
- GitStrategy
- ConfigMapStrategy
- HTTPStrategy
- RcloneStrategy
"""

from .strategies import GitStrategy, ConfigMapStrategy, HTTPStrategy, RcloneStrategy

__all__ = [
    'GitStrategy',
    'ConfigMapStrategy',
    'HTTPStrategy',
    'RcloneStrategy',
]
