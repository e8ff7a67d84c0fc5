"""
CBI Stage IO Module

- secure_join: Path guard joining a relative path onto a base without escaping it
- is_within: Lexical containment check
- PodPath: POSIX path inside the execution pod

Usage:
    from cbistage.io import secure_join, PodPath

    path = secure_join("/cbi-gitcontext", "context")
    sub = PodPath(path).secure_join("docs")
"""

from .path import secure_join, is_within, PodPath

__all__ = [
    'secure_join',
    'is_within',
    'PodPath',
]
