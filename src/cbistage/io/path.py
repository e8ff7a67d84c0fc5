# cbistage/io/path.py

import logging
import os
import posixpath
from pathlib import Path, PurePosixPath
from typing import List, Optional, Union

from .. import constants
from ..exceptions import PathEscapeError


logger = logging.getLogger(__name__)

PathLike = Union[str, PurePosixPath]


def _split(relative: str) -> List[str]:
    """Split a POSIX relative path into its meaningful segments"""
    return [part for part in relative.split("/") if part not in ("", ".")]


def _normalize_base(base: PathLike) -> PurePosixPath:
    base_str = str(base)
    if not base_str:
        raise ValueError("base directory must not be empty")
    return PurePosixPath(posixpath.normpath(base_str))


def secure_join(base: PathLike, relative: PathLike = "", root: Optional[Union[str, Path]] = None) -> str:
    """
    Join `relative` onto `base`, refusing any result outside of `base`.

    The walk is lexical: `.` segments are dropped and `..` removes the previous
    segment, failing as soon as it would climb above `base`. When `root` is
    given it names a host directory standing in for the pod filesystem `/`;
    every component that exists there as a symlink is expanded and must stay
    within `base` too.

    Args:
        base: Absolute (in-pod) directory the result must stay in.
        relative: Relative path to append, may be empty.
        root: Optional host directory used to inspect symlinks.

    Returns:
        str: The normalized joined path.

    Raises:
        PathEscapeError: If the result would leave `base`.
    """
    base_path = _normalize_base(base)
    relative = str(relative)
    if not relative:
        return str(base_path)
    if relative.startswith("/"):
        raise PathEscapeError(str(base_path), relative, "absolute paths are not allowed")

    remaining = _split(relative)
    stack: List[str] = []
    expansions = 0

    while remaining:
        part = remaining.pop(0)
        if part == "..":
            if not stack:
                raise PathEscapeError(str(base_path), relative, "'..' leaves the base directory")
            stack.pop()
            continue

        stack.append(part)
        if root is None:
            continue

        host_path = Path(root).joinpath(str(base_path).lstrip("/"), *stack)
        if not os.path.islink(host_path):
            continue

        expansions += 1
        if expansions > constants.MAX_SYMLINK_EXPANSIONS:
            raise PathEscapeError(str(base_path), relative, "too many levels of symbolic links")

        target = os.readlink(host_path)
        logger.debug(f"Expanding symlink '{'/'.join(stack)}' -> '{target}' under '{base_path}'")
        stack.pop()
        if target.startswith("/"):
            # absolute links are interpreted inside the pod filesystem
            target_path = PurePosixPath(posixpath.normpath(target))
            if target_path != base_path and base_path not in target_path.parents:
                raise PathEscapeError(
                    str(base_path), relative, f"symlink to '{target}' leaves the base directory"
                )
            stack = []
            remaining = list(target_path.relative_to(base_path).parts) + remaining
        else:
            remaining = _split(target) + remaining

    return str(base_path.joinpath(*stack))


def is_within(base: PathLike, path: PathLike) -> bool:
    """
    Check lexically whether `path` is `base` or lies below it.
    """
    base_path = _normalize_base(base)
    target = PurePosixPath(posixpath.normpath(str(path)))
    return target == base_path or base_path in target.parents


class PodPath(PurePosixPath):
    """
    A POSIX path inside the execution pod.

    Pod paths never touch the local filesystem; they are only joined through
    `secure_join` so that no `..` can climb out of a staging directory.
    """

    def secure_join(self, relative: PathLike = "", root: Optional[Union[str, Path]] = None) -> "PodPath":
        return PodPath(secure_join(self, relative, root=root))
