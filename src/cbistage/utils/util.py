"""
Some utils for CBI Stage
"""

import re

from ..exceptions import DefinitionError

SNAKE_CASE = re.compile(r'[a-z0-9]+(?:_[a-z0-9]+)*')


def to_camel(name: str) -> str:
    """
    Manifest key of a model field: `mount_path` -> `mountPath`
    """
    if not SNAKE_CASE.fullmatch(name):
        raise DefinitionError(f"Field name '{name}' is not snake_case, cannot derive a manifest key.")
    head, *tail = name.split('_')
    return head + ''.join(word.capitalize() for word in tail)
