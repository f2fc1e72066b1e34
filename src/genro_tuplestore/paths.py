# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Path normalization.

A path addresses a location in the tree as an ordered list of string
segments. Callers may pass either a dotted string ('user.profile.name') or an
explicit sequence (['user', 'profile', 'name']); both are normalized here.
The empty path ([] or '') addresses the root.

Segments are opaque: '0' addresses index 0 of a list or key '0' of a dict.
There is no escaping, so a segment can never contain a dot when given as a
string path.
"""

from __future__ import annotations

from typing import Sequence, Union

PathLike = Union[str, Sequence[str], None]


class _Missing:
    """Sentinel type for 'no value at this path'."""

    __slots__ = ()

    def __repr__(self) -> str:
        return '<MISSING>'

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Missing:
        return self

    def __deepcopy__(self, memo: dict) -> _Missing:
        return self

    def __reduce__(self) -> str:
        return 'MISSING'


MISSING = _Missing()


def normalize_path(path: PathLike) -> list[str]:
    """Return the path as a fresh list of string segments.

    Args:
        path: Dotted string, sequence of segments, or None for the root.

    Returns:
        A new list; mutating it never affects the caller's sequence.

    Example:
        >>> normalize_path('user.profile.name')
        ['user', 'profile', 'name']
        >>> normalize_path(['users', 0])
        ['users', '0']
        >>> normalize_path('')
        []
    """
    if path is None:
        return []
    if isinstance(path, str):
        if path == '':
            return []
        return path.split('.')
    return [str(segment) for segment in path]


def join_path(path: PathLike) -> str:
    """Return the dotted string form of a path ('' for the root)."""
    if isinstance(path, str):
        return path
    return '.'.join(normalize_path(path))
