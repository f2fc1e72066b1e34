# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Wildcard patterns over paths.

A pattern is a path whose segments are either literal strings or one of two
wildcards:

    - '*': exactly one segment
    - '**': zero or more segments

Only a whole segment can be a wildcard: 'user*' is the literal label 'user*'.

Two algorithms share this grammar:

    - find_paths() walks a tree and enumerates every concrete path matching
      the pattern (used by TupleStore.find).
    - matches_pattern() decides whether a single concrete path matches
      (used to dispatch change notifications to subscribers).

They must agree: every path returned by find_paths(tree, p) satisfies
matches_pattern(path, p).

The tree must not be mutated while find_paths() is walking it.

Example:
    >>> tree = {'users': {'0': {'name': 'A'}, '1': {'name': 'B'}}}
    >>> find_paths(tree, 'users.*.name')
    ['users.0.name', 'users.1.name']
    >>> matches_pattern('users.0.name', 'users.*.name')
    True
    >>> matches_pattern('users.0.profile.name', 'users.*.name')
    False
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any, Iterator

from .paths import MISSING, PathLike, join_path, normalize_path

ANY_SEGMENT = '*'
ANY_DEPTH = '**'


def has_wildcard(pattern: PathLike) -> bool:
    """True if any segment of the pattern is '*' or '**'."""
    return any(seg in (ANY_SEGMENT, ANY_DEPTH) for seg in normalize_path(pattern))


def iter_children(node: Any) -> Iterator[tuple[str, Any]]:
    """Yield (segment, child) pairs of a tree node.

    Dict children come in insertion order, list children as '0', '1', ...
    Scalars have no children.
    """
    if isinstance(node, dict):
        for key, child in node.items():
            yield str(key), child
    elif isinstance(node, list):
        for index, child in enumerate(node):
            yield str(index), child


def child_of(node: Any, segment: str, default: Any = None) -> Any:
    """Return the child of node addressed by segment, or default."""
    if isinstance(node, dict):
        return node.get(segment, default)
    if isinstance(node, list):
        index = list_index(segment)
        if index is not None and index < len(node):
            return node[index]
    return default


def list_index(segment: str) -> int | None:
    """Return segment as a list index, or None if it is not a plain non-negative integer."""
    if segment.isascii() and segment.isdigit():
        return int(segment)
    return None


# ==================== Discovery ====================

def find_paths(tree: Any, pattern: PathLike) -> list[str]:
    """Enumerate the paths of tree that match pattern.

    Depth-first, in lock-step with the pattern segments:

        - literal segment: descend only into that child, if present
        - '*': descend into every child
        - '**': match here with zero segments consumed, then descend into
          every child keeping '**' at the same pattern position

    When the pattern is exhausted the current path is recorded and that branch
    is not explored further. A trailing '**' therefore records every node of
    the subtree, the subtree root included, whether or not it is a leaf.

    Args:
        tree: The root node to search.
        pattern: Dotted string or segment sequence.

    Returns:
        Dotted paths in discovery order, each listed once.
    """
    parts = normalize_path(pattern)
    results: list[str] = []
    seen: set[tuple[str, ...]] = set()

    def _record(current: list[str]) -> None:
        key = tuple(current)
        if key not in seen:
            seen.add(key)
            results.append('.'.join(current))

    def _search(node: Any, current: list[str], index: int) -> None:
        if index >= len(parts):
            _record(current)
            return

        part = parts[index]

        if part == ANY_SEGMENT:
            for label, child in iter_children(node):
                _search(child, current + [label], index + 1)
        elif part == ANY_DEPTH:
            _search(node, current, index + 1)
            for label, child in iter_children(node):
                _search(child, current + [label], index)
        else:
            child = child_of(node, part, MISSING)
            if child is not MISSING:
                _search(child, current + [part], index + 1)

    _search(tree, [], 0)
    return results


# ==================== Point match ====================

@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a dotted pattern into an anchored regex over dotted paths.

    The regex is meant to be matched against the path with a leading dot per
    segment ('.a.b' for 'a.b', '' for the root), which lets '**' match zero
    segments without special-casing the separators around it.
    """
    chunks = []
    for part in normalize_path(pattern):
        if part == ANY_DEPTH:
            chunks.append(r'(?:\.[^.]*)*')
        elif part == ANY_SEGMENT:
            chunks.append(r'\.[^.]*')
        else:
            chunks.append(r'\.' + re.escape(part))
    return re.compile(''.join(chunks) + r'\Z')


def matches_pattern(path: PathLike, pattern: PathLike) -> bool:
    """Check whether a concrete path matches a pattern.

    Args:
        path: The concrete path (dotted string or segments).
        pattern: The pattern (dotted string or segments).

    Returns:
        True if the path matches.

    Example:
        >>> matches_pattern('user.name', 'user.*')
        True
        >>> matches_pattern('user.profile.email', 'user.*')
        False
        >>> matches_pattern('user', 'user.**')
        True
    """
    path_str = join_path(path)
    pattern_str = join_path(pattern)

    # Deep wildcard suffix: the prefix itself or anything below it
    if pattern_str.endswith('.' + ANY_DEPTH):
        prefix = pattern_str[:-3]
        if not has_wildcard(prefix):
            return path_str == prefix or path_str.startswith(prefix + '.')

    target = ''.join('.' + seg for seg in normalize_path(path_str))
    return compile_pattern(pattern_str).match(target) is not None
