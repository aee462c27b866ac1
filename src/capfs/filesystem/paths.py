"""Path algebra over plain path strings.

Every function here is pure: no filesystem access, no state. Entries build
their resolved paths, child paths and virtual paths from these functions.

Example:
    >>> merge_overlapping("/projects/toolkit", "toolkit/src", "/")
    '/projects/toolkit/src'
    >>> resolve("/projects/toolkit", "../other")
    '/projects/other'
    >>> contains("/home/user", "/home/user/docs")
    True
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from ..validation import assert_type
from .data_models import PathParts


def cwd() -> str:
    """Return the current working directory."""
    return os.getcwd()


def normalize_separators(path: str) -> str:
    """
    Convert any mix of separators to the platform form and normalize the path.

    An empty string stays empty so callers can detect "no path supplied".

    Args:
        path: The path to normalize

    Returns:
        The normalized path
    """
    assert_type(path, str, allow_empty=True, name="path")

    if not path:
        return ""

    return os.path.normpath(path.replace("\\", "/"))


def to_locator(path: str) -> str:
    """
    Convert an absolute path to a file:// URL.

    Falls back to returning the input unchanged if it cannot be converted.
    """
    if not isinstance(path, str) or not os.path.isabs(path):
        return path
    try:
        return Path(path).as_uri()
    except ValueError:
        return path


def from_locator(locator: str) -> str:
    """
    Convert a file:// URL back to a filesystem path.

    Falls back to returning the input unchanged if it is not a file URL.
    """
    try:
        parsed = urlparse(locator)
    except (TypeError, ValueError):
        return locator

    if parsed.scheme != "file":
        return locator

    return url2pathname(unquote(parsed.path))


def _segments(path: str, sep: str) -> List[str]:
    if not path:
        return []
    return [part for part in os.path.normpath(path).split(sep) if part and part != "."]


def _join(first: str, second: str, sep: str) -> str:
    if not first or not second:
        return os.path.normpath(first or second) if (first or second) else ""
    # rstrip keeps "/" + "a" from becoming "//a", which normpath preserves
    return os.path.normpath(first.rstrip(sep) + sep + second.lstrip(sep))


def merge_overlapping(path_a: str, path_b: str, sep: str = os.sep) -> str:
    """
    Merge two paths on the segment they share.

    The last segment of ``path_a`` equal to the first segment of ``path_b``
    is where ``path_b`` is spliced in, so ``/projects/app`` merged with
    ``app/src`` gives ``/projects/app/src``. Without a shared segment the
    paths are simply joined.

    Args:
        path_a: Base path
        path_b: Fragment to extend it with
        sep: Separator to split and join on

    Returns:
        The merged path (``path_a`` itself when both have the same segments)
    """
    assert_type(path_a, str, allow_empty=True, name="path_a")
    assert_type(path_b, str, allow_empty=True, name="path_b")

    is_absolute = os.path.isabs(path_a)
    from_trail = _segments(path_a, sep)
    to_trail = _segments(path_b, sep)

    if from_trail == to_trail:
        return path_a

    overlap = -1
    if to_trail:
        for index in range(len(from_trail) - 1, -1, -1):
            if from_trail[index] == to_trail[0]:
                overlap = index
                break

    if overlap == -1:
        return _join(path_a, path_b, sep)

    result = sep.join(from_trail[:overlap] + to_trail)

    if is_absolute and not os.path.isabs(result):
        root = decompose(path_a).root or sep
        result = root + result

    return result


def resolve(from_path: str, to_path: str) -> str:
    """
    Resolve ``to_path`` against ``from_path``.

    Strategies, in order:
    1. Identical inputs resolve to themselves; an empty side yields the other.
    2. An absolute ``to_path`` stands alone and ``from_path`` is ignored.
    3. A ``to_path`` starting with ``..`` is resolved lexically, honouring
       the traversal.
    4. Anything else is merged on overlapping segments.

    Args:
        from_path: The base path
        to_path: The path to resolve against it

    Returns:
        The resolved path
    """
    assert_type(from_path, str, allow_empty=True, name="from_path")
    assert_type(to_path, str, allow_empty=True, name="to_path")

    source = normalize_separators(from_path.strip())
    target = normalize_separators(to_path.strip())

    if source == target:
        return source

    if not source:
        return target

    if not target:
        return source

    if os.path.isabs(target):
        return os.path.abspath(target)

    if target == os.pardir or target.startswith(os.pardir + os.sep):
        return os.path.abspath(os.path.join(source, target))

    return merge_overlapping(source, target)


def contains(container: str, candidate: str) -> bool:
    """
    Check whether ``candidate`` lies strictly inside ``container``.

    The container is bounded with a trailing separator first, so
    ``/home/user`` does not contain ``/home/username``.

    Example:
        >>> contains("/home/user", "/home/user/docs")
        True
        >>> contains("/home/user", "/home/other")
        False
    """
    assert_type(container, str, name="container")
    assert_type(candidate, str, name="candidate")

    bounded = container if container.endswith(os.sep) else container + os.sep

    return candidate.startswith(bounded)


def relative_by_overlap(from_path: str, to_path: str, sep: str = os.sep) -> Optional[str]:
    """
    Relative portion of ``to_path`` after the first segment equal to the
    last segment of ``from_path``.

    Example:
        >>> relative_by_overlap("/projects/toolkit", "/projects/toolkit/src", "/")
        'src'
        >>> relative_by_overlap("/home/user", "/home/user", "/")
        ''
        >>> relative_by_overlap("/projects/app", "/other/path", "/") is None
        True
    """
    assert_type(from_path, str, allow_empty=True, name="from_path")
    assert_type(to_path, str, allow_empty=True, name="to_path")

    if from_path == to_path:
        return ""

    last = from_path.split(sep)[-1]
    to_trail = to_path.split(sep)

    for index, segment in enumerate(to_trail):
        if segment == last:
            return sep.join(to_trail[index + 1:])

    return None


def common_root(from_path: str, to_path: str, sep: str = os.sep) -> Optional[str]:
    """
    Leading portion of ``from_path`` up to the last segment of ``to_path``
    equal to the last segment of ``from_path``.

    Example:
        >>> common_root("/projects/toolkit", "/projects/toolkit/src", "/")
        '/projects/toolkit'
        >>> common_root("/projects/app", "/other/path", "/") is None
        True
    """
    assert_type(from_path, str, name="from_path")
    assert_type(to_path, str, name="to_path")

    if from_path == to_path:
        return from_path

    from_trail = from_path.split(sep)
    to_trail = to_path.split(sep)
    last = from_trail[-1]

    for index in range(len(to_trail) - 1, -1, -1):
        if to_trail[index] == last:
            return sep.join(from_trail[:index + 1])

    return None


def relative_or_absolute(from_path: str, to_path: str) -> str:
    """
    Relative path from directory ``from_path`` to ``to_path``, or ``to_path``
    itself when reaching it would need ``..``.
    """
    assert_type(from_path, str, name="from_path")
    assert_type(to_path, str, name="to_path")

    try:
        relative = os.path.relpath(to_path, from_path)
    except ValueError:
        # Different drives on Windows
        return to_path

    return to_path if relative.startswith(os.pardir) else relative


def decompose(path: str) -> PathParts:
    """
    Split a path into root, directory, base, stem and extension.

    Trailing separators are ignored, so ``/a/b/`` decomposes like ``/a/b``.

    Args:
        path: The path to decompose

    Returns:
        PathParts for the path
    """
    assert_type(path, str, name="path")

    drive, rest = os.path.splitdrive(path)
    separators = (os.sep, os.altsep) if os.altsep else (os.sep,)
    root = drive + (rest[0] if rest and rest[0] in separators else "")

    trimmed = path
    while len(trimmed) > len(root) and trimmed[-1:] in separators:
        trimmed = trimmed[:-1]

    base = os.path.basename(trimmed)
    directory = os.path.dirname(trimmed) if base else trimmed
    stem, extension = os.path.splitext(base)

    return PathParts(
        root=root,
        directory=directory,
        base=base,
        stem=stem,
        extension=extension,
    )
