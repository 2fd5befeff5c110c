"""Normalization of both backends' output into canonical diff records.

Both backends end up as :class:`~difftreecheck.records.DiffRecord` objects
whose lines look exactly like ``git diff-tree --name-status`` output:
``"<status>\\t<path>"``. Git's output is taken as is. dulwich changes are
translated here, which means replicating two git behaviors:

* git reports a regular file turning into a symlink (or back) as a type
  change ``T`` rather than a modification ``M``.
* git quotes paths with non-ASCII bytes: the path is wrapped in double
  quotes and every byte of a multi-byte character is written as a
  backslash and three octal digits, e.g. ``gitweb/test/Märchen`` becomes
  ``"gitweb/test/M\\303\\244rchen"``. ASCII bytes inside a quoted path are
  left as they are.
"""

import logging
import re
from typing import Iterable, List, Optional, Union

from dulwich.diff_tree import CHANGE_ADD, CHANGE_DELETE, CHANGE_MODIFY, TreeChange

from .errors import TreeDiffError
from .library import LibraryDiff
from .records import DiffRecord
from .vcs import RawDiff

logger = logging.getLogger(__name__)

STATUS_ADDED = "A"
STATUS_DELETED = "D"
STATUS_MODIFIED = "M"
STATUS_TYPE_CHANGED = "T"

# Raw git tree entry modes
REGULAR_MODE = 0o100644
REGULAR_MODE_DEPRECATED = 0o100664
SYMLINK_MODE = 0o120000

_OCTAL_ESCAPE = re.compile(rb"\\([0-7]{3})")


def quote_path(path: Union[bytes, str]) -> str:
    """Quote ``path`` the way git prints non-ASCII paths."""
    raw = path if isinstance(path, bytes) else path.encode("utf-8", "surrogateescape")
    if raw.isascii():
        return raw.decode("ascii")

    quoted = "".join(chr(b) if b < 0x80 else f"\\{b:03o}" for b in raw)
    return f'"{quoted}"'


def unquote_path(quoted: str) -> bytes:
    """Recover the raw path bytes from a :func:`quote_path` result."""
    if len(quoted) < 2 or not (quoted.startswith('"') and quoted.endswith('"')):
        return quoted.encode("utf-8", "surrogateescape")
    inner = quoted[1:-1].encode("ascii")
    return _OCTAL_ESCAPE.sub(lambda m: bytes([int(m.group(1), 8)]), inner)


def display_path(quoted: str) -> str:
    """Human readable form of a quoted path, for reports."""
    return unquote_path(quoted).decode("utf-8", "replace")


def is_regular(mode: Optional[int]) -> bool:
    return mode in (REGULAR_MODE, REGULAR_MODE_DEPRECATED)


def is_symlink(mode: Optional[int]) -> bool:
    return mode is not None and mode & SYMLINK_MODE == SYMLINK_MODE


def is_type_change(old_mode: Optional[int], new_mode: Optional[int]) -> bool:
    """Whether git would report ``old_mode -> new_mode`` as ``T``."""
    return (is_regular(old_mode) and is_symlink(new_mode)) or (
        is_symlink(old_mode) and is_regular(new_mode)
    )


def change_status(change: TreeChange) -> str:
    """Map a dulwich change to its one-letter git status."""
    if change.type == CHANGE_ADD:
        return STATUS_ADDED
    if change.type == CHANGE_DELETE:
        return STATUS_DELETED
    if change.type == CHANGE_MODIFY:
        if is_type_change(change.old.mode, change.new.mode):
            return STATUS_TYPE_CHANGED
        return STATUS_MODIFIED
    raise ValueError(f"unsupported change type {change.type!r}")


def change_path(change: TreeChange) -> bytes:
    """Added entries are named by their new path, everything else by the old one."""
    if change.type == CHANGE_ADD:
        return change.new.path
    return change.old.path


def change_line(change: TreeChange) -> str:
    return f"{change_status(change)}\t{quote_path(change_path(change))}"


def normalize_reference(raw: RawDiff) -> DiffRecord:
    """git already prints canonical lines; only the pair is attached."""
    return DiffRecord(older=raw.pair.older, newer=raw.pair.newer, lines=list(raw.lines))


def normalize_library(result: LibraryDiff) -> DiffRecord:
    try:
        lines = [change_line(c) for c in result.changes]
    except ValueError as e:
        raise TreeDiffError(result.pair, str(e)) from e
    return DiffRecord(older=result.pair.older, newer=result.pair.newer, lines=lines)


def normalize_reference_all(raws: Iterable[RawDiff]) -> List[DiffRecord]:
    return [normalize_reference(r) for r in raws]


def normalize_library_all(results: Iterable[LibraryDiff]) -> List[DiffRecord]:
    records = [normalize_library(r) for r in results]
    logger.debug("Normalized library changes", extra={"records": len(records)})
    return records
