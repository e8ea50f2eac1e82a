"""
LCS alignment of two sequences into ordered change hunks.

Items are compared through a key function (the fingerprint), never by
identity. The output follows the classic ``diff`` shape: a list of hunks,
each a run of deletions (``-``, indexed into the old sequence) followed by
insertions (``+``, indexed into the new sequence). Items not mentioned in any
hunk are unchanged and keep their relative order.

Tie-breaking: when several alignments share the same LCS length, the walk
keeps earlier old items as match candidates and inserts the new item in
front of them. For ``old=[A, B]``, ``new=[B, A]`` the result keeps ``A``
(inserting ``B`` before it and deleting the old ``B``).
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..utils.tracing import trace_function

DELETE = "-"
INSERT = "+"
KEEP = "="


@dataclass(frozen=True)
class HunkItem:
    """One change: ``sign`` is ``-`` (old index) or ``+`` (new index)."""

    sign: str
    index: int
    item: Any


@dataclass
class Hunk:
    """A maximal run of changes between two unchanged runs."""

    items: list[HunkItem] = field(default_factory=list)

    @property
    def deletions(self) -> list[HunkItem]:
        return [i for i in self.items if i.sign == DELETE]

    @property
    def insertions(self) -> list[HunkItem]:
        return [i for i in self.items if i.sign == INSERT]

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def lcs_table(old_keys: Sequence[Any], new_keys: Sequence[Any]) -> list[list[int]]:
    """
    Suffix LCS lengths: ``table[i][j]`` is the LCS of ``old[i:]`` and ``new[j:]``.

    O(N*M) time and memory; callers bound the partition size.
    """
    n, m = len(old_keys), len(new_keys)
    table = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        row, below = table[i], table[i + 1]
        key = old_keys[i]
        for j in range(m - 1, -1, -1):
            if key == new_keys[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = below[j] if below[j] > row[j + 1] else row[j + 1]
    return table


def edit_script(
    old: Sequence[Any],
    new: Sequence[Any],
    key: Callable[[Any], Any] = lambda item: item,
) -> list[tuple[str, int | None, int | None]]:
    """
    Full alignment as ``(sign, old_index, new_index)`` steps.

    ``=`` steps carry both indexes, ``-`` only the old one, ``+`` only the
    new one. Steps are in left-to-right order.
    """
    old_keys = [key(item) for item in old]
    new_keys = [key(item) for item in new]
    table = lcs_table(old_keys, new_keys)

    steps = []
    i = j = 0
    n, m = len(old_keys), len(new_keys)
    while i < n and j < m:
        if old_keys[i] == new_keys[j]:
            steps.append((KEEP, i, j))
            i += 1
            j += 1
        elif table[i][j + 1] >= table[i + 1][j]:
            steps.append((INSERT, None, j))
            j += 1
        else:
            steps.append((DELETE, i, None))
            i += 1
    steps.extend((DELETE, k, None) for k in range(i, n))
    steps.extend((INSERT, None, k) for k in range(j, m))
    return steps


@trace_function("sequence.diff", component="matcher")
def diff(
    old: Sequence[Any],
    new: Sequence[Any],
    key: Callable[[Any], Any] = lambda item: item,
) -> list[Hunk]:
    """
    Align ``old`` with ``new`` and group the changes into hunks.

    Within a hunk deletions come first, then insertions, each in index order.

    Args:
        old: Current sequence
        new: Desired sequence
        key: Projection used for equality (e.g. a fingerprint)

    Returns:
        Hunks ordered by position; empty when the keyed sequences are equal
    """
    hunks: list[Hunk] = []
    deletions: list[HunkItem] = []
    insertions: list[HunkItem] = []

    def flush() -> None:
        if deletions or insertions:
            hunks.append(Hunk(items=deletions + insertions))
            deletions.clear()
            insertions.clear()

    for sign, old_index, new_index in edit_script(old, new, key):
        if sign == KEEP:
            flush()
        elif sign == DELETE:
            deletions.append(HunkItem(DELETE, old_index, old[old_index]))
        else:
            insertions.append(HunkItem(INSERT, new_index, new[new_index]))
    flush()

    return hunks
