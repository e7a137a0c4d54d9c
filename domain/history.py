from __future__ import annotations

from typing import List, Sequence

HISTORY_SIZE = 3


def merge_mru3(history: Sequence[str], value: str) -> List[str]:
    """
    Put `value` at the head of a most-recently-used history.

    The history keeps at most three unique values, newest first. When
    `value` is already the newest entry, the history is returned unchanged.
    """

    if history and history[0] == value:
        return list(history)

    merged = [value]
    merged.extend(item for item in history if item != value)
    return merged[:HISTORY_SIZE]
