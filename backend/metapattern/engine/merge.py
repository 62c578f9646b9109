"""First-writer-wins merge of partial metadata records.

Usage:
    result = await cascade([
        Stage("service", fetch_from_service),
        Stage("pixels", analyze),
    ])
    result.record   # merged partial record
    result.sources  # field -> stage that wrote it

Each stage receives the record accumulated so far and returns the fields it
could determine. Only fields still absent (or None) are taken from it, so no
later stage can overwrite an earlier one.
"""

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Union

logger = logging.getLogger(__name__)

PartialRecord = dict[str, Any]
StageFn = Callable[[PartialRecord], Union[PartialRecord, None, Awaitable[PartialRecord | None]]]


@dataclass
class Stage:
    name: str
    fn: StageFn


@dataclass
class MergeResult:
    record: PartialRecord = field(default_factory=dict)
    sources: dict[str, str] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    completed: list[str] = field(default_factory=list)


def fill_missing(base: PartialRecord, update: PartialRecord | None) -> PartialRecord:
    """Return ``base`` plus the fields of ``update`` that ``base`` lacks."""
    merged = dict(base)
    for key, value in (update or {}).items():
        if value is None:
            continue
        if merged.get(key) is None:
            merged[key] = value
    return merged


def _record_sources(result: MergeResult, stage_name: str) -> None:
    for key, value in result.record.items():
        if value is not None and key not in result.sources:
            result.sources[key] = stage_name


async def cascade(
    stages: Iterable[Stage],
    initial: PartialRecord | None = None,
) -> MergeResult:
    """Fold ``stages`` left-to-right with :func:`fill_missing`.

    A stage that raises is recorded in ``errors`` and contributes nothing.
    """
    result = MergeResult(record=dict(initial or {}))
    _record_sources(result, "initial")

    for stage in stages:
        t0 = time.perf_counter()
        try:
            produced = stage.fn(dict(result.record))
            if inspect.isawaitable(produced):
                produced = await produced
        except Exception as e:
            result.errors[stage.name] = str(e) or type(e).__name__
            logger.warning("  stage %s FAILED: %s", stage.name, e)
            continue

        result.record = fill_missing(result.record, produced)
        _record_sources(result, stage.name)

        result.completed.append(stage.name)
        elapsed = (time.perf_counter() - t0) * 1000
        logger.debug(
            "  stage %s filled %d field(s) in %.1fms",
            stage.name,
            sum(1 for s in result.sources.values() if s == stage.name),
            elapsed,
        )

    return result
