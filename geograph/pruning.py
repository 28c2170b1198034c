"""Cascade deletion over the construction reference graph."""

from __future__ import annotations

import logging
from typing import List, Sequence, Set

from .logging_utils import apply_debug_logging
from .model import Construction, ObjectId, references

logger = logging.getLogger(__name__)


def prune_dependents(target_id: ObjectId, constructions: Sequence[Construction]) -> List[ObjectId]:
    """Return ``target_id`` followed by every object that transitively depends on it.

    Rescans the construction list until a full pass adds nothing, so the
    result never leaves a dangling reference behind.  Unknown ids simply
    yield ``[target_id]``.
    """

    removal: List[ObjectId] = [str(target_id)]
    marked: Set[ObjectId] = set(removal)
    changed = True
    while changed:
        changed = False
        for obj in constructions:
            if obj.id in marked:
                continue
            if any(ref in marked for ref in references(obj)):
                marked.add(obj.id)
                removal.append(obj.id)
                changed = True
    if len(removal) > 1:
        logger.info("Removing %s cascades to %d dependent object(s)", target_id, len(removal) - 1)
    return removal


def remove_with_dependents(target_id: ObjectId, constructions: Sequence[Construction]) -> List[Construction]:
    """Return ``constructions`` without ``target_id`` and its dependents."""

    doomed = set(prune_dependents(target_id, constructions))
    return [obj for obj in constructions if obj.id not in doomed]


apply_debug_logging(globals(), logger=logger)


__all__ = ["prune_dependents", "remove_with_dependents"]
