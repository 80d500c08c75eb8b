"""Learned mappings from user-confirmed matches."""

import logging
from collections.abc import Iterable, Iterator
from typing import Any, Protocol, runtime_checkable

from labelmatch.models.records import LearnedMapping

logger = logging.getLogger(__name__)


@runtime_checkable
class LearnedMappingStore(Protocol):
    """Key -> master cache keyed by the exact raw label.

    Only explicit user confirmation writes to a store; the matcher reads a
    snapshot of it and never writes back.
    """

    def get(self, raw_label: str) -> LearnedMapping | None: ...

    def learn(self, raw_label: str, master_id: Any) -> LearnedMapping: ...

    def forget(self, raw_label: str) -> bool: ...

    def reset(self) -> int: ...

    def __iter__(self) -> Iterator[LearnedMapping]: ...

    def __len__(self) -> int: ...


class InMemoryLearnedMappingStore:
    """Dict-backed learned-mapping store.

    Re-teaching the same pair is a no-op; teaching a label again with a
    different master overwrites it (last write wins).
    """

    def __init__(self, mappings: Iterable[LearnedMapping] | None = None):
        """Initialize store.

        Args:
            mappings: Initial mappings; later entries win for repeated labels
        """
        self._mappings: dict[str, LearnedMapping] = {}
        for mapping in mappings or []:
            self._mappings[mapping.raw_label] = mapping

    def get(self, raw_label: str) -> LearnedMapping | None:
        """Look up a mapping by exact raw label."""
        return self._mappings.get(raw_label)

    def learn(self, raw_label: str, master_id: Any) -> LearnedMapping:
        """Record that a raw label refers to a master.

        Args:
            raw_label: Label exactly as it appeared in the source document
            master_id: Identifier of the confirmed master record

        Returns:
            The stored mapping
        """
        existing = self._mappings.get(raw_label)
        if existing is not None and existing.master_id == master_id:
            return existing

        mapping = LearnedMapping(raw_label=raw_label, master_id=master_id)
        self._mappings[raw_label] = mapping
        if existing is None:
            logger.info(f"Learned mapping {raw_label!r} -> {master_id}")
        else:
            logger.info(
                f"Re-learned mapping {raw_label!r}: {existing.master_id} -> {master_id}"
            )
        return mapping

    def forget(self, raw_label: str) -> bool:
        """Delete one mapping. Returns True if it existed."""
        return self._mappings.pop(raw_label, None) is not None

    def reset(self) -> int:
        """Delete all mappings. Returns how many were removed."""
        count = len(self._mappings)
        self._mappings.clear()
        if count:
            logger.info(f"Reset {count} learned mappings")
        return count

    def snapshot(self) -> list[LearnedMapping]:
        """Copy of the current mappings for one matching run."""
        return list(self._mappings.values())

    def __iter__(self) -> Iterator[LearnedMapping]:
        return iter(list(self._mappings.values()))

    def __len__(self) -> int:
        return len(self._mappings)

    def __contains__(self, raw_label: object) -> bool:
        return raw_label in self._mappings
