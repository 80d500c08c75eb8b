"""Learned-mapping persistence in PostgreSQL (or any SQLAlchemy backend)."""

import logging
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from labelmatch.config import CHANNELS, DEFAULT_CHANNEL
from labelmatch.models.mapping import LearnedMappingRow
from labelmatch.models.records import LearnedMapping
from labelmatch.services.learning import InMemoryLearnedMappingStore

logger = logging.getLogger(__name__)


class LearnedMappingRepository:
    """Stores learned mappings for one sales channel.

    Each channel (amazon, rakuten, ...) has its own namespace, so the same
    raw label may map to different masters on different channels. Writes
    are upserts on (channel, raw_label): last write wins.
    """

    def __init__(self, session: AsyncSession, channel: str = DEFAULT_CHANNEL):
        if channel not in CHANNELS:
            raise ValueError(f"Unknown channel: {channel}")
        self.session = session
        self.channel = channel

    async def load(self) -> InMemoryLearnedMappingStore:
        """Load every mapping of the channel into an in-memory snapshot."""
        result = await self.session.execute(
            select(LearnedMappingRow)
            .where(LearnedMappingRow.channel == self.channel)
            .order_by(LearnedMappingRow.id)
        )
        rows = result.scalars().all()
        logger.info(f"Loaded {len(rows)} learned mappings for {self.channel}")
        return InMemoryLearnedMappingStore(
            LearnedMapping(raw_label=row.raw_label, master_id=row.master_id) for row in rows
        )

    async def get(self, raw_label: str) -> LearnedMapping | None:
        """Look up one mapping by exact raw label."""
        row = await self._get_row(raw_label)
        if row is None:
            return None
        return LearnedMapping(raw_label=row.raw_label, master_id=row.master_id)

    async def learn(self, raw_label: str, master_id: Any) -> LearnedMapping:
        """Insert or update the mapping for a raw label.

        Args:
            raw_label: Label exactly as it appeared in the source document
            master_id: Identifier of the confirmed master record

        Returns:
            The stored mapping (master id as text)

        Raises:
            ValueError: If the label is blank or the master id is missing
        """
        if not isinstance(raw_label, str) or not raw_label.strip():
            raise ValueError("raw_label is required")
        if master_id is None or str(master_id) == "":
            raise ValueError("master_id is required")

        master_key = str(master_id)

        try:
            row = await self._get_row(raw_label)

            if row is None:
                row = LearnedMappingRow(
                    channel=self.channel,
                    raw_label=raw_label,
                    master_id=master_key,
                )
                self.session.add(row)
                logger.info(f"Learned {self.channel} mapping {raw_label!r} -> {master_key}")
            elif row.master_id != master_key:
                logger.info(
                    f"Re-learned {self.channel} mapping {raw_label!r}: "
                    f"{row.master_id} -> {master_key}"
                )
                row.master_id = master_key

            await self.session.flush()

        except Exception as e:
            logger.error(f"Failed to store {self.channel} mapping {raw_label!r}: {e}")
            raise

        return LearnedMapping(raw_label=raw_label, master_id=master_key)

    async def forget(self, raw_label: str) -> bool:
        """Delete one mapping. Returns True if it existed."""
        result = await self.session.execute(
            delete(LearnedMappingRow).where(
                LearnedMappingRow.channel == self.channel,
                LearnedMappingRow.raw_label == raw_label,
            )
        )
        await self.session.flush()
        return result.rowcount > 0

    async def reset(self) -> int:
        """Delete every mapping of the channel. Returns how many were removed."""
        result = await self.session.execute(
            delete(LearnedMappingRow).where(LearnedMappingRow.channel == self.channel)
        )
        await self.session.flush()
        logger.info(f"Reset {result.rowcount} learned mappings for {self.channel}")
        return result.rowcount

    async def count(self) -> int:
        """Number of mappings stored for the channel."""
        result = await self.session.execute(
            select(func.count())
            .select_from(LearnedMappingRow)
            .where(LearnedMappingRow.channel == self.channel)
        )
        return result.scalar_one()

    async def _get_row(self, raw_label: str) -> LearnedMappingRow | None:
        result = await self.session.execute(
            select(LearnedMappingRow).where(
                LearnedMappingRow.channel == self.channel,
                LearnedMappingRow.raw_label == raw_label,
            )
        )
        return result.scalar_one_or_none()
