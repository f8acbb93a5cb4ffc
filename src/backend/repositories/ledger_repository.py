"""
In-memory points ledger repository.

Append-only: transactions are added, never edited or removed.
"""

import logging
from typing import Iterable

from models.documents import PointsTransactionDocument

logger = logging.getLogger(__name__)


class LedgerRepository:
    """Repository for points transactions, partitioned by member."""

    def __init__(self) -> None:
        self._ledgers: dict[str, list[PointsTransactionDocument]] = {}

    async def get_points_history(
        self,
        user_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[PointsTransactionDocument]:
        """Get a member's transactions, newest first."""
        history = list(reversed(self._ledgers.get(user_id, [])))
        if limit is None:
            return history[offset:]
        return history[offset : offset + limit]

    async def get_ledger(self, user_id: str) -> list[PointsTransactionDocument]:
        """Get a member's transactions in the order they were recorded."""
        return list(self._ledgers.get(user_id, []))

    async def get_all_ledgers(self) -> dict[str, list[PointsTransactionDocument]]:
        return {user_id: list(ledger) for user_id, ledger in self._ledgers.items()}

    async def append(self, transactions: Iterable[PointsTransactionDocument]) -> int:
        """
        Record transactions not yet in the ledger.

        Transactions already recorded (same ID) are skipped, so a session can
        hand over its full ledger after each change.
        Returns the number of transactions added.
        """
        added = 0
        for transaction in transactions:
            ledger = self._ledgers.setdefault(transaction.user_id, [])
            if any(existing.id == transaction.id for existing in ledger):
                continue
            ledger.append(transaction)
            added += 1

        if added:
            logger.debug(f"Recorded {added} points transactions")
        return added
