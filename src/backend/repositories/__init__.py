"""Repository modules for member, ledger, challenge and client-local storage."""

from repositories.challenge_repository import ChallengeRepository
from repositories.ledger_repository import LedgerRepository
from repositories.local_storage_repository import LocalStorageRepository, SessionStorageRepository
from repositories.user_repository import UserRepository

__all__ = [
    "ChallengeRepository",
    "LedgerRepository",
    "LocalStorageRepository",
    "SessionStorageRepository",
    "UserRepository",
]
