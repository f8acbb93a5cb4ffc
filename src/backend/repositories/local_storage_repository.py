"""
Client-local persistent storage.

A JSON file of string keys to string values, used the way a browser's
localStorage is: the signed-in member is stored as one flat JSON object under
a fixed key and read back verbatim on the next start. The payload has no
version field and no migration scheme.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from models.documents import UserDocument

logger = logging.getLogger(__name__)

# Identity fields a persisted payload must carry to be trusted
REQUIRED_USER_FIELDS = ("id", "email", "role")


class LocalStorageRepository:
    """Key/value storage backed by a single JSON file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Local storage at {self.path} is unreadable, treating as empty: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Local storage at {self.path} is not an object, treating as empty")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write local storage at {self.path}: {e}")
            raise

    async def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    async def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    async def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


class SessionStorageRepository:
    """Persists the signed-in member under a single fixed key."""

    def __init__(self, storage: LocalStorageRepository, key: str = "currentUser"):
        self.storage = storage
        self.key = key

    async def save_user(self, user: UserDocument) -> None:
        """Serialize the member (gamification fields included) as one flat object."""
        await self.storage.set_item(self.key, user.model_dump_json())

    async def load_user(self) -> Optional[UserDocument]:
        """
        Rehydrate the persisted member.

        Payloads that cannot be parsed, lack an identity field or fail
        validation are removed and None is returned.
        """
        raw = await self.storage.get_item(self.key)
        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse saved user: {e}")
            await self.storage.remove_item(self.key)
            return None

        if not isinstance(data, dict) or not all(data.get(field) for field in REQUIRED_USER_FIELDS):
            logger.warning("Discarding saved user without identity fields")
            await self.storage.remove_item(self.key)
            return None

        try:
            return UserDocument.model_validate(data)
        except ValidationError as e:
            logger.error(f"Saved user failed validation: {e}")
            await self.storage.remove_item(self.key)
            return None

    async def clear_user(self) -> None:
        await self.storage.remove_item(self.key)
