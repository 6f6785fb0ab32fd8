"""
In-memory dataset store.

The store owns one immutable snapshot of the uploaded users. Loading builds a
new tuple and swaps it in under a lock, so a reader always sees either the old
dataset or the new one, never a mix.
"""
import logging
import threading
from typing import Iterable, List, Optional, Tuple, Union

from pydantic import TypeAdapter, ValidationError

from exceptions import DecodeError, MissingInputError
from schemas import User

logger = logging.getLogger(__name__)

_users_adapter = TypeAdapter(List[User])


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid payload")
    if loc:
        message = f"{loc}: {message}"
    if exc.error_count() > 1:
        message += f" (and {exc.error_count() - 1} more errors)"
    return message


def decode_users(raw: Union[bytes, str]) -> List[User]:
    """Decode a JSON array of user records, raising DecodeError on any mismatch."""
    try:
        return _users_adapter.validate_json(raw, strict=True)
    except ValidationError as e:
        raise DecodeError(_describe(e)) from e


class DatasetStore:
    def __init__(self, users: Iterable[User] = ()):
        self._lock = threading.Lock()
        self._users: Tuple[User, ...] = tuple(users)

    def load(self, users: Iterable[User]) -> int:
        """Replace the whole dataset. Returns the number of users loaded."""
        snapshot = tuple(users)
        with self._lock:
            previous = len(self._users)
            self._users = snapshot
        logger.info(
            f"Dataset replaced: {previous} -> {len(snapshot)} users",
            extra={"extra_fields": {"previous": previous, "loaded": len(snapshot)}}
        )
        return len(snapshot)

    def load_json(self, raw: Optional[Union[bytes, str]]) -> int:
        if raw is None or not raw.strip():
            raise MissingInputError("No dataset was provided")
        # decode fully before touching the current snapshot
        return self.load(decode_users(raw))

    def snapshot(self) -> Tuple[User, ...]:
        with self._lock:
            return self._users

    def clear(self) -> None:
        self.load(())

    def __len__(self) -> int:
        return len(self.snapshot())


dataset_store = DatasetStore()
