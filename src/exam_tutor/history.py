"""HistoryCache — bounded, most-recent-first store of past analyses."""
import json
import logging
import random
import string
import time
from dataclasses import dataclass
from typing import Any, Callable

from exam_tutor.constants import (
    HISTORY_ID_SUFFIX_LENGTH,
    HISTORY_MAX_ITEMS,
    HISTORY_STORAGE_KEY,
    MSG_HISTORY_CORRUPT,
    MSG_PERSIST_FAILED,
    MSG_QUOTA_GIVE_UP,
    MSG_QUOTA_RETRY,
)
from exam_tutor.errors import StorageError
from exam_tutor.parser import AnalysisResult
from exam_tutor.storage import KeyValueStorage
from exam_tutor.validation import AcceptedImage

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


@dataclass(frozen=True)
class HistoryItem:
    id: str
    timestamp: int
    image_data: str
    analysis: AnalysisResult

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "imageData": self.image_data,
            "analysis": self.analysis.to_dict(),
        }

    @classmethod
    def from_record(cls, record: Any) -> "HistoryItem":
        """Rebuild an item from its persisted form. Raises ValueError on any shape mismatch."""
        match record:
            case {
                "id": str() as item_id,
                "timestamp": int() as timestamp,
                "imageData": str() as image_data,
                "analysis": dict() as analysis,
            } if not isinstance(timestamp, bool):
                AcceptedImage.from_data_url(image_data)
                return cls(
                    id=item_id,
                    timestamp=timestamp,
                    image_data=image_data,
                    analysis=AnalysisResult.from_dict(analysis),
                )
            case _:
                raise ValueError(f"Not a history record: {str(record)[:80]}")


HistoryListener = Callable[[tuple[HistoryItem, ...]], None]


class HistoryCache:

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = HISTORY_STORAGE_KEY,
        max_items: int = HISTORY_MAX_ITEMS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._key = key
        self._max = max_items
        self._clock = clock
        self._items: tuple[HistoryItem, ...] = ()
        self._listeners: list[HistoryListener] = []
        self.load()

    # ── read side ─────────────────────────────────────────────────────────────

    @property
    def items(self) -> tuple[HistoryItem, ...]:
        return self._items

    def get(self, item_id: str) -> HistoryItem | None:
        return next(filter(lambda item: item.id == item_id, self._items), None)

    def subscribe(self, listener: HistoryListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    # ── mutations ─────────────────────────────────────────────────────────────

    def load(self) -> tuple[HistoryItem, ...]:
        """Read the persisted record. Corrupt records are discarded, never raised."""
        try:
            match self._storage.get(self._key):
                case None:
                    self._items = ()
                case text:
                    match json.loads(text):
                        case list() as records:
                            self._items = tuple(map(HistoryItem.from_record, records))
                        case _:
                            raise ValueError("History record is not a list")
        except (ValueError, RecursionError) as exc:
            logger.warning(MSG_HISTORY_CORRUPT, exc)
            self._storage.remove(self._key)
            self._items = ()
        except OSError as exc:
            logger.error(MSG_PERSIST_FAILED, exc)
            self._items = ()
        self._notify()
        return self._items

    def add(self, image_data: str, analysis: AnalysisResult) -> HistoryItem:
        now = int(self._clock() * 1000)
        item = HistoryItem(
            id=self._new_id(now),
            timestamp=now,
            image_data=image_data,
            analysis=analysis,
        )
        self._items = ((item,) + self._items)[: self._max]
        self._persist(self._items)
        self._notify()
        return item

    def delete(self, item_id: str) -> None:
        self._items = tuple(filter(lambda item: item.id != item_id, self._items))
        self._persist(self._items)
        self._notify()

    # ── internals ─────────────────────────────────────────────────────────────

    def _new_id(self, now: int) -> str:
        taken = set(map(lambda item: item.id, self._items))
        candidate = None
        while candidate is None or candidate in taken:
            suffix = "".join(random.choices(_ID_ALPHABET, k=HISTORY_ID_SUFFIX_LENGTH))
            candidate = f"{now}{suffix}"
        return candidate

    def _persist(self, items: tuple[HistoryItem, ...]) -> None:
        """Write items, dropping the oldest on quota failure until a prefix fits."""
        candidate = items
        while True:
            try:
                payload = json.dumps(list(map(HistoryItem.to_record, candidate)))
                self._storage.set(self._key, payload)
                return
            except StorageError as exc:
                match len(candidate):
                    case n if n > 1:
                        logger.warning(MSG_QUOTA_RETRY, n, n - 1)
                        candidate = candidate[:-1]
                    case _:
                        logger.error("%s: %s", MSG_QUOTA_GIVE_UP, exc)
                        return
            except OSError as exc:
                logger.error(MSG_PERSIST_FAILED, exc)
                return

    def _notify(self) -> None:
        list(map(lambda listener: listener(self._items), tuple(self._listeners)))
