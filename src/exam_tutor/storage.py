"""Narrow key-value persistence used by the history cache."""
import errno
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from exam_tutor.errors import StorageError

logger = logging.getLogger(__name__)

_QUOTA_ERRNOS = (errno.ENOSPC, errno.EDQUOT)


class KeyValueStorage(ABC):
    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key. Raises StorageError when capacity is exceeded."""
        ...

    @abstractmethod
    def remove(self, key: str) -> None: ...


def _check_quota(value: str, quota_bytes: int | None) -> None:
    size = len(value.encode())
    match quota_bytes:
        case int() as quota if size > quota:
            raise StorageError(f"{size} bytes exceeds quota of {quota} bytes")
        case _:
            pass


class MemoryStorage(KeyValueStorage):

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._quota = quota_bytes
        self._store: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        _check_quota(value, self._quota)
        self._store[key] = value

    def remove(self, key: str) -> None:
        self._store.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """One ``<key>.json`` file per record under a directory."""

    def __init__(self, directory: Path, quota_bytes: int | None = None) -> None:
        self._dir = directory
        self._quota = quota_bytes

    def _path(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        match path.exists():
            case True:
                return path.read_text(encoding="utf-8")
            case False:
                return None

    def set(self, key: str, value: str) -> None:
        _check_quota(value, self._quota)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp.write_text(value, encoding="utf-8")
            tmp.replace(path)
        except OSError as exc:
            match exc.errno:
                case code if code in _QUOTA_ERRNOS:
                    tmp.unlink(missing_ok=True)
                    raise StorageError(str(exc)) from exc
                case _:
                    raise

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
        logger.debug("Removed record %s", key)
