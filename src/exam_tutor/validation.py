"""ValidationGate — classifies a candidate upload before it enters the pipeline."""
import base64
import mimetypes
from dataclasses import dataclass
from pathlib import Path

from exam_tutor.constants import (
    IMAGE_MIME_PREFIX,
    MAX_IMAGE_BYTES,
    MSG_NOT_AN_IMAGE,
    MSG_TOO_LARGE,
)
from exam_tutor.errors import ValidationError, ValidationReason


@dataclass(frozen=True)
class CandidateFile:
    content_type: str
    size: int
    data: bytes

    @classmethod
    def from_path(cls, path: Path) -> "CandidateFile":
        """Describe a file on disk. Contents are only read when the file can pass validation."""
        content_type = mimetypes.guess_type(path.name)[0] or ""
        size = path.stat().st_size
        match (content_type.startswith(IMAGE_MIME_PREFIX), size <= MAX_IMAGE_BYTES):
            case (True, True):
                data = path.read_bytes()
            case _:
                data = b""
        return cls(content_type=content_type, size=size, data=data)


@dataclass(frozen=True)
class AcceptedImage:
    mime_type: str
    data: bytes

    @property
    def data_url(self) -> str:
        """Self-describing payload stored as a history item's imageData."""
        encoded = base64.standard_b64encode(self.data).decode()
        return f"data:{self.mime_type};base64,{encoded}"

    @classmethod
    def from_data_url(cls, data_url: str) -> "AcceptedImage":
        """Inverse of data_url. Raises ValueError when the payload is not a base64 data URL."""
        header, _, payload = data_url.partition(",")
        match header.removeprefix("data:").split(";"):
            case [mime_type, "base64"] if header.startswith("data:") and mime_type:
                return cls(mime_type=mime_type, data=base64.b64decode(payload, validate=True))
            case _:
                raise ValueError(f"Not a base64 data URL: {data_url[:40]}")


def validate_image(candidate: CandidateFile) -> AcceptedImage:
    """Accept an image/* file of at most MAX_IMAGE_BYTES. Type is checked before size."""
    match (candidate.content_type.startswith(IMAGE_MIME_PREFIX), candidate.size):
        case (False, _):
            raise ValidationError(ValidationReason.NOT_AN_IMAGE, MSG_NOT_AN_IMAGE)
        case (True, size) if size > MAX_IMAGE_BYTES:
            raise ValidationError(ValidationReason.TOO_LARGE, MSG_TOO_LARGE)
        case _:
            return AcceptedImage(mime_type=candidate.content_type, data=candidate.data)
