"""ResponseParser — fence-stripping strict JSON decode of model output."""
import json
from collections.abc import Mapping
from dataclasses import dataclass
from functools import reduce
from types import MappingProxyType
from typing import Any

from exam_tutor.constants import FENCE_MARKERS
from exam_tutor.errors import MalformedResponse

SINGLE_QUESTION_KEY = "singleQuestionAnalysis"
CONCEPT_HISTORY_KEY = "conceptHistoricalAnalysis"
PRACTICE_PROBLEMS_KEY = "practiceProblems"


def _freeze(value: Any) -> Any:
    match value:
        case dict():
            return MappingProxyType({k: _freeze(v) for k, v in value.items()})
        case list() | tuple():
            return tuple(map(_freeze, value))
        case _:
            return value


def _thaw(value: Any) -> Any:
    match value:
        case Mapping():
            return {k: _thaw(v) for k, v in value.items()}
        case tuple():
            return list(map(_thaw, value))
        case _:
            return value


@dataclass(frozen=True, eq=False)
class AnalysisResult:
    """Read-only view over a decoded analysis tree. Section contents are opaque."""

    payload: Mapping[str, Any]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisResult":
        return cls(payload=_freeze(data))

    def to_dict(self) -> dict[str, Any]:
        return _thaw(self.payload)

    @property
    def single_question_analysis(self) -> Mapping[str, Any] | None:
        return self.payload.get(SINGLE_QUESTION_KEY)

    @property
    def concept_historical_analysis(self) -> Mapping[str, Any] | None:
        return self.payload.get(CONCEPT_HISTORY_KEY)

    @property
    def practice_problems(self) -> Mapping[str, Any] | None:
        return self.payload.get(PRACTICE_PROBLEMS_KEY)

    def __eq__(self, other: object) -> bool:
        match other:
            case AnalysisResult():
                return self.to_dict() == other.to_dict()
            case _:
                return NotImplemented


def strip_fences(raw: str) -> str:
    return reduce(lambda text, marker: text.replace(marker, ""), FENCE_MARKERS, raw).strip()


def _reject_constant(name: str) -> None:
    raise ValueError(f"Non-standard JSON constant {name}")


def parse_analysis(raw: str) -> AnalysisResult:
    """Decode raw model text into an AnalysisResult. Raises MalformedResponse, never repairs."""
    cleaned = strip_fences(raw)
    try:
        data = json.loads(cleaned, parse_constant=_reject_constant)
        match data:
            case dict():
                return AnalysisResult.from_dict(data)
            case _:
                pass
    except (ValueError, RecursionError) as exc:
        raise MalformedResponse(f"Invalid JSON: {exc}", raw) from exc
    raise MalformedResponse(f"Expected a JSON object, got {type(data).__name__}", raw)
