"""PracticeSession — quiz progress kept beside an analysis result, never written into it."""
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Callable

from exam_tutor.parser import AnalysisResult

FACT_CHECK_KEY = "factCheck"


@dataclass(frozen=True)
class FactCheckAnswer:
    question: str
    answer: bool | None
    explanation: str
    selected: bool | None = None
    revealed: bool = False

    @property
    def correct(self) -> bool | None:
        """None until the learner has picked an answer."""
        match (self.revealed, self.selected, self.answer):
            case (True, bool() as selected, bool() as answer):
                return selected == answer
            case _:
                return None

    @classmethod
    def from_entry(cls, entry: Any) -> "FactCheckAnswer":
        match entry:
            case Mapping():
                answer = entry.get("answer")
                return cls(
                    question=str(entry.get("question", "")),
                    answer=answer if isinstance(answer, bool) else None,
                    explanation=str(entry.get("explanation", "")),
                )
            case _:
                return cls(question=str(entry), answer=None, explanation="")


@dataclass(frozen=True)
class PracticeState:
    revealed: bool = False
    fact_checks: tuple[FactCheckAnswer, ...] = ()


PracticeListener = Callable[[PracticeState], None]


def _fact_check_entries(result: AnalysisResult) -> tuple[Any, ...]:
    match result.practice_problems:
        case Mapping() as section:
            match section.get(FACT_CHECK_KEY):
                case tuple() as entries:
                    return entries
                case _:
                    return ()
        case _:
            return ()


class PracticeSession:

    def __init__(self) -> None:
        self._state = PracticeState()
        self._listeners: list[PracticeListener] = []

    @property
    def state(self) -> PracticeState:
        return self._state

    def subscribe(self, listener: PracticeListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _set_state(self, state: PracticeState) -> None:
        self._state = state
        list(map(lambda listener: listener(state), tuple(self._listeners)))

    def reveal(self, result: AnalysisResult) -> PracticeState:
        """Show the practice problems and start a fresh fact-check round."""
        fact_checks = tuple(map(FactCheckAnswer.from_entry, _fact_check_entries(result)))
        self._set_state(PracticeState(revealed=True, fact_checks=fact_checks))
        return self._state

    def check(self, index: int, selected: bool) -> FactCheckAnswer | None:
        """Record an answer for one fact-check question. Unknown indexes are ignored."""
        match (self._state.revealed, 0 <= index < len(self._state.fact_checks)):
            case (True, True):
                pass
            case _:
                return None
        checked = replace(self._state.fact_checks[index], selected=selected, revealed=True)
        fact_checks = (
            self._state.fact_checks[:index] + (checked,) + self._state.fact_checks[index + 1:]
        )
        self._set_state(replace(self._state, fact_checks=fact_checks))
        return checked

    def reset(self) -> None:
        self._set_state(PracticeState())
