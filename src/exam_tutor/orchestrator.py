"""RequestOrchestrator — drives validate → analyze → parse → store and owns the visible state."""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

from exam_tutor.constants import (
    ANALYSIS_INSTRUCTION,
    MSG_ANALYSIS_FAILED,
    MSG_ANALYZE_IGNORED,
    MSG_HISTORY_UNREADABLE,
    MSG_MALFORMED_RESPONSE,
    MSG_TRANSPORT_FAILED,
)
from exam_tutor.errors import MalformedResponse, TransportError, ValidationError
from exam_tutor.history import HistoryCache
from exam_tutor.parser import AnalysisResult, parse_analysis
from exam_tutor.practice import PracticeSession
from exam_tutor.validation import AcceptedImage, CandidateFile, validate_image
from exam_tutor.vision.client import AnalysisClient

logger = logging.getLogger(__name__)


class Status(Enum):
    IDLE = "idle"
    IMAGE_READY = "image_ready"
    LOADING = "loading"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class OrchestratorState:
    status: Status = Status.IDLE
    image: AcceptedImage | None = None
    result: AnalysisResult | None = None
    error: str | None = None


StateListener = Callable[[OrchestratorState], None]


class RequestOrchestrator:
    """Single-request state machine. At most one analysis is in flight per instance."""

    def __init__(
        self,
        client: AnalysisClient | None,
        history: HistoryCache,
        instruction: str = ANALYSIS_INSTRUCTION,
    ) -> None:
        self._client = client
        self._history = history
        self._instruction = instruction
        self._state = OrchestratorState()
        self._in_flight = False
        self._listeners: list[StateListener] = []
        self._practice = PracticeSession()

    # ── observable state ──────────────────────────────────────────────────────

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def history(self) -> HistoryCache:
        return self._history

    @property
    def practice(self) -> PracticeSession:
        """Quiz progress for the displayed result. Reset whenever the result changes."""
        return self._practice

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _set_state(self, state: OrchestratorState) -> None:
        self._state = state
        list(map(lambda listener: listener(state), tuple(self._listeners)))

    # ── transitions ───────────────────────────────────────────────────────────

    def select_image(self, candidate: CandidateFile) -> bool:
        """Validate and hold a new image. A rejected file only sets the error message."""
        try:
            image = validate_image(candidate)
        except ValidationError as exc:
            logger.info("Rejected upload (%s): %s", exc.reason.value, exc.message)
            self._set_state(replace(self._state, error=exc.message))
            return False
        self._practice.reset()
        self._set_state(OrchestratorState(status=Status.IMAGE_READY, image=image))
        return True

    async def analyze(self, user_query: str | None = None) -> OrchestratorState:
        image = self._state.image
        match (self._in_flight, image, self._client):
            case (True, _, _):
                logger.debug(MSG_ANALYZE_IGNORED, "request already in flight")
                return self._state
            case (False, None, _):
                logger.debug(MSG_ANALYZE_IGNORED, "no image selected")
                return self._state
            case (False, _, None):
                logger.warning(MSG_ANALYZE_IGNORED, "no analysis backend configured")
                return self._state
            case _:
                pass

        self._in_flight = True
        self._practice.reset()
        self._set_state(OrchestratorState(status=Status.LOADING, image=image))
        try:
            result = await self._request(image, user_query)
        except (TransportError, MalformedResponse):
            self._set_state(
                OrchestratorState(status=Status.FAILED, image=image, error=MSG_ANALYSIS_FAILED)
            )
            return self._state
        finally:
            self._in_flight = False

        self._history.add(image.data_url, result)
        self._practice.reset()
        self._set_state(OrchestratorState(status=Status.RESOLVED, image=image, result=result))
        return self._state

    async def _request(self, image: AcceptedImage, user_query: str | None) -> AnalysisResult:
        try:
            raw = await self._client.analyze(
                image.data, image.mime_type, self._instruction, user_query
            )
        except Exception as exc:
            logger.error(MSG_TRANSPORT_FAILED, exc)
            raise TransportError(str(exc)) from exc
        try:
            return parse_analysis(raw)
        except MalformedResponse as exc:
            logger.error(MSG_MALFORMED_RESPONSE, exc, exc.raw_text)
            raise

    def load_history_item(self, item_id: str) -> bool:
        """Restore a stored result without contacting the analysis backend."""
        match self._history.get(item_id):
            case None:
                return False
            case item:
                pass
        try:
            image = AcceptedImage.from_data_url(item.image_data)
        except ValueError as exc:
            logger.error(MSG_HISTORY_UNREADABLE, item_id, exc)
            return False
        self._practice.reset()
        self._set_state(OrchestratorState(status=Status.RESOLVED, image=image, result=item.analysis))
        return True

    def reveal_practice_problems(self) -> bool:
        """Start the practice round for the displayed result."""
        match self._state.result:
            case None:
                return False
            case result:
                self._practice.reveal(result)
                return True

    def delete_history_item(self, item_id: str) -> None:
        self._history.delete(item_id)

    def clear(self) -> None:
        self._practice.reset()
        self._set_state(OrchestratorState())
