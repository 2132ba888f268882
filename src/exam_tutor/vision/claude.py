"""ClaudeAnalysisClient — Anthropic Claude vision backend."""
import base64

from anthropic import AsyncAnthropic

from exam_tutor.constants import ANALYSIS_MAX_TOKENS, CLAUDE_ANALYSIS_MODEL, MSG_DEFAULT_QUERY
from exam_tutor.vision.client import AnalysisClient


class ClaudeAnalysisClient(AnalysisClient):

    def __init__(self, api_key: str, model: str = CLAUDE_ANALYSIS_MODEL) -> None:
        self._api_key = api_key
        self._model = model

    async def analyze(
        self,
        image_bytes: bytes,
        mime_type: str,
        instruction: str,
        user_query: str | None = None,
    ) -> str:
        client = AsyncAnthropic(api_key=self._api_key)
        image_data = base64.standard_b64encode(image_bytes).decode()
        message = await client.messages.create(
            model=self._model,
            max_tokens=ANALYSIS_MAX_TOKENS,
            system=instruction,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": mime_type,
                                "data": image_data,
                            },
                        },
                        {"type": "text", "text": user_query or MSG_DEFAULT_QUERY},
                    ],
                }
            ],
        )
        return "".join(
            block.text for block in message.content if getattr(block, "type", "text") == "text"
        ).strip()
