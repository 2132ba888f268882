"""OpenAIAnalysisClient — OpenAI GPT-4o vision backend."""
import base64

from openai import AsyncOpenAI

from exam_tutor.constants import MSG_DEFAULT_QUERY, OPENAI_ANALYSIS_MODEL
from exam_tutor.vision.client import AnalysisClient


class OpenAIAnalysisClient(AnalysisClient):

    def __init__(self, api_key: str, model: str = OPENAI_ANALYSIS_MODEL) -> None:
        self._api_key = api_key
        self._model = model

    async def analyze(
        self,
        image_bytes: bytes,
        mime_type: str,
        instruction: str,
        user_query: str | None = None,
    ) -> str:
        client = AsyncOpenAI(api_key=self._api_key)
        image_data = base64.standard_b64encode(image_bytes).decode()
        response = await client.chat.completions.create(
            model=self._model,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": instruction},
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{mime_type};base64,{image_data}"},
                        },
                        {"type": "text", "text": user_query or MSG_DEFAULT_QUERY},
                    ],
                },
            ],
        )
        content = response.choices[0].message.content
        return content.strip() if content else ""
