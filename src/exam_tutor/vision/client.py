"""AnalysisClient — abstract base for image analysis backends."""
from abc import ABC, abstractmethod


class AnalysisClient(ABC):
    @abstractmethod
    async def analyze(
        self,
        image_bytes: bytes,
        mime_type: str,
        instruction: str,
        user_query: str | None = None,
    ) -> str:
        """Send the image with a fixed instruction and return the raw model text. Raises on failure."""
        ...
