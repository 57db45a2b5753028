"""
LLM service for answer generation
"""
from openai import AsyncOpenAI
from typing import Any, Dict, List, Optional

from core.errors import MissingCredentials

DEFAULT_MODE = "default"

MODE_SHAPES = {
    "default": "Give a concise answer followed by 2-3 key takeaways.",
    "socratic": "Begin with 1-2 guiding questions, then give a brief sourced note.",
    "studyplan": "Give a study plan of 3-5 steps (read, reflect, practice), citing readings where possible.",
}

NO_ANSWER = "No answer returned."


def normalize_mode(mode: Any) -> str:
    """Unknown or missing modes fall back to the default framing."""
    if isinstance(mode, str) and mode.strip().lower() in MODE_SHAPES:
        return mode.strip().lower()
    return DEFAULT_MODE


class LLMService:
    """Handles answer generation using the OpenAI Responses API."""

    def __init__(self, client: Optional[AsyncOpenAI], model: str = "gpt-4o-mini"):
        self.client = client
        self.model = model

    async def generate_answer(self, question: str, course: str, mode: str, vector_store_id: Optional[str]) -> str:
        """Generate an answer, searching the vector store when one is configured."""
        mode = normalize_mode(mode)
        request: Dict[str, Any] = {
            "model": self.model,
            "input": [
                {"role": "system", "content": self._build_system_prompt(course, mode)},
                {"role": "user", "content": f"Course: {course}\nMode: {mode}\nQuestion: {question}"},
            ],
        }
        if vector_store_id:
            request["tools"] = self._retrieval_tools(vector_store_id)

        if self.client is None:
            raise MissingCredentials()
        response = await self.client.responses.create(**request)
        return (response.output_text or "").strip() or NO_ANSWER

    @staticmethod
    def _build_system_prompt(course: str, mode: str) -> str:
        return f"""You are the MIQ Study Assistant for the course "{course}".
Answer ONLY from the retrieved course readings when available.
Always be concise and include citations when possible (chapter/page).
Response shape ({mode} mode): {MODE_SHAPES[mode]}
If evidence is insufficient, say so and suggest where to look."""

    @staticmethod
    def _retrieval_tools(vector_store_id: str) -> List[Dict[str, Any]]:
        return [{"type": "file_search", "vector_store_ids": [vector_store_id]}]
