"""Pydantic schemas for remote classifier payloads."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

ON_TOPIC = "on-topic"
OFF_TOPIC = "off-topic"


class ClassifierProvider(str, Enum):
    """Remote model backends that can answer relevance prompts."""

    GEMINI = "gemini"
    CLAUDE = "claude"


class GeminiPart(BaseModel):
    """A single content part; a part without text reads as empty."""

    model_config = ConfigDict(extra="ignore")

    text: str | None = None


class GeminiContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    parts: list[GeminiPart] = Field(min_length=1)


class GeminiCandidate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: GeminiContent


class GenerateContentResponse(BaseModel):
    """The subset of a generateContent response the classifier reads.

    Anything short of candidates[0].content.parts[0] fails validation.
    """

    model_config = ConfigDict(extra="ignore")

    candidates: list[GeminiCandidate] = Field(min_length=1)

    @property
    def answer_text(self) -> str:
        return self.candidates[0].content.parts[0].text or ""


class GenerateContentRequest(BaseModel):
    """Request body for a zero-temperature generateContent call."""

    contents: list[dict[str, Any]]
    generation_config: dict[str, Any] = Field(
        default_factory=lambda: {"temperature": 0},
        serialization_alias="generationConfig",
    )

    @classmethod
    def for_prompt(cls, prompt: str) -> GenerateContentRequest:
        return cls(contents=[{"parts": [{"text": prompt}]}])

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def decode_generate_content(data: Any) -> str | None:
    """Extract the answer text from a response payload, None on shape mismatch."""
    try:
        return GenerateContentResponse.model_validate(data).answer_text
    except ValidationError:
        return None


def parse_decision(answer: str) -> bool:
    """Decide on-topic only when the answer says so and does not also say off-topic.

    An answer carrying neither marker is a real off-topic decision.
    """
    text = answer.lower()
    return ON_TOPIC in text and OFF_TOPIC not in text
