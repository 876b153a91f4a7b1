"""ChadGPT - Pydantic models for messages, prompts and completions."""

from pydantic import BaseModel, Field
from typing import Optional, Literal


class IncomingMessage(BaseModel):
    model_config = {"frozen": True}

    sender_nick: str
    target_channel: str
    raw_text: str


class PromptTemplate(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    role: Literal["system", "user", "assistant"] = "user"
    content: str


class RenderedPrompt(BaseModel):
    role: str
    content: str


class CompletionRequest(BaseModel):
    model: str
    messages: list[RenderedPrompt] = Field(default_factory=list)
    temperature: Optional[float] = None
    max_tokens: int = 256
    top_p: Optional[float] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None


class CompletionResult(BaseModel):
    ok: bool
    content: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    status_code: Optional[int] = None

    @classmethod
    def success(cls, content: list[str], status_code: Optional[int] = 200) -> "CompletionResult":
        return cls(ok=True, content=list(content), status_code=status_code)

    @classmethod
    def failure(cls, error: str, status_code: Optional[int] = None) -> "CompletionResult":
        return cls(ok=False, error=(error or "").strip() or "Unknown error", status_code=status_code)
