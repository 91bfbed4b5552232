"""Core types and DTOs for the answer-engine gateway."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ChatMessage:
    """One role/content entry of a chat-completion request."""

    role: str = "user"  # system | user | assistant
    content: str = ""

    @classmethod
    def coerce(cls, message: ChatMessage | dict[str, Any]) -> ChatMessage:
        """Accept either a ChatMessage or a plain ``{"role", "content"}`` mapping."""
        if isinstance(message, ChatMessage):
            return message
        return cls(role=str(message.get("role", "user")), content=str(message.get("content", "")))

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


# ---------------------------------------------------------------------------
# Gateway request
# ---------------------------------------------------------------------------


@dataclass
class GatewayRequest:
    """A single chat-completion request to the answer engine."""

    messages: list[ChatMessage] = field(default_factory=list)
    temperature: float = 0.1
    model: str = ""  # empty → gateway default model

    def to_payload(self, default_model: str) -> dict[str, Any]:
        """Serialize to the provider's ``{model, messages, temperature}`` body."""
        return {
            "model": self.model or default_model,
            "messages": [m.to_dict() for m in self.messages],
            "temperature": self.temperature,
        }


# ---------------------------------------------------------------------------
# Gateway response
# ---------------------------------------------------------------------------


@dataclass
class GatewayResponse:
    """Text of the first completion choice plus call metadata."""

    text: str = ""
    model_version: str = ""  # Actual model reported by vendor
    cited_urls: list[str] = field(default_factory=list)

    # Performance
    latency_ms: int = 0

    # Tokens & cost
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    cost_usd: float = 0.0
