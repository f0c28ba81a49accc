# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-22
# Updated: 2026-02-02
# Description: OpenAIChat
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence

from openai import OpenAI

from utility.logging_utils import get_class_logger

Message = Dict[str, str]  # {"role": "system"|"user"|"assistant", "content": "..."}


def answer_text(resp: Any) -> str:
    """Content of the first choice of a ChatCompletion."""
    try:
        return resp.choices[0].message.content or ""
    except (AttributeError, IndexError, TypeError) as e:
        raise RuntimeError(f"Unexpected chat response format: {e}") from e


def delta_text(event: Any) -> str:
    """Content of one streamed chunk; keep-alive and role-only chunks give ''."""
    choices = getattr(event, "choices", None) or []
    if not choices:
        return ""
    delta = getattr(choices[0], "delta", None)
    return getattr(delta, "content", None) or ""


@dataclass
class OpenAIChat:
    """
    Chat-completions client behind the retrieval-augmented /chat endpoints.

    Reads cfg.openai_chat_model, cfg.openai_api_key and (optionally)
    cfg.openai_base_url. `client` can be passed in to point at a test double.
    OpenAIError is left to the caller; the API layer maps it to a 500.
    """

    cfg: Any
    logger: Any = None
    client: Any = None
    timeout_s: float = 60.0

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

        self.model = getattr(self.cfg, "openai_chat_model", None)
        if not self.model:
            raise ValueError("Config missing openai_chat_model")

        if self.client is None:
            api_key = getattr(self.cfg, "openai_api_key", None)
            if not api_key:
                raise ValueError("Config is missing openai_api_key")
            base_url = getattr(self.cfg, "openai_base_url", None) or None
            self.client = OpenAI(api_key=api_key, base_url=base_url, timeout=self.timeout_s)

        self.logger.info("OpenAIChat initialised (model=%s)", self.model)

    def _request(self, messages: Sequence[Message], *, stream: bool, **options: Any) -> Any:
        if not messages:
            raise ValueError("messages must be non-empty.")

        params: Dict[str, Any] = {"model": self.model, "messages": list(messages), "stream": stream}
        params.update({k: v for k, v in options.items() if v is not None})

        self.logger.debug(
            "chat.completions request: model=%s stream=%s messages=%d temperature=%s max_tokens=%s",
            self.model,
            stream,
            len(params["messages"]),
            params.get("temperature"),
            params.get("max_tokens"),
        )
        return self.client.chat.completions.create(**params)

    def chat(
            self,
            messages: Sequence[Message],
            temperature: float = 0.0,
            max_tokens: int = 512,
            **options: Any,
    ) -> Any:
        """Full ChatCompletion; callers read choices / usage / model."""
        resp = self._request(messages, stream=False, temperature=temperature, max_tokens=max_tokens, **options)
        self.logger.debug("ChatCompletion usage=%r", getattr(resp, "usage", None))
        return resp

    def chat_stream(
            self,
            messages: Sequence[Message],
            temperature: float = 0.0,
            max_tokens: int = 512,
            **options: Any,
    ) -> Iterator[str]:
        """Answer text as it arrives."""
        stream = self._request(messages, stream=True, temperature=temperature, max_tokens=max_tokens, **options)
        for event in stream:
            text = delta_text(event)
            if text:
                yield text

    def simple_chat(self, user_text: str, system_text: Optional[str] = None, **kwargs: Any) -> dict:
        messages: List[Message] = []
        if system_text:
            messages.append({"role": "system", "content": system_text})
        messages.append({"role": "user", "content": user_text})

        resp = self.chat(messages, **kwargs)
        content = answer_text(resp)
        self.logger.info("Chat answer generated (model=%s, chars=%d)", getattr(resp, "model", None), len(content))

        return {
            "answer": content,
            "raw": resp,
            "usage": getattr(resp, "usage", None),
            "model": getattr(resp, "model", None),
        }
