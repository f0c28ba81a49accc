# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-27
# Updated: 2026-01-28
# Description: EntityChatService.py
# -----------------------------------------------------------------------------
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence

import settings
from chat.OpenAIChat import Message, OpenAIChat, answer_text
from services.EntitySearchService import EntitySearchService, ScoredEntity
from utility.logging_utils import get_class_logger


def _usage_dict(usage: Any) -> Optional[Dict[str, Any]]:
    if usage is None:
        return None
    if isinstance(usage, dict):
        return usage
    dump = getattr(usage, "model_dump", None)
    return dump() if callable(dump) else None


@dataclass
class EntityChatService:
    """
    Chat Service:
        - retrieves relevant entities with hybrid search
        - builds an instruction + context prompt
        - calls OpenAIChat to generate the answer
        - returns answer + sources
    """
    search_service: EntitySearchService
    chat_client: OpenAIChat
    logger: logging.Logger | None = None

    system_prompt: str = (
        "You are an assistant for the NAVIGATE transport innovation knowledge base.\n"
        "Use ONLY the provided entities to answer.\n"
        "If the context is insufficient, say so and ask a precise follow-up.\n"
        "Cite entities as [entity_id] where possible.\n"
    )

    max_context_chars: int = settings.MAX_CONTEXT_CHARS
    default_temperature: float = 0.0
    default_max_tokens: int = 700

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)
        self.logger.info(
            "EntityChatService initialised (search_service=%s chat_client=%s)",
            type(self.search_service).__name__,
            type(self.chat_client).__name__,
        )

    def _retrieve(
            self,
            question: str,
            n_results: int,
            domain: Optional[str],
            entity_type: Optional[str],
            threshold: Optional[float],
    ) -> List[ScoredEntity]:
        hits = self.search_service.hybrid_search(
            question,
            top_k=n_results,
            threshold=threshold,
            domain=domain,
            entity_type=entity_type,
        )
        self.logger.info("chat: retrieved hits=%d", len(hits))
        return hits

    def _messages(self, question: str, hits: Sequence[ScoredEntity], history: Optional[List[Message]]) -> List[Message]:
        context = self._build_context_block(hits)
        self.logger.debug("chat: context_chars=%d", len(context))

        messages: List[Message] = [{"role": "system", "content": self.system_prompt}]
        # prior turns go before the new question; retrieved context is never replayed as assistant text
        if history:
            messages.extend(history)

        user_payload = (
            f"USER QUESTION:\n{question}\n\n"
            f"CONTEXT (retrieved entities):\n{context}\n\n"
            f"INSTRUCTIONS:\n"
            f"- Answer the user question.\n"
            f"- If you use an entity, cite it like [entity_id].\n"
            f"- If you cannot answer from context, say so.\n"
        )
        messages.append({"role": "user", "content": user_payload})
        return messages

    def ask(
            self,
            *,
            question: str,
            n_results: int = 5,
            domain: Optional[str] = None,
            entity_type: Optional[str] = None,
            threshold: Optional[float] = None,
            history: Optional[List[Message]] = None,
            temperature: Optional[float] = None,
            max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
            Returns:
            {
                "question": str,
                "answer": str,
                "sources": [ScoredEntity, ...],
                "model": str|None,
                "usage": dict|None,
            }
        """
        q = (question or "").strip()
        if not q:
            raise ValueError("question must not be empty")

        self.logger.info(
            "chat: question='%s' n_results=%d domain=%s history_turns=%d (start)",
            q[:120],
            n_results,
            domain,
            len(history or []),
        )

        hits = self._retrieve(q, n_results, domain, entity_type, threshold)
        messages = self._messages(q, hits, history)

        temp = self.default_temperature if temperature is None else temperature
        mtok = self.default_max_tokens if max_tokens is None else max_tokens
        resp = self.chat_client.chat(messages, temperature=temp, max_tokens=mtok)

        answer = answer_text(resp)
        self.logger.info("chat: answer_chars=%d (done)", len(answer))

        return {
            "question": q,
            "answer": answer,
            "sources": hits,
            "model": getattr(resp, "model", None),
            "usage": _usage_dict(getattr(resp, "usage", None)),
        }

    def ask_stream(
            self,
            *,
            question: str,
            n_results: int = 5,
            domain: Optional[str] = None,
            entity_type: Optional[str] = None,
            threshold: Optional[float] = None,
            history: Optional[List[Message]] = None,
            temperature: Optional[float] = None,
            max_tokens: Optional[int] = None,
    ) -> Iterator[str]:
        """Retrieval happens up front; the answer text is yielded as it arrives."""
        q = (question or "").strip()
        if not q:
            raise ValueError("question must not be empty")

        hits = self._retrieve(q, n_results, domain, entity_type, threshold)
        messages = self._messages(q, hits, history)

        temp = self.default_temperature if temperature is None else temperature
        mtok = self.default_max_tokens if max_tokens is None else max_tokens
        return self.chat_client.chat_stream(messages, temperature=temp, max_tokens=mtok)

    def _build_context_block(self, hits: Sequence[ScoredEntity]) -> str:
        """
        Turn hits into a prompt-friendly context block.
        """
        parts: List[str] = []
        total = 0

        for i, h in enumerate(hits, start=1):
            header = f"[{i}] {h.entity_id} ({h.entity_type}, {h.domain}) score={h.score:.4f}"
            chunk = f"{header}\n{h.name}\n{h.description}".strip() + "\n"

            if total + len(chunk) > self.max_context_chars:
                self.logger.warning(
                    "_build_context_block: truncating context at %d chars (limit=%d)",
                    total,
                    self.max_context_chars,
                )
                break

            parts.append(chunk)
            total += len(chunk)

        if not parts:
            return "(no retrieved context)"

        return "\n---\n".join(parts)
