# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-28
# Updated: 2026-01-28
# Description: chat.py
# -----------------------------------------------------------------------------
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from openai import OpenAIError

from api.dependencies import get_chat_service
from api.routers.search import to_hits
from api.schemas.chat import ChatRequest, ChatResponse
from services.EntityChatService import EntityChatService
from utility.errors import NavigateAIError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


def _ask_kwargs(req: ChatRequest, question: str) -> Dict[str, Any]:
    return {
        "question": question,
        "n_results": req.n_results,
        "domain": req.domain,
        "entity_type": req.entity_type,
        "threshold": req.threshold,
        "temperature": req.temperature,
        "max_tokens": req.max_tokens,
        "history": req.history,
    }


@router.post("", response_model=ChatResponse)
def post_chat(
        req: ChatRequest,
        svc: EntityChatService = Depends(get_chat_service),
) -> ChatResponse:
    question = (req.question or "").strip()
    if not question:
        raise HTTPException(status_code=400, detail="question must not be empty")

    logger.info("POST /chat (start) question_len=%d n_results=%d", len(question), req.n_results)

    try:
        out: Dict[str, Any] = svc.ask(**_ask_kwargs(req, question))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (NavigateAIError, OpenAIError, RuntimeError) as e:
        logger.exception("post_chat failed: %s", e)
        raise HTTPException(status_code=500, detail=f"chat failed: {e}")

    sources = to_hits(out.get("sources") or [])
    logger.info("POST /chat (done) answer_len=%d sources=%d", len(out.get("answer", "") or ""), len(sources))

    return ChatResponse(
        question=out["question"],
        answer=out["answer"],
        n_results=req.n_results,
        sources=sources,
        model=out.get("model"),
        usage=out.get("usage"),
    )


@router.post("/stream")
def post_chat_stream(
        req: ChatRequest,
        svc: EntityChatService = Depends(get_chat_service),
) -> StreamingResponse:
    question = (req.question or "").strip()
    if not question:
        raise HTTPException(status_code=400, detail="question must not be empty")

    logger.info("POST /chat/stream (start) question_len=%d", len(question))
    try:
        chunks = svc.ask_stream(**_ask_kwargs(req, question))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (NavigateAIError, OpenAIError) as e:
        logger.exception("post_chat_stream failed: %s", e)
        raise HTTPException(status_code=500, detail=f"chat failed: {e}")

    return StreamingResponse(chunks, media_type="text/plain; charset=utf-8")
