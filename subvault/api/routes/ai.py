"""AI Routes: provider config, spending analysis, subscription parsing and chat.

Invariants:
    - Every route here is vault-scoped through the bearer token
    - Streaming chat relays provider chunks as SSE `data:` lines, ends with
      `data: [DONE]`, and stores the assembled reply once the stream completes
    - A provider failure mid-stream becomes one `data: {"error": ...}` event;
      the partial reply is discarded

Design Decisions:
    - The streamed reply is stored through a fresh db_manager session: the
      request-scoped session is closed by the time the generator finishes
"""

import asyncio
import json
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from subvault.api.dependencies import current_vault_id
from subvault.core.domain_types import VaultId
from subvault.core.errors import AIProviderError, DatabaseError
from subvault.infrastructure.database import get_db, get_db_manager
from subvault.schemas.ai import (
    AIConfigIn, AIConfigOut, AnalysisResult, ChatMessageOut, ChatReply,
    ChatRequest, ParseSubscriptionRequest, ReportOut,
)
from subvault.schemas.base import MessageResponse
from subvault.services import ai_assistant
from subvault.services.ai_assistant import ChatTurn

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ai", tags=["ai"])

_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}
_SSE_DONE = "data: [DONE]\n\n"


def _sse_line(event: dict) -> str:
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


@router.get("/config", response_model=AIConfigOut)
async def get_ai_config(
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    return await ai_assistant.describe_ai_config(db, vault_id)


@router.post("/config", response_model=MessageResponse)
async def save_ai_config(
    body: AIConfigIn,
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    await ai_assistant.save_ai_config(db, vault_id, body)
    return MessageResponse(message="Saved")


@router.post("/analyze", response_model=AnalysisResult)
async def analyze(
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    return await ai_assistant.analyze_subscriptions(db, vault_id)


@router.get("/reports", response_model=list[ReportOut])
async def list_reports(
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    return await ai_assistant.list_reports(db, vault_id)


@router.post("/parse-subscription")
async def parse_subscription(
    body: ParseSubscriptionRequest,
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    """Model-extracted subscription fields (free-form JSON object)."""
    return await ai_assistant.parse_subscription(db, vault_id, body)


@router.get("/chat", response_model=list[ChatMessageOut])
async def get_chat_history(
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    return await ai_assistant.list_chat_history(db, vault_id)


@router.delete("/chat", response_model=MessageResponse)
async def clear_chat_history(
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    await ai_assistant.clear_chat_history(db, vault_id)
    return MessageResponse(message="Cleared")


@router.post("/chat")
async def chat(
    body: ChatRequest,
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    """Send a message; JSON reply, or an SSE stream when `stream` is true."""
    turn = await ai_assistant.prepare_chat(db, vault_id, body.message)

    if body.stream:
        return StreamingResponse(
            _relay_stream(turn, vault_id),
            media_type="text/event-stream",
            headers=_SSE_HEADERS,
        )

    reply = await turn.provider.client.complete(
        model=turn.provider.model,
        messages=turn.messages,
        context=turn.provider.context,
    )
    stored = await ai_assistant.record_assistant_reply(db, vault_id, reply)
    return ChatReply(reply=reply, chat=ChatMessageOut.model_validate(stored))


async def _relay_stream(turn: ChatTurn, vault_id: str):
    parts: list[str] = []
    provider = turn.provider
    try:
        async with provider.client.stream_chat(
            model=provider.model,
            messages=turn.messages,
            context=provider.context,
        ) as stream:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    parts.append(delta)
                    yield f"data: {chunk.model_dump_json(exclude_unset=True)}\n\n"
        yield _SSE_DONE
    except AIProviderError as e:
        logger.error(
            f"Chat stream failed: {e.message}",
            extra={"vault_id": vault_id, "error_code": e.code},
        )
        yield _sse_line(e.to_sse_event())
        return
    except asyncio.CancelledError:
        logger.info("Client disconnected from chat stream",
                    extra={"vault_id": vault_id})
        return

    if parts:
        await _store_streamed_reply(vault_id, "".join(parts))


async def _store_streamed_reply(vault_id: str, content: str) -> None:
    try:
        async with get_db_manager().session() as db:
            await ai_assistant.record_assistant_reply(db, vault_id, content)
    except DatabaseError as e:
        logger.error(
            f"Failed to store streamed chat reply: {e.message}",
            extra={"vault_id": vault_id, "error_code": e.code},
        )
