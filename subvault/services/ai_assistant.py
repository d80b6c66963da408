"""AI Assistant: provider configuration, spending analysis, subscription parsing and chat.

Invariants:
    - The provider API key is decrypted only to build a chat client, never returned
    - Every provider call requires a complete AIConfig (base URL, key, model)
    - Chat context = system prompt + the most recent `chat_history_limit` turns,
      oldest first, including the user message just stored
    - Reports and chat turns are committed only after the provider succeeded
      (the user's own chat message is committed before the call)

Design Decisions:
    - Chat clients come from create_chat_client (module attribute) so tests
      substitute a fake at this boundary
    - Parsed subscriptions are returned as plain dicts: the model decides the
      field set, the client pre-fills a form with it
"""

import json
import logging
from dataclasses import dataclass

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from subvault.config import get_settings
from subvault.core import ai_prompts
from subvault.core.domain_types import ChatRole, TAG_COLOR_PALETTE
from subvault.core.errors import (
    AIProviderError, BusinessRuleError, EncryptionError, ErrorContext,
)
from subvault.infrastructure import crypto
from subvault.infrastructure.chat_client import (
    ResilientChatClient, create_chat_client,
)
from subvault.models.ai_chat import AIChat
from subvault.models.ai_config import AIConfig
from subvault.models.ai_report import AIReport
from subvault.models.subscription import Subscription
from subvault.models.tag import Tag
from subvault.schemas.ai import (
    AIConfigIn, AIConfigOut, AnalysisResult, CategoryAnalysis,
    ParseSubscriptionRequest, ReportOut,
)
from subvault.services.records import list_owned

logger = logging.getLogger(__name__)

VISION_MAX_TOKENS = 1000


@dataclass
class ProviderSession:
    """A ready-to-use chat client bound to one vault's model."""
    client: ResilientChatClient
    model: str
    context: ErrorContext


@dataclass
class ChatTurn:
    provider: ProviderSession
    messages: list[dict]


# -- Configuration --------------------------------------------------------------

async def get_ai_config(db: AsyncSession, vault_id: str) -> AIConfig | None:
    result = await db.execute(
        select(AIConfig).where(AIConfig.vault_id == vault_id),
    )
    return result.scalar_one_or_none()


async def describe_ai_config(db: AsyncSession, vault_id: str) -> AIConfigOut:
    """Stored config with the API key masked (empty config when none saved)."""
    config = await get_ai_config(db, vault_id)
    if config is None:
        return AIConfigOut(vault_id=vault_id)

    masked = ""
    if config.api_key:
        try:
            masked = crypto.mask_secret(
                crypto.decrypt(config.api_key, get_settings().encryption_key),
            )
        except EncryptionError as e:
            logger.warning(
                f"Stored AI API key cannot be decrypted: {e.message}",
                extra={"vault_id": vault_id},
            )
    return AIConfigOut(
        id=config.id,
        vault_id=config.vault_id,
        base_url=config.base_url,
        api_key=masked,
        model=config.model,
    )


async def save_ai_config(
    db: AsyncSession, vault_id: str, payload: AIConfigIn,
) -> None:
    """Upsert provider settings. A masked or empty key keeps the stored key."""
    sealed_key = ""
    if payload.api_key and not crypto.is_masked(payload.api_key):
        sealed_key = crypto.encrypt(payload.api_key, get_settings().encryption_key)

    config = await get_ai_config(db, vault_id)
    if config is None:
        db.add(AIConfig(
            vault_id=vault_id,
            base_url=payload.base_url,
            api_key=sealed_key,
            model=payload.model,
        ))
    else:
        config.base_url = payload.base_url
        config.model = payload.model
        if sealed_key:
            config.api_key = sealed_key
    await db.commit()
    logger.info("AI config saved", extra={"vault_id": vault_id})


async def require_provider(db: AsyncSession, vault_id: str) -> ProviderSession:
    """Build a chat client from the vault's config or explain what is missing."""
    context = ErrorContext(vault_id=vault_id)
    config = await get_ai_config(db, vault_id)
    if config is None:
        raise BusinessRuleError(
            "Configure the AI service first", "AI_NOT_CONFIGURED", context,
        )
    if not config.is_complete:
        raise BusinessRuleError(
            "AI configuration is incomplete (base URL, API key and model are required)",
            "AI_CONFIG_INCOMPLETE", context,
        )
    try:
        api_key = crypto.decrypt(config.api_key, get_settings().encryption_key)
    except EncryptionError as e:
        e.context = context
        raise
    return ProviderSession(
        client=create_chat_client(config.base_url, api_key),
        model=config.model,
        context=context,
    )


# -- Analysis -------------------------------------------------------------------

async def analyze_subscriptions(db: AsyncSession, vault_id: str) -> AnalysisResult:
    """Ask the model for a spending breakdown and store it as a report."""
    provider = await require_provider(db, vault_id)
    subscriptions = await list_owned(db, Subscription, vault_id)
    if not subscriptions:
        raise BusinessRuleError(
            "There are no subscriptions to analyse", "NO_SUBSCRIPTIONS",
            provider.context,
        )

    prompt = ai_prompts.build_analysis_prompt(
        subscriptions, get_settings().ai_reply_language,
    )
    reply = await provider.client.complete(
        model=provider.model,
        messages=[{"role": "user", "content": prompt}],
        context=provider.context,
    )
    try:
        result = AnalysisResult.model_validate(
            ai_prompts.extract_json_object(reply),
        )
    except ValidationError as e:
        raise AIProviderError(
            f"Analysis reply has an unexpected shape: {e.error_count()} error(s)",
            "parse_error", context=provider.context,
        )

    db.add(AIReport(
        vault_id=vault_id,
        total_monthly=result.total_monthly,
        total_yearly=result.total_yearly,
        categories=json.dumps(
            [c.model_dump() for c in result.categories], ensure_ascii=False,
        ),
        insights=json.dumps(result.insights, ensure_ascii=False),
    ))
    await db.commit()
    logger.info("AI analysis stored", extra={"vault_id": vault_id})
    return result


def _decode_json_list(raw: str) -> list:
    try:
        value = json.loads(raw or "[]")
    except json.JSONDecodeError:
        return []
    return value if isinstance(value, list) else []


def report_to_schema(report: AIReport) -> ReportOut:
    categories = []
    for item in _decode_json_list(report.categories):
        try:
            categories.append(CategoryAnalysis.model_validate(item))
        except ValidationError:
            continue
    return ReportOut(
        id=report.id,
        total_monthly=report.total_monthly,
        total_yearly=report.total_yearly,
        categories=categories,
        insights=[str(i) for i in _decode_json_list(report.insights)],
        created_at=report.created_at,
    )


async def list_reports(db: AsyncSession, vault_id: str) -> list[ReportOut]:
    """Most recent reports first."""
    result = await db.execute(
        select(AIReport)
        .where(AIReport.vault_id == vault_id)
        .order_by(AIReport.created_at.desc())
        .limit(get_settings().report_history_limit),
    )
    return [report_to_schema(r) for r in result.scalars().all()]


# -- Subscription parsing -------------------------------------------------------

async def parse_subscription(
    db: AsyncSession, vault_id: str, payload: ParseSubscriptionRequest,
) -> dict:
    """Extract subscription fields from text or a screenshot.

    A category the vault has no tag for becomes a new tag; the reply then
    carries tagCreated/newTag so the client can refresh its tag list.
    """
    provider = await require_provider(db, vault_id)
    existing_tags = await list_owned(db, Tag, vault_id)
    language = get_settings().ai_reply_language
    prompt = ai_prompts.build_parse_prompt([t.name for t in existing_tags], language)

    if payload.image_data:
        messages = [{
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": payload.image_data}},
            ],
        }]
        reply = await provider.client.complete(
            model=provider.model, messages=messages,
            max_tokens=VISION_MAX_TOKENS, context=provider.context,
        )
    else:
        reply = await provider.client.complete(
            model=provider.model,
            messages=[{
                "role": "user",
                "content": ai_prompts.append_user_text(prompt, payload.text),
            }],
            context=provider.context,
        )

    result = ai_prompts.extract_json_object(reply)
    category = result.get("category")
    if isinstance(category, str) and category:
        if all(t.name != category for t in existing_tags):
            tag = Tag(
                vault_id=vault_id,
                name=category,
                color=TAG_COLOR_PALETTE[len(existing_tags) % len(TAG_COLOR_PALETTE)],
            )
            db.add(tag)
            await db.commit()
            logger.info(f"Created tag '{category}' from parsed subscription",
                        extra={"vault_id": vault_id})
            result["tagCreated"] = True
            result["newTag"] = {"id": tag.id, "name": tag.name, "color": tag.color}
    return result


# -- Chat -----------------------------------------------------------------------

async def list_chat_history(db: AsyncSession, vault_id: str) -> list[AIChat]:
    return await list_owned(db, AIChat, vault_id, AIChat.created_at.asc())


async def clear_chat_history(db: AsyncSession, vault_id: str) -> None:
    await db.execute(delete(AIChat).where(AIChat.vault_id == vault_id))
    await db.commit()


async def _recent_history(db: AsyncSession, vault_id: str) -> list[AIChat]:
    result = await db.execute(
        select(AIChat)
        .where(AIChat.vault_id == vault_id)
        .order_by(AIChat.created_at.desc())
        .limit(get_settings().chat_history_limit),
    )
    return list(reversed(result.scalars().all()))


async def prepare_chat(db: AsyncSession, vault_id: str, message: str) -> ChatTurn:
    """Store the user's message and assemble the provider message list."""
    provider = await require_provider(db, vault_id)

    db.add(AIChat(vault_id=vault_id, role=ChatRole.USER.value, content=message))
    await db.commit()

    subscriptions = await list_owned(db, Subscription, vault_id)
    messages = [{
        "role": "system",
        "content": ai_prompts.build_chat_system_prompt(
            subscriptions, get_settings().ai_reply_language,
        ),
    }]
    for turn in await _recent_history(db, vault_id):
        messages.append({"role": turn.role, "content": turn.content})
    return ChatTurn(provider=provider, messages=messages)


async def record_assistant_reply(
    db: AsyncSession, vault_id: str, content: str,
) -> AIChat:
    chat = AIChat(vault_id=vault_id, role=ChatRole.ASSISTANT.value, content=content)
    db.add(chat)
    await db.commit()
    await db.refresh(chat)
    return chat
