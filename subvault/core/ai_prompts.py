"""AI Prompts: prompt builders and reply parsing for the OpenAI-compatible provider.

Invariants:
    - Pure string building: no provider calls, no DB access
    - Subscription lines always read "name (cost currency / amount unit)"
    - extract_json_object accepts bare JSON or a single markdown-fenced block
      and only returns dicts; anything else raises AIProviderError(parse_error)
"""

import json

from subvault.core.errors import AIProviderError


def format_cost(cost: float) -> str:
    """Shortest natural rendering: 10.0 -> '10', 9.99 -> '9.99'."""
    if float(cost).is_integer():
        return str(int(cost))
    return repr(float(cost))


def format_subscription_line(sub) -> str:
    return (
        f"{sub.name} ({format_cost(sub.cost)} {sub.currency} / "
        f"{sub.frequency_amount} {sub.frequency_unit})"
    )


def format_subscription_list(subscriptions) -> str:
    return "\n".join(format_subscription_line(s) for s in subscriptions)


def build_chat_system_prompt(subscriptions, language: str) -> str:
    """Advisor persona plus the vault's current subscriptions as context."""
    prompt = (
        "You are a professional personal finance advisor who helps the user "
        "manage and optimise their subscription spending. "
        f"Reply in {language}, stay friendly and professional. "
        "Markdown formatting is supported."
    )
    subscriptions = list(subscriptions)
    if subscriptions:
        prompt += (
            "\n\nThe user's current subscriptions:\n"
            + format_subscription_list(subscriptions)
        )
    return prompt


def build_analysis_prompt(subscriptions, language: str) -> str:
    return f"""Analyse the following subscription list. Write all text in {language} and reply strictly as JSON.

1. Estimate the total monthly spend (spread yearly subscriptions over 12 months).
2. Estimate the total yearly spend.
3. Group the subscriptions into logical categories (for example entertainment, tools, software services, utilities) and give each category's monthly spend and its percentage of the total budget.
4. Based on this specific combination of subscriptions, give 3 short, strategic money-saving tips or financial insights.

Subscriptions:
{format_subscription_list(subscriptions)}

Reply with exactly this JSON shape and no other text:
{{
  "totalMonthly": number,
  "totalYearly": number,
  "categories": [
    {{"name": "category name", "amount": monthly amount, "percentage": percentage}}
  ],
  "insights": ["tip 1", "tip 2", "tip 3"]
}}"""


def build_parse_prompt(tag_names: list[str], language: str) -> str:
    """Extraction prompt for a subscription described in text or a screenshot."""
    tags_context = ""
    if tag_names:
        tags_context = "\n\nThe user's existing category tags: " + ", ".join(tag_names)

    return f"""Extract the subscription service details from the content below. Write text values in {language} and reply strictly as JSON.

Fields to extract:
1. name: service name
2. cost: price (number)
3. currency: currency code (CNY/USD/EUR/HKD, default CNY)
4. frequencyAmount: billing period count (default 1)
5. frequencyUnit: billing period unit (DAYS/WEEKS/MONTHS/YEARS/PERMANENT, default MONTHS)
6. website: website address (if any)
7. category: category tag (recommend one that fits the service type, such as entertainment, tools, software, learning, lifestyle, work, cloud, music, video, games, storage, development){tags_context}

Reply with exactly this JSON shape and no other text:
{{
  "name": "service name",
  "cost": number,
  "currency": "currency code",
  "frequencyAmount": number,
  "frequencyUnit": "period unit",
  "website": "website or empty string",
  "category": "category tag"
}}

If some details cannot be identified, use sensible defaults."""


def append_user_text(prompt: str, text: str) -> str:
    return f"{prompt}\n\nUser input:\n{text}"


def strip_code_fence(content: str) -> str:
    content = content.strip()
    if content.startswith("```json"):
        content = content.removeprefix("```json")
    elif content.startswith("```"):
        content = content.removeprefix("```")
    else:
        return content
    return content.removesuffix("```").strip()


def extract_json_object(content: str) -> dict:
    """Parse a model reply that should contain a single JSON object."""
    body = strip_code_fence(content)
    try:
        result = json.loads(body)
    except json.JSONDecodeError as e:
        raise AIProviderError(
            f"Could not parse model reply as JSON: {e}", "parse_error",
        )
    if not isinstance(result, dict):
        raise AIProviderError(
            "Model reply is not a JSON object", "parse_error",
        )
    return result
