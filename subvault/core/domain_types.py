"""Domain Types: enums, identity types and constants shared across layers.

Invariants:
    - VaultId wraps the string UUID of a vault: every query is scoped by it
    - All valid billing units and chat roles encoded as str Enums
    - TAG_COLOR_PALETTE has 8 entries; auto-created tags cycle through it
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

VaultId = NewType("VaultId", str)


# ─── Enums ───────────────────────────────────────────────────────

class FrequencyUnit(str, Enum):
    """Billing period unit of a subscription."""
    DAYS = "DAYS"
    WEEKS = "WEEKS"
    MONTHS = "MONTHS"
    YEARS = "YEARS"
    PERMANENT = "PERMANENT"


class ChatRole(str, Enum):
    """Roles persisted in chat history (system prompt is never stored)."""
    USER = "user"
    ASSISTANT = "assistant"


# ─── Defaults ────────────────────────────────────────────────────

DEFAULT_CURRENCY = "CNY"
DEFAULT_CATEGORY = "Lifestyle"
DEFAULT_TAG_COLOR = "#3B82F6"
DEFAULT_DAYS_BEFORE_LIST = "1,3,7"
RENEWAL_DATE_FORMAT = "%Y-%m-%d"

TAG_COLOR_PALETTE = (
    "#3B82F6", "#10B981", "#F59E0B", "#EF4444",
    "#8B5CF6", "#EC4899", "#06B6D4", "#84CC16",
)
