"""AI Schemas: provider config, analysis reports, subscription parsing and chat.

Invariants:
    - AIConfigOut.api_key is always masked (or empty)
    - ParseSubscriptionRequest needs text or imageData (at least one non-empty)
    - AnalysisResult tolerates missing fields in model output (zero/empty defaults)
"""

from datetime import datetime

from pydantic import Field, model_validator

from subvault.schemas.base import CamelModel


class AIConfigIn(CamelModel):
    base_url: str = Field("", max_length=500)
    api_key: str = ""
    model: str = Field("", max_length=200)


class AIConfigOut(CamelModel):
    id: str = ""
    vault_id: str
    base_url: str = ""
    api_key: str = ""
    model: str = ""


class CategoryAnalysis(CamelModel):
    name: str = ""
    amount: float = 0.0
    percentage: float = 0.0


class AnalysisResult(CamelModel):
    total_monthly: float = 0.0
    total_yearly: float = 0.0
    categories: list[CategoryAnalysis] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)


class ReportOut(AnalysisResult):
    id: str
    created_at: datetime


class ParseSubscriptionRequest(CamelModel):
    text: str = ""
    image_data: str = ""

    @model_validator(mode="after")
    def require_text_or_image(self):
        if not self.text and not self.image_data:
            raise ValueError("provide a text description or an image")
        return self


class ChatRequest(CamelModel):
    message: str = Field(min_length=1, max_length=20_000)
    stream: bool = False


class ChatMessageOut(CamelModel):
    id: str
    vault_id: str
    role: str
    content: str
    created_at: datetime


class ChatReply(CamelModel):
    reply: str
    chat: ChatMessageOut
