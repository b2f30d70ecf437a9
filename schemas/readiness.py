"""Green readiness schema - the score handed to the investment recommender."""

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

from schemas.source import Bureau


class ReadinessFactor(BaseModel):
    """One plain-language contributor to the readiness score."""
    label: str
    impact: Literal["positive", "negative", "neutral"]
    description: str


class GreenReadiness(BaseModel):
    """Tiered financial readiness derived from a single primary record."""
    model_config = ConfigDict(frozen=True)

    tier: str
    score: int = Field(ge=0, le=100)
    source: Bureau
    credit_score: int
    utilization: float = Field(ge=0.0)
    total_debt: float
    total_credit_limit: float
    tradeline_count: int
    derogatory_count: int = 0
    factors: List[ReadinessFactor] = Field(default_factory=list)
