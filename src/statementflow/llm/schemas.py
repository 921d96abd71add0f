"""Pydantic schemas for coercing model responses."""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RawBalanceData(BaseModel):
    """Schema for the balance_data block."""
    model_config = ConfigDict(extra="ignore")

    opening_balance: Optional[Any] = None
    closing_balance: Optional[Any] = None
    available_balance: Optional[Any] = None
    current_balance: Optional[Any] = None
    balance_confidence: int = Field(default=0, description="Model confidence, 0-100")
    balance_extraction_notes: str = "No balance information extracted"

    @field_validator("balance_confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, value: Any) -> int:
        try:
            confidence = int(round(float(value)))
        except (TypeError, ValueError):
            return 0
        return max(0, min(100, confidence))

    @field_validator("balance_extraction_notes", mode="before")
    @classmethod
    def coerce_notes(cls, value: Any) -> str:
        if value is None or value == "":
            return "No balance information extracted"
        return str(value)


class ExtractionResponse(BaseModel):
    """Schema for the top-level transaction_extraction response."""
    model_config = ConfigDict(extra="ignore")

    transactions: List[Dict[str, Any]] = Field(default_factory=list)
    balance_data: Optional[RawBalanceData] = None
    has_incomplete_transactions: bool = False

    @field_validator("transactions", mode="before")
    @classmethod
    def coerce_transactions(cls, value: Any) -> List[Dict[str, Any]]:
        if isinstance(value, dict):
            value = [value]
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    @field_validator("balance_data", mode="before")
    @classmethod
    def coerce_balance_data(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @field_validator("has_incomplete_transactions", mode="before")
    @classmethod
    def coerce_flag(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)
