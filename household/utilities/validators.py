"""
Input validation schemas using Pydantic for request bodies.
"""
import re
from datetime import date
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Frequency = Literal["weekly", "fortnightly", "monthly", "quarterly", "biannual", "yearly"]
AdjustmentRule = Literal["previous_working_day", "next_working_day", "closest_working_day", "no_adjustment"]


class BillInput(BaseModel):
    """Schema for bill create/update."""
    name: str = Field(..., min_length=1, max_length=120)
    amount: float = Field(..., ge=0)
    due_day: int = Field(..., ge=1, le=31)
    frequency: Frequency = "monthly"
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = True
    category: str = Field("", max_length=60)

    @field_validator('name', 'category')
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode='after')
    def check_window(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError('end_date must not be before start_date')
        return self


class BillPaymentInput(BaseModel):
    due_date: date
    amount: Optional[float] = Field(None, ge=0)


class StockItemInput(BaseModel):
    """Schema for toiletry/grocery stock items."""
    name: str = Field(..., min_length=1, max_length=120)
    kind: Literal["toiletry", "grocery"] = "toiletry"
    category: Literal["body", "hair", "oral", "household", "cleaning", "food", "other"] = "other"
    total_size: float = Field(..., gt=0)
    size_unit: Literal["ml", "g", "units"] = "units"
    cost_per_item: float = Field(0, ge=0)
    pack_size: int = Field(1, ge=1)
    usage_rate_per_day: float = Field(0, ge=0)
    current_remaining: float = Field(0, ge=0)
    status: Literal["active", "out_of_stock", "discontinued"] = "active"
    retailer: str = Field("", max_length=60)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator('name', 'retailer')
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v


class UsageLogInput(BaseModel):
    amount_used: float = Field(..., gt=0)
    logged_date: Optional[date] = None


class WeightLogInput(BaseModel):
    reading_type: Literal["full", "regular", "empty"]
    weight: float = Field(..., ge=0)
    recorded_at: Optional[date] = None


class ShippingProfileInput(BaseModel):
    dispatch_days_min: int = Field(0, ge=0, le=30)
    dispatch_days_max: int = Field(0, ge=0, le=30)
    delivery_days_min: int = Field(0, ge=0, le=30)
    delivery_days_max: int = Field(0, ge=0, le=30)
    dispatches_weekends: bool = False
    delivers_weekends: bool = False
    cutoff_time: Optional[str] = None

    @field_validator('cutoff_time')
    @classmethod
    def validate_cutoff(cls, v):
        """Accept HH:MM (24h) or empty."""
        if not v:
            return None
        if not re.fullmatch(r'([01]\d|2[0-3]):[0-5]\d', v.strip()):
            raise ValueError('cutoff_time must be HH:MM')
        return v.strip()

    @model_validator(mode='after')
    def check_ranges(self):
        if self.dispatch_days_max < self.dispatch_days_min or self.delivery_days_max < self.delivery_days_min:
            raise ValueError('max days must not be below min days')
        return self


class PurchaseInput(BaseModel):
    required_amount: float = Field(..., ge=0)
    pack_size: int = Field(..., ge=1)
    cost_per_item: float = Field(0, ge=0)


class NutritionInput(BaseModel):
    age: int
    sex: Literal["male", "female"]
    height_cm: float
    weight_kg: float
    activity_level: Literal["sedentary", "lightly_active", "moderately_active",
                            "very_active", "extremely_active"] = "sedentary"
    formula: Literal["mifflin_st_jeor", "harris_benedict", "katch_mcardle"] = "mifflin_st_jeor"
    body_fat_percent: Optional[float] = None
    goal: Literal["maintain", "cut", "bulk"] = "maintain"
    protein_per_kg: float = Field(2.2, gt=0, le=5)
    fat_per_kg: float = Field(0.8, gt=0, le=3)


class BlackoutInput(BaseModel):
    start_date: date
    end_date: date
    reason: str = Field("", max_length=120)

    @model_validator(mode='after')
    def check_order(self):
        if self.end_date < self.start_date:
            raise ValueError('end_date must not be before start_date')
        return self


class InvestmentAccountInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    ticker: Optional[str] = Field(None, max_length=20)
    expected_annual_return: float = Field(8.0, ge=-50, le=50)
    monthly_contribution: float = Field(0, ge=0)
    start_date: Optional[date] = None


class TransactionInput(BaseModel):
    transaction_date: date
    type: Literal["deposit", "withdrawal", "fee", "dividend"]
    amount: float = Field(..., gt=0)


class ValuationInput(BaseModel):
    valuation_date: date
    value: float = Field(..., ge=0)


class ProjectionInput(BaseModel):
    current_value: float = Field(..., ge=0)
    monthly_contribution: float = Field(0, ge=0)
    expected_annual_return: Optional[float] = Field(None, ge=-50, le=50)
    risk_preset: Optional[Literal["conservative", "medium", "aggressive"]] = None
    months: int = Field(120, ge=1, le=600)


class QuoteRequest(BaseModel):
    ticker: Optional[str] = Field(None, max_length=20)
    investment_account_id: Optional[str] = None


class RegisterShipmentInput(BaseModel):
    tracking_number: Optional[str] = Field(None, max_length=100)
    carrier_code: Optional[str] = Field(None, max_length=50)
    order_id: Optional[str] = None


class GmailOAuthRequest(BaseModel):
    action: Literal["get_auth_url", "exchange_token", "refresh_token"]
    code: Optional[str] = Field(None, max_length=2048)
    redirect_uri: Optional[str] = Field(None, max_length=2048)


class WebhookTrackingData(BaseModel):
    model_config = ConfigDict(extra='allow')

    tracking_number: Optional[str] = Field(None, max_length=100)
    delivery_status: Optional[str] = Field(None, max_length=50)
    courier_code: Optional[str] = Field(None, max_length=50)
    latest_event_time: Optional[str] = Field(None, max_length=100)
    id: Optional[str] = Field(None, max_length=100)
    origin_info: Optional[Any] = None
    destination_info: Optional[Any] = None


class WebhookBody(BaseModel):
    """TrackingMore webhook body: v4 envelope under 'data' or the flat legacy fields."""
    model_config = ConfigDict(extra='allow')

    data: Optional[WebhookTrackingData] = None
    tracking_number: Optional[str] = Field(None, max_length=100)
    status: Optional[str] = Field(None, max_length=50)
    carrier: Optional[str] = Field(None, max_length=50)
    event_time: Optional[str] = Field(None, max_length=100)
