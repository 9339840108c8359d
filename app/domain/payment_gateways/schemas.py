"""Payment gateway schemas"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

Provider = Literal[
    "stripe", "paypal", "redsys", "bizum", "apple_pay", "google_pay", "klarna", "afterpay"
]


class GatewayConfiguration(BaseModel):
    public_key: str = ""
    secret_key: str = ""
    webhook_secret: Optional[str] = None
    merchant_id: Optional[str] = None
    environment: Literal["sandbox", "production"] = "sandbox"


class GatewayFees(BaseModel):
    fixed_fee: float = Field(0, ge=0)
    percentage_fee: float = Field(0, ge=0, le=100)
    currency: str = "EUR"


class GatewayFeatures(BaseModel):
    recurring_payments: bool = False
    refunds: bool = False
    disputes: bool = False
    webhooks: bool = False
    three_d_secure: bool = False


class GatewayLimits(BaseModel):
    min_amount: float = Field(0, ge=0)
    max_amount: Optional[float] = Field(None, ge=0)
    daily_limit: Optional[float] = Field(None, ge=0)
    monthly_limit: Optional[float] = Field(None, ge=0)


class GatewayCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    provider: Provider
    configuration: GatewayConfiguration = GatewayConfiguration()
    fees: GatewayFees = GatewayFees()
    supported_currencies: list[str] = ["EUR"]
    supported_countries: list[str] = ["ES"]
    features: GatewayFeatures = GatewayFeatures()
    limits: GatewayLimits = GatewayLimits()


class GatewayUpdate(BaseModel):
    """Blank secret values keep the stored ones"""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    is_live: Optional[bool] = None
    configuration: Optional[GatewayConfiguration] = None
    fees: Optional[GatewayFees] = None
    supported_currencies: Optional[list[str]] = None
    supported_countries: Optional[list[str]] = None
    features: Optional[GatewayFeatures] = None
    limits: Optional[GatewayLimits] = None


class GatewayResponse(BaseModel):
    id: int
    name: str
    provider: str
    is_enabled: bool
    is_live: bool
    configuration: GatewayConfiguration
    fees: GatewayFees
    supported_currencies: list[str]
    supported_countries: list[str]
    features: GatewayFeatures
    limits: GatewayLimits
    status: str
    last_sync: Optional[datetime] = None
    last_test_result: Optional[dict] = None
    created_at: Optional[datetime] = None


class GatewayTestResult(BaseModel):
    success: bool
    connection: bool
    authentication: bool
    warnings: list[str]
    errors: list[str]
    response_time_ms: int
    tested_at: datetime
