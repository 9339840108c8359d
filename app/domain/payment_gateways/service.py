"""
Payment gateway service

Credentials are checked offline: the dashboard only verifies that keys are present and
belong to the configured environment, it never charges or calls the provider.
"""

import logging
import time
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models_payment import PaymentGateway
from .schemas import (
    GatewayConfiguration,
    GatewayCreate,
    GatewayFeatures,
    GatewayFees,
    GatewayLimits,
    GatewayResponse,
    GatewayTestResult,
    GatewayUpdate,
)

logger = logging.getLogger(__name__)

# Providers whose keys announce their environment
KEY_PREFIXES = {
    "stripe": {
        "production": ("pk_live_", "sk_live_"),
        "sandbox": ("pk_test_", "sk_test_"),
    },
}


def mask_secret(value: Optional[str]) -> Optional[str]:
    """Keep only the last 4 characters visible"""
    if not value:
        return value
    return f"****{value[-4:]}" if len(value) > 4 else "****"


def fee_for(gateway: PaymentGateway, amount: float) -> float:
    return round((gateway.fixed_fee or 0) + amount * (gateway.percentage_fee or 0) / 100, 2)


def check_configuration(gateway: PaymentGateway) -> GatewayTestResult:
    started = time.perf_counter()
    warnings: list[str] = []
    errors: list[str] = []

    connection = bool(gateway.public_key and gateway.secret_key)
    if not connection:
        errors.append("Public and secret keys are required")

    authentication = connection
    prefixes = KEY_PREFIXES.get(gateway.provider)
    if connection and prefixes:
        public_prefix, secret_prefix = prefixes[gateway.environment or "sandbox"]
        if not gateway.public_key.startswith(public_prefix):
            authentication = False
            errors.append(f"Public key must start with {public_prefix} in {gateway.environment}")
        if not gateway.secret_key.startswith(secret_prefix):
            authentication = False
            errors.append(f"Secret key must start with {secret_prefix} in {gateway.environment}")

    if not gateway.webhook_secret:
        warnings.append("No webhook secret configured, payment events will not be verified")
    if gateway.is_live and gateway.environment == "sandbox":
        warnings.append("Gateway is marked live but uses the sandbox environment")
    if gateway.max_amount is not None and (gateway.min_amount or 0) >= gateway.max_amount:
        warnings.append("Minimum amount is not below the maximum amount")

    return GatewayTestResult(
        success=connection and authentication,
        connection=connection,
        authentication=authentication,
        warnings=warnings,
        errors=errors,
        response_time_ms=int((time.perf_counter() - started) * 1000),
        tested_at=datetime.utcnow(),
    )


def to_response(gateway: PaymentGateway) -> GatewayResponse:
    return GatewayResponse(
        id=gateway.id,
        name=gateway.name,
        provider=gateway.provider,
        is_enabled=gateway.is_enabled,
        is_live=gateway.is_live,
        configuration=GatewayConfiguration(
            public_key=gateway.public_key or "",
            secret_key=mask_secret(gateway.secret_key) or "",
            webhook_secret=mask_secret(gateway.webhook_secret),
            merchant_id=gateway.merchant_id,
            environment=gateway.environment or "sandbox",
        ),
        fees=GatewayFees(
            fixed_fee=gateway.fixed_fee or 0,
            percentage_fee=gateway.percentage_fee or 0,
            currency=gateway.fee_currency or "EUR",
        ),
        supported_currencies=gateway.supported_currencies or [],
        supported_countries=gateway.supported_countries or [],
        features=GatewayFeatures(**(gateway.features or {})),
        limits=GatewayLimits(
            min_amount=gateway.min_amount or 0,
            max_amount=gateway.max_amount,
            daily_limit=gateway.daily_limit,
            monthly_limit=gateway.monthly_limit,
        ),
        status=gateway.status,
        last_sync=gateway.last_sync,
        last_test_result=gateway.last_test_result,
        created_at=gateway.created_at,
    )


class PaymentGatewayService:
    def __init__(self, db: Session):
        self.db = db

    def list_gateways(self) -> list[PaymentGateway]:
        gateways = self.db.query(PaymentGateway).order_by(PaymentGateway.name.asc()).all()
        # Active first, then by name
        return sorted(gateways, key=lambda g: (g.status != "active", g.name.lower()))

    def get_gateway(self, gateway_id: int) -> PaymentGateway:
        gateway = self.db.query(PaymentGateway).filter(PaymentGateway.id == gateway_id).first()
        if not gateway:
            raise HTTPException(status_code=404, detail="Payment gateway not found")
        return gateway

    def _apply_configuration(self, gateway: PaymentGateway, config: GatewayConfiguration) -> None:
        gateway.public_key = config.public_key
        # Masked or blank secrets coming back from the dashboard keep the stored value
        if config.secret_key and not config.secret_key.startswith("****"):
            gateway.secret_key = config.secret_key
        if config.webhook_secret and not config.webhook_secret.startswith("****"):
            gateway.webhook_secret = config.webhook_secret
        gateway.merchant_id = config.merchant_id
        gateway.environment = config.environment

    def _apply_fees(self, gateway: PaymentGateway, fees: GatewayFees) -> None:
        gateway.fixed_fee = fees.fixed_fee
        gateway.percentage_fee = fees.percentage_fee
        gateway.fee_currency = fees.currency

    def _apply_limits(self, gateway: PaymentGateway, limits: GatewayLimits) -> None:
        gateway.min_amount = limits.min_amount
        gateway.max_amount = limits.max_amount
        gateway.daily_limit = limits.daily_limit
        gateway.monthly_limit = limits.monthly_limit

    def create_gateway(self, data: GatewayCreate) -> PaymentGateway:
        gateway = PaymentGateway(
            name=data.name,
            provider=data.provider,
            is_enabled=False,
            is_live=False,
            status="testing",
            supported_currencies=data.supported_currencies,
            supported_countries=data.supported_countries,
            features=data.features.model_dump(),
        )
        self._apply_configuration(gateway, data.configuration)
        self._apply_fees(gateway, data.fees)
        self._apply_limits(gateway, data.limits)

        self.db.add(gateway)
        self.db.commit()
        self.db.refresh(gateway)
        logger.info(f"✅ Payment gateway {gateway.name} ({gateway.provider}) created in testing mode")
        return gateway

    def update_gateway(self, gateway_id: int, data: GatewayUpdate) -> PaymentGateway:
        gateway = self.get_gateway(gateway_id)

        if data.name is not None:
            gateway.name = data.name
        if data.is_live is not None:
            gateway.is_live = data.is_live
        if data.configuration is not None:
            self._apply_configuration(gateway, data.configuration)
        if data.fees is not None:
            self._apply_fees(gateway, data.fees)
        if data.limits is not None:
            self._apply_limits(gateway, data.limits)
        if data.features is not None:
            gateway.features = data.features.model_dump()
        if data.supported_currencies is not None:
            gateway.supported_currencies = data.supported_currencies
        if data.supported_countries is not None:
            gateway.supported_countries = data.supported_countries

        self.db.commit()
        self.db.refresh(gateway)
        return gateway

    def delete_gateway(self, gateway_id: int) -> None:
        gateway = self.get_gateway(gateway_id)
        if gateway.is_enabled:
            raise HTTPException(status_code=400, detail="Disable the gateway before deleting it")
        self.db.delete(gateway)
        self.db.commit()

    def toggle_gateway(self, gateway_id: int, enabled: bool) -> PaymentGateway:
        gateway = self.get_gateway(gateway_id)
        gateway.is_enabled = enabled
        if not enabled:
            gateway.status = "inactive"
        else:
            # Only a passing connection test makes a gateway active
            last_test = gateway.last_test_result or {}
            gateway.status = "active" if last_test.get("success") else "testing"
        self.db.commit()
        self.db.refresh(gateway)
        logger.info(f"🔄 Payment gateway {gateway.name} {'enabled' if enabled else 'disabled'}")
        return gateway

    def test_gateway(self, gateway_id: int) -> GatewayTestResult:
        gateway = self.get_gateway(gateway_id)
        result = check_configuration(gateway)

        if result.success:
            if gateway.is_enabled:
                gateway.status = "active"
            gateway.last_sync = result.tested_at
        else:
            gateway.status = "error"
            logger.warning(f"⚠️ Payment gateway {gateway.name} failed test: {result.errors}")

        gateway.last_test_result = result.model_dump(mode="json")
        self.db.commit()
        return result

    def get_stats(self, amount: float = 100) -> dict:
        gateways = self.list_gateways()
        enabled = [g for g in gateways if g.is_enabled]
        return {
            "total_gateways": len(gateways),
            "enabled_gateways": len(enabled),
            "live_gateways": sum(1 for g in gateways if g.is_live),
            "by_status": {
                status: sum(1 for g in gateways if g.status == status)
                for status in ("active", "inactive", "error", "testing")
            },
            "average_percentage_fee": (
                round(sum(g.percentage_fee or 0 for g in gateways) / len(gateways), 2)
                if gateways
                else 0
            ),
            "fee_preview": {
                "amount": amount,
                "gateways": [
                    {"id": g.id, "name": g.name, "fee": fee_for(g, amount)} for g in gateways
                ],
            },
        }
