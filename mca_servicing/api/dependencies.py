"""Dependency injection for FastAPI endpoints"""

import uuid
from fastapi import HTTPException, Request
from mca_servicing.infrastructure.clients.payments import PaymentWebhookClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_payment_webhook_client() -> PaymentWebhookClient:
    """Provide payment webhook client instance"""
    return PaymentWebhookClient()


def parse_uuid(value: str, label: str) -> uuid.UUID:
    """Parse a path/query identifier, answering 400 on malformed input"""
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {label} format")
