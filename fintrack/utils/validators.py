"""
Custom validators for Pydantic models and external input.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from .constants import GITHUB_PROVIDER_DOMAIN, MAX_AMOUNT, NOREPLY_EMAIL_TEMPLATE


def validate_amount(amount: Any) -> Decimal:
    """Coerce an amount to Decimal and require a positive magnitude."""
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise ValueError("Amount must be a number")
    
    if not value.is_finite():
        raise ValueError("Amount must be a number")
    
    if value <= 0:
        raise ValueError("Amount must be positive")
    
    if value > MAX_AMOUNT:
        raise ValueError("Amount too large")
    
    return value


def validate_phone_number(phone: str) -> str:
    """Validate phone number format."""
    # Remove all non-digit characters
    phone_digits = re.sub(r'\D', '', phone)
    
    # Check length (7-15 digits as per international standards)
    if len(phone_digits) < 7 or len(phone_digits) > 15:
        raise ValueError("Phone number must be between 7 and 15 digits")
    
    return phone_digits


def validate_required_text(value: Optional[str], field_name: str) -> str:
    """Strip a free-text value and reject it when nothing is left."""
    if value is None or not str(value).strip():
        raise ValueError(f"{field_name} is required")
    return str(value).strip()


def placeholder_email(login: str, provider: str = GITHUB_PROVIDER_DOMAIN) -> str:
    """Build the no-reply address used when an identity exposes no email."""
    login = validate_required_text(login, "login")
    return NOREPLY_EMAIL_TEMPLATE.format(login=login, provider=provider)
