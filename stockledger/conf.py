"""
Stockledger configuration.

Usage in settings.py:
    STOCKLEDGER = {
        "COST_DECIMAL_PLACES": 6,
        "AMOUNT_DECIMAL_PLACES": 2,
        "ROUNDING": "ROUND_HALF_EVEN",
        "MOVEMENTS_ENABLED": True,
        "NEAR_EXPIRY_DAYS": 30,
        "MAX_PAGE_SIZE": 100,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class StockledgerSettings:
    """Stockledger configuration settings."""

    # Precision of moving-average unit costs
    COST_DECIMAL_PLACES: int = 6

    # Precision of money amounts (currency minor unit)
    AMOUNT_DECIMAL_PLACES: int = 2

    # Name of a decimal rounding mode
    ROUNDING: str = "ROUND_HALF_EVEN"

    # Master switch for posting movements (False = posting is skipped)
    MOVEMENTS_ENABLED: bool = True

    # Default window for near-expiry queries
    NEAR_EXPIRY_DAYS: int = 30

    # Upper bound for paginated query limits
    MAX_PAGE_SIZE: int = 100


def get_stockledger_settings() -> StockledgerSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STOCKLEDGER", {})
    return StockledgerSettings(**{
        k: v for k, v in user_settings.items()
        if k in StockledgerSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_stockledger_settings(), name)


stockledger_settings = _LazySettings()
