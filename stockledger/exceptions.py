"""
Exceptions for Stockledger.

All errors are StockError subclasses with a structured code for programmatic
handling. The subclass tells the caller which kind of outcome it is:

- StockNotFound: batch, position, movement type or transaction is absent
- InsufficientStock: OUT movement or allocation exceeds qty_on_hand
- StockValidationError: missing reference fields, bad quantity, etc.
- ConcurrencyConflict: lock wait timeout / serialization failure (retry)
"""

from decimal import Decimal
from typing import Any


class StockError(Exception):
    """
    Structured exception for stock operations.

    Usage:
        try:
            inventory.allocate_fifo(product_id, warehouse_id, Decimal('50'))
        except InsufficientStock as e:
            print(f"Only {e.available} available")

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, /, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.data:
            return f"[{self.code}] {self.message}"
        context = ', '.join(f"{k}={v}" for k, v in self.data.items())
        return f"[{self.code}] {self.message} ({context})"

    @property
    def available(self) -> Decimal:
        """Shortcut for data['available']."""
        return self.data.get('available', Decimal('0'))

    @property
    def requested(self) -> Decimal:
        """Shortcut for data['requested']."""
        return self.data.get('requested', Decimal('0'))

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }


class StockNotFound(StockError):
    """A batch, position, movement type or ledger row does not exist."""

    _default_messages = {
        'MOVEMENT_TYPE_NOT_FOUND': 'Unknown or inactive movement type',
        'BATCH_NOT_FOUND': 'Batch not found',
        'POSITION_NOT_FOUND': 'No stock position for this batch in this warehouse',
        'TRANSACTION_NOT_FOUND': 'Inventory transaction not found',
    }


class InsufficientStock(StockError):
    """Requested quantity exceeds what is on hand."""

    _default_messages = {
        'INSUFFICIENT_STOCK': 'Insufficient stock',
    }


class StockValidationError(StockError):
    """Input rejected before any state was touched."""

    _default_messages = {
        'INVALID_QUANTITY': 'Quantity must be positive',
        'INVALID_COST': 'Unit cost cannot be negative',
        'SOURCE_REQUIRED': 'source_type and source_id are required',
        'BATCH_NO_REQUIRED': 'Batch number is required',
        'BATCH_REQUIRED': 'This movement requires a batch',
        'BATCH_PRODUCT_MISMATCH': 'Batch belongs to another product',
        'TRANSIT_NOT_POSITIONED': 'Transit movements do not change stock positions',
        'ALREADY_VOIDED': 'Transaction is already voided',
        'ALREADY_REVERSED': 'Transaction was already reversed',
        'INVALID_POLICY': 'Unknown allocation policy',
        'SAME_WAREHOUSE': 'Source and destination warehouse must differ',
    }


class ConcurrencyConflict(StockError):
    """The store gave up waiting for a lock. Callers retry with backoff."""

    _default_messages = {
        'CONCURRENT_MODIFICATION': 'Concurrent modification detected',
    }
