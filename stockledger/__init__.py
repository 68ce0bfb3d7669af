"""
Stockledger: inventory ledger and batch costing engine.

Usage:
    from stockledger import inventory, StockError

    inventory.upsert_batch(product_id, 'LOT-1')
    inventory.allocate_fifo(product_id, warehouse_id, Decimal('50'))
    inventory.stock_on_hand(product_id, warehouse_id)
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'inventory':
        from stockledger.service import Inventory
        return Inventory
    elif name in ('StockError', 'StockNotFound', 'InsufficientStock',
                  'StockValidationError', 'ConcurrencyConflict'):
        from stockledger import exceptions
        return getattr(exceptions, name)
    elif name in ('MovementType', 'Batch', 'StockPosition', 'InventoryTransaction',
                  'MovementCode', 'MovementClass', 'MovementDirection',
                  'AllocationPolicy'):
        from stockledger import models
        return getattr(models, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'inventory',
    'StockError',
    'StockNotFound',
    'InsufficientStock',
    'StockValidationError',
    'ConcurrencyConflict',
    'MovementType',
    'Batch',
    'StockPosition',
    'InventoryTransaction',
    'MovementCode',
    'MovementClass',
    'MovementDirection',
    'AllocationPolicy',
]

__version__ = '0.1.0'
