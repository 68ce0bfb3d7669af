"""
Stockledger Models.

Core models for the inventory ledger:
- MovementType: What a movement does to quantity
- Batch: Lot identity (number + dates)
- StockPosition: Quantity and average cost per product/warehouse/batch
- InventoryTransaction: Immutable ledger of changes
"""

from stockledger.models.batch import Batch
from stockledger.models.enums import (
    AllocationPolicy,
    MovementClass,
    MovementCode,
    MovementDirection,
)
from stockledger.models.movement_type import MovementType
from stockledger.models.position import StockPosition
from stockledger.models.transaction import InventoryTransaction

__all__ = [
    'AllocationPolicy',
    'MovementClass',
    'MovementCode',
    'MovementDirection',
    'MovementType',
    'Batch',
    'StockPosition',
    'InventoryTransaction',
]
