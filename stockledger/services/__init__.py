"""
Stock services: modular organization of ledger operations.

    from stockledger.services import StockQueries, StockMovements, Allocation
"""

from stockledger.services.allocation import Allocation, AllocationLine
from stockledger.services.batches import BatchRegistry
from stockledger.services.ledger import Ledger
from stockledger.services.movements import StockMovements
from stockledger.services.positions import StockPositions
from stockledger.services.queries import Page, StockOnHand, StockQueries
from stockledger.services.registry import MovementTypeRegistry

__all__ = [
    'Allocation',
    'AllocationLine',
    'BatchRegistry',
    'Ledger',
    'MovementTypeRegistry',
    'Page',
    'StockMovements',
    'StockOnHand',
    'StockPositions',
    'StockQueries',
]
