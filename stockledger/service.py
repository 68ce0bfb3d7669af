"""
Inventory Service: the single public interface for all ledger operations.

Usage:
    from stockledger import inventory, StockError

    batch_id = inventory.upsert_batch(product_id, 'LOT-1', exp_date=exp)
    inventory.post_movement(
        movement_code='REGULAR_IN', product_id=product_id,
        warehouse_id=warehouse_id, batch_id=batch_id,
        qty=Decimal('100'), unit_cost=Decimal('10'),
        source_type='GRN', source_id=grn.pk,
    )
    plan = inventory.allocate_fefo(product_id, warehouse_id, Decimal('20'))
"""

from stockledger.services import (
    Allocation,
    BatchRegistry,
    Ledger,
    MovementTypeRegistry,
    StockMovements,
    StockPositions,
    StockQueries,
)


class Inventory(
    MovementTypeRegistry,
    BatchRegistry,
    StockPositions,
    Ledger,
    Allocation,
    StockMovements,
    StockQueries,
):
    """
    Single interface for all inventory-ledger operations.

    Registry:    lookup_by_code, lookup_by_id, list_active
    Batches:     upsert_batch, get_batch
    Positions:   apply_movement
    Ledger:      record_transaction, void_transaction, reverse_transaction
    Allocation:  allocate_fifo, allocate_fefo, allocate, validate_batch_stock
    Movements:   post_movement, post_allocation, issue, transfer
    Queries:     get_available_batches, get_batch_stock,
                 get_near_expiry_batches, get_inventory_transactions,
                 get_all_batches, stock_on_hand

    IMPORTANT: apply_movement and record_transaction are building blocks.
    Call them inside one transaction.atomic() block, or use post_movement
    which does that for you.
    """
