"""
Allocation: pure planning of which batches an outbound movement draws from.

Nothing here writes or locks. A plan is advisory: the enforcement point is
the locked re-check inside StockPositions.apply_movement(), and callers
treat InsufficientStock at apply time as a retryable outcome.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable

from django.db.models import F

from stockledger.costing import validate_qty
from stockledger.exceptions import (
    InsufficientStock,
    StockNotFound,
    StockValidationError,
)
from stockledger.models.enums import AllocationPolicy
from stockledger.models.position import StockPosition


@dataclass(frozen=True)
class AllocationLine:
    """One batch and how much to take from it."""

    batch_id: int
    batch_no: str
    quantity: Decimal
    unit_cost: Decimal
    exp_date: date | None


def _field(item: Any, name: str):
    if isinstance(item, dict):
        return item[name]
    return getattr(item, name)


class Allocation:
    """FIFO/FEFO planners and the allocation validator."""

    # Batch ids grow with creation order
    FIFO_ORDER = ('batch_id',)
    FEFO_ORDER = (F('batch__exp_date').asc(nulls_last=True), 'batch_id')

    @classmethod
    def allocate_fifo(cls, product_id, warehouse_id, required_qty) -> list[AllocationLine]:
        """Oldest batch first (batch creation order)."""
        return cls._allocate(product_id, warehouse_id, required_qty, cls.FIFO_ORDER)

    @classmethod
    def allocate_fefo(cls, product_id, warehouse_id, required_qty) -> list[AllocationLine]:
        """Soonest expiry first; batches without expiry go last."""
        return cls._allocate(product_id, warehouse_id, required_qty, cls.FEFO_ORDER)

    @classmethod
    def allocate(cls, policy, product_id, warehouse_id, required_qty) -> list[AllocationLine]:
        """Dispatch on AllocationPolicy (the caller picks the policy)."""
        if policy == AllocationPolicy.FIFO:
            return cls.allocate_fifo(product_id, warehouse_id, required_qty)
        if policy == AllocationPolicy.FEFO:
            return cls.allocate_fefo(product_id, warehouse_id, required_qty)
        raise StockValidationError('INVALID_POLICY', policy=policy)

    @classmethod
    def validate_batch_stock(cls, allocations: Iterable[Any], warehouse_id) -> None:
        """
        Check a caller-proposed allocation against current stock.

        Each allocation is a mapping or object with batch_id, product_id
        and quantity. Lines for the same batch are summed before the
        comparison. Stops at the first violation.

        Raises:
            StockValidationError('INVALID_QUANTITY'): a line quantity is not positive
            StockNotFound('POSITION_NOT_FOUND'): batch has no position here
            InsufficientStock('INSUFFICIENT_STOCK'): batch is short
        """
        requested_by_key: dict[tuple, Decimal] = {}
        for alloc in allocations:
            key = (_field(alloc, 'product_id'), _field(alloc, 'batch_id'))
            quantity = validate_qty(_field(alloc, 'quantity'))
            requested_by_key[key] = requested_by_key.get(key, Decimal('0')) + quantity

        for (product_id, batch_id), requested in requested_by_key.items():
            position = StockPosition.objects.filter(
                batch_id=batch_id,
                warehouse_id=warehouse_id,
                product_id=product_id,
            ).only('qty_on_hand').first()

            if position is None:
                raise StockNotFound(
                    'POSITION_NOT_FOUND',
                    batch_id=batch_id,
                    warehouse_id=warehouse_id,
                )

            if position.qty_on_hand < requested:
                raise InsufficientStock(
                    'INSUFFICIENT_STOCK',
                    batch_id=batch_id,
                    available=position.qty_on_hand,
                    requested=requested,
                    shortfall=requested - position.qty_on_hand,
                )

    @classmethod
    def _allocate(cls, product_id, warehouse_id, required_qty, ordering) -> list[AllocationLine]:
        required = validate_qty(required_qty)

        positions = StockPosition.objects.for_key(
            product_id, warehouse_id,
        ).with_stock().select_related('batch').order_by(*ordering)

        lines = []
        remaining = required
        for position in positions:
            if remaining <= 0:
                break
            take = min(remaining, position.qty_on_hand)
            lines.append(AllocationLine(
                batch_id=position.batch_id,
                batch_no=position.batch.batch_no,
                quantity=take,
                unit_cost=position.unit_cost,
                exp_date=position.batch.exp_date,
            ))
            remaining -= take

        if remaining > 0:
            raise InsufficientStock(
                'INSUFFICIENT_STOCK',
                product_id=product_id,
                warehouse_id=warehouse_id,
                available=required - remaining,
                requested=required,
            )
        return lines
