"""
Stock position store: the mutable projection protected by row locks.

apply_movement() must run inside the same atomic block as the matching
ledger append (see services.movements.post_movement).
"""

import logging
from decimal import Decimal

from django.db import transaction

from stockledger.costing import validate_qty, weighted_average_cost
from stockledger.exceptions import (
    InsufficientStock,
    StockNotFound,
    StockValidationError,
)
from stockledger.models.position import StockPosition
from stockledger.services.batches import BatchRegistry
from stockledger.services.registry import MovementTypeRegistry

logger = logging.getLogger('stockledger')


class StockPositions:
    """Locked read-modify-write of StockPosition rows."""

    @classmethod
    def apply_movement(cls, product_id, warehouse_id, batch_id, qty,
                       unit_cost, movement_type, currency_id=None,
                       uom_id=None) -> StockPosition:
        """
        Apply one movement to the position for (product, warehouse, batch).

        IN:       creates the position if missing, adds qty and blends
                  unit_cost into the moving average.
        OUT:      subtracts qty; average cost unchanged.
        DISCARD:  same as OUT.

        Raises:
            StockValidationError('INVALID_QUANTITY'): qty <= 0 or finer than 4 places
            StockValidationError('TRANSIT_NOT_POSITIONED'): transit type
            StockValidationError('BATCH_PRODUCT_MISMATCH'): batch of another product
            StockNotFound('BATCH_NOT_FOUND')
            StockNotFound('POSITION_NOT_FOUND'): OUT on a missing position
            InsufficientStock('INSUFFICIENT_STOCK'): qty > qty_on_hand

        Concurrency:
            - Runs under transaction.atomic()
            - Uses select_for_update() on the position
            - Verifies quantity after lock
        """
        movement_type = MovementTypeRegistry.resolve(movement_type)
        qty = validate_qty(qty)

        if not movement_type.affects_position:
            raise StockValidationError('TRANSIT_NOT_POSITIONED', movement_code=movement_type.code)
        if batch_id is None:
            raise StockValidationError('BATCH_REQUIRED', movement_code=movement_type.code)
        BatchRegistry.check_batch_product(batch_id, product_id)

        with transaction.atomic():
            if movement_type.is_in:
                position = cls._receive(
                    product_id, warehouse_id, batch_id, qty,
                    Decimal(str(unit_cost if unit_cost is not None else 0)),
                    currency_id, uom_id,
                )
            else:
                position = cls._deplete(product_id, warehouse_id, batch_id, qty)

        logger.info(
            "stock.apply",
            extra={
                "position_id": position.pk,
                "code": movement_type.code,
                "qty": str(qty),
                "qty_on_hand": str(position.qty_on_hand),
                "unit_cost": str(position.unit_cost),
            },
        )
        return position

    @classmethod
    def lock_position(cls, product_id, warehouse_id, batch_id) -> StockPosition:
        """
        Lock and return an existing position.

        Raises:
            StockNotFound('POSITION_NOT_FOUND')
        """
        try:
            return StockPosition.objects.select_for_update().get(
                product_id=product_id,
                warehouse_id=warehouse_id,
                batch_id=batch_id,
            )
        except StockPosition.DoesNotExist:
            raise StockNotFound(
                'POSITION_NOT_FOUND',
                product_id=product_id,
                warehouse_id=warehouse_id,
                batch_id=batch_id,
            )

    @classmethod
    def lock_or_create_position(cls, product_id, warehouse_id, batch_id,
                                currency_id=None, uom_id=None) -> StockPosition:
        """Lock the position, creating an empty one first if missing."""
        created_position, _ = StockPosition.objects.get_or_create(
            product_id=product_id,
            warehouse_id=warehouse_id,
            batch_id=batch_id,
            defaults={'currency_id': currency_id, 'uom_id': uom_id},
        )
        return StockPosition.objects.select_for_update().get(pk=created_position.pk)

    @classmethod
    def _receive(cls, product_id, warehouse_id, batch_id, qty, unit_cost,
                 currency_id, uom_id) -> StockPosition:
        if unit_cost < 0:
            raise StockValidationError('INVALID_COST', unit_cost=unit_cost)

        position = cls.lock_or_create_position(
            product_id, warehouse_id, batch_id, currency_id, uom_id,
        )

        position.unit_cost = weighted_average_cost(
            position.qty_on_hand, position.unit_cost, qty, unit_cost,
        )
        position.qty_on_hand = position.qty_on_hand + qty
        # Keep the existing currency/uom when the caller passes none
        if currency_id is not None:
            position.currency_id = currency_id
        if uom_id is not None:
            position.uom_id = uom_id
        position.save(update_fields=[
            'qty_on_hand', 'unit_cost', 'currency_id', 'uom_id', 'updated_at',
        ])
        return position

    @classmethod
    def _deplete(cls, product_id, warehouse_id, batch_id, qty) -> StockPosition:
        position = cls.lock_position(product_id, warehouse_id, batch_id)

        if position.qty_on_hand < qty:
            raise InsufficientStock(
                'INSUFFICIENT_STOCK',
                batch_id=batch_id,
                warehouse_id=warehouse_id,
                available=position.qty_on_hand,
                requested=qty,
            )

        position.qty_on_hand = position.qty_on_hand - qty
        position.save(update_fields=['qty_on_hand', 'updated_at'])
        return position
