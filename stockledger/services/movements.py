"""
Stock movements: state-changing operations that pair a position update
with its ledger row (post_movement, post_allocation, issue, transfer).

All methods use transaction.atomic() with row locks taken in
StockPositions.apply_movement(). A failure anywhere rolls back every
position update and ledger row of the call.
"""

import logging
from decimal import Decimal

from django.db import OperationalError, transaction

from stockledger.conf import stockledger_settings
from stockledger.costing import validate_qty
from stockledger.exceptions import ConcurrencyConflict, StockValidationError
from stockledger.models.enums import MovementCode
from stockledger.models.transaction import InventoryTransaction
from stockledger.services.allocation import Allocation
from stockledger.services.batches import BatchRegistry
from stockledger.services.ledger import Ledger
from stockledger.services.positions import StockPositions
from stockledger.services.registry import MovementTypeRegistry

logger = logging.getLogger('stockledger')


def _movements_disabled(**context) -> bool:
    if stockledger_settings.MOVEMENTS_ENABLED:
        return False
    logger.info("stock.movement.disabled", extra=context)
    return True


class StockMovements:
    """Atomic position + ledger postings."""

    @classmethod
    def post_movement(cls, *, movement_code, product_id, warehouse_id, qty,
                      source_type, source_id, unit_cost=None, batch_id=None,
                      **ledger_fields) -> InventoryTransaction | None:
        """
        Apply one movement and append its ledger row.

        - REGULAR/DISCARD: apply_movement() then record_transaction()
        - TRANSIT: ledger row only
        - OUT/DISCARD: the ledger line uses the position's average cost
          (unit_cost is ignored)
        - TRANSIT OUT without unit_cost: recorded at zero cost

        Extra keyword arguments go to Ledger.record_transaction()
        (txn_type, txn_date, source_line_id, currency_id, exchange_rate, ...).

        Raises:
            StockValidationError, StockNotFound, InsufficientStock
            ConcurrencyConflict('CONCURRENT_MODIFICATION'): lock timeout or
                serialization failure; retry with backoff
        """
        if _movements_disabled(code=str(movement_code), source=f"{source_type}#{source_id}"):
            return None

        try:
            with transaction.atomic():
                txn_id = cls._post(
                    movement_code=movement_code,
                    product_id=product_id,
                    warehouse_id=warehouse_id,
                    qty=qty,
                    unit_cost=unit_cost,
                    batch_id=batch_id,
                    source_type=source_type,
                    source_id=source_id,
                    **ledger_fields,
                )
        except OperationalError as exc:
            raise ConcurrencyConflict(
                'CONCURRENT_MODIFICATION',
                product_id=product_id,
                warehouse_id=warehouse_id,
                batch_id=batch_id,
            ) from exc

        return Ledger.get_transaction(txn_id)

    @classmethod
    def post_allocation(cls, lines, *, movement_code, product_id, warehouse_id,
                        source_type, source_id, **ledger_fields) -> list[InventoryTransaction]:
        """
        Apply a multi-line plan (AllocationLine or dicts with batch_id and
        quantity) as one logical movement.

        Each line is re-checked under its row lock. If any line fails, all
        previous lines of this call are rolled back.
        """
        if _movements_disabled(code=str(movement_code), source=f"{source_type}#{source_id}"):
            return []

        txn_ids = []
        try:
            with transaction.atomic():
                for line in lines:
                    if isinstance(line, dict):
                        batch_id, quantity = line['batch_id'], line['quantity']
                        unit_cost = line.get('unit_cost')
                    else:
                        batch_id, quantity = line.batch_id, line.quantity
                        unit_cost = line.unit_cost
                    txn_ids.append(cls._post(
                        movement_code=movement_code,
                        product_id=product_id,
                        warehouse_id=warehouse_id,
                        qty=quantity,
                        unit_cost=unit_cost,
                        batch_id=batch_id,
                        source_type=source_type,
                        source_id=source_id,
                        **ledger_fields,
                    ))
        except OperationalError as exc:
            raise ConcurrencyConflict(
                'CONCURRENT_MODIFICATION',
                product_id=product_id,
                warehouse_id=warehouse_id,
            ) from exc

        logger.info(
            "stock.allocation.posted",
            extra={
                "product_id": product_id,
                "warehouse_id": warehouse_id,
                "lines": len(txn_ids),
                "source": f"{source_type}#{source_id}",
            },
        )
        return list(
            InventoryTransaction.objects.filter(pk__in=txn_ids)
            .select_related('movement_type', 'batch')
            .order_by('id')
        )

    @classmethod
    def issue(cls, product_id, warehouse_id, qty, policy, *, source_type,
              source_id, movement_code=MovementCode.REGULAR_OUT,
              **ledger_fields) -> list[InventoryTransaction]:
        """
        Plan with FIFO/FEFO and apply the plan.

        The plan is made without locks; apply-time InsufficientStock means
        another writer got there first and the caller should retry.
        """
        lines = Allocation.allocate(policy, product_id, warehouse_id, qty)
        # Ledger lines carry the average cost read under the lock
        return cls.post_allocation(
            [{'batch_id': line.batch_id, 'quantity': line.quantity} for line in lines],
            movement_code=movement_code,
            product_id=product_id,
            warehouse_id=warehouse_id,
            source_type=source_type,
            source_id=source_id,
            **ledger_fields,
        )

    @classmethod
    def transfer(cls, product_id, batch_id, from_warehouse_id, to_warehouse_id,
                 qty, *, source_type, source_id, txn_type='TRANSFER',
                 **ledger_fields) -> tuple[InventoryTransaction, InventoryTransaction] | None:
        """
        Move stock of one batch between warehouses at the source's average cost.

        Returns:
            (out_transaction, in_transaction)
        """
        if from_warehouse_id == to_warehouse_id:
            raise StockValidationError(
                'SAME_WAREHOUSE', warehouse_id=from_warehouse_id,
            )
        qty = validate_qty(qty)
        BatchRegistry.check_batch_product(batch_id, product_id)
        if _movements_disabled(code='TRANSFER', source=f"{source_type}#{source_id}"):
            return None

        try:
            with transaction.atomic():
                cls._lock_transfer_positions(
                    product_id, batch_id, from_warehouse_id, to_warehouse_id,
                )
                out_id = cls._post(
                    movement_code=MovementCode.REGULAR_OUT,
                    product_id=product_id,
                    warehouse_id=from_warehouse_id,
                    qty=qty,
                    unit_cost=None,
                    batch_id=batch_id,
                    source_type=source_type,
                    source_id=source_id,
                    txn_type=txn_type,
                    **ledger_fields,
                )
                out_txn = Ledger.get_transaction(out_id)
                in_id = cls._post(
                    movement_code=MovementCode.REGULAR_IN,
                    product_id=product_id,
                    warehouse_id=to_warehouse_id,
                    qty=qty,
                    unit_cost=out_txn.unit_cost,
                    batch_id=batch_id,
                    source_type=source_type,
                    source_id=source_id,
                    txn_type=txn_type,
                    **ledger_fields,
                )
        except OperationalError as exc:
            raise ConcurrencyConflict(
                'CONCURRENT_MODIFICATION', product_id=product_id, batch_id=batch_id,
            ) from exc

        return out_txn, Ledger.get_transaction(in_id)

    @classmethod
    def _lock_transfer_positions(cls, product_id, batch_id, from_warehouse_id,
                                 to_warehouse_id) -> None:
        """
        Lock both ends of a transfer in warehouse id order.

        Opposite transfers of the same batch then wait on each other
        instead of deadlocking.
        """
        for warehouse_id in sorted((from_warehouse_id, to_warehouse_id)):
            if warehouse_id == from_warehouse_id:
                StockPositions.lock_position(product_id, warehouse_id, batch_id)
            else:
                StockPositions.lock_or_create_position(product_id, warehouse_id, batch_id)

    @classmethod
    def _post(cls, *, movement_code, product_id, warehouse_id, qty, unit_cost,
              batch_id, source_type, source_id, **ledger_fields) -> int:
        """Position update + ledger append; caller owns the atomic block."""
        movement_type = MovementTypeRegistry.resolve(movement_code)
        currency_id = ledger_fields.get('currency_id')
        uom_id = ledger_fields.get('uom_id')

        # Validate the ledger reference before taking any lock
        if not source_type or source_id is None:
            raise StockValidationError(
                'SOURCE_REQUIRED', source_type=source_type, source_id=source_id,
            )

        if unit_cost is None and movement_type.is_in:
            unit_cost = Decimal('0')

        if movement_type.affects_position:
            position = StockPositions.apply_movement(
                product_id, warehouse_id, batch_id, qty, unit_cost,
                movement_type, currency_id=currency_id, uom_id=uom_id,
            )
            # OUT never re-costs: the line carries the current average
            if movement_type.is_out:
                unit_cost = position.unit_cost

        return Ledger.record_transaction(
            movement_type=movement_type,
            source_type=source_type,
            source_id=source_id,
            product_id=product_id,
            warehouse_id=warehouse_id,
            batch_id=batch_id,
            qty=qty,
            unit_cost=unit_cost if unit_cost is not None else Decimal('0'),
            **ledger_fields,
        )
