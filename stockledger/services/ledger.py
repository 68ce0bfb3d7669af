"""
Ledger writer: the single place where ledger rows and their amounts
are computed and persisted.

Rows are append-only. void_transaction() flips an audit flag;
reverse_transaction() posts the compensating movement that actually
undoes the economic effect.
"""

import logging
from decimal import Decimal

from django.db import OperationalError, transaction
from django.utils import timezone

from stockledger.costing import (
    convert_amount,
    line_amount,
    quantize_amount,
    quantize_cost,
    validate_qty,
)
from stockledger.exceptions import ConcurrencyConflict, StockNotFound, StockValidationError
from stockledger.models.transaction import InventoryTransaction
from stockledger.services.batches import BatchRegistry
from stockledger.services.positions import StockPositions
from stockledger.services.registry import MovementTypeRegistry

logger = logging.getLogger('stockledger')


class Ledger:
    """Append, void and reverse inventory transactions."""

    @classmethod
    def record_transaction(cls, *, movement_type, source_type, source_id,
                           product_id, warehouse_id, qty, unit_cost,
                           txn_type='', txn_date=None, source_line_id=None,
                           batch_id=None, currency_id=None, exchange_rate=None,
                           foreign_amount=None, total_amount=None, uom_id=None,
                           qc_posting_type='', reverses=None) -> int:
        """
        Append one immutable ledger row.

        amount          = qty * unit_cost
        foreign_amount  = given, else amount
        total_amount    = given, else amount * exchange_rate (rate > 0), else amount

        Raises:
            StockValidationError('SOURCE_REQUIRED'): source_type/source_id missing
            StockValidationError('INVALID_QUANTITY'): qty <= 0 or finer than 4 places
            StockValidationError('INVALID_COST'): unit_cost < 0
            StockValidationError('BATCH_PRODUCT_MISMATCH')
            StockNotFound('MOVEMENT_TYPE_NOT_FOUND'), StockNotFound('BATCH_NOT_FOUND')

        Returns:
            Transaction id
        """
        if not source_type or source_id is None:
            raise StockValidationError(
                'SOURCE_REQUIRED', source_type=source_type, source_id=source_id,
            )

        qty = validate_qty(qty)
        unit_cost = Decimal(str(unit_cost))
        if unit_cost < 0:
            raise StockValidationError('INVALID_COST', unit_cost=unit_cost)
        unit_cost = quantize_cost(unit_cost)

        movement_type = MovementTypeRegistry.resolve(movement_type)
        if batch_id is not None:
            BatchRegistry.check_batch_product(batch_id, product_id)

        amount = line_amount(qty, unit_cost)
        if foreign_amount is None:
            foreign_amount = amount
        if total_amount is None:
            total_amount = convert_amount(amount, exchange_rate)

        txn = InventoryTransaction.objects.create(
            txn_date=txn_date or timezone.localdate(),
            movement_type=movement_type,
            txn_type=txn_type or '',
            source_type=source_type,
            source_id=source_id,
            source_line_id=source_line_id,
            product_id=product_id,
            warehouse_id=warehouse_id,
            batch_id=batch_id,
            qty=qty,
            unit_cost=unit_cost,
            amount=amount,
            currency_id=currency_id,
            exchange_rate=exchange_rate,
            foreign_amount=quantize_amount(foreign_amount),
            total_amount=quantize_amount(total_amount),
            uom_id=uom_id,
            qc_posting_type=qc_posting_type or '',
            reverses=reverses,
        )
        logger.info(
            "stock.ledger.record",
            extra={
                "transaction_id": txn.pk,
                "code": movement_type.code,
                "source": f"{source_type}#{source_id}",
                "qty": str(qty),
                "amount": str(amount),
            },
        )
        return txn.pk

    @classmethod
    def get_transaction(cls, transaction_id) -> InventoryTransaction:
        try:
            return InventoryTransaction.objects.select_related(
                'movement_type', 'batch',
            ).get(pk=transaction_id)
        except InventoryTransaction.DoesNotExist:
            raise StockNotFound('TRANSACTION_NOT_FOUND', transaction_id=transaction_id)

    @classmethod
    def void_transaction(cls, transaction_id, reason='') -> InventoryTransaction:
        """
        Soft-void a ledger row (display/audit flag only).

        Does NOT touch qty_on_hand. Use reverse_transaction() to undo the
        economic effect.

        Raises:
            StockNotFound('TRANSACTION_NOT_FOUND')
            StockValidationError('ALREADY_VOIDED')
        """
        now = timezone.now()
        with transaction.atomic():
            txn = cls.get_transaction(transaction_id)
            updated = InventoryTransaction.objects.filter(
                pk=txn.pk, is_deleted=False,
            ).update(is_deleted=True, voided_at=now, void_reason=reason or '')
            if not updated:
                raise StockValidationError('ALREADY_VOIDED', transaction_id=txn.pk)

        logger.info(
            "stock.ledger.void",
            extra={"transaction_id": txn.pk, "reason": reason},
        )
        txn.refresh_from_db()
        return txn

    @classmethod
    def reverse_transaction(cls, transaction_id, *, source_type=None,
                            source_id=None, txn_type='REVERSAL',
                            txn_date=None) -> InventoryTransaction:
        """
        Post the compensating movement for a ledger row.

        Same key, qty and unit cost, opposite movement type, linked to the
        original through `reverses`. Position and ledger change together.

        Raises:
            StockValidationError('ALREADY_VOIDED'): original is voided
            StockValidationError('ALREADY_REVERSED'): already compensated
            InsufficientStock: reversing an IN whose stock was consumed
            ConcurrencyConflict('CONCURRENT_MODIFICATION'): lock timeout; retry
        """
        try:
            with transaction.atomic():
                original = InventoryTransaction.objects.select_for_update().select_related(
                    'movement_type',
                ).filter(pk=transaction_id).first()
                if original is None:
                    raise StockNotFound('TRANSACTION_NOT_FOUND', transaction_id=transaction_id)
                if original.is_deleted:
                    raise StockValidationError('ALREADY_VOIDED', transaction_id=original.pk)
                if InventoryTransaction.objects.filter(reverses=original).exists():
                    raise StockValidationError('ALREADY_REVERSED', transaction_id=original.pk)

                reverse_type = MovementTypeRegistry.lookup_by_code(
                    original.movement_type.reverse_code
                )
                if reverse_type.affects_position:
                    StockPositions.apply_movement(
                        original.product_id, original.warehouse_id, original.batch_id,
                        original.qty, original.unit_cost, reverse_type,
                    )

                txn_id = cls.record_transaction(
                    movement_type=reverse_type,
                    source_type=source_type or original.source_type,
                    source_id=source_id if source_id is not None else original.source_id,
                    source_line_id=original.source_line_id,
                    product_id=original.product_id,
                    warehouse_id=original.warehouse_id,
                    batch_id=original.batch_id,
                    qty=original.qty,
                    unit_cost=original.unit_cost,
                    txn_type=txn_type,
                    txn_date=txn_date,
                    currency_id=original.currency_id,
                    exchange_rate=original.exchange_rate,
                    foreign_amount=original.foreign_amount,
                    total_amount=original.total_amount,
                    uom_id=original.uom_id,
                    qc_posting_type=original.qc_posting_type,
                    reverses=original,
                )
        except OperationalError as exc:
            raise ConcurrencyConflict(
                'CONCURRENT_MODIFICATION', transaction_id=transaction_id,
            ) from exc

        logger.info(
            "stock.ledger.reverse",
            extra={"transaction_id": original.pk, "reversal_id": txn_id},
        )
        return cls.get_transaction(txn_id)
