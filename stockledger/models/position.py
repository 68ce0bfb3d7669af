"""
StockPosition model: quantity and moving-average cost per
(product, warehouse, batch).
"""

import logging
from decimal import Decimal

from django.db import models
from django.db.models import Case, F, Q, Sum, When
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import MovementClass, MovementDirection

logger = logging.getLogger('stockledger')


class StockPositionQuerySet(models.QuerySet):
    """Helper filters for StockPosition queries."""

    def for_key(self, product_id, warehouse_id, batch_id=None):
        qs = self.filter(product_id=product_id, warehouse_id=warehouse_id)
        if batch_id is not None:
            qs = qs.filter(batch_id=batch_id)
        return qs

    def with_stock(self):
        return self.filter(qty_on_hand__gt=0)

    def total_quantity(self) -> Decimal:
        return self.aggregate(
            t=Coalesce(Sum('qty_on_hand'), Decimal('0'))
        )['t']


class StockPosition(models.Model):
    """
    Current stock of one product, in one warehouse, for one batch.

    Performance:
    - qty_on_hand is a projection of the ledger, updated under a row lock
      by services.positions.apply_movement
    - Read is O(1), not O(N)
    - Use ledger_quantity() / reconcile() for audit
    """

    product_id = models.PositiveBigIntegerField(verbose_name=_('Product ID'))
    warehouse_id = models.PositiveBigIntegerField(verbose_name=_('Warehouse ID'))
    batch = models.ForeignKey(
        'stockledger.Batch',
        on_delete=models.PROTECT,
        related_name='positions',
        verbose_name=_('Batch'),
    )

    qty_on_hand = models.DecimalField(
        max_digits=18,
        decimal_places=4,
        default=Decimal('0'),
        verbose_name=_('Quantity on hand'),
    )
    unit_cost = models.DecimalField(
        max_digits=20,
        decimal_places=6,
        default=Decimal('0'),
        verbose_name=_('Average unit cost'),
    )
    currency_id = models.PositiveBigIntegerField(null=True, blank=True)
    uom_id = models.PositiveBigIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = StockPositionQuerySet.as_manager()

    class Meta:
        verbose_name = _('Stock position')
        verbose_name_plural = _('Stock positions')
        constraints = [
            models.UniqueConstraint(
                fields=['product_id', 'warehouse_id', 'batch'],
                name='unique_stock_position',
            ),
            models.CheckConstraint(
                condition=Q(qty_on_hand__gte=0),
                name='stock_position_qty_non_negative',
            ),
        ]
        indexes = [
            models.Index(fields=['product_id', 'warehouse_id'], name='stockpos_product_wh_idx'),
        ]

    @property
    def stock_value(self) -> Decimal:
        return self.qty_on_hand * self.unit_cost

    def ledger_quantity(self) -> Decimal:
        """
        Signed sum of the non-voided ledger rows for this key.

        Transit rows are excluded: they never move qty_on_hand.
        """
        from stockledger.models.transaction import InventoryTransaction

        signed = Case(
            When(movement_type__direction=MovementDirection.IN, then=F('qty')),
            default=-F('qty'),
            output_field=models.DecimalField(max_digits=18, decimal_places=4),
        )
        return InventoryTransaction.objects.filter(
            product_id=self.product_id,
            warehouse_id=self.warehouse_id,
            batch_id=self.batch_id,
            is_deleted=False,
        ).exclude(
            movement_type__movement_class=MovementClass.TRANSIT,
        ).aggregate(
            t=Coalesce(Sum(signed), Decimal('0'))
        )['t']

    def reconcile(self) -> Decimal:
        """
        Compare qty_on_hand against the ledger.

        Never rewrites qty_on_hand: a drift is logged and returned so an
        operator can post a compensating movement.

        Returns:
            ledger quantity minus qty_on_hand (0 = reconciled)
        """
        drift = self.ledger_quantity() - self.qty_on_hand
        if drift:
            logger.warning(
                "stock.reconcile.drift",
                extra={
                    "position_id": self.pk,
                    "qty_on_hand": str(self.qty_on_hand),
                    "drift": str(drift),
                },
            )
        return drift

    def __str__(self) -> str:
        return (
            f"product {self.product_id} @ warehouse {self.warehouse_id} "
            f"[{self.batch.batch_no}]: {self.qty_on_hand}"
        )
