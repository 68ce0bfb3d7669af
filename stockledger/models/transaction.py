"""
InventoryTransaction model: immutable ledger of stock-affecting events.
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class InventoryTransactionQuerySet(models.QuerySet):

    def live(self):
        """Rows that are not soft-voided."""
        return self.filter(is_deleted=False)


class InventoryTransaction(models.Model):
    """
    Immutable record of one stock-affecting event.

    Rules:
    - NEVER update() or delete()
    - qty is always a positive magnitude; the movement type gives the sign
    - Corrections are new rows (reverse_transaction), linked via `reverses`
    - is_deleted is an audit flag set by void_transaction only; it does
      not change qty_on_hand
    """

    txn_date = models.DateField(
        default=timezone.localdate,
        db_index=True,
        verbose_name=_('Date'),
    )
    movement_type = models.ForeignKey(
        'stockledger.MovementType',
        on_delete=models.PROTECT,
        related_name='transactions',
        verbose_name=_('Movement type'),
    )
    txn_type = models.CharField(
        max_length=50,
        blank=True,
        default='',
        verbose_name=_('Business type'),
        help_text=_('Ex: "GRN", "DISPATCH", "TRANSFER"'),
    )

    # Originating business document (opaque to the engine)
    source_type = models.CharField(max_length=50, verbose_name=_('Source type'))
    source_id = models.PositiveBigIntegerField(verbose_name=_('Source ID'))
    source_line_id = models.PositiveBigIntegerField(null=True, blank=True)

    product_id = models.PositiveBigIntegerField(verbose_name=_('Product ID'))
    warehouse_id = models.PositiveBigIntegerField(verbose_name=_('Warehouse ID'))
    batch = models.ForeignKey(
        'stockledger.Batch',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='transactions',
        verbose_name=_('Batch'),
    )

    qty = models.DecimalField(max_digits=18, decimal_places=4, verbose_name=_('Quantity'))
    unit_cost = models.DecimalField(max_digits=20, decimal_places=6, verbose_name=_('Unit cost'))
    amount = models.DecimalField(max_digits=20, decimal_places=4, verbose_name=_('Amount'))

    currency_id = models.PositiveBigIntegerField(null=True, blank=True)
    exchange_rate = models.DecimalField(max_digits=18, decimal_places=8, null=True, blank=True)
    foreign_amount = models.DecimalField(
        max_digits=20,
        decimal_places=4,
        verbose_name=_('Amount (transaction currency)'),
    )
    total_amount = models.DecimalField(
        max_digits=20,
        decimal_places=4,
        verbose_name=_('Amount (base currency)'),
    )
    uom_id = models.PositiveBigIntegerField(null=True, blank=True)
    qc_posting_type = models.CharField(max_length=30, blank=True, default='')

    reverses = models.OneToOneField(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='reversed_by',
        verbose_name=_('Reverses'),
    )

    is_deleted = models.BooleanField(default=False, db_index=True, verbose_name=_('Voided'))
    voided_at = models.DateTimeField(null=True, blank=True)
    void_reason = models.CharField(max_length=255, blank=True, default='')

    created_at = models.DateTimeField(default=timezone.now)

    objects = InventoryTransactionQuerySet.as_manager()

    class Meta:
        verbose_name = _('Inventory transaction')
        verbose_name_plural = _('Inventory transactions')
        ordering = ['id']
        indexes = [
            models.Index(fields=['product_id', 'warehouse_id', 'batch'], name='invtxn_key_idx'),
            models.Index(fields=['source_type', 'source_id'], name='invtxn_source_idx'),
        ]

    def save(self, *args, **kwargs):
        # Immutability check (voiding goes through QuerySet.update)
        if self.pk:
            raise ValueError(
                "Inventory transactions are immutable. "
                "Post a compensating transaction instead."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError(
            "Inventory transactions are immutable. "
            "Void it or post a compensating transaction."
        )

    def __str__(self) -> str:
        return f"{self.movement_type.code} {self.qty} | {self.source_type}#{self.source_id}"
