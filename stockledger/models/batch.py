"""
Batch model: lot/batch identity for traceability and expiry.

A Batch carries no quantity. Stock for a batch lives in StockPosition,
one row per warehouse.

Usage:
    batch_id = inventory.upsert_batch(
        product_id=42,
        batch_no="LOT-2026-0223-A",
        mfg_date=date(2026, 2, 23),
        exp_date=date(2026, 8, 23),
    )
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Batch(models.Model):
    """
    Traceable lot of a product.

    Identity is (product_id, batch_no). Created on first reference,
    dates and notes overwritten on later upserts. Never deleted while a
    StockPosition or InventoryTransaction references it.
    """

    # Product is owned by another module; referenced by id only
    product_id = models.PositiveBigIntegerField(
        db_index=True,
        verbose_name=_('Product ID'),
    )
    batch_no = models.CharField(
        max_length=100,
        verbose_name=_('Batch number'),
    )
    mfg_date = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Manufacture date'),
    )
    exp_date = models.DateField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_('Expiry date'),
    )
    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Batch')
        verbose_name_plural = _('Batches')
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(
                fields=['product_id', 'batch_no'],
                name='unique_batch_per_product',
            )
        ]

    @property
    def is_expired(self) -> bool:
        """Is this batch past its expiry date?"""
        if self.exp_date is None:
            return False
        return timezone.localdate() > self.exp_date

    @property
    def days_to_expiry(self) -> int | None:
        if self.exp_date is None:
            return None
        return (self.exp_date - timezone.localdate()).days

    def __str__(self) -> str:
        expiry = f" (exp:{self.exp_date})" if self.exp_date else ""
        return f"Batch {self.batch_no}{expiry}"
