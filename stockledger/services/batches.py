"""
Batch registry: identity of physical batches. Never touches quantity.
"""

import logging

from django.db import transaction

from stockledger.exceptions import StockNotFound, StockValidationError
from stockledger.models.batch import Batch

logger = logging.getLogger('stockledger')


class BatchRegistry:
    """Create/update batch identity."""

    @classmethod
    def upsert_batch(cls, product_id, batch_no, mfg_date=None,
                     exp_date=None, notes='') -> int:
        """
        Create the batch, or overwrite dates/notes of the existing one.

        Concurrency:
            - update_or_create locks an existing row with select_for_update()
            - a racing insert hits unique_batch_per_product and the loser
              re-reads and updates the winner's row

        Returns:
            Batch id
        """
        batch_no = (batch_no or '').strip()
        if not batch_no:
            raise StockValidationError('BATCH_NO_REQUIRED', product_id=product_id)

        with transaction.atomic():
            batch, created = Batch.objects.update_or_create(
                product_id=product_id,
                batch_no=batch_no,
                defaults={
                    'mfg_date': mfg_date,
                    'exp_date': exp_date,
                    'notes': notes or '',
                },
            )

        logger.info(
            "stock.batch.upsert",
            extra={
                "batch_id": batch.pk,
                "product_id": product_id,
                "batch_no": batch_no,
                "created": created,
            },
        )
        return batch.pk

    @classmethod
    def get_batch(cls, batch_id) -> Batch:
        try:
            return Batch.objects.get(pk=batch_id)
        except Batch.DoesNotExist:
            raise StockNotFound('BATCH_NOT_FOUND', batch_id=batch_id)

    @classmethod
    def check_batch_product(cls, batch_id, product_id) -> None:
        """
        Raises:
            StockNotFound('BATCH_NOT_FOUND')
            StockValidationError('BATCH_PRODUCT_MISMATCH'): batch belongs to another product
        """
        batch_product_id = Batch.objects.filter(pk=batch_id).values_list(
            'product_id', flat=True,
        ).first()
        if batch_product_id is None:
            raise StockNotFound('BATCH_NOT_FOUND', batch_id=batch_id)
        if batch_product_id != product_id:
            raise StockValidationError(
                'BATCH_PRODUCT_MISMATCH',
                batch_id=batch_id,
                product_id=product_id,
                batch_product_id=batch_product_id,
            )
