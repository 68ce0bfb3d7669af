"""
Stock queries: read-only operations.

All methods are classmethods and use no locking.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import Any

from django.db.models import F, Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from stockledger.conf import stockledger_settings
from stockledger.models.batch import Batch
from stockledger.models.enums import MovementClass, MovementDirection
from stockledger.models.position import StockPosition
from stockledger.models.transaction import InventoryTransaction


@dataclass
class Page:
    """One page of rows plus the unpaginated count."""

    rows: list = field(default_factory=list)
    total: int = 0


@dataclass(frozen=True)
class StockOnHand:
    """Transit-aware stock: regular_stock + transit_in - transit_out."""

    regular_stock: Decimal
    transit_in: Decimal
    transit_out: Decimal

    @property
    def net_transit(self) -> Decimal:
        return self.transit_in - self.transit_out

    @property
    def stock_on_hand(self) -> Decimal:
        return self.regular_stock + self.net_transit


def _paginate(qs, offset, limit) -> Page:
    max_size = stockledger_settings.MAX_PAGE_SIZE
    offset = max(int(offset or 0), 0)
    limit = min(max(int(limit or max_size), 1), max_size)
    return Page(rows=list(qs[offset:offset + limit]), total=qs.count())


class StockQueries:
    """Read-only stock query methods."""

    @classmethod
    def get_available_batches(cls, product_id, warehouse_id):
        """Positions with stock for a product in a warehouse, soonest expiry first."""
        return list(
            StockPosition.objects.for_key(product_id, warehouse_id)
            .with_stock()
            .select_related('batch')
            .order_by(
                F('batch__exp_date').asc(nulls_last=True),
                F('batch__mfg_date').asc(nulls_last=True),
                'batch_id',
            )
        )

    @classmethod
    def get_batch_stock(cls, filters: dict[str, Any] | None = None,
                        offset: int = 0, limit: int = 100) -> Page:
        """
        Stock positions with filters and pagination.

        Filters: product_id, warehouse_id, batch_id, search (batch number).
        """
        filters = filters or {}
        qs = StockPosition.objects.select_related('batch')

        for key in ('product_id', 'warehouse_id', 'batch_id'):
            if filters.get(key):
                qs = qs.filter(**{key: filters[key]})

        search = (filters.get('search') or '').strip()
        if search:
            qs = qs.filter(batch__batch_no__icontains=search)

        qs = qs.order_by(
            F('batch__exp_date').asc(nulls_last=True),
            F('batch__mfg_date').asc(nulls_last=True),
            'id',
        )
        return _paginate(qs, offset, limit)

    @classmethod
    def get_near_expiry_batches(cls, days: int | None = None, warehouse_id=None):
        """
        Positions with stock whose batch expires within `days` from today.

        Already-expired batches are not included. Each row exposes
        batch.days_to_expiry.
        """
        if days is None:
            days = stockledger_settings.NEAR_EXPIRY_DAYS
        today = timezone.localdate()

        qs = StockPosition.objects.with_stock().select_related('batch').filter(
            batch__exp_date__isnull=False,
            batch__exp_date__gte=today,
            batch__exp_date__lte=today + timedelta(days=days),
        )
        if warehouse_id:
            qs = qs.filter(warehouse_id=warehouse_id)

        return list(qs.order_by('batch__exp_date', 'id'))

    @classmethod
    def get_inventory_transactions(cls, filters: dict[str, Any] | None = None,
                                   offset: int = 0, limit: int = 100) -> Page:
        """
        Non-voided ledger rows with filters and pagination, newest first.

        Filters: source_type, source_id, product_id, warehouse_id, batch_id,
        qc_posting_type, from, to (txn_date bounds), search.
        """
        filters = filters or {}
        qs = InventoryTransaction.objects.live().select_related('movement_type', 'batch')

        for key in ('source_type', 'source_id', 'product_id', 'warehouse_id',
                    'batch_id', 'qc_posting_type'):
            if filters.get(key):
                qs = qs.filter(**{key: filters[key]})
        if filters.get('from'):
            qs = qs.filter(txn_date__gte=filters['from'])
        if filters.get('to'):
            qs = qs.filter(txn_date__lte=filters['to'])

        search = (filters.get('search') or '').strip()
        if search:
            qs = qs.filter(
                Q(batch__batch_no__icontains=search)
                | Q(txn_type__icontains=search)
                | Q(source_type__icontains=search)
            )

        return _paginate(qs.order_by('-txn_date', '-id'), offset, limit)

    @classmethod
    def get_all_batches(cls):
        """Distinct batches referenced by non-voided ledger rows."""
        return list(
            Batch.objects.filter(
                transactions__is_deleted=False,
            ).distinct().order_by('batch_no')
        )

    @classmethod
    def stock_on_hand(cls, product_id, warehouse_id, batch_id=None) -> StockOnHand:
        """
        regular_stock + transit_in - transit_out.

        regular_stock comes from StockPosition (already net of regular
        out and discards); transit is summed from the ledger on every call.
        """
        regular = StockPosition.objects.for_key(
            product_id, warehouse_id, batch_id,
        ).total_quantity()

        transit = InventoryTransaction.objects.live().filter(
            product_id=product_id,
            warehouse_id=warehouse_id,
            movement_type__movement_class=MovementClass.TRANSIT,
        )
        if batch_id is not None:
            transit = transit.filter(batch_id=batch_id)

        totals = transit.aggregate(
            transit_in=Coalesce(
                Sum('qty', filter=Q(movement_type__direction=MovementDirection.IN)),
                Decimal('0'),
            ),
            transit_out=Coalesce(
                Sum('qty', filter=Q(movement_type__direction=MovementDirection.OUT)),
                Decimal('0'),
            ),
        )
        return StockOnHand(
            regular_stock=regular,
            transit_in=totals['transit_in'],
            transit_out=totals['transit_out'],
        )
