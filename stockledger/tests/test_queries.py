"""
Tests for read-only stock queries.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from stockledger import inventory
from stockledger.services import Page, StockOnHand


pytestmark = pytest.mark.django_db


class TestAvailableBatches:

    def test_soonest_expiry_first(self, stocked, product_id, warehouse_id):
        b1, b2 = stocked

        positions = inventory.get_available_batches(product_id, warehouse_id)

        assert [p.batch_id for p in positions] == [b2, b1]

    def test_empty_positions_hidden(self, stocked, product_id, warehouse_id):
        _, b2 = stocked
        inventory.post_movement(
            movement_code='REGULAR_OUT', product_id=product_id, warehouse_id=warehouse_id,
            batch_id=b2, qty=Decimal('20'), source_type='DN', source_id=1,
        )

        assert [p.batch_id for p in inventory.get_available_batches(product_id, warehouse_id)] == [stocked[0]]


class TestBatchStock:

    def test_returns_page_with_total(self, stocked):
        page = inventory.get_batch_stock({'product_id': 42}, offset=0, limit=1)

        assert isinstance(page, Page)
        assert page.total == 2
        assert len(page.rows) == 1
        assert page.rows[0].batch.batch_no == 'B2'

    def test_search_by_batch_no(self, stocked):
        page = inventory.get_batch_stock({'search': 'b1'})

        assert [row.batch.batch_no for row in page.rows] == ['B1']

    def test_limit_is_clamped(self, stocked, settings):
        settings.STOCKLEDGER = {'MAX_PAGE_SIZE': 1}

        page = inventory.get_batch_stock(limit=500)

        assert len(page.rows) == 1
        assert page.total == 2


class TestNearExpiry:

    def test_within_window(self, stocked):
        _, b2 = stocked

        positions = inventory.get_near_expiry_batches(days=15)

        assert [p.batch_id for p in positions] == [b2]
        assert positions[0].batch.days_to_expiry == 10

    def test_default_window_from_settings(self, stocked, settings):
        settings.STOCKLEDGER = {'NEAR_EXPIRY_DAYS': 90}

        assert len(inventory.get_near_expiry_batches()) == 2

    def test_expired_batches_excluded(self, receive, product_id, today):
        old = inventory.upsert_batch(product_id, 'OLD', exp_date=today - timedelta(days=1))
        receive(old, '3', '1')

        assert inventory.get_near_expiry_batches(days=30) == []

    def test_filter_by_warehouse(self, stocked, other_warehouse_id):
        assert inventory.get_near_expiry_batches(days=90, warehouse_id=other_warehouse_id) == []


class TestInventoryTransactions:

    def test_newest_first(self, stocked):
        page = inventory.get_inventory_transactions()

        assert page.total == 2
        assert [row.batch.batch_no for row in page.rows] == ['B2', 'B1']

    def test_voided_rows_hidden(self, stocked):
        first = inventory.get_inventory_transactions().rows[-1]
        inventory.void_transaction(first.pk)

        assert inventory.get_inventory_transactions().total == 1

    def test_filters(self, stocked, receive, today):
        b1, _ = stocked
        receive(b1, '1', '1', source_id=99, qc_posting_type='ACCEPTED')

        assert inventory.get_inventory_transactions({'source_id': 99}).total == 1
        assert inventory.get_inventory_transactions({'qc_posting_type': 'ACCEPTED'}).total == 1
        assert inventory.get_inventory_transactions({'batch_id': b1}).total == 2
        assert inventory.get_inventory_transactions({'from': today, 'to': today}).total == 3
        assert inventory.get_inventory_transactions(
            {'from': today + timedelta(days=1)}
        ).total == 0

    def test_search(self, stocked):
        assert inventory.get_inventory_transactions({'search': 'grn'}).total == 2
        assert inventory.get_inventory_transactions({'search': 'B2'}).total == 1


class TestAllBatches:

    def test_only_batches_with_ledger_rows(self, stocked, product_id):
        inventory.upsert_batch(product_id, 'UNUSED')

        assert [b.batch_no for b in inventory.get_all_batches()] == ['B1', 'B2']


class TestStockOnHand:

    def test_regular_only(self, stocked, product_id, warehouse_id):
        result = inventory.stock_on_hand(product_id, warehouse_id)

        assert result == StockOnHand(Decimal('50'), Decimal('0'), Decimal('0'))
        assert result.stock_on_hand == Decimal('50')

    def test_includes_net_transit(self, stocked, product_id, warehouse_id):
        b1, _ = stocked
        for code, qty in (('IN_TRANSIT', '10'), ('TRANSIT_OUT', '4')):
            inventory.post_movement(
                movement_code=code, product_id=product_id, warehouse_id=warehouse_id,
                batch_id=b1, qty=Decimal(qty), source_type='TRF', source_id=1,
            )

        result = inventory.stock_on_hand(product_id, warehouse_id)

        assert result.regular_stock == Decimal('50')
        assert result.net_transit == Decimal('6')
        assert result.stock_on_hand == Decimal('56')

    def test_discard_reduces_regular_stock(self, stocked, product_id, warehouse_id):
        b1, _ = stocked
        inventory.post_movement(
            movement_code='DISCARD', product_id=product_id, warehouse_id=warehouse_id,
            batch_id=b1, qty=Decimal('5'), source_type='QC', source_id=1,
        )

        assert inventory.stock_on_hand(product_id, warehouse_id, b1).stock_on_hand == Decimal('25')
