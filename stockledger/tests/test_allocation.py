"""
Tests for FIFO/FEFO planning and allocation validation.
"""

from datetime import date
from decimal import Decimal

import pytest

from stockledger import InsufficientStock, StockNotFound, StockValidationError, inventory
from stockledger.models import AllocationPolicy, InventoryTransaction, StockPosition


pytestmark = pytest.mark.django_db


def _plan(lines):
    return [(line.batch_no, line.quantity) for line in lines]


class TestAllocateFifo:

    def test_oldest_batch_first(self, stocked, product_id, warehouse_id):
        lines = inventory.allocate_fifo(product_id, warehouse_id, Decimal('50'))

        assert _plan(lines) == [('B1', Decimal('30')), ('B2', Decimal('20'))]

    def test_partial_batch(self, stocked, product_id, warehouse_id):
        lines = inventory.allocate_fifo(product_id, warehouse_id, Decimal('10'))

        assert _plan(lines) == [('B1', Decimal('10'))]
        assert lines[0].unit_cost == Decimal('10')

    def test_planning_writes_nothing(self, stocked, product_id, warehouse_id):
        before = InventoryTransaction.objects.count()

        inventory.allocate_fifo(product_id, warehouse_id, Decimal('50'))

        assert InventoryTransaction.objects.count() == before
        assert StockPosition.objects.total_quantity() == Decimal('50')

    def test_partial_take_from_second_batch(self, batch_b1, batch_b2, receive,
                                            product_id, warehouse_id):
        """B1 30, B2 40, allocate 50: all of B1 then 20 of B2."""
        receive(batch_b1, '30', '10')
        receive(batch_b2, '40', '12')

        lines = inventory.allocate_fifo(product_id, warehouse_id, Decimal('50'))

        assert _plan(lines) == [('B1', Decimal('30')), ('B2', Decimal('20'))]


class TestAllocateFefo:

    def test_dated_batches(self, receive, product_id, warehouse_id):
        """B1 expires 2025-01-01, B2 expires 2024-06-01: B2 goes first."""
        b1 = inventory.upsert_batch(product_id, 'B1', exp_date=date(2025, 1, 1))
        b2 = inventory.upsert_batch(product_id, 'B2', exp_date=date(2024, 6, 1))
        receive(b1, '30', '10')
        receive(b2, '40', '12')

        lines = inventory.allocate_fefo(product_id, warehouse_id, Decimal('20'))

        assert _plan(lines) == [('B2', Decimal('20'))]

    def test_soonest_expiry_first(self, stocked, product_id, warehouse_id):
        lines = inventory.allocate_fefo(product_id, warehouse_id, Decimal('20'))

        assert _plan(lines) == [('B2', Decimal('20'))]

    def test_spills_to_next_expiry(self, stocked, product_id, warehouse_id):
        lines = inventory.allocate_fefo(product_id, warehouse_id, Decimal('25'))

        assert _plan(lines) == [('B2', Decimal('20')), ('B1', Decimal('5'))]

    def test_batches_without_expiry_last(self, stocked, receive, product_id, warehouse_id):
        undated = inventory.upsert_batch(product_id, 'B0')
        receive(undated, '5', '1')

        lines = inventory.allocate_fefo(product_id, warehouse_id, Decimal('55'))

        assert _plan(lines)[-1] == ('B0', Decimal('5'))


class TestAllocate:

    def test_dispatch_on_policy(self, stocked, product_id, warehouse_id):
        lines = inventory.allocate(AllocationPolicy.FEFO, product_id, warehouse_id, Decimal('1'))

        assert _plan(lines) == [('B2', Decimal('1'))]

    def test_unknown_policy(self, stocked, product_id, warehouse_id):
        with pytest.raises(StockValidationError) as exc:
            inventory.allocate('LIFO', product_id, warehouse_id, Decimal('1'))

        assert exc.value.code == 'INVALID_POLICY'

    def test_insufficient_stock(self, stocked, product_id, warehouse_id):
        with pytest.raises(InsufficientStock) as exc:
            inventory.allocate_fifo(product_id, warehouse_id, Decimal('51'))

        assert exc.value.available == Decimal('50')
        assert exc.value.requested == Decimal('51')

    def test_other_warehouse_not_used(self, stocked, product_id, other_warehouse_id):
        with pytest.raises(InsufficientStock):
            inventory.allocate_fifo(product_id, other_warehouse_id, Decimal('1'))

    def test_zero_quantity(self, stocked, product_id, warehouse_id):
        with pytest.raises(StockValidationError):
            inventory.allocate_fifo(product_id, warehouse_id, Decimal('0'))


class TestValidateBatchStock:

    def test_valid_allocation(self, stocked, product_id, warehouse_id):
        b1, b2 = stocked

        inventory.validate_batch_stock([
            {'batch_id': b1, 'product_id': product_id, 'quantity': Decimal('30')},
            {'batch_id': b2, 'product_id': product_id, 'quantity': Decimal('5')},
        ], warehouse_id)

    def test_short_batch(self, stocked, product_id, warehouse_id):
        _, b2 = stocked

        with pytest.raises(InsufficientStock) as exc:
            inventory.validate_batch_stock([
                {'batch_id': b2, 'product_id': product_id, 'quantity': Decimal('21')},
            ], warehouse_id)

        assert exc.value.data['shortfall'] == Decimal('1')

    def test_batch_not_in_warehouse(self, stocked, product_id, other_warehouse_id):
        b1, _ = stocked

        with pytest.raises(StockNotFound) as exc:
            inventory.validate_batch_stock([
                {'batch_id': b1, 'product_id': product_id, 'quantity': Decimal('1')},
            ], other_warehouse_id)

        assert exc.value.code == 'POSITION_NOT_FOUND'

    @pytest.mark.parametrize('quantity', [Decimal('-5'), Decimal('0')])
    def test_non_positive_quantity(self, stocked, product_id, warehouse_id, quantity):
        b1, _ = stocked

        with pytest.raises(StockValidationError) as exc:
            inventory.validate_batch_stock([
                {'batch_id': b1, 'product_id': product_id, 'quantity': quantity},
            ], warehouse_id)

        assert exc.value.code == 'INVALID_QUANTITY'

    def test_lines_for_same_batch_are_summed(self, stocked, product_id, warehouse_id):
        """Two lines of 20 against 30 on hand ask for 40 in total."""
        b1, _ = stocked

        with pytest.raises(InsufficientStock) as exc:
            inventory.validate_batch_stock([
                {'batch_id': b1, 'product_id': product_id, 'quantity': Decimal('20')},
                {'batch_id': b1, 'product_id': product_id, 'quantity': Decimal('20')},
            ], warehouse_id)

        assert exc.value.requested == Decimal('40')
        assert exc.value.data['shortfall'] == Decimal('10')

    def test_full_plan_validates(self, stocked, product_id, warehouse_id):
        lines = inventory.allocate_fifo(product_id, warehouse_id, Decimal('50'))

        inventory.validate_batch_stock(
            [{'batch_id': line.batch_id, 'product_id': product_id, 'quantity': line.quantity}
             for line in lines],
            warehouse_id,
        )
