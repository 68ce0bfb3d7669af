"""
Pytest fixtures for Stockledger tests.

Movement types are seeded by migration 0002, so every test database
already has REGULAR_IN, REGULAR_OUT, IN_TRANSIT, TRANSIT_OUT and DISCARD.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from stockledger import inventory
from stockledger.models import MovementCode


PRODUCT_ID = 42
WAREHOUSE_ID = 1
OTHER_WAREHOUSE_ID = 2


@pytest.fixture
def product_id():
    return PRODUCT_ID


@pytest.fixture
def warehouse_id():
    return WAREHOUSE_ID


@pytest.fixture
def other_warehouse_id():
    return OTHER_WAREHOUSE_ID


@pytest.fixture
def today():
    """Return today's date."""
    return timezone.localdate()


@pytest.fixture
def batch_b1(db, today):
    """Older batch, expires later."""
    return inventory.upsert_batch(
        PRODUCT_ID, 'B1',
        mfg_date=today - timedelta(days=30),
        exp_date=today + timedelta(days=60),
    )


@pytest.fixture
def batch_b2(db, today):
    """Newer batch, expires sooner."""
    return inventory.upsert_batch(
        PRODUCT_ID, 'B2',
        mfg_date=today - timedelta(days=10),
        exp_date=today + timedelta(days=10),
    )


@pytest.fixture
def receive(db):
    """Post a REGULAR_IN for PRODUCT_ID into a batch."""

    def _receive(batch_id, qty, unit_cost, warehouse_id=WAREHOUSE_ID,
                 product_id=PRODUCT_ID, source_id=1, **kwargs):
        return inventory.post_movement(
            movement_code=MovementCode.REGULAR_IN,
            product_id=product_id,
            warehouse_id=warehouse_id,
            batch_id=batch_id,
            qty=Decimal(str(qty)),
            unit_cost=Decimal(str(unit_cost)),
            source_type='GRN',
            source_id=source_id,
            txn_type='GRN',
            **kwargs,
        )

    return _receive


@pytest.fixture
def stocked(batch_b1, batch_b2, receive):
    """B1: 30 @ 10, B2: 20 @ 12 in WAREHOUSE_ID."""
    receive(batch_b1, '30', '10')
    receive(batch_b2, '20', '12')
    return batch_b1, batch_b2
