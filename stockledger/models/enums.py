"""
Enums for Stockledger models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class MovementDirection(models.TextChoices):
    """Whether a movement increases or decreases quantity."""
    IN = 'IN', _('In')
    OUT = 'OUT', _('Out')


class MovementClass(models.TextChoices):
    """
    Class of stock a movement belongs to.

    REGULAR:  Stock physically on hand at a warehouse.
    TRANSIT:  Stock moving between locations. Tracked in the ledger only,
              never in StockPosition.
    DISCARD:  Stock written off. Decrements qty_on_hand like REGULAR OUT.
    """
    REGULAR = 'REGULAR', _('Regular')
    TRANSIT = 'TRANSIT', _('Transit')
    DISCARD = 'DISCARD', _('Discard')


class MovementCode(models.TextChoices):
    """Known movement type codes (seeded by migration 0002)."""
    REGULAR_IN = 'REGULAR_IN', _('Regular stock in')
    REGULAR_OUT = 'REGULAR_OUT', _('Regular stock out')
    IN_TRANSIT = 'IN_TRANSIT', _('In transit')
    TRANSIT_OUT = 'TRANSIT_OUT', _('Transit out')
    DISCARD = 'DISCARD', _('Discard')


# Movement used to compensate each code
REVERSE_CODES = {
    MovementCode.REGULAR_IN: MovementCode.REGULAR_OUT,
    MovementCode.REGULAR_OUT: MovementCode.REGULAR_IN,
    MovementCode.IN_TRANSIT: MovementCode.TRANSIT_OUT,
    MovementCode.TRANSIT_OUT: MovementCode.IN_TRANSIT,
    MovementCode.DISCARD: MovementCode.REGULAR_IN,
}


class AllocationPolicy(models.TextChoices):
    """Order in which batches are depleted."""
    FIFO = 'FIFO', _('First in, first out')
    FEFO = 'FEFO', _('First expiry, first out')
