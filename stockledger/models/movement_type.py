"""
MovementType model: reference table of movement semantics.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import (
    REVERSE_CODES,
    MovementClass,
    MovementCode,
    MovementDirection,
)


class MovementTypeQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)


class MovementType(models.Model):
    """
    Kind of stock movement.

    Immutable reference data, created by migration at setup time.
    All components consult this table instead of hard-coding what a
    movement does to quantity.
    """

    code = models.CharField(
        max_length=30,
        unique=True,
        verbose_name=_('Code'),
    )
    name = models.CharField(max_length=100, verbose_name=_('Name'))
    direction = models.CharField(
        max_length=3,
        choices=MovementDirection.choices,
        verbose_name=_('Direction'),
    )
    movement_class = models.CharField(
        max_length=10,
        choices=MovementClass.choices,
        verbose_name=_('Class'),
    )
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))
    sort_order = models.PositiveSmallIntegerField(default=0)

    objects = MovementTypeQuerySet.as_manager()

    class Meta:
        verbose_name = _('Movement type')
        verbose_name_plural = _('Movement types')
        ordering = ['sort_order', 'name']

    @property
    def is_in(self) -> bool:
        return self.direction == MovementDirection.IN

    @property
    def is_out(self) -> bool:
        return self.direction == MovementDirection.OUT

    @property
    def is_transit(self) -> bool:
        return self.movement_class == MovementClass.TRANSIT

    @property
    def affects_position(self) -> bool:
        """Regular and discard movements change StockPosition; transit does not."""
        return not self.is_transit

    @property
    def sign(self) -> int:
        return 1 if self.is_in else -1

    @property
    def reverse_code(self) -> str:
        """Code of the movement that compensates this one."""
        return REVERSE_CODES[MovementCode(self.code)]

    def __str__(self) -> str:
        return f"{self.code} ({self.direction}/{self.movement_class})"
