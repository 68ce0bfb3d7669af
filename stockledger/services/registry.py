"""
Movement type registry: read-only lookups.

Unknown or inactive codes fail fast; nothing falls back to a default type.
"""

from stockledger.exceptions import StockNotFound
from stockledger.models.movement_type import MovementType


class MovementTypeRegistry:
    """Lookups over the movement_types reference table."""

    @classmethod
    def lookup_by_code(cls, code) -> MovementType:
        """
        Active movement type for a code.

        Raises:
            StockNotFound('MOVEMENT_TYPE_NOT_FOUND')
        """
        try:
            return MovementType.objects.active().get(code=str(code))
        except MovementType.DoesNotExist:
            raise StockNotFound('MOVEMENT_TYPE_NOT_FOUND', movement_code=str(code))

    @classmethod
    def lookup_by_id(cls, movement_type_id: int) -> MovementType:
        """
        Active movement type by primary key.

        Raises:
            StockNotFound('MOVEMENT_TYPE_NOT_FOUND')
        """
        try:
            return MovementType.objects.active().get(pk=movement_type_id)
        except MovementType.DoesNotExist:
            raise StockNotFound('MOVEMENT_TYPE_NOT_FOUND', id=movement_type_id)

    @classmethod
    def list_active(cls) -> list[MovementType]:
        return list(MovementType.objects.active().order_by('sort_order', 'name'))

    @classmethod
    def resolve(cls, movement_type) -> MovementType:
        """Accept a MovementType, a code or an id."""
        if isinstance(movement_type, MovementType):
            return movement_type
        if isinstance(movement_type, int):
            return cls.lookup_by_id(movement_type)
        return cls.lookup_by_code(movement_type)
