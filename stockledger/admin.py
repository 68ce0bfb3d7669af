"""
Stockledger Admin.

Provides read-only views for production debugging:
- MovementType: reference table
- Batch: lot identity and expiry
- StockPosition: quantity and average cost (stock only changes via the service)
- InventoryTransaction: immutable audit trail, with a "void" action
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from stockledger.exceptions import StockError
from stockledger.models import Batch, InventoryTransaction, MovementType, StockPosition

logger = logging.getLogger('stockledger')


class ReadOnlyAdmin(admin.ModelAdmin):
    """Base admin without add/change/delete."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =============================================================================
# MOVEMENT TYPE ADMIN
# =============================================================================

@admin.register(MovementType)
class MovementTypeAdmin(ReadOnlyAdmin):
    list_display = ['code', 'name', 'direction', 'movement_class', 'is_active', 'sort_order']
    list_filter = ['direction', 'movement_class', 'is_active']
    search_fields = ['code', 'name']


# =============================================================================
# BATCH ADMIN
# =============================================================================

@admin.register(Batch)
class BatchAdmin(ReadOnlyAdmin):
    """Batch admin: lot traceability."""

    list_display = ['batch_no', 'product_id', 'mfg_date', 'exp_date', 'is_expired_display']
    list_filter = ['exp_date', 'mfg_date']
    search_fields = ['batch_no', 'notes']
    readonly_fields = ['created_at', 'updated_at']

    @admin.display(description=_('Expired?'), boolean=True)
    def is_expired_display(self, obj):
        return obj.is_expired


# =============================================================================
# STOCK POSITION ADMIN (read-only)
# =============================================================================

@admin.register(StockPosition)
class StockPositionAdmin(ReadOnlyAdmin):
    """StockPosition admin: read-only. Stock only changes via the inventory service."""

    list_display = ['product_id', 'warehouse_id', 'batch', 'qty_on_hand',
                    'unit_cost', 'stock_value_display']
    list_filter = ['warehouse_id']
    search_fields = ['batch__batch_no']
    list_select_related = ['batch']

    @admin.display(description=_('Stock value'))
    def stock_value_display(self, obj):
        return obj.stock_value


# =============================================================================
# INVENTORY TRANSACTION ADMIN (read-only with void action)
# =============================================================================

@admin.register(InventoryTransaction)
class InventoryTransactionAdmin(ReadOnlyAdmin):
    """InventoryTransaction admin: read-only audit trail."""

    list_display = ['id', 'txn_date', 'movement_type', 'txn_type', 'source_type',
                    'source_id', 'product_id', 'warehouse_id', 'batch', 'qty',
                    'unit_cost', 'total_amount', 'is_deleted']
    list_filter = ['movement_type', 'is_deleted', 'txn_date', 'qc_posting_type']
    search_fields = ['source_type', 'txn_type', 'batch__batch_no']
    list_select_related = ['movement_type', 'batch']
    date_hierarchy = 'txn_date'
    actions = ['void_transactions']

    @admin.action(description=_('Void selected transactions'))
    def void_transactions(self, request, queryset):
        from stockledger import inventory

        count = 0
        for txn in queryset.filter(is_deleted=False):
            try:
                inventory.void_transaction(txn.pk, reason='Voided via admin')
                count += 1
            except StockError as exc:
                logger.warning("void_transactions: failed to void %s: %s", txn.pk, exc)

        self.message_user(request, _('{count} transaction(s) voided.').format(count=count))
