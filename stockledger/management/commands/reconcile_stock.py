"""
Management command to compare stock positions against the ledger.

Usage:
    python manage.py reconcile_stock
    python manage.py reconcile_stock --product 42 --warehouse 3

Reports drift only. Positions are never rewritten; post a compensating
movement to fix a reported drift.
"""

from django.core.management.base import BaseCommand

from stockledger.models import StockPosition


class Command(BaseCommand):
    """Reconcile stock positions command."""

    help = 'Compare qty_on_hand of each stock position with its ledger'

    def add_arguments(self, parser):
        parser.add_argument('--product', type=int, help='Only this product id')
        parser.add_argument('--warehouse', type=int, help='Only this warehouse id')

    def handle(self, *args, **options):
        positions = StockPosition.objects.select_related('batch').order_by('id')
        if options['product'] is not None:
            positions = positions.filter(product_id=options['product'])
        if options['warehouse'] is not None:
            positions = positions.filter(warehouse_id=options['warehouse'])

        checked = 0
        drifted = 0
        for position in positions:
            checked += 1
            drift = position.reconcile()
            if drift:
                drifted += 1
                self.stdout.write(self.style.WARNING(
                    f'{position}: ledger differs by {drift}'
                ))

        message = f'{checked} position(s) checked, {drifted} with drift'
        if drifted:
            self.stdout.write(self.style.ERROR(message))
        else:
            self.stdout.write(self.style.SUCCESS(message))
