"""
Initial migration for Stockledger models.
"""

from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create MovementType, Batch, StockPosition, InventoryTransaction."""

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='MovementType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=30, unique=True, verbose_name='Code')),
                ('name', models.CharField(max_length=100, verbose_name='Name')),
                ('direction', models.CharField(choices=[('IN', 'In'), ('OUT', 'Out')], max_length=3, verbose_name='Direction')),
                ('movement_class', models.CharField(choices=[('REGULAR', 'Regular'), ('TRANSIT', 'Transit'), ('DISCARD', 'Discard')], max_length=10, verbose_name='Class')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('sort_order', models.PositiveSmallIntegerField(default=0)),
            ],
            options={
                'verbose_name': 'Movement type',
                'verbose_name_plural': 'Movement types',
                'ordering': ['sort_order', 'name'],
            },
        ),
        migrations.CreateModel(
            name='Batch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_id', models.PositiveBigIntegerField(db_index=True, verbose_name='Product ID')),
                ('batch_no', models.CharField(max_length=100, verbose_name='Batch number')),
                ('mfg_date', models.DateField(blank=True, null=True, verbose_name='Manufacture date')),
                ('exp_date', models.DateField(blank=True, db_index=True, null=True, verbose_name='Expiry date')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Batch',
                'verbose_name_plural': 'Batches',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='StockPosition',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_id', models.PositiveBigIntegerField(verbose_name='Product ID')),
                ('warehouse_id', models.PositiveBigIntegerField(verbose_name='Warehouse ID')),
                ('qty_on_hand', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=18, verbose_name='Quantity on hand')),
                ('unit_cost', models.DecimalField(decimal_places=6, default=Decimal('0'), max_digits=20, verbose_name='Average unit cost')),
                ('currency_id', models.PositiveBigIntegerField(blank=True, null=True)),
                ('uom_id', models.PositiveBigIntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('batch', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='positions', to='stockledger.batch', verbose_name='Batch')),
            ],
            options={
                'verbose_name': 'Stock position',
                'verbose_name_plural': 'Stock positions',
            },
        ),
        migrations.CreateModel(
            name='InventoryTransaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('txn_date', models.DateField(db_index=True, default=django.utils.timezone.localdate, verbose_name='Date')),
                ('txn_type', models.CharField(blank=True, default='', help_text='Ex: "GRN", "DISPATCH", "TRANSFER"', max_length=50, verbose_name='Business type')),
                ('source_type', models.CharField(max_length=50, verbose_name='Source type')),
                ('source_id', models.PositiveBigIntegerField(verbose_name='Source ID')),
                ('source_line_id', models.PositiveBigIntegerField(blank=True, null=True)),
                ('product_id', models.PositiveBigIntegerField(verbose_name='Product ID')),
                ('warehouse_id', models.PositiveBigIntegerField(verbose_name='Warehouse ID')),
                ('qty', models.DecimalField(decimal_places=4, max_digits=18, verbose_name='Quantity')),
                ('unit_cost', models.DecimalField(decimal_places=6, max_digits=20, verbose_name='Unit cost')),
                ('amount', models.DecimalField(decimal_places=4, max_digits=20, verbose_name='Amount')),
                ('currency_id', models.PositiveBigIntegerField(blank=True, null=True)),
                ('exchange_rate', models.DecimalField(blank=True, decimal_places=8, max_digits=18, null=True)),
                ('foreign_amount', models.DecimalField(decimal_places=4, max_digits=20, verbose_name='Amount (transaction currency)')),
                ('total_amount', models.DecimalField(decimal_places=4, max_digits=20, verbose_name='Amount (base currency)')),
                ('uom_id', models.PositiveBigIntegerField(blank=True, null=True)),
                ('qc_posting_type', models.CharField(blank=True, default='', max_length=30)),
                ('is_deleted', models.BooleanField(db_index=True, default=False, verbose_name='Voided')),
                ('voided_at', models.DateTimeField(blank=True, null=True)),
                ('void_reason', models.CharField(blank=True, default='', max_length=255)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('batch', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='stockledger.batch', verbose_name='Batch')),
                ('movement_type', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='stockledger.movementtype', verbose_name='Movement type')),
                ('reverses', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='reversed_by', to='stockledger.inventorytransaction', verbose_name='Reverses')),
            ],
            options={
                'verbose_name': 'Inventory transaction',
                'verbose_name_plural': 'Inventory transactions',
                'ordering': ['id'],
            },
        ),
        migrations.AddConstraint(
            model_name='batch',
            constraint=models.UniqueConstraint(fields=('product_id', 'batch_no'), name='unique_batch_per_product'),
        ),
        migrations.AddConstraint(
            model_name='stockposition',
            constraint=models.UniqueConstraint(fields=('product_id', 'warehouse_id', 'batch'), name='unique_stock_position'),
        ),
        migrations.AddConstraint(
            model_name='stockposition',
            constraint=models.CheckConstraint(condition=models.Q(('qty_on_hand__gte', 0)), name='stock_position_qty_non_negative'),
        ),
        migrations.AddIndex(
            model_name='stockposition',
            index=models.Index(fields=['product_id', 'warehouse_id'], name='stockpos_product_wh_idx'),
        ),
        migrations.AddIndex(
            model_name='inventorytransaction',
            index=models.Index(fields=['product_id', 'warehouse_id', 'batch'], name='invtxn_key_idx'),
        ),
        migrations.AddIndex(
            model_name='inventorytransaction',
            index=models.Index(fields=['source_type', 'source_id'], name='invtxn_source_idx'),
        ),
    ]
