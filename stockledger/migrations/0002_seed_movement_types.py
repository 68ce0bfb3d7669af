"""
Create the movement types.

DISCARD is an OUT movement: it decrements qty_on_hand like REGULAR_OUT.
"""

from django.db import migrations


MOVEMENT_TYPES = [
    {'code': 'REGULAR_IN', 'name': 'Regular Stock In', 'direction': 'IN',
     'movement_class': 'REGULAR', 'sort_order': 1},
    {'code': 'REGULAR_OUT', 'name': 'Regular Stock Out', 'direction': 'OUT',
     'movement_class': 'REGULAR', 'sort_order': 2},
    {'code': 'IN_TRANSIT', 'name': 'In Transit', 'direction': 'IN',
     'movement_class': 'TRANSIT', 'sort_order': 3},
    {'code': 'TRANSIT_OUT', 'name': 'Transit Out', 'direction': 'OUT',
     'movement_class': 'TRANSIT', 'sort_order': 4},
    {'code': 'DISCARD', 'name': 'Discard', 'direction': 'OUT',
     'movement_class': 'DISCARD', 'sort_order': 5},
]


def create_movement_types(apps, schema_editor):
    MovementType = apps.get_model('stockledger', 'MovementType')

    for data in MOVEMENT_TYPES:
        MovementType.objects.get_or_create(
            code=data['code'],
            defaults=data,
        )


def remove_movement_types(apps, schema_editor):
    MovementType = apps.get_model('stockledger', 'MovementType')
    MovementType.objects.filter(
        code__in=[data['code'] for data in MOVEMENT_TYPES]
    ).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('stockledger', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(create_movement_types, remove_movement_types),
    ]
