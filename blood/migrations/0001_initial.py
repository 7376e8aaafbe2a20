import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='BloodType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('label', models.CharField(db_column='type', max_length=16, unique=True, verbose_name='Blood type')),
            ],
            options={
                'db_table': 'blood_types',
                'ordering': ['label'],
            },
        ),
        migrations.CreateModel(
            name='Donor',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=120, verbose_name='Name')),
                ('phone', models.CharField(blank=True, max_length=32, verbose_name='Phone')),
                ('city', models.CharField(blank=True, max_length=80, verbose_name='City')),
                ('created_at', models.DateField(default=django.utils.timezone.localdate, verbose_name='Created at')),
                ('deleted_at', models.DateTimeField(blank=True, null=True, verbose_name='Deleted at')),
                ('blood_type', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='donors', to='blood.bloodtype')),
            ],
            options={
                'db_table': 'donors',
                'ordering': ['-id'],
            },
        ),
        migrations.CreateModel(
            name='Recipient',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=120, verbose_name='Name')),
                ('phone', models.CharField(blank=True, max_length=32, verbose_name='Phone')),
                ('hospital', models.CharField(blank=True, max_length=120, verbose_name='Hospital')),
                ('created_at', models.DateField(default=django.utils.timezone.localdate, verbose_name='Created at')),
                ('deleted_at', models.DateTimeField(blank=True, null=True, verbose_name='Deleted at')),
                ('blood_type', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='recipients', to='blood.bloodtype')),
            ],
            options={
                'db_table': 'recipients',
                'ordering': ['-id'],
            },
        ),
        migrations.CreateModel(
            name='Donation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('units', models.PositiveIntegerField(verbose_name='Units')),
                ('donation_date', models.DateField(default=django.utils.timezone.localdate, verbose_name='Donation date')),
                ('expiry_date', models.DateField(verbose_name='Expiry date')),
                ('deleted_at', models.DateTimeField(blank=True, null=True, verbose_name='Deleted at')),
                ('donor', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='donations', to='blood.donor')),
            ],
            options={
                'db_table': 'donations',
                'ordering': ['-id'],
            },
        ),
        migrations.CreateModel(
            name='BloodRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('units', models.PositiveIntegerField(verbose_name='Units')),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('Fulfilled', 'Fulfilled'), ('Cancelled', 'Cancelled')], db_index=True, default='Pending', max_length=10, verbose_name='Status')),
                ('request_date', models.DateField(default=django.utils.timezone.localdate, verbose_name='Request date')),
                ('deleted_at', models.DateTimeField(blank=True, null=True, verbose_name='Deleted at')),
                ('recipient', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='requests', to='blood.recipient')),
            ],
            options={
                'db_table': 'requests',
                'ordering': ['-id'],
            },
        ),
        migrations.CreateModel(
            name='Inventory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('units', models.PositiveIntegerField(default=0, verbose_name='Units')),
                ('deleted_at', models.DateTimeField(blank=True, null=True, verbose_name='Deleted at')),
                ('blood_type', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='inventory', to='blood.bloodtype')),
            ],
            options={
                'verbose_name_plural': 'inventory',
                'db_table': 'inventory',
                'ordering': ['blood_type__label'],
            },
        ),
    ]
