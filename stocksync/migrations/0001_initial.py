import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='CatalogItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('sku', models.CharField(blank=True, db_index=True, default='', max_length=100)),
                ('kind', models.CharField(choices=[('simple', 'Simple'), ('variation', 'Variation')], default='simple', max_length=20)),
                ('status', models.CharField(choices=[('publish', 'Published'), ('draft', 'Draft')], default='publish', max_length=20)),
                ('manage_stock', models.BooleanField(default=False)),
                ('stock_quantity', models.IntegerField(blank=True, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='variations', to='stocksync.catalogitem')),
            ],
            options={
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='SyncRunState',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(default='stock_sync', max_length=50, unique=True)),
                ('run_id', models.CharField(max_length=32)),
                ('start_time', models.DateTimeField()),
                ('end_time', models.DateTimeField(blank=True, null=True)),
                ('total_items', models.PositiveIntegerField()),
                ('total_chunks', models.PositiveIntegerField()),
                ('current_chunk', models.PositiveIntegerField(default=0)),
                ('processed_items', models.PositiveIntegerField(default=0)),
                ('successful_updates', models.PositiveIntegerField(default=0)),
                ('failed_updates', models.PositiveIntegerField(default=0)),
                ('status', models.CharField(choices=[('in_progress', 'In progress'), ('completed', 'Completed')], default='in_progress', max_length=20)),
            ],
        ),
        migrations.CreateModel(
            name='ScheduledChunk',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('run_id', models.CharField(db_index=True, max_length=32)),
                ('chunk_index', models.PositiveIntegerField()),
                ('item_ids', models.JSONField(default=list)),
                ('scheduled_at', models.DateTimeField()),
                ('task_id', models.CharField(blank=True, default='', max_length=255)),
            ],
            options={
                'ordering': ['scheduled_at', 'chunk_index'],
            },
        ),
        migrations.AddConstraint(
            model_name='scheduledchunk',
            constraint=models.UniqueConstraint(fields=('run_id', 'chunk_index'), name='unique_chunk_per_run'),
        ),
    ]
