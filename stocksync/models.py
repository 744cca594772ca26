from django.db import models


class CatalogItem(models.Model):
    KIND_SIMPLE = 'simple'
    KIND_VARIATION = 'variation'
    KIND_CHOICES = [
        (KIND_SIMPLE, 'Simple'),
        (KIND_VARIATION, 'Variation'),
    ]

    STATUS_PUBLISH = 'publish'
    STATUS_DRAFT = 'draft'
    STATUS_CHOICES = [
        (STATUS_PUBLISH, 'Published'),
        (STATUS_DRAFT, 'Draft'),
    ]

    name = models.CharField(max_length=255)
    sku = models.CharField(max_length=100, blank=True, default='', db_index=True)
    kind = models.CharField(max_length=20, choices=KIND_CHOICES, default=KIND_SIMPLE)
    parent = models.ForeignKey(
        'self', null=True, blank=True, on_delete=models.CASCADE, related_name='variations',
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PUBLISH)
    manage_stock = models.BooleanField(default=False)
    stock_quantity = models.IntegerField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.name} (sku={self.sku or '-'})"


class SyncRunState(models.Model):
    """Progress record of the current or last stock sync run (single row)."""

    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_COMPLETED = 'completed'
    STATUS_CHOICES = [
        (STATUS_IN_PROGRESS, 'In progress'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    SINGLETON_KEY = 'stock_sync'

    key = models.CharField(max_length=50, unique=True, default=SINGLETON_KEY)
    run_id = models.CharField(max_length=32)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField(null=True, blank=True)
    total_items = models.PositiveIntegerField()
    total_chunks = models.PositiveIntegerField()
    current_chunk = models.PositiveIntegerField(default=0)
    processed_items = models.PositiveIntegerField(default=0)
    successful_updates = models.PositiveIntegerField(default=0)
    failed_updates = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_IN_PROGRESS)

    def __str__(self):
        return f"run {self.run_id[:8]} {self.status} ({self.current_chunk}/{self.total_chunks})"

    @property
    def is_in_progress(self):
        return self.status == self.STATUS_IN_PROGRESS

    def as_dict(self) -> dict:
        return {
            'run_id': self.run_id,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'total_items': self.total_items,
            'total_chunks': self.total_chunks,
            'current_chunk': self.current_chunk,
            'processed_items': self.processed_items,
            'successful_updates': self.successful_updates,
            'failed_updates': self.failed_updates,
            'status': self.status,
        }


class ScheduledChunk(models.Model):
    """A chunk job handed to Celery that has not fired yet."""

    run_id = models.CharField(max_length=32, db_index=True)
    chunk_index = models.PositiveIntegerField()
    item_ids = models.JSONField(default=list)
    scheduled_at = models.DateTimeField()
    task_id = models.CharField(max_length=255, blank=True, default='')

    class Meta:
        ordering = ['scheduled_at', 'chunk_index']
        constraints = [
            models.UniqueConstraint(fields=['run_id', 'chunk_index'], name='unique_chunk_per_run'),
        ]

    def __str__(self):
        return f"chunk {self.chunk_index} of run {self.run_id[:8]} at {self.scheduled_at:%Y-%m-%d %H:%M:%S}"
