import mimetypes
from datetime import timedelta

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator, validate_email
from django.db import models, transaction
from django.utils import timezone

from .labels import (
    CASE_CATEGORY_LABELS, CASE_STATUS_LABELS, CONSULTATION_STATUS_LABELS,
    CONSULTATION_TYPE_LABELS, DOCUMENT_STATUS_LABELS, DOCUMENT_TYPE_LABELS,
    PRIORITY_LABELS, ROLE_LABELS, choices,
)


class User(AbstractUser):
    """Account for every person using the system; ``role`` drives access."""

    ROLE_ADMIN = 'ADMIN'
    ROLE_MANAGER = 'MANAGER'
    ROLE_LAWYER = 'LAWYER'
    ROLE_CLIENT = 'CLIENT'

    STAFF_ROLES = (ROLE_ADMIN, ROLE_MANAGER)

    role = models.CharField(max_length=20, choices=choices(ROLE_LABELS), default=ROLE_CLIENT)
    phone = models.CharField(max_length=20, blank=True)

    class Meta:
        ordering = ['username']

    @property
    def client(self):
        """Return related Client instance if present."""
        return getattr(self, 'client_profile', None)

    @property
    def effective_role(self):
        # superusers created from the shell keep the default role
        if self.is_superuser:
            return self.ROLE_ADMIN
        return self.role

    @property
    def is_lawyer(self):
        return self.effective_role == self.ROLE_LAWYER

    @property
    def is_client(self):
        return self.effective_role == self.ROLE_CLIENT

    @property
    def is_manager_or_admin(self):
        return self.effective_role in self.STAFF_ROLES

    def __str__(self):
        return self.get_full_name() or self.username


class LawyerProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='lawyer_profile')
    specialization = models.CharField(max_length=100, blank=True)
    bio = models.TextField(blank=True, help_text="Short biography")
    photo = models.ImageField(upload_to='lawyer_photos/', blank=True, null=True)

    def __str__(self):
        return f"Profile of {self.user.get_full_name() or self.user.username}"


class Client(models.Model):
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='client_profile',
        verbose_name='User Account',
        null=True,  # walk-in clients have no account
        blank=True
    )
    name = models.CharField(
        max_length=100,
        help_text="Client's full name"
    )
    email = models.EmailField(
        unique=True,
        help_text="Primary email address (must be unique)"
    )
    phone = models.CharField(
        max_length=20,
        blank=True,
        null=True,
        help_text="Contact phone number"
    )
    address = models.TextField(
        blank=True,
        null=True,
        help_text="Full mailing address"
    )
    date_of_birth = models.DateField(
        blank=True,
        null=True,
        help_text="Date of birth (YYYY-MM-DD)",
        verbose_name="Date of Birth"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = 'Client'
        verbose_name_plural = 'Clients'
        indexes = [
            models.Index(fields=['email'], name='client_email_idx'),
            models.Index(fields=['name'], name='client_name_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.email})"

    def clean(self):
        """
        Ensure data integrity and proper formatting.
        """
        if not self.email:
            raise ValidationError({'email': 'Email is required.'})

        self.email = self.email.lower().strip()

        try:
            validate_email(self.email)
        except ValidationError:
            raise ValidationError({'email': 'Enter a valid email address.'})

        # Check for duplicate email (excluding self)
        query = Client.objects.filter(email=self.email)
        if self.pk:
            query = query.exclude(pk=self.pk)

        if query.exists():
            raise ValidationError({'email': 'A client with this email already exists.'})

        if not self.name or not self.name.strip():
            raise ValidationError({'name': 'Name is required.'})

        self.name = ' '.join(part.capitalize() for part in self.name.strip().split())

        if self.user_id:
            if User.objects.filter(email__iexact=self.email).exclude(pk=self.user_id).exists():
                raise ValidationError({'email': 'This email is already in use by another account.'})

    def save(self, *args, **kwargs):
        """
        Save the client and keep the linked User's email and names in sync.
        """
        self.full_clean()

        with transaction.atomic():
            super().save(*args, **kwargs)

            if self.user_id:
                user = self.user
                needs_save = False

                if self.email != user.email:
                    user.email = self.email
                    needs_save = True

                if not user.first_name and not user.last_name:
                    name_parts = self.name.split(' ', 1)
                    user.first_name = name_parts[0]
                    if len(name_parts) > 1:
                        user.last_name = name_parts[1]
                    needs_save = True

                if needs_save:
                    user.save()


class Case(models.Model):
    STATUS_NEW = 'NEW'
    STATUS_IN_PROGRESS = 'IN_PROGRESS'
    STATUS_AWAITING_HEARING = 'AWAITING_HEARING'
    STATUS_SUSPENDED = 'SUSPENDED'
    STATUS_WON = 'WON'
    STATUS_LOST = 'LOST'
    STATUS_SETTLED = 'SETTLED'
    STATUS_CLOSED = 'CLOSED'

    # reaching one of these stamps close_date
    FINAL_STATUSES = (STATUS_WON, STATUS_LOST, STATUS_SETTLED, STATUS_CLOSED)

    case_number = models.CharField(max_length=50, unique=True)
    title = models.CharField(max_length=200)
    description = models.TextField()
    category = models.CharField(max_length=30, choices=choices(CASE_CATEGORY_LABELS))
    status = models.CharField(max_length=30, choices=choices(CASE_STATUS_LABELS), default=STATUS_NEW)
    priority = models.CharField(max_length=20, choices=choices(PRIORITY_LABELS), default='MEDIUM')
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='cases')
    lawyer = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='assigned_cases', limit_choices_to={'role': User.ROLE_LAWYER},
    )
    open_date = models.DateField(default=timezone.localdate)
    close_date = models.DateField(null=True, blank=True)
    cost = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0)],
    )
    next_hearing_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-open_date', '-id']
        indexes = [
            models.Index(fields=['status'], name='case_status_idx'),
            models.Index(fields=['open_date'], name='case_open_date_idx'),
        ]

    def __str__(self):
        return f"{self.case_number}: {self.title}"

    @property
    def is_active(self):
        return self.status not in self.FINAL_STATUSES


class Document(models.Model):
    STATUS_DRAFT = 'DRAFT'

    # documents never disappear with their case implicitly,
    # see services.delete_case
    case = models.ForeignKey(Case, on_delete=models.PROTECT, related_name='documents')
    title = models.CharField(max_length=200, default='Untitled Document')
    document_type = models.CharField(max_length=30, choices=choices(DOCUMENT_TYPE_LABELS), default='OTHER')
    description = models.TextField(blank=True)
    file = models.FileField(upload_to='docs/')
    file_name = models.CharField(max_length=255, blank=True)
    file_size = models.PositiveBigIntegerField(null=True, blank=True)
    mime_type = models.CharField(max_length=100, blank=True)
    document_date = models.DateField(null=True, blank=True)
    document_number = models.CharField(max_length=100, blank=True)
    is_important = models.BooleanField(default=False)
    status = models.CharField(max_length=30, choices=choices(DOCUMENT_STATUS_LABELS), default=STATUS_DRAFT)
    notes = models.TextField(blank=True)
    uploaded_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    uploaded_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-uploaded_at', '-id']

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        # only a fresh upload carries new metadata
        if self.file and not self.file._committed:
            self.file_name = self.file.name.rsplit('/', 1)[-1]
            self.file_size = self.file.size
            self.mime_type = mimetypes.guess_type(self.file_name)[0] or 'application/octet-stream'
        super().save(*args, **kwargs)


class Consultation(models.Model):
    STATUS_SCHEDULED = 'SCHEDULED'
    STATUS_CONFIRMED = 'CONFIRMED'
    STATUS_IN_PROGRESS = 'IN_PROGRESS'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CANCELLED_BY_CLIENT = 'CANCELLED_BY_CLIENT'
    STATUS_CANCELLED_BY_LAWYER = 'CANCELLED_BY_LAWYER'
    STATUS_NO_SHOW = 'NO_SHOW'
    STATUS_RESCHEDULED = 'RESCHEDULED'

    # statuses that still occupy the lawyer's calendar
    LIVE_STATUSES = (STATUS_SCHEDULED, STATUS_CONFIRMED, STATUS_IN_PROGRESS)

    MIN_DURATION = 15
    MAX_DURATION = 480

    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='consultations')
    lawyer = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='lawyer_consultations', limit_choices_to={'role': User.ROLE_LAWYER},
    )
    start_time = models.DateTimeField()
    duration_minutes = models.PositiveSmallIntegerField(
        default=60,
        validators=[MinValueValidator(MIN_DURATION), MaxValueValidator(MAX_DURATION)],
    )
    topic = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    consultation_type = models.CharField(
        max_length=30, choices=choices(CONSULTATION_TYPE_LABELS), default='OFFICE',
    )
    status = models.CharField(
        max_length=30, choices=choices(CONSULTATION_STATUS_LABELS), default=STATUS_SCHEDULED,
    )
    cost = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0)],
    )
    lawyer_notes = models.TextField(blank=True)
    result = models.TextField(blank=True)
    is_paid = models.BooleanField(default=False)
    reminder_sent = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['start_time']
        indexes = [
            models.Index(fields=['start_time'], name='consultation_start_idx'),
            models.Index(fields=['status'], name='consultation_status_idx'),
        ]

    def __str__(self):
        return f"{self.topic} on {self.start_time:%Y-%m-%d %H:%M}"

    @property
    def end_time(self):
        if self.start_time is None:
            return None
        return self.start_time + timedelta(minutes=self.duration_minutes)

    @property
    def is_live(self):
        return self.status in self.LIVE_STATUSES

    @property
    def is_upcoming(self):
        if self.start_time is None:
            return False
        return self.start_time > timezone.now()

    @property
    def is_past(self):
        end_time = self.end_time
        if end_time is None:
            return False
        return end_time < timezone.now()
