import django.contrib.auth.models
import django.contrib.auth.validators
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


ROLE_CHOICES = [('ADMIN', 'Administrator'), ('MANAGER', 'Manager'), ('LAWYER', 'Lawyer'), ('CLIENT', 'Client')]

CASE_CATEGORY_CHOICES = [
    ('CIVIL', 'Civil'), ('CRIMINAL', 'Criminal'), ('ADMINISTRATIVE', 'Administrative'),
    ('CORPORATE', 'Corporate'), ('FAMILY', 'Family'), ('LABOR', 'Labor dispute'), ('TAX', 'Tax'),
    ('INTELLECTUAL_PROPERTY', 'Intellectual property'),
]

CASE_STATUS_CHOICES = [
    ('NEW', 'New'), ('IN_PROGRESS', 'In progress'), ('AWAITING_HEARING', 'Awaiting hearing'),
    ('SUSPENDED', 'Suspended'), ('WON', 'Won'), ('LOST', 'Lost'), ('SETTLED', 'Settled'), ('CLOSED', 'Closed'),
]

PRIORITY_CHOICES = [('LOW', 'Low'), ('MEDIUM', 'Medium'), ('HIGH', 'High'), ('CRITICAL', 'Critical')]

DOCUMENT_TYPE_CHOICES = [
    ('CONTRACT', 'Contract'), ('COMPLAINT', 'Statement of claim'), ('COURT_DECISION', 'Court decision'),
    ('COURT_PROTOCOL', 'Hearing transcript'), ('POWER_OF_ATTORNEY', 'Power of attorney'),
    ('APPLICATION', 'Application'), ('MOTION', 'Motion'), ('APPEAL', 'Appeal'),
    ('CERTIFICATE', 'Certificate'), ('ACT', 'Act'), ('LETTER', 'Letter'), ('OTHER', 'Other'),
]

DOCUMENT_STATUS_CHOICES = [
    ('DRAFT', 'Draft'), ('UNDER_REVIEW', 'Under review'), ('APPROVED', 'Approved'), ('SIGNED', 'Signed'),
    ('SENT', 'Sent'), ('RECEIVED', 'Received'), ('ARCHIVED', 'Archived'),
]

CONSULTATION_STATUS_CHOICES = [
    ('SCHEDULED', 'Scheduled'), ('CONFIRMED', 'Confirmed'), ('IN_PROGRESS', 'In progress'),
    ('COMPLETED', 'Completed'), ('CANCELLED_BY_CLIENT', 'Cancelled by client'),
    ('CANCELLED_BY_LAWYER', 'Cancelled by lawyer'), ('NO_SHOW', 'Client did not show up'),
    ('RESCHEDULED', 'Rescheduled'),
]

CONSULTATION_TYPE_CHOICES = [
    ('OFFICE', 'At the office'), ('ONLINE', 'Online'), ('PHONE', 'By phone'), ('HOME_VISIT', 'Home visit'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('role', models.CharField(choices=ROLE_CHOICES, default='CLIENT', max_length=20)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'ordering': ['username'],
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Client',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text="Client's full name", max_length=100)),
                ('email', models.EmailField(help_text='Primary email address (must be unique)', max_length=254, unique=True)),
                ('phone', models.CharField(blank=True, help_text='Contact phone number', max_length=20, null=True)),
                ('address', models.TextField(blank=True, help_text='Full mailing address', null=True)),
                ('date_of_birth', models.DateField(blank=True, help_text='Date of birth (YYYY-MM-DD)', null=True, verbose_name='Date of Birth')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='client_profile', to=settings.AUTH_USER_MODEL, verbose_name='User Account')),
            ],
            options={
                'verbose_name': 'Client',
                'verbose_name_plural': 'Clients',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['email'], name='client_email_idx'),
                    models.Index(fields=['name'], name='client_name_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='LawyerProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('specialization', models.CharField(blank=True, max_length=100)),
                ('bio', models.TextField(blank=True, help_text='Short biography')),
                ('photo', models.ImageField(blank=True, null=True, upload_to='lawyer_photos/')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='lawyer_profile', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Case',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('case_number', models.CharField(max_length=50, unique=True)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('category', models.CharField(choices=CASE_CATEGORY_CHOICES, max_length=30)),
                ('status', models.CharField(choices=CASE_STATUS_CHOICES, default='NEW', max_length=30)),
                ('priority', models.CharField(choices=PRIORITY_CHOICES, default='MEDIUM', max_length=20)),
                ('open_date', models.DateField(default=django.utils.timezone.localdate)),
                ('close_date', models.DateField(blank=True, null=True)),
                ('cost', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('next_hearing_date', models.DateField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='cases', to='core.client')),
                ('lawyer', models.ForeignKey(blank=True, limit_choices_to={'role': 'LAWYER'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_cases', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-open_date', '-id'],
                'indexes': [
                    models.Index(fields=['status'], name='case_status_idx'),
                    models.Index(fields=['open_date'], name='case_open_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Document',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(default='Untitled Document', max_length=200)),
                ('document_type', models.CharField(choices=DOCUMENT_TYPE_CHOICES, default='OTHER', max_length=30)),
                ('description', models.TextField(blank=True)),
                ('file', models.FileField(upload_to='docs/')),
                ('file_name', models.CharField(blank=True, max_length=255)),
                ('file_size', models.PositiveBigIntegerField(blank=True, null=True)),
                ('mime_type', models.CharField(blank=True, max_length=100)),
                ('document_date', models.DateField(blank=True, null=True)),
                ('document_number', models.CharField(blank=True, max_length=100)),
                ('is_important', models.BooleanField(default=False)),
                ('status', models.CharField(choices=DOCUMENT_STATUS_CHOICES, default='DRAFT', max_length=30)),
                ('notes', models.TextField(blank=True)),
                ('uploaded_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('case', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='documents', to='core.case')),
                ('uploaded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-uploaded_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='Consultation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('start_time', models.DateTimeField()),
                ('duration_minutes', models.PositiveSmallIntegerField(default=60, validators=[django.core.validators.MinValueValidator(15), django.core.validators.MaxValueValidator(480)])),
                ('topic', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('consultation_type', models.CharField(choices=CONSULTATION_TYPE_CHOICES, default='OFFICE', max_length=30)),
                ('status', models.CharField(choices=CONSULTATION_STATUS_CHOICES, default='SCHEDULED', max_length=30)),
                ('cost', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('lawyer_notes', models.TextField(blank=True)),
                ('result', models.TextField(blank=True)),
                ('is_paid', models.BooleanField(default=False)),
                ('reminder_sent', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='consultations', to='core.client')),
                ('lawyer', models.ForeignKey(blank=True, limit_choices_to={'role': 'LAWYER'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='lawyer_consultations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['start_time'],
                'indexes': [
                    models.Index(fields=['start_time'], name='consultation_start_idx'),
                    models.Index(fields=['status'], name='consultation_status_idx'),
                ],
            },
        ),
    ]
