from django import forms
from django.contrib.auth import get_user_model
from django.contrib.auth.forms import UserCreationForm
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.utils import timezone

from .models import Case, Client, Consultation, Document
from .services import active_lawyers

User = get_user_model()

DATETIME_INPUT_FORMATS = ['%Y-%m-%dT%H:%M', '%Y-%m-%d %H:%M', '%Y-%m-%d %H:%M:%S']


def _is_adult(date_of_birth):
    today = timezone.now().date()
    age = today.year - date_of_birth.year - ((today.month, today.day) < (date_of_birth.month, date_of_birth.day))
    return age >= 18


class ClientRegistrationForm(UserCreationForm):
    name = forms.CharField(
        max_length=100,
        required=True,
        help_text='Your full name',
        widget=forms.TextInput(attrs={
            'class': 'form-control',
            'placeholder': 'John Doe',
            'autofocus': 'autofocus'
        })
    )
    email = forms.EmailField(
        required=True,
        help_text='A valid email address',
        widget=forms.EmailInput(attrs={
            'class': 'form-control',
            'placeholder': 'your.email@example.com',
            'autocomplete': 'email'
        })
    )
    phone = forms.CharField(
        max_length=20,
        required=True,
        help_text='Your phone number',
        widget=forms.TextInput(attrs={
            'class': 'form-control',
            'placeholder': '+1 (555) 123-4567'
        })
    )
    address = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 2})
    )
    date_of_birth = forms.DateField(
        required=False,
        widget=forms.DateInput(attrs={'type': 'date', 'class': 'form-control'})
    )

    class Meta(UserCreationForm.Meta):
        model = User
        fields = ('username', 'email', 'name', 'phone', 'address', 'date_of_birth')

    def clean_username(self):
        username = self.cleaned_data.get('username', '').strip()
        if User.objects.filter(username__iexact=username).exists():
            raise forms.ValidationError('This username is already taken.')
        return username

    def clean_email(self):
        email = self.cleaned_data.get('email', '').lower().strip()
        if User.objects.filter(email__iexact=email).exists() or Client.objects.filter(email=email).exists():
            raise forms.ValidationError('This email is already registered.')
        return email

    def clean_date_of_birth(self):
        date_of_birth = self.cleaned_data.get('date_of_birth')
        if date_of_birth and not _is_adult(date_of_birth):
            raise forms.ValidationError('You must be at least 18 years old.')
        return date_of_birth

    def save(self, commit=True):
        user = super().save(commit=False)
        user.email = self.cleaned_data['email']
        user.phone = self.cleaned_data['phone']
        user.role = User.ROLE_CLIENT
        name_parts = self.cleaned_data['name'].split(' ', 1)
        user.first_name = name_parts[0]
        if len(name_parts) > 1:
            user.last_name = name_parts[1]
        if commit:
            user.save()
            Client.objects.create(
                user=user,
                name=self.cleaned_data['name'],
                email=self.cleaned_data['email'],
                phone=self.cleaned_data['phone'],
                address=self.cleaned_data.get('address') or None,
                date_of_birth=self.cleaned_data.get('date_of_birth'),
            )
        return user


class ClientProfileForm(forms.ModelForm):
    """
    Form for client profile information, used both by clients editing
    their own profile and by staff registering walk-in clients.
    Updates the associated User account when there is one.
    """
    email = forms.EmailField(
        required=True,
        help_text='Email address',
        widget=forms.EmailInput(attrs={
            'class': 'form-control',
            'placeholder': 'your.email@example.com',
            'autocomplete': 'email'
        }),
        error_messages={
            'required': 'Please enter your email address.',
            'invalid': 'Please enter a valid email address.'
        }
    )

    name = forms.CharField(
        max_length=100,
        required=True,
        help_text='Full name',
        widget=forms.TextInput(attrs={
            'class': 'form-control',
            'placeholder': 'John Doe'
        }),
        error_messages={
            'required': 'Please enter your full name.',
            'max_length': 'Name is too long (max 100 characters).'
        }
    )

    phone = forms.CharField(
        max_length=20,
        required=False,
        help_text='Contact phone number (optional)',
        widget=forms.TextInput(attrs={
            'class': 'form-control',
            'placeholder': '+1 (555) 123-4567'
        })
    )

    address = forms.CharField(
        required=False,
        help_text='Mailing address (optional)',
        widget=forms.Textarea(attrs={
            'class': 'form-control',
            'rows': 3,
            'placeholder': '123 Main St, City, State, ZIP'
        })
    )

    date_of_birth = forms.DateField(
        required=False,
        help_text='Date of birth (YYYY-MM-DD)',
        widget=forms.DateInput(attrs={'type': 'date', 'class': 'form-control'}),
        error_messages={
            'invalid': 'Please enter a valid date (YYYY-MM-DD).'
        }
    )

    class Meta:
        model = Client
        fields = ['name', 'email', 'phone', 'address', 'date_of_birth']
        error_messages = {
            'email': {
                'unique': 'This email is already in use by another client.'
            }
        }

    def clean_email(self):
        email = self.cleaned_data.get('email', '').lower().strip()
        if not email:
            raise forms.ValidationError('Please enter your email address.')

        try:
            validate_email(email)
        except ValidationError:
            raise forms.ValidationError('Please enter a valid email address.')

        users = User.objects.filter(email__iexact=email)
        if self.instance.user_id:
            users = users.exclude(pk=self.instance.user_id)
        if users.exists():
            raise forms.ValidationError('This email is already in use by another account.')

        return email

    def clean_name(self):
        name = self.cleaned_data.get('name', '').strip()
        if not name:
            raise forms.ValidationError('Please enter your full name.')

        return ' '.join(part.capitalize() for part in name.split() if part)

    def clean_date_of_birth(self):
        date_of_birth = self.cleaned_data.get('date_of_birth')
        if date_of_birth and not _is_adult(date_of_birth):
            raise forms.ValidationError('You must be at least 18 years old.')
        return date_of_birth

    def save(self, commit=True):
        """
        Save the client profile; Client.save keeps the account email in sync,
        the account names are refreshed here.
        """
        client = super().save(commit=False)

        if client.user_id:
            name_parts = self.cleaned_data['name'].split(' ', 1)
            client.user.first_name = name_parts[0]
            client.user.last_name = name_parts[1] if len(name_parts) > 1 else ''

        if commit:
            client.save()
            if client.user_id:
                client.user.save()

        return client


class LawyerChoiceMixin:
    def limit_lawyers(self):
        if 'lawyer' in self.fields:
            self.fields['lawyer'].queryset = active_lawyers()
            self.fields['lawyer'].required = False


class CaseForm(LawyerChoiceMixin, forms.ModelForm):
    class Meta:
        model = Case
        fields = [
            'case_number', 'title', 'client', 'lawyer', 'category', 'status', 'priority',
            'description', 'open_date', 'next_hearing_date', 'cost', 'notes',
        ]
        widgets = {
            'description': forms.Textarea(attrs={'rows': 3}),
            'notes': forms.Textarea(attrs={'rows': 2}),
            'open_date': forms.DateInput(attrs={'type': 'date'}),
            'next_hearing_date': forms.DateInput(attrs={'type': 'date'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.limit_lawyers()


class DocumentForm(forms.ModelForm):
    class Meta:
        model = Document
        fields = [
            'title', 'document_type', 'file', 'description', 'document_date',
            'document_number', 'is_important', 'notes',
        ]
        widgets = {
            'description': forms.Textarea(attrs={'rows': 2}),
            'notes': forms.Textarea(attrs={'rows': 2}),
            'document_date': forms.DateInput(attrs={'type': 'date'}),
        }


class ConsultationForm(LawyerChoiceMixin, forms.ModelForm):
    """
    Booking form. Clients book for themselves, so the client field is
    dropped when ``user`` is a client.
    """
    start_time = forms.DateTimeField(
        input_formats=DATETIME_INPUT_FORMATS,
        widget=forms.DateTimeInput(attrs={'type': 'datetime-local', 'class': 'form-control'}, format='%Y-%m-%dT%H:%M'),
    )

    class Meta:
        model = Consultation
        fields = ['client', 'lawyer', 'start_time', 'duration_minutes', 'consultation_type', 'topic', 'description', 'cost']
        widgets = {
            'description': forms.Textarea(attrs={'class': 'form-control', 'rows': 3, 'placeholder': 'Describe your question (optional)'}),
        }

    def __init__(self, *args, user=None, **kwargs):
        super().__init__(*args, **kwargs)
        if user is not None and user.is_client:
            del self.fields['client']
            del self.fields['cost']
        self.limit_lawyers()


class ConsultationUpdateForm(ConsultationForm):
    class Meta(ConsultationForm.Meta):
        fields = ConsultationForm.Meta.fields + ['status', 'lawyer_notes', 'result', 'is_paid']
        widgets = {
            'description': forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
            'lawyer_notes': forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
            'result': forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
        }


class UserAdminForm(forms.ModelForm):
    class Meta:
        model = User
        fields = ['first_name', 'last_name', 'email', 'phone', 'is_active']


class StatisticsPeriodForm(forms.Form):
    start_date = forms.DateField(required=False, widget=forms.DateInput(attrs={'type': 'date', 'class': 'form-control'}))
    end_date = forms.DateField(required=False, widget=forms.DateInput(attrs={'type': 'date', 'class': 'form-control'}))

    def clean(self):
        cleaned_data = super().clean()
        today = timezone.localdate()
        # defaults: the current month up to today
        start_date = cleaned_data.get('start_date') or today.replace(day=1)
        end_date = cleaned_data.get('end_date') or today
        if start_date > end_date:
            raise forms.ValidationError('The start date must not be after the end date.')
        cleaned_data['start_date'] = start_date
        cleaned_data['end_date'] = end_date
        return cleaned_data
