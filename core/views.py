import logging
from datetime import datetime, time

from django.contrib import messages
from django.contrib.auth import get_user_model
from django.contrib.auth.decorators import login_required
from django.contrib.auth.mixins import LoginRequiredMixin
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from django.http import Http404, JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse_lazy
from django.utils import timezone
from django.views.decorators.http import require_POST
from django.views.generic import UpdateView

from . import policies, services, statistics
from .decorators import role_required
from .exceptions import BookingConflict, NotFound
from .forms import (
    CaseForm, ClientProfileForm, ClientRegistrationForm, ConsultationForm,
    ConsultationUpdateForm, DocumentForm, StatisticsPeriodForm, UserAdminForm,
)
from .labels import (
    CASE_STATUS_LABELS, CONSULTATION_STATUS_LABELS, DOCUMENT_STATUS_LABELS,
    DOCUMENT_TYPE_LABELS, ROLE_LABELS, label_for,
)
from .models import Case, Client, Consultation, Document

User = get_user_model()
logger = logging.getLogger(__name__)

ADMIN = User.ROLE_ADMIN
MANAGER = User.ROLE_MANAGER
LAWYER = User.ROLE_LAWYER


def landing_page(request):
    if request.user.is_authenticated:
        return redirect('dashboard')
    return render(request, 'landing.html', {'lawyers': services.active_lawyers()[:3]})


def register(request):
    if request.user.is_authenticated:
        messages.info(request, 'You are already logged in.')
        return redirect('dashboard')

    if request.method == 'POST':
        form = ClientRegistrationForm(request.POST)
        if form.is_valid():
            try:
                with transaction.atomic():
                    form.instance.is_active = False  # Require admin validation
                    form.save()
                messages.success(request, 'Your account has been created and is pending admin approval. You will be able to log in once an admin activates your account.')
                return redirect('login')
            except ValidationError as e:
                for error in e.messages:
                    form.add_error(None, error)
            except Exception:
                logger.exception("Error during registration")
                messages.error(request, 'An unexpected error occurred during registration. Please try again or contact support.')
    else:
        form = ClientRegistrationForm()

    return render(request, 'registration/register.html', {
        'form': form,
        'title': 'Client Registration'
    })


class ClientProfileView(LoginRequiredMixin, UpdateView):
    model = Client
    form_class = ClientProfileForm
    template_name = 'profile.html'
    success_url = reverse_lazy('dashboard')

    def get_object(self, queryset=None):
        """Return Client profile for the logged-in user, creating one if missing."""
        user = self.request.user
        try:
            return user.client_profile
        except Client.DoesNotExist:
            name = (user.get_full_name() or user.username).strip()
            if not user.email:
                # Ensure an email value (use placeholder)
                user.email = f"{user.username}@example.com"
                user.save(update_fields=["email"])
            return Client.objects.create(user=user, name=name, email=user.email)

    def form_valid(self, form):
        messages.success(self.request, 'Profile updated successfully!')
        return super().form_valid(form)


@login_required
def dashboard(request):
    user = request.user
    context = {
        'cases': policies.visible_cases(user).select_related('client', 'lawyer')[:10],
        'consultations': policies.visible_consultations(user).filter(
            status__in=Consultation.LIVE_STATUSES,
        ).select_related('client', 'lawyer')[:10],
    }
    if user.is_lawyer:
        context['upcoming'] = services.upcoming_for_lawyer(user)[:5]
    if user.is_manager_or_admin:
        context['upcoming'] = services.upcoming_consultations(limit=5)
        context['hearings'] = services.upcoming_hearings()[:5]
        context['recent_cases'] = services.recent_cases(limit=5)
    return render(request, 'dashboard.html', context)


def lawyers_list(request):
    lawyers = services.active_lawyers().select_related('lawyer_profile')
    return render(request, 'lawyers_list.html', {'lawyers': lawyers})


# Clients

@login_required
@role_required(ADMIN, MANAGER, LAWYER)
def client_list(request):
    clients = policies.visible_clients(request.user)
    query = request.GET.get('q')
    if query:
        clients = clients.filter(Q(name__icontains=query) | Q(email__icontains=query))
    return render(request, 'clients/list.html', {'clients': clients, 'query': query or ''})


@login_required
@role_required(ADMIN, MANAGER, LAWYER)
def client_create(request):
    if request.method == 'POST':
        form = ClientProfileForm(request.POST)
        if form.is_valid():
            client = form.save()
            messages.success(request, f'Client "{client.name}" has been created successfully.')
            return redirect('client_detail', pk=client.pk)
    else:
        form = ClientProfileForm()
    return render(request, 'form_template.html', {'form': form, 'title': 'Add New Client'})


@login_required
def client_detail(request, pk):
    client = get_object_or_404(Client, pk=pk)
    if not policies.can_view_client(request.user, client):
        messages.error(request, 'You do not have permission to view this client.')
        return redirect('dashboard')
    context = {
        'client': client,
        'cases': policies.visible_cases(request.user, client.cases.all()),
        'consultations': policies.visible_consultations(request.user, client.consultations.all()),
    }
    return render(request, 'client_detail.html', context)


@login_required
@role_required(ADMIN, MANAGER, LAWYER)
def client_update(request, pk):
    client = get_object_or_404(Client, pk=pk)
    if request.method == 'POST':
        form = ClientProfileForm(request.POST, instance=client)
        if form.is_valid():
            form.save()
            messages.success(request, f'Client "{client.name}" has been updated successfully.')
            return redirect('client_detail', pk=client.pk)
    else:
        form = ClientProfileForm(instance=client)
    return render(request, 'form_template.html', {'form': form, 'title': 'Edit Client'})


# Cases

@login_required
def case_list(request):
    cases = policies.visible_cases(request.user).select_related('client', 'lawyer')
    query = request.GET.get('q', '')
    status = request.GET.get('status')
    if query:
        cases = services.search_cases(query, cases)
    if status in CASE_STATUS_LABELS:
        cases = cases.filter(status=status)
    return render(request, 'cases/list.html', {
        'cases': cases,
        'query': query,
        'statuses': CASE_STATUS_LABELS,
    })


@login_required
@role_required(ADMIN, MANAGER, LAWYER)
def case_create(request):
    if request.method == 'POST':
        form = CaseForm(request.POST)
        if form.is_valid():
            case = form.save()
            logger.info("Case %s opened by %s", case.case_number, request.user.username)
            messages.success(request, f'Case "{case.title}" has been created successfully.')
            return redirect('case_detail', pk=case.pk)
    else:
        form = CaseForm()
    return render(request, 'form_template.html', {'form': form, 'title': 'Add New Case'})


@login_required
def case_detail(request, pk):
    case = get_object_or_404(Case, pk=pk)
    if not policies.can_view_case(request.user, case):
        messages.error(request, 'You do not have permission to view this case.')
        return redirect('dashboard')

    can_upload = request.user.effective_role in (ADMIN, MANAGER, LAWYER)
    form = DocumentForm()

    if request.method == 'POST':
        if not can_upload:
            messages.error(request, 'You do not have permission to upload documents.')
            return redirect('case_detail', pk=case.pk)
        form = DocumentForm(request.POST, request.FILES)
        if form.is_valid():
            document = form.save(commit=False)
            document.case = case
            document.uploaded_by = request.user
            document.save()
            messages.success(request, f'Document "{document.title}" has been uploaded successfully.')
            return redirect('case_detail', pk=case.pk)

    context = {
        'case': case,
        'documents': case.documents.all(),
        'form': form,
        'can_upload': can_upload,
        'statuses': CASE_STATUS_LABELS,
        'document_statuses': DOCUMENT_STATUS_LABELS,
        'lawyers': services.active_lawyers() if request.user.is_manager_or_admin else None,
    }
    return render(request, 'case_detail.html', context)


@login_required
@role_required(ADMIN, MANAGER, LAWYER)
def case_update(request, pk):
    case = get_object_or_404(Case, pk=pk)
    if request.method == 'POST':
        form = CaseForm(request.POST, instance=case)
        if form.is_valid():
            form.save()
            messages.success(request, f'Case "{case.title}" has been updated successfully.')
            return redirect('case_detail', pk=case.pk)
    else:
        form = CaseForm(instance=case)
    return render(request, 'form_template.html', {'form': form, 'title': 'Edit Case'})


@login_required
@role_required(ADMIN, MANAGER, LAWYER)
@require_POST
def case_change_status(request, pk):
    status = request.POST.get('status', '')
    try:
        services.change_case_status(pk, status)
    except NotFound:
        raise Http404
    except ValidationError as e:
        messages.error(request, ' '.join(e.messages))
    else:
        messages.success(request, f'Case status changed to "{label_for("case_status", status)}".')
    return redirect('case_detail', pk=pk)


@login_required
@role_required(ADMIN, MANAGER)
@require_POST
def case_assign_lawyer(request, pk):
    try:
        lawyer_id = int(request.POST.get('lawyer', ''))
    except ValueError:
        messages.error(request, 'Please choose a lawyer.')
        return redirect('case_detail', pk=pk)
    try:
        case = services.assign_case_lawyer(pk, lawyer_id)
    except NotFound as e:
        messages.error(request, str(e))
    else:
        messages.success(request, f'Case assigned to {case.lawyer}.')
    return redirect('case_detail', pk=pk)


@login_required
@role_required(ADMIN, MANAGER)
def case_delete(request, pk):
    case = get_object_or_404(Case, pk=pk)
    if request.method == 'POST':
        removed = services.delete_case(case.pk)
        messages.success(request, f'Case "{case.title}" and {removed} document(s) have been deleted.')
        return redirect('case_list')
    return render(request, 'confirm_delete.html', {
        'object': case,
        'title': 'Delete Case',
        'warning': f'{case.documents.count()} document(s) attached to this case will be deleted too.',
    })


# Documents

@login_required
@role_required(ADMIN, MANAGER, LAWYER)
def document_list(request):
    documents = policies.visible_documents(request.user).select_related('case')
    document_type = request.GET.get('document_type')
    status = request.GET.get('status')
    case_id = request.GET.get('case')
    if document_type in DOCUMENT_TYPE_LABELS:
        documents = documents.filter(document_type=document_type)
    if status in DOCUMENT_STATUS_LABELS:
        documents = documents.filter(status=status)
    if case_id and case_id.isdigit():
        documents = documents.filter(case_id=int(case_id))
    if request.GET.get('important'):
        documents = documents.filter(is_important=True)
    return render(request, 'documents/list.html', {
        'documents': documents,
        'document_types': DOCUMENT_TYPE_LABELS,
        'statuses': DOCUMENT_STATUS_LABELS,
    })


@login_required
@role_required(ADMIN, MANAGER, LAWYER)
def document_update(request, pk):
    document = get_object_or_404(Document, pk=pk)
    if request.method == 'POST':
        form = DocumentForm(request.POST, request.FILES, instance=document)
        if form.is_valid():
            form.save()
            messages.success(request, f'Document "{document.title}" has been updated.')
            return redirect('case_detail', pk=document.case_id)
    else:
        form = DocumentForm(instance=document)
    return render(request, 'form_template.html', {'form': form, 'title': 'Edit Document'})


@login_required
@role_required(ADMIN, MANAGER, LAWYER)
@require_POST
def document_change_status(request, pk):
    document = get_object_or_404(Document, pk=pk)
    try:
        services.change_document_status(pk, request.POST.get('status', ''))
    except ValidationError as e:
        messages.error(request, ' '.join(e.messages))
    return redirect('case_detail', pk=document.case_id)


@login_required
@role_required(ADMIN, MANAGER, LAWYER)
@require_POST
def document_toggle_important(request, pk):
    document = get_object_or_404(Document, pk=pk)
    services.mark_document_important(pk, not document.is_important)
    return redirect('case_detail', pk=document.case_id)


@login_required
@role_required(ADMIN, MANAGER, LAWYER)
@require_POST
def document_delete(request, pk):
    document = get_object_or_404(Document, pk=pk)
    services.delete_document(pk)
    messages.success(request, f'Document "{document.title}" has been deleted.')
    return redirect('case_detail', pk=document.case_id)


# Consultations

def _service_error(form, error):
    """Show a service-level rejection on the form as a non-field error."""
    for message in getattr(error, 'messages', [str(error)]):
        form.add_error(None, message)


@login_required
def consultation_list(request):
    consultations = policies.visible_consultations(request.user).select_related('client', 'lawyer')
    status = request.GET.get('status')
    if status in CONSULTATION_STATUS_LABELS:
        consultations = consultations.filter(status=status)
    if request.GET.get('unpaid') and request.user.is_manager_or_admin:
        consultations = services.unpaid_consultations(consultations)
    return render(request, 'consultations/list.html', {
        'consultations': consultations,
        'statuses': CONSULTATION_STATUS_LABELS,
    })


@login_required
def consultation_create(request):
    user = request.user
    if user.is_client and user.client is None:
        messages.error(request, 'Please complete your profile before booking a consultation.')
        return redirect('profile')

    if request.method == 'POST':
        form = ConsultationForm(request.POST, user=user)
        if form.is_valid():
            consultation = form.save(commit=False)
            if user.is_client:
                consultation.client = user.client
            try:
                services.create_consultation(consultation)
            except (BookingConflict, NotFound, ValidationError) as e:
                _service_error(form, e)
            else:
                messages.success(request, f'Consultation booked for {consultation.start_time:%Y-%m-%d %H:%M}.')
                return redirect('consultation_detail', pk=consultation.pk)
    else:
        form = ConsultationForm(user=user)
    return render(request, 'form_template.html', {'form': form, 'title': 'Book a Consultation'})


@login_required
def consultation_detail(request, pk):
    consultation = get_object_or_404(Consultation.objects.select_related('client', 'lawyer'), pk=pk)
    if not policies.can_view_consultation(request.user, consultation):
        messages.error(request, 'You do not have permission to view this consultation.')
        return redirect('dashboard')
    return render(request, 'consultations/detail.html', {
        'consultation': consultation,
        'statuses': CONSULTATION_STATUS_LABELS,
        'lawyers': services.active_lawyers(),
    })


@login_required
@role_required(ADMIN, MANAGER, LAWYER)
def consultation_update(request, pk):
    consultation = get_object_or_404(Consultation, pk=pk)
    if request.method == 'POST':
        form = ConsultationUpdateForm(request.POST, instance=consultation, user=request.user)
        if form.is_valid():
            try:
                services.update_consultation(form.save(commit=False))
            except (BookingConflict, NotFound, ValidationError) as e:
                _service_error(form, e)
            else:
                messages.success(request, 'Consultation updated successfully.')
                return redirect('consultation_detail', pk=pk)
    else:
        form = ConsultationUpdateForm(instance=consultation, user=request.user)
    return render(request, 'form_template.html', {'form': form, 'title': 'Edit Consultation'})


@login_required
@role_required(ADMIN, MANAGER, LAWYER)
@require_POST
def consultation_change_status(request, pk):
    status = request.POST.get('status', '')
    try:
        services.change_consultation_status(pk, status)
    except NotFound:
        raise Http404
    except ValidationError as e:
        messages.error(request, ' '.join(e.messages))
    else:
        messages.success(request, f'Consultation status changed to "{label_for("consultation_status", status)}".')
    return redirect('consultation_detail', pk=pk)


@login_required
@role_required(ADMIN, MANAGER)
@require_POST
def consultation_assign(request, pk):
    try:
        lawyer_id = int(request.POST.get('lawyer', ''))
    except ValueError:
        messages.error(request, 'Please choose a lawyer.')
        return redirect('consultation_detail', pk=pk)
    try:
        services.assign_lawyer(pk, lawyer_id)
    except BookingConflict as e:
        messages.error(request, e.messages[0])
    except NotFound as e:
        messages.error(request, str(e))
    else:
        messages.success(request, 'Lawyer assigned.')
    return redirect('consultation_detail', pk=pk)


@login_required
@role_required(ADMIN, MANAGER)
@require_POST
def consultation_mark_paid(request, pk):
    try:
        services.mark_consultation_paid(pk)
    except NotFound:
        raise Http404
    messages.success(request, 'Consultation marked as paid.')
    return redirect('consultation_detail', pk=pk)


@login_required
@role_required(ADMIN, MANAGER, LAWYER)
@require_POST
def consultation_send_reminder(request, pk):
    try:
        services.mark_reminder_sent(pk)
    except NotFound:
        raise Http404
    messages.success(request, 'Reminder marked as sent.')
    return redirect('consultation_detail', pk=pk)


@login_required
@role_required(ADMIN, MANAGER)
@require_POST
def consultation_delete(request, pk):
    try:
        services.delete_consultation(pk)
    except NotFound:
        raise Http404
    messages.success(request, 'Consultation deleted.')
    return redirect('consultation_list')


# Statistics

@login_required
@role_required(ADMIN, MANAGER)
def statistics_view(request):
    return render(request, 'statistics.html', {
        'stats': statistics.general_statistics(),
        'top_lawyers': statistics.top_lawyers_by_case_count(limit=5),
        'charts': list(statistics.CHARTS),
    })


@login_required
@role_required(ADMIN, MANAGER)
def statistics_period(request):
    form = StatisticsPeriodForm(request.GET)
    context = {'form': form}
    if form.is_valid():
        start_date = form.cleaned_data['start_date']
        end_date = form.cleaned_data['end_date']
        context.update({
            'start_date': start_date,
            'end_date': end_date,
            'case_stats': statistics.case_statistics_for_period(start_date, end_date),
            'consultation_stats': statistics.consultation_statistics_for_period(
                timezone.make_aware(datetime.combine(start_date, time.min)),
                timezone.make_aware(datetime.combine(end_date, time.max)),
            ),
        })
    return render(request, 'statistics_period.html', context)


@login_required
@role_required(ADMIN, MANAGER)
def statistics_chart(request, kind):
    try:
        counter, labels = statistics.CHARTS[kind]
    except KeyError:
        raise Http404(f"Unknown chart {kind}")
    return JsonResponse(statistics.chart_data(counter(), labels))


# Users

@login_required
@role_required(ADMIN)
def user_list(request):
    query = request.GET.get('q', '')
    users = services.search_users(query)
    role = request.GET.get('role')
    if role in ROLE_LABELS:
        users = users.filter(role=role)
    return render(request, 'users/list.html', {
        'users': users,
        'query': query,
        'roles': ROLE_LABELS,
    })


@login_required
@role_required(ADMIN)
def user_detail(request, pk):
    account = get_object_or_404(User, pk=pk)
    context = {
        'account': account,
        'roles': ROLE_LABELS,
        'assigned_cases': account.assigned_cases.select_related('client')[:10],
        'consultations': account.lawyer_consultations.select_related('client')[:10],
    }
    return render(request, 'users/detail.html', context)


@login_required
@role_required(ADMIN)
def user_update(request, pk):
    account = get_object_or_404(User, pk=pk)
    if request.method == 'POST':
        form = UserAdminForm(request.POST, instance=account)
        if form.is_valid():
            account = form.save()
            messages.success(request, f'User "{account.username}" has been updated.')
            return redirect('user_detail', pk=account.pk)
    else:
        form = UserAdminForm(instance=account)
    return render(request, 'form_template.html', {'form': form, 'title': f'Edit {account.username}'})


@login_required
@role_required(ADMIN)
@require_POST
def user_change_role(request, pk):
    role = request.POST.get('role', '')
    try:
        account = services.change_user_role(pk, role)
    except NotFound:
        raise Http404
    except ValidationError as e:
        messages.error(request, ' '.join(e.messages))
    else:
        messages.success(request, f'User "{account.username}" is now {label_for("role", role)}.')
    return redirect('user_detail', pk=pk)


@login_required
@role_required(ADMIN)
@require_POST
def user_toggle_active(request, pk):
    account = get_object_or_404(User, pk=pk)
    if account == request.user:
        messages.error(request, 'You cannot deactivate your own account.')
    else:
        services.set_user_active(pk, not account.is_active)
    return redirect('user_list')
