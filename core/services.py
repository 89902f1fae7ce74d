import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from .exceptions import BookingConflict, NotFound
from .labels import CASE_STATUS_LABELS, CONSULTATION_STATUS_LABELS, DOCUMENT_STATUS_LABELS, ROLE_LABELS
from .models import Case, Client, Consultation, Document, LawyerProfile, User
from .scheduling import is_lawyer_busy

logger = logging.getLogger(__name__)


def _get(model, pk, what):
    try:
        return model.objects.get(pk=pk)
    except model.DoesNotExist:
        raise NotFound(f"{what} with id {pk} not found.")


def _lock_lawyer(lawyer_id):
    """
    Fetch the lawyer row with a row lock so two bookings for the same lawyer
    cannot pass the availability check at the same time.
    """
    lawyer = User.objects.select_for_update().filter(pk=lawyer_id).first()
    if lawyer is None:
        raise NotFound(f"Lawyer with id {lawyer_id} not found.")
    return lawyer


# Consultations

def get_consultation(pk):
    return _get(Consultation, pk, 'Consultation')


def create_consultation(consultation):
    """
    Validate and store a new booking. It always starts as SCHEDULED.

    Raises ValidationError for a missing client or a start in the past,
    NotFound for unknown client/lawyer and BookingConflict when the lawyer is
    already booked for an overlapping slot.
    """
    if not consultation.client_id:
        raise ValidationError({'client': 'A client must be specified.'})
    if not Client.objects.filter(pk=consultation.client_id).exists():
        raise NotFound(f"Client with id {consultation.client_id} not found.")

    consultation.status = Consultation.STATUS_SCHEDULED

    with transaction.atomic():
        if consultation.lawyer_id:
            _ensure_lawyer_free(consultation, consultation.lawyer_id)

        if consultation.start_time <= timezone.now():
            raise ValidationError({'start_time': 'The consultation date must be in the future.'})

        consultation.full_clean()
        consultation.save()

    logger.info("Consultation %s booked for %s", consultation.pk, consultation.start_time)
    return consultation


def _ensure_lawyer_free(consultation, lawyer_id):
    """
    Lock the lawyer and raise BookingConflict when ``consultation``'s slot
    clashes with another of their live bookings.
    """
    lawyer = _lock_lawyer(lawyer_id)
    if is_lawyer_busy(
        lawyer_id,
        consultation.start_time,
        consultation.duration_minutes,
        exclude_consultation_id=consultation.pk,
    ):
        logger.warning(
            "Rejected consultation %s for lawyer %s at %s: slot taken",
            consultation.pk, lawyer_id, consultation.start_time,
        )
        raise BookingConflict()
    return lawyer


def update_consultation(consultation):
    """
    Store edits to an existing booking.

    A live booking with a lawyer is checked again whenever the lawyer, the
    start time or the duration changed, or when it comes back to a live
    status from a cancelled or finished one. Non-live bookings never block
    and are never blocked.
    """
    stored = get_consultation(consultation.pk)
    slot_changed = (
        consultation.lawyer_id != stored.lawyer_id
        or consultation.start_time != stored.start_time
        or consultation.duration_minutes != stored.duration_minutes
    )
    revived = consultation.is_live and not stored.is_live

    with transaction.atomic():
        if consultation.lawyer_id and consultation.is_live and (slot_changed or revived):
            _ensure_lawyer_free(consultation, consultation.lawyer_id)

        consultation.full_clean()
        consultation.save()

    return consultation


def assign_lawyer(consultation_id, lawyer_id):
    consultation = get_consultation(consultation_id)

    with transaction.atomic():
        if consultation.is_live:
            lawyer = _ensure_lawyer_free(consultation, lawyer_id)
        else:
            lawyer = _lock_lawyer(lawyer_id)
        consultation.lawyer = lawyer
        consultation.save(update_fields=['lawyer', 'updated_at'])

    logger.info("Consultation %s assigned to lawyer %s", consultation.pk, lawyer_id)
    return consultation


def change_consultation_status(consultation_id, status):
    """
    Any status may follow any other, but moving a cancelled or finished
    booking back to a live status checks the lawyer's calendar first.
    """
    if status not in CONSULTATION_STATUS_LABELS:
        raise ValidationError({'status': f'Unknown consultation status "{status}".'})
    consultation = get_consultation(consultation_id)
    revived = status in Consultation.LIVE_STATUSES and not consultation.is_live
    consultation.status = status

    with transaction.atomic():
        if revived and consultation.lawyer_id:
            _ensure_lawyer_free(consultation, consultation.lawyer_id)
        consultation.save(update_fields=['status', 'updated_at'])

    return consultation


def mark_consultation_paid(consultation_id):
    consultation = get_consultation(consultation_id)
    consultation.is_paid = True
    consultation.save(update_fields=['is_paid', 'updated_at'])
    return consultation


def mark_reminder_sent(consultation_id):
    consultation = get_consultation(consultation_id)
    consultation.reminder_sent = True
    consultation.save(update_fields=['reminder_sent', 'updated_at'])
    return consultation


def delete_consultation(consultation_id):
    consultation = get_consultation(consultation_id)
    consultation.delete()
    logger.info("Consultation %s deleted", consultation_id)


def upcoming_consultations(limit=5):
    return list(
        Consultation.objects
        .filter(
            start_time__gt=timezone.now(),
            status__in=[Consultation.STATUS_SCHEDULED, Consultation.STATUS_CONFIRMED],
        )
        .select_related('client', 'lawyer')
        .order_by('start_time')[:limit]
    )


def upcoming_for_lawyer(lawyer):
    return (
        Consultation.objects
        .filter(lawyer=lawyer, start_time__gt=timezone.now())
        .select_related('client')
        .order_by('start_time')
    )


def unpaid_consultations(queryset=None):
    if queryset is None:
        queryset = Consultation.objects.all()
    return queryset.filter(is_paid=False).select_related('client', 'lawyer')


# Cases

def get_case(pk):
    return _get(Case, pk, 'Case')


def change_case_status(case_id, status):
    if status not in CASE_STATUS_LABELS:
        raise ValidationError({'status': f'Unknown case status "{status}".'})
    case = get_case(case_id)
    case.status = status
    if status in Case.FINAL_STATUSES and case.close_date is None:
        case.close_date = timezone.localdate()
    case.save(update_fields=['status', 'close_date', 'updated_at'])
    return case


def assign_case_lawyer(case_id, lawyer_id):
    case = get_case(case_id)
    lawyer = User.objects.filter(pk=lawyer_id, role=User.ROLE_LAWYER).first()
    if lawyer is None:
        raise NotFound(f"Lawyer with id {lawyer_id} not found.")
    case.lawyer = lawyer
    case.save(update_fields=['lawyer', 'updated_at'])
    logger.info("Case %s assigned to lawyer %s", case.case_number, lawyer_id)
    return case


def delete_case(case_id):
    """
    Delete a case together with its documents and their stored files.

    Returns the number of documents removed.
    """
    case = get_case(case_id)
    documents = list(case.documents.all())

    with transaction.atomic():
        for document in documents:
            _delete_document(document)
        case.delete()

    logger.info("Case %s deleted with %d document(s)", case.case_number, len(documents))
    return len(documents)


def search_cases(keyword, queryset=None):
    if queryset is None:
        queryset = Case.objects.all()
    keyword = (keyword or '').strip()
    if not keyword:
        return queryset
    return queryset.filter(
        Q(case_number__icontains=keyword) |
        Q(title__icontains=keyword) |
        Q(description__icontains=keyword)
    ).distinct()


def upcoming_hearings():
    return (
        Case.objects
        .filter(next_hearing_date__gte=timezone.localdate())
        .select_related('client', 'lawyer')
        .order_by('next_hearing_date')
    )


def recent_cases(limit=5):
    return list(Case.objects.select_related('client').order_by('-created_at', '-id')[:limit])


# Documents

def get_document(pk):
    return _get(Document, pk, 'Document')


def _delete_document(document):
    stored_file = document.file
    document.delete()
    if stored_file:
        # the file goes only once the rows are really gone
        transaction.on_commit(lambda: stored_file.storage.delete(stored_file.name))


def delete_document(document_id):
    document = get_document(document_id)
    with transaction.atomic():
        _delete_document(document)


def change_document_status(document_id, status):
    if status not in DOCUMENT_STATUS_LABELS:
        raise ValidationError({'status': f'Unknown document status "{status}".'})
    document = get_document(document_id)
    document.status = status
    document.save(update_fields=['status', 'updated_at'])
    return document


def mark_document_important(document_id, important=True):
    document = get_document(document_id)
    document.is_important = important
    document.save(update_fields=['is_important', 'updated_at'])
    return document


# Users

def active_lawyers():
    return User.objects.filter(role=User.ROLE_LAWYER, is_active=True).order_by('last_name', 'first_name')


def search_users(keyword, queryset=None):
    """Match username, names, email, phone or role code, case-insensitively."""
    if queryset is None:
        queryset = User.objects.all()
    keyword = (keyword or '').strip()
    if not keyword:
        return queryset
    return queryset.filter(
        Q(username__icontains=keyword) |
        Q(first_name__icontains=keyword) |
        Q(last_name__icontains=keyword) |
        Q(email__icontains=keyword) |
        Q(phone__icontains=keyword) |
        Q(role__iexact=keyword)
    )


def change_user_role(user_id, role):
    if role not in ROLE_LABELS:
        raise ValidationError({'role': f'Unknown role "{role}".'})
    user = _get(User, user_id, 'User')
    user.role = role
    user.save(update_fields=['role'])
    if role == User.ROLE_LAWYER:
        LawyerProfile.objects.get_or_create(user=user)
    logger.info("User %s is now %s", user.username, role)
    return user


def set_user_active(user_id, active):
    user = _get(User, user_id, 'User')
    user.is_active = active
    user.save(update_fields=['is_active'])
    return user
