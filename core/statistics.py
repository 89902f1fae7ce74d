"""
Counting and grouping for the managers' statistics page.
"""
from django.db.models import Avg, Count

from .labels import (
    CASE_CATEGORY_LABELS, CASE_STATUS_LABELS, CONSULTATION_STATUS_LABELS,
    DOCUMENT_TYPE_LABELS, ROLE_LABELS,
)
from .models import Case, Consultation, Document, User


def _round(value):
    return round(float(value or 0), 2)


def count_by(queryset, field, codes=None):
    """
    ``{code: count}`` over ``field``. When ``codes`` is given every code
    appears, with 0 for the ones that have no rows.
    """
    rows = queryset.order_by().values(field).annotate(total=Count('id'))
    counts = {row[field]: row['total'] for row in rows}
    if codes is None:
        return counts
    return {code: counts.get(code, 0) for code in codes}


def users_by_role():
    return count_by(User.objects.all(), 'role', ROLE_LABELS)


def cases_by_status():
    return count_by(Case.objects.all(), 'status', CASE_STATUS_LABELS)


def cases_by_category():
    return count_by(Case.objects.all(), 'category', CASE_CATEGORY_LABELS)


def consultations_by_status():
    return count_by(Consultation.objects.all(), 'status', CONSULTATION_STATUS_LABELS)


def documents_by_type():
    # only the types actually present
    return count_by(Document.objects.all(), 'document_type')


def average_cases_per_lawyer():
    lawyers = User.objects.filter(role=User.ROLE_LAWYER, is_active=True).count()
    if not lawyers:
        return 0.0
    return _round(Case.objects.count() / lawyers)


def average_consultation_duration():
    return _round(Consultation.objects.aggregate(avg=Avg('duration_minutes'))['avg'])


def top_lawyers_by_case_count(limit=5):
    return list(
        User.objects
        .filter(role=User.ROLE_LAWYER)
        .annotate(case_count=Count('assigned_cases'))
        .order_by('-case_count', 'username')[:limit]
    )


def case_statistics_for_period(start_date, end_date):
    cases = Case.objects.filter(open_date__range=(start_date, end_date))
    return {
        'total_cases': cases.count(),
        'by_status': count_by(cases, 'status'),
        'by_category': count_by(cases, 'category'),
        'average_cost': _round(cases.exclude(cost__isnull=True).aggregate(avg=Avg('cost'))['avg']),
    }


def consultation_statistics_for_period(start, end):
    consultations = Consultation.objects.filter(start_time__range=(start, end))
    return {
        'total_consultations': consultations.count(),
        'by_status': count_by(consultations, 'status'),
        'average_cost': _round(
            consultations.exclude(cost__isnull=True).aggregate(avg=Avg('cost'))['avg']
        ),
        'paid_consultations': consultations.filter(is_paid=True).count(),
    }


def general_statistics():
    return {
        'total_users': User.objects.count(),
        'users_by_role': users_by_role(),
        'total_cases': Case.objects.count(),
        'cases_by_status': cases_by_status(),
        'cases_by_category': cases_by_category(),
        'average_cases_per_lawyer': average_cases_per_lawyer(),
        'total_consultations': Consultation.objects.count(),
        'consultations_by_status': consultations_by_status(),
        'average_consultation_duration': average_consultation_duration(),
        'total_documents': Document.objects.count(),
        'documents_by_type': documents_by_type(),
    }


def chart_data(counts, labels):
    """Chart.js style payload: display names and values in the same order."""
    return {
        'labels': [labels.get(code, code) for code in counts],
        'data': list(counts.values()),
    }


CHARTS = {
    'case-status': (cases_by_status, CASE_STATUS_LABELS),
    'case-category': (cases_by_category, CASE_CATEGORY_LABELS),
    'consultation-status': (consultations_by_status, CONSULTATION_STATUS_LABELS),
    'document-type': (documents_by_type, DOCUMENT_TYPE_LABELS),
}
