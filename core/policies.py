"""
Which records each role may see.

Every table maps a role to a function returning the ``Q`` predicate for a
given user; views filter their querysets through ``visible_*``.
"""
from django.db.models import Q

from .models import Case, Client, Consultation, Document, User

NOTHING = Q(pk__in=[])
EVERYTHING = Q()


def _everything(user):
    return EVERYTHING


CASE_POLICIES = {
    User.ROLE_ADMIN: _everything,
    User.ROLE_MANAGER: _everything,
    User.ROLE_LAWYER: lambda user: Q(lawyer=user),
    User.ROLE_CLIENT: lambda user: Q(client__user=user),
}

CONSULTATION_POLICIES = {
    User.ROLE_ADMIN: _everything,
    User.ROLE_MANAGER: _everything,
    User.ROLE_LAWYER: lambda user: Q(lawyer=user),
    User.ROLE_CLIENT: lambda user: Q(client__user=user),
}

DOCUMENT_POLICIES = {
    User.ROLE_ADMIN: _everything,
    User.ROLE_MANAGER: _everything,
    User.ROLE_LAWYER: lambda user: Q(case__lawyer=user),
    User.ROLE_CLIENT: lambda user: Q(case__client__user=user),
}

CLIENT_POLICIES = {
    User.ROLE_ADMIN: _everything,
    User.ROLE_MANAGER: _everything,
    User.ROLE_LAWYER: lambda user: Q(cases__lawyer=user) | Q(consultations__lawyer=user),
    User.ROLE_CLIENT: lambda user: Q(user=user),
}


def predicate(policies, user):
    """Return the filter ``user`` is allowed to see under ``policies``."""
    if user is None or not user.is_authenticated:
        return NOTHING
    rule = policies.get(user.effective_role)
    if rule is None:
        return NOTHING
    return rule(user)


def visible_cases(user, queryset=None):
    if queryset is None:
        queryset = Case.objects.all()
    return queryset.filter(predicate(CASE_POLICIES, user)).distinct()


def visible_consultations(user, queryset=None):
    if queryset is None:
        queryset = Consultation.objects.all()
    return queryset.filter(predicate(CONSULTATION_POLICIES, user)).distinct()


def visible_documents(user, queryset=None):
    if queryset is None:
        queryset = Document.objects.all()
    return queryset.filter(predicate(DOCUMENT_POLICIES, user)).distinct()


def visible_clients(user, queryset=None):
    if queryset is None:
        queryset = Client.objects.all()
    return queryset.filter(predicate(CLIENT_POLICIES, user)).distinct()


def can_view_case(user, case):
    return visible_cases(user).filter(pk=case.pk).exists()


def can_view_consultation(user, consultation):
    return visible_consultations(user).filter(pk=consultation.pk).exists()


def can_view_client(user, client):
    return visible_clients(user).filter(pk=client.pk).exists()
