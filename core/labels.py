"""
Display names for the enumerated codes stored on the models.

Models store the bare codes; anything rendered to a person goes through
these tables (see ``label_for`` and the ``label`` template filter).
"""

ROLE_LABELS = {
    'ADMIN': 'Administrator',
    'MANAGER': 'Manager',
    'LAWYER': 'Lawyer',
    'CLIENT': 'Client',
}

CASE_STATUS_LABELS = {
    'NEW': 'New',
    'IN_PROGRESS': 'In progress',
    'AWAITING_HEARING': 'Awaiting hearing',
    'SUSPENDED': 'Suspended',
    'WON': 'Won',
    'LOST': 'Lost',
    'SETTLED': 'Settled',
    'CLOSED': 'Closed',
}

CASE_CATEGORY_LABELS = {
    'CIVIL': 'Civil',
    'CRIMINAL': 'Criminal',
    'ADMINISTRATIVE': 'Administrative',
    'CORPORATE': 'Corporate',
    'FAMILY': 'Family',
    'LABOR': 'Labor dispute',
    'TAX': 'Tax',
    'INTELLECTUAL_PROPERTY': 'Intellectual property',
}

PRIORITY_LABELS = {
    'LOW': 'Low',
    'MEDIUM': 'Medium',
    'HIGH': 'High',
    'CRITICAL': 'Critical',
}

DOCUMENT_TYPE_LABELS = {
    'CONTRACT': 'Contract',
    'COMPLAINT': 'Statement of claim',
    'COURT_DECISION': 'Court decision',
    'COURT_PROTOCOL': 'Hearing transcript',
    'POWER_OF_ATTORNEY': 'Power of attorney',
    'APPLICATION': 'Application',
    'MOTION': 'Motion',
    'APPEAL': 'Appeal',
    'CERTIFICATE': 'Certificate',
    'ACT': 'Act',
    'LETTER': 'Letter',
    'OTHER': 'Other',
}

DOCUMENT_STATUS_LABELS = {
    'DRAFT': 'Draft',
    'UNDER_REVIEW': 'Under review',
    'APPROVED': 'Approved',
    'SIGNED': 'Signed',
    'SENT': 'Sent',
    'RECEIVED': 'Received',
    'ARCHIVED': 'Archived',
}

CONSULTATION_STATUS_LABELS = {
    'SCHEDULED': 'Scheduled',
    'CONFIRMED': 'Confirmed',
    'IN_PROGRESS': 'In progress',
    'COMPLETED': 'Completed',
    'CANCELLED_BY_CLIENT': 'Cancelled by client',
    'CANCELLED_BY_LAWYER': 'Cancelled by lawyer',
    'NO_SHOW': 'Client did not show up',
    'RESCHEDULED': 'Rescheduled',
}

CONSULTATION_TYPE_LABELS = {
    'OFFICE': 'At the office',
    'ONLINE': 'Online',
    'PHONE': 'By phone',
    'HOME_VISIT': 'Home visit',
}

TABLES = {
    'role': ROLE_LABELS,
    'case_status': CASE_STATUS_LABELS,
    'case_category': CASE_CATEGORY_LABELS,
    'priority': PRIORITY_LABELS,
    'document_type': DOCUMENT_TYPE_LABELS,
    'document_status': DOCUMENT_STATUS_LABELS,
    'consultation_status': CONSULTATION_STATUS_LABELS,
    'consultation_type': CONSULTATION_TYPE_LABELS,
}


def choices(table):
    """Django ``choices`` list built from one of the tables above."""
    return [(code, text) for code, text in table.items()]


def label_for(table_name, code):
    """Return the display name of ``code``, falling back to the code itself."""
    return TABLES.get(table_name, {}).get(code, code)
