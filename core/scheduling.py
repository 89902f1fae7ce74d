"""
Lawyer availability checks for consultation bookings.

A lawyer is *busy* for a proposed slot when another live consultation of
theirs (scheduled, confirmed or in progress) overlaps it. Intervals are
half-open, so a booking ending at 11:00 and one starting at 11:00 do not
clash.

Candidates are looked up by the local calendar day of the proposed start.
A slot crossing midnight therefore does not see bookings on the next day,
and a late booking from the previous day running past midnight is not seen
either. Setting ``LAWFIRM_SCHEDULING['CROSS_MIDNIGHT_LOOKUP'] = True``
widens the lookup to cover both cases.
"""
import logging
from datetime import datetime, time, timedelta

from django.conf import settings
from django.utils import timezone

from .exceptions import NotFound
from .models import Consultation, User

logger = logging.getLogger(__name__)


def scheduling_option(name, default=None):
    return getattr(settings, 'LAWFIRM_SCHEDULING', {}).get(name, default)


def day_bounds(moment):
    """Return (midnight, next midnight) of the local day containing ``moment``."""
    if timezone.is_aware(moment):
        local = timezone.localtime(moment)
        day_start = timezone.make_aware(datetime.combine(local.date(), time.min))
    else:
        day_start = datetime.combine(moment.date(), time.min)
    return day_start, day_start + timedelta(days=1)


def candidate_window(proposed_start, proposed_end):
    """
    Start-time range of the consultations worth comparing against the
    proposed slot.
    """
    day_start, day_end = day_bounds(proposed_start)
    if not scheduling_option('CROSS_MIDNIGHT_LOOKUP', False):
        return day_start, day_end

    longest = scheduling_option('MAX_DURATION_MINUTES', Consultation.MAX_DURATION)
    return day_start - timedelta(minutes=longest), max(day_end, proposed_end)


def overlaps(proposed_start, proposed_end, existing_start, existing_end):
    return not (proposed_end <= existing_start or proposed_start >= existing_end)


def is_lawyer_busy(lawyer_id, proposed_start, duration_minutes, exclude_consultation_id=None):
    """
    Tell whether the lawyer already has a live consultation overlapping
    ``[proposed_start, proposed_start + duration_minutes)``.

    ``exclude_consultation_id`` is the consultation being edited, which must
    never conflict with itself.

    Raises NotFound when ``lawyer_id`` does not match any user.
    """
    if not User.objects.filter(pk=lawyer_id).exists():
        raise NotFound(f"Lawyer with id {lawyer_id} not found.")

    proposed_end = proposed_start + timedelta(minutes=duration_minutes)
    window_start, window_end = candidate_window(proposed_start, proposed_end)

    candidates = Consultation.objects.filter(
        lawyer_id=lawyer_id,
        status__in=Consultation.LIVE_STATUSES,
        start_time__gte=window_start,
        start_time__lt=window_end,
    )
    if exclude_consultation_id is not None:
        candidates = candidates.exclude(pk=exclude_consultation_id)

    for existing in candidates.order_by('start_time'):
        if overlaps(proposed_start, proposed_end, existing.start_time, existing.end_time):
            logger.info(
                "Lawyer %s busy: %s-%s clashes with consultation %s",
                lawyer_id, proposed_start, proposed_end, existing.pk,
            )
            return True

    return False
