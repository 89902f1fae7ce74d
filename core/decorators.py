from functools import wraps

from django.contrib import messages
from django.shortcuts import redirect


def role_required(*roles):
    """
    Let the view run only for users whose role is one of ``roles``;
    everyone else is sent back to the dashboard with an error message.
    Superusers count as ADMIN.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            user = request.user
            if user.is_authenticated and user.effective_role in roles:
                return view_func(request, *args, **kwargs)
            messages.error(request, 'You do not have permission to access this page.')
            return redirect('dashboard')
        return _wrapped
    return decorator
