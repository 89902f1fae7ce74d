from django import template

from ..labels import label_for

register = template.Library()


@register.filter(name='add_class')
def add_class(field, css_class):
    if hasattr(field, 'as_widget'):
        return field.as_widget(attrs={'class': css_class})
    # If it's not a form field, return it as is (for safe strings)
    return field


@register.filter(name='has_role')
def has_role(user, roles):
    """``{% if user|has_role:"ADMIN,MANAGER" %}``"""
    if not user.is_authenticated:
        return False
    return user.effective_role in [role.strip() for role in roles.split(',')]


@register.filter(name='label')
def label(code, table_name):
    """``{{ case.status|label:"case_status" }}``"""
    return label_for(table_name, code)
