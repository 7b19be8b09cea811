"""Domain layer for bizdesk application.

Services live in their own modules (``bizdesk.domain.invoice``,
``bizdesk.domain.substitution`` and so on) and are imported from there.
"""
