"""
Accounts application.

Caller identity and role for the returns engine. Authentication itself
(JWT issuance) is handled by djangorestframework-simplejwt.
"""
