"""
Shared API Layer
================

HTTP middleware and exception handlers used by every router.
"""
