"""
Public content: case highlights, news updates, educational resources.

All three share the DRAFT/PUBLISHED/ARCHIVED lifecycle; only PUBLISHED items are public.
"""
