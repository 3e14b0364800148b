"""
Corruption reports submitted by the public (optionally anonymous) and triaged by staff.
"""
