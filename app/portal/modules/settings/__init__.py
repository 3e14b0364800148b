"""
Site-wide settings (key/value) and newsletter subscriptions.
"""
