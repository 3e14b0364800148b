"""
Recovery statistics per period and the public dashboard built from them.
"""
