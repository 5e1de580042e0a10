"""
dnam_age

Applies precomputed DNA methylation age clocks to array data and compares the
predictions with chronological age.
"""

__version__ = "0.1.0"
