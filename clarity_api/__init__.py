"""
Clarity Label API: projects, labels, images and annotations behind a
row-level access policy.
"""

__version__ = "0.1.0"
