"""
ReliaTrack: maintenance management and reliability analysis API.
"""

__version__ = "1.0.0"
