"""
ParkHub - parking reservation backend

Manages parking areas, the spots inside them, users and time-bounded
reservations, and forwards car searches/rentals to the partner rental service.
"""

__version__ = "1.0.0"
