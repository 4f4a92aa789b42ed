"""droid-sync: forward Factory Droid session transcripts to an OpenSync backend."""

from __future__ import annotations

__version__ = '0.1.0'
