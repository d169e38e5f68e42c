"""
Klass Hero: program booking, enrollment quotas and session participation.
"""

__version__ = "0.1.0"
