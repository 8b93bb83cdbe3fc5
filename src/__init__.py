"""
Source package initialization.

TaskBoard task parsing core: natural-language task extraction, role-based
assignment and email triage.
"""

__version__ = '1.0.0'
