"""
Ref Graph - follow-up tracking for git commit series.

Walks a commit range oldest-to-newest, collects "Fixes:" tags, reverts and
bare hash ("title") mentions, and reports every commit that (eventually)
references a given one.
"""

__version__ = "0.3.1"
