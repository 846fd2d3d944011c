"""Learner report card builder.

Joins the chapter-completion, monthly-assessment and OCS-attendance exports
per candidate, classifies progress and renders / dispatches report cards.
"""

__version__ = "0.1.0"
