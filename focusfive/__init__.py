"""
FocusFive: daily goal tracking across Work, Health and Family.

Markdown files hold the day; JSON sidecars hold identity, rich status,
objectives, indicators and reviews.
"""

__version__ = "0.1.0"
