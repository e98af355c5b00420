"""Insight auth: organization signup, invites, password reset and sessions."""

__version__ = "0.1.0"
