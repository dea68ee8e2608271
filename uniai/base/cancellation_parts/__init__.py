"""Cancellation implementation parts; import from ``uniai.base.cancellation``."""
