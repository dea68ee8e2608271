"""Protocol parts; import from ``uniai.base.interfaces``."""
