"""Models parts package: one DTO family per module.

Prefer importing from `uniai.base.models` for the stable surface.
"""
