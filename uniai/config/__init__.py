"""Configuration layer for the chat client.

Public API
----------
* ``ClientConfig`` / ``ClientConfig.from_env()``
* ``ProviderSettings``: the per-adapter view adapters are built from
* ``ClientConfigView``: non-sensitive snapshot for diagnostics
"""

from .settings import ClientConfig, ClientConfigView, ProviderSettings

__all__ = ["ClientConfig", "ClientConfigView", "ProviderSettings"]
