"""Benefit card providers.

Each provider module offers a client that fetches one month of raw statement
items and a ``to_statement`` function that maps them to the provider-neutral
:class:`~benefits2ofx.statement.Statement`.
"""

from . import caju, flash
from .caju import CajuClient
from .flash import FlashClient

__all__ = ["CajuClient", "FlashClient", "caju", "flash"]
