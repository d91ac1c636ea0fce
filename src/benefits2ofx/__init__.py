"""benefits2ofx: export benefit card statements to OFX.

This package talks to the private APIs behind the Caju and Flash benefit
cards, downloads one month of transactions and writes them as an OFX file
that budgeting applications can import.
"""

__version__ = "0.1.0"
