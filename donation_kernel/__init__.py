"""
Donation Kernel

Stock ledger and allocation engine for a food donation service:
- Item catalog with authoritative stock
- Per-recipient-class allocation caps
- Atomic assign / reverse of item quantities to recipients
- Denormalized distribution reporting
"""

__version__ = "0.1.0"
