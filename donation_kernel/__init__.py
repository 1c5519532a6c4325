"""
Donation Kernel

Core of the donation platform backend:
- Exactly-once reconciliation of payment callbacks against campaign totals
- Single-winner allocation of donated goods to boutique orders
- Repository access over a transactional relational store
"""

__version__ = "0.1.0"
