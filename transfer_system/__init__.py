"""
Transfer System

Monetary accounts and an atomic transfer engine: double-entry balance
movement under concurrent access, with Decimal arithmetic throughout and
deadlock-free ordered locking.
"""

__version__ = "1.0.0"
