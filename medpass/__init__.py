"""Medpass health-wallet client core"""

__version__ = "1.0.0"
