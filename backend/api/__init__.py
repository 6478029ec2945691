"""API route handlers."""
from . import accounts, dashboard, token, transactions

__all__ = ["accounts", "dashboard", "token", "transactions"]
