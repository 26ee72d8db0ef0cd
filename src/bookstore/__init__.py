"""Bookstore ledger — catalogue, carts, orders and their flat-record persistence."""

__version__ = "0.1.0"
