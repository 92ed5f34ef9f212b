"""Persisted collections behind the public site and the admin API.

Every function takes an open connection from `c4knives.db.connect`; the caller
owns the transaction.
"""
