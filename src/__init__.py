"""expiry-board: next option expiries per index symbol."""
