"""
Progress views built from ledger claim records.

`aggregator` assembles weekly, monthly and yearly views; `controller` owns the
application state built from them.
"""

__all__ = ["aggregator", "controller"]
