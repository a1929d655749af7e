"""Reservations app package.

Instrument rent and borrow requests. This app owns the request ledger,
the availability calculator and the cart admission that guarantees an
instrument is never reserved beyond its stocked quantity, even with
concurrent writers: every admission re-reads the ledger inside the
transaction that writes, with the instrument rows locked.
"""
