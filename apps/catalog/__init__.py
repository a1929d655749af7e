"""Catalog app package.

Holds the instrument catalog (identity, stocked quantity, daily price and
condition) and the pricing table. The catalog is read-mostly: it is edited
through the Django admin and only read, or row-locked, by the reservation
engine.
"""
