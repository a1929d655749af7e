"""Invoices raised for approved ensemble bookings."""
