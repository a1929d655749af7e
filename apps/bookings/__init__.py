"""Ensemble event bookings: requests, approval and conflict detection."""
