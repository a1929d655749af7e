"""Email notices for reservation and booking events."""
