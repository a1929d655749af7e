"""
Shared Kernel

Value objects, the error taxonomy, lifecycle tables, the unit of work and
the message bus used by both the instrument and the booking contexts.
"""
