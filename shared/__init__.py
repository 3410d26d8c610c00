"""
Shared Kernel

Base domain classes, value objects, the unit of work and the message bus
used by the booking engine.
"""
