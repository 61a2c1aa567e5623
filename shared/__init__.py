"""
Shared Kernel

Base classes used by every payment context: value objects, domain events,
the unit of work and the in-process message bus.
"""
