"""core/ -- Kernel utilities: configuration, time, sanitization, sweeping.

Layer rule: core/ has no reverse dependencies. It may not import from
api/ or auth/.
"""
