"""Infrastructure Layer — transport adapter, latency cache and logging.

Invariants:
    - Infrastructure never imports from services/
    - Third-party exceptions are translated at this boundary
"""
