"""Infrastructure Layer — cross-cutting concerns around the pure core.

Invariants:
    - Infrastructure never imports from core/ domain logic
"""
