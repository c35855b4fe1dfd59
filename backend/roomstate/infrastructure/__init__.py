"""Infrastructure Layer — database sessions and cross-cutting concerns.

Invariants:
    - Infrastructure never imports domain logic from core/ (errors excepted)
    - Driver exceptions are mapped to roomstate errors before leaving this layer
"""
