"""Pydantic Schemas — validation at the system boundary.

Invariants:
    - Input schemas validate caller-supplied data before it reaches services
    - Event schemas validate payloads read back from the event log
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are contracts, models are persistence
"""
