"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions are pure; the only nondeterminism is event id generation (identifiers.py)

Design Decisions:
    - Functional core separated from imperative shell: services/ orchestrate the
      session, core/ decides what the events look like and who may create them
"""
