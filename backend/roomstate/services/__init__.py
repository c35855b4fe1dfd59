"""Services Layer — units of work over an explicitly passed AsyncSession.

Invariants:
    - Every service receives its AsyncSession in the constructor (no globals)
    - Collaborators taking part in a unit of work share that session
    - Services commit only inside atomic(); reads never commit
"""
