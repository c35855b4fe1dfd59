"""API Layer — FastAPI app shell: probes and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All responses, including errors, are structured JSON
"""
