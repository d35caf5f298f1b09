"""Core Layer — domain rules, projections, and boundary protocols. No IO, no DB, no HTTP.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - Guard and ledger functions are pure and deterministic (the clock is passed in)

Design Decisions:
    - Functional core separated from imperative shell: services/ orchestrate the store
      around these pure rules
"""
