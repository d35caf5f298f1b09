"""Stockhub Application Package — stock & exchange registry with a live-in-market invariant.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
