"""Service Layer — orchestrates the store around the pure core rules.

Invariants:
    - Every public operation opens exactly one store transaction
    - Change notifications are published only after that transaction committed

Design Decisions:
    - Services are plain classes with injected collaborators (store, sink, clock,
      threshold): no module-level state, safe to call from concurrent requests
"""
