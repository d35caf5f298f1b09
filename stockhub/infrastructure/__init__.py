"""Infrastructure Layer — database sessions, SQL repositories, logging, event broadcast.

Invariants:
    - Implements the Protocols declared in core/repository_protocols.py
    - Maps every third-party exception to the core error hierarchy before it leaves
"""
