"""Pydantic Schemas — request and response models at the HTTP boundary.

Invariants:
    - Request models reject malformed payloads before any service is called
    - Response models mirror core projections (camelCase wire names)
"""
