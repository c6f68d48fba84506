"""Pydantic request/response contracts.

Invariants:
    - Request bodies reject unknown enum values at the boundary (Literal fields)
    - Response models read ORM rows via from_attributes; ORM objects never leave a route
"""
