"""Pydantic Schemas — request/response models for API endpoints.

Invariants:
    - Request DTOs carry the field constraints (lengths, status enum, id ranges, EmailStr)
    - Request DTOs drop server-assigned fields (extra="ignore")
    - Each request DTO declares the fixed message for each field failure (field_messages)
    - Response models read from ORM objects (from_attributes=True)

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
