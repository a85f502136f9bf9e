"""
Strict Base Models for Request/Result Validation

This module provides base classes with strict validation settings for the
values that cross the boundary between callers and the tracking services.

MOTIVATION:
    Callers (UI layers, scripts) build requests from loosely typed input.
    By enforcing strict validation:
    - Unknown fields are rejected (extra="forbid")
    - Type mismatches fail fast with clear error messages

Usage:
    # For inputs (strictest validation)
    class ItemCreate(StrictRequest):
        name: str
        quantity: int

    # For derived results (allows construction from ORM objects)
    class ItemResult(StrictResponse):
        id: str
        name: str

Architecture:
    Caller → StrictRequest (extra="forbid") → Service
    ORM objects / derived values → StrictResponse (extra="ignore") → Caller
"""

from pydantic import BaseModel, ConfigDict


class StrictRequest(BaseModel):
    """
    Base model for service inputs with strict validation.

    Features:
        - extra="forbid": Unknown fields raise ValidationError
        - validate_default=True: Validates default values
        - str_strip_whitespace=True: Trims whitespace from strings
        - from_attributes=True: Allows ORM model conversion

    Example:
        >>> class ItemCreate(StrictRequest):
        ...     name: str
        ...     quantity: int
        >>>
        >>> ItemCreate(name="Widget", quantity=5)  # OK
        >>> ItemCreate(name="Widget", qty=5)  # Raises ValidationError
    """

    model_config = ConfigDict(
        extra="forbid",  # Reject unknown fields
        validate_default=True,  # Validate defaults
        str_strip_whitespace=True,  # Clean string inputs
        from_attributes=True,  # Enable ORM conversion
    )


class StrictResponse(BaseModel):
    """
    Base model for service results.

    More lenient than StrictRequest: still enforces types but ignores
    extra attributes when validating from ORM objects.

    Example:
        >>> class ItemResult(StrictResponse):
        ...     id: str
        ...     name: str
        >>>
        >>> ItemResult.model_validate(db_item)
    """

    model_config = ConfigDict(
        extra="ignore",  # Allow extra fields from ORM objects
        validate_default=True,  # Validate defaults
        from_attributes=True,  # Enable ORM conversion
    )
