"""
Shared type definitions for schemas.

Centralizes the two model bases every schema module builds on:
- StrictModel: our own data (sync records, results, persisted state)
- PermissiveModel: host-tool JSON we decode but do not control
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, TypeAlias

import pydantic

# ==============================================================================
# Strict Model (Foundation)
# ==============================================================================


class StrictModel(pydantic.BaseModel):
    """
    Foundation strict model for data droid-sync produces itself.

    Uses extra='forbid' to reject unknown fields - any field not modeled
    causes immediate validation failure (fail-fast).
    """

    model_config = pydantic.ConfigDict(
        extra='forbid',  # Reject unknown fields (fail-fast)
        strict=True,  # Strict type coercion
        frozen=True,  # Immutable after creation
    )


# ==============================================================================
# Permissive Model (Foundation)
# ==============================================================================


class PermissiveModel(pydantic.BaseModel):
    """
    Foundation permissive model for host-tool records.

    Symmetry with StrictModel:
    - StrictModel: extra='forbid' (rejects unknown fields)
    - PermissiveModel: extra='allow' (accepts unknown fields)

    Factory Droid adds transcript fields between releases. Known fields are
    still validated strictly; unknown ones ride along in __pydantic_extra__.
    """

    model_config = pydantic.ConfigDict(
        extra='allow',  # Accept unknown fields (graceful fallback)
        strict=True,  # Strict type coercion for known fields
        frozen=True,  # Immutable after creation
    )


# ==============================================================================
# Primitive Types
# ==============================================================================

JsonDatetime: TypeAlias = Annotated[datetime, pydantic.Field(strict=False)]
"""Pydantic-enhanced datetime for JSON serialization (allows string->datetime conversion)."""
