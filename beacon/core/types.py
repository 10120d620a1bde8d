"""
Beacon: Core Type Definitions

This module defines common type aliases used across the Beacon codebase.
It exists to centralise frequently used type definitions and avoid
circular imports between higher-level modules.

Key responsibilities:
- Provide canonical aliases for raw (untrusted) input records
- Provide canonical aliases for JSON-ready output payloads

External dependencies:
- typing: Standard library typing primitives only

Thread safety: Thread-safe (no mutable global state)

Author: Beacon Team
Created: 2025-11-24
Last Modified: 2025-12-02
Status: Development
Version: v0.1.0
"""

# ============================================================================
# Imports
# ============================================================================

from __future__ import annotations

from typing import Any, Dict, Mapping, TypeAlias

# ============================================================================
# Type Aliases
# ============================================================================

# Monetary amounts; the engine is currency-agnostic.
Number: TypeAlias = float

# Raw goal/contribution record as delivered by a data-access layer
# (e.g. decoded JSON). Fields are untrusted until normalised.
RawRecord: TypeAlias = Mapping[str, Any]

# JSON-serialisable payload produced by ``to_dict`` helpers.
JsonDict: TypeAlias = Dict[str, Any]
