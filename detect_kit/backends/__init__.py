"""
Optional inference backends for detect_kit.

Backends are kept in a separate module so decoding and selection stay
lightweight and can be used without installing an inference runtime.
"""

from __future__ import annotations

__all__ = []
