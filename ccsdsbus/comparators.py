"""Threshold comparisons used for monitoring values."""

from __future__ import annotations

from typing import Any


def compare(received: Any, wanted: Any, is_smaller: bool, is_equal_allowed: bool) -> bool:
    """Tell whether ``received`` is below (or above) ``wanted``.

    With ``is_smaller`` the test is ``received < wanted``, otherwise
    ``received > wanted``; ``is_equal_allowed`` also accepts equality.
    """
    if is_equal_allowed and received == wanted:
        return True
    return received < wanted if is_smaller else received > wanted


def compare_equal(received: Any, wanted: Any) -> bool:
    """Tell whether ``received`` equals ``wanted``."""
    return received == wanted