"""
Global configuration for csmat.

Provides:
- Validation switches for matrices built from raw arrays
- Index precision for arrays csmat allocates itself
- Environment variable defaults and a temporary override context

Environment:
    CSMAT_CHECK_SORTED   '0'/'false'/'no' disables the ascending-index check
    CSMAT_CHECK_BOUNDS   '0'/'false'/'no' disables the inner-bounds check
    CSMAT_INDEX_DTYPE    'int32' or 'int64' (default)
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator

import numpy as np

__all__ = ['settings', 'override']

logger = logging.getLogger("csmat.config")

_VALID_INDEX_DTYPES = ('int32', 'int64')


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in ('0', 'false', 'no', 'off')


# =============================================================================
# Global Configuration State
# =============================================================================

class _Config:
    """
    Global configuration singleton.

    Attributes:
        check_sorted: Validate strictly ascending inner indices per slice.
        check_bounds: Validate inner indices lie in [0, inner_dim).
        index_dtype: Index dtype for package-allocated matrices.
    """

    _FIELDS = ('check_sorted', 'check_bounds', 'index_dtype')

    def __init__(self):
        self.check_sorted = _env_flag('CSMAT_CHECK_SORTED', True)
        self.check_bounds = _env_flag('CSMAT_CHECK_BOUNDS', True)
        self._index_dtype = np.dtype('int64')
        self.index_dtype = os.environ.get('CSMAT_INDEX_DTYPE', 'int64')

    @property
    def index_dtype(self) -> np.dtype:
        """Index dtype for arrays allocated by csmat."""
        return self._index_dtype

    @index_dtype.setter
    def index_dtype(self, value: Any):
        dtype = np.dtype(value)
        if dtype.name not in _VALID_INDEX_DTYPES:
            raise ValueError(
                f"Unsupported index dtype: {dtype.name}. "
                f"Supported: {list(_VALID_INDEX_DTYPES)}"
            )
        self._index_dtype = dtype

    def as_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self._FIELDS}

    def __setattr__(self, name: str, value: Any):
        if not name.startswith('_') and name not in self._FIELDS:
            raise AttributeError(f"Unknown csmat setting: {name!r}")
        super().__setattr__(name, value)

    def __repr__(self) -> str:
        items = ", ".join(f"{k}={v}" for k, v in self.as_dict().items())
        return f"Config({items})"


settings = _Config()


@contextmanager
def override(**values: Any) -> Iterator[_Config]:
    """
    Temporarily change settings.

    Example:
        >>> with override(check_sorted=False):
        ...     mat = CsMat.from_slices(...)  # trusted input, skip the scan
    """
    previous = settings.as_dict()
    for name in values:
        if name not in _Config._FIELDS:
            raise AttributeError(f"Unknown csmat setting: {name!r}")
    try:
        for name, value in values.items():
            setattr(settings, name, value)
        logger.debug("csmat settings overridden: %s", values)
        yield settings
    finally:
        for name, value in previous.items():
            setattr(settings, name, value)
