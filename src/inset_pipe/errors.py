"""Error taxonomy for the inset engine.

Validation failures are raised synchronously, before anything is written to a
destination buffer. An inset or annotation that misses the destination
entirely is *not* an error (see :func:`inset_pipe.composite.composite_inset`).
"""

from __future__ import annotations


class InsetError(RuntimeError):
    """Base class for engine failures the caller is expected to report."""

    code = "INSET_ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        if code is not None:
            self.code = str(code)
        self.message = str(message)
        super().__init__(f"{self.code}: {self.message}")


class OutOfBoundsError(InsetError, ValueError):
    """Requested rectangle or circle extends past the source dimensions."""

    code = "OUT_OF_BOUNDS"


class RegionTooSmallError(InsetError, ValueError):
    """Selection is narrower or shorter than the minimum region size."""

    code = "REGION_TOO_SMALL"
