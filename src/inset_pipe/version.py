"""Engine version and the stamp written next to extracted images.

``__version__`` is what pip sees. ``ENGINE_VERSION`` is bumped whenever the
pixel output of the same parameters can change (kernels, mask geometry,
rounding). A finalize run can compare the stamp of an extracted image with
the running engine to tell whether a re-extraction would look different.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import sys

import numpy as np

from inset_pipe.resample import ResampleMethod


__version__ = "1.0.0"
ENGINE_VERSION = "v1.0.0"


@dataclass(frozen=True)
class EngineStamp:
    engine_version: str
    package_version: str
    kernels: tuple[str, ...]
    numpy: str
    python: str

    def to_cards(self, prefix: str = "INSET") -> dict[str, str]:
        return {
            f"{prefix}_VER": self.engine_version,
            f"{prefix}_PKG": self.package_version,
            f"{prefix}_KRN": ",".join(self.kernels),
            f"{prefix}_NPY": self.numpy,
            f"{prefix}_PY": self.python,
        }

    def same_output_as(self, cards: dict[str, object], prefix: str = "INSET") -> bool:
        """True if ``cards`` were stamped by an engine with identical pixel output."""
        return str(cards.get(f"{prefix}_VER", "")).strip("'\" ") == self.engine_version


@lru_cache(maxsize=1)
def engine_stamp() -> EngineStamp:
    return EngineStamp(
        engine_version=ENGINE_VERSION,
        package_version=__version__,
        kernels=tuple(m.value for m in ResampleMethod),
        numpy=np.__version__,
        python=sys.version.split()[0],
    )


def as_header_cards(prefix: str = "INSET") -> dict[str, str]:
    """Key-value cards describing the engine that produced an artifact."""
    return engine_stamp().to_cards(prefix)
