"""inset-pipe package.

Pixel engine for magnified image insets: region extraction, resampling,
border synthesis, alpha compositing and anti-aliased annotations.
"""

from .version import __version__, ENGINE_VERSION

__all__ = ["__version__", "ENGINE_VERSION"]
