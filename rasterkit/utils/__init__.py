"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Vector math (vectors)
    - Packed RGBA8 colors (color)
    - Shapes and geometric queries (geometry)
    - Config validation (validators)
    - Atomic I/O and image decode/encode (fs)
    - Profiling (profiler)
    - Unified logging (logging_config)

No module in utils/ may import from upper layers (surface, graphics,
tessellation, scene) at import time.

Convenience imports:
    from rasterkit.utils import fs, color, geometry, validators
    from rasterkit.utils.logging_config import setup_logging, get_logger
"""

# Re-export commonly used modules for convenience
from . import color
from . import fs
from . import geometry
from . import logging_config
from . import profiler
from . import validators
from . import vectors
