"""Top-level package for gsplice.

The package turns multi-material slicer G-code into a structured
:class:`~gsplice.gcode.Document` and a list of filament
:class:`~gsplice.gcode.Splice` values.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
