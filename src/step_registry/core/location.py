"""Capture the source location of the code registering a definition.

The registry only depends on :data:`LocationProvider`, a callable returning a
:class:`SourceLocation`. :func:`caller_location` is the default provider: it
walks the current stack and reports the innermost frame that lives outside
this package, so the location points at the user's step module rather than at
the registry internals.
"""

from __future__ import annotations

import traceback
from pathlib import Path
from typing import Callable, Iterable, Sequence

from .contracts import SourceLocation, UNKNOWN_LOCATION

LocationProvider = Callable[[], SourceLocation]

PACKAGE_DIR = Path(__file__).resolve().parent.parent


def _is_inside(filename: str, directories: Iterable[Path]) -> bool:
    path = Path(filename).resolve()
    return any(path == d or d in path.parents for d in directories)


def caller_location(excluded: Sequence[Path] = (PACKAGE_DIR,)) -> SourceLocation:
    """Return the innermost stack frame outside of ``excluded`` directories.

    Falls back to ``unknown:0`` when every frame is excluded.
    """
    directories = [Path(d).resolve() for d in excluded]
    for frame in reversed(traceback.extract_stack()):
        if frame.filename and not _is_inside(frame.filename, directories):
            return SourceLocation(frame.filename, frame.lineno or 0)
    return UNKNOWN_LOCATION
