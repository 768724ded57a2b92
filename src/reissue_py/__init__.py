"""reissue-py: keep a changelog and a version file in step across releases."""

from __future__ import annotations

from reissue_py.core import (
    Changelog,
    Segment,
    VersionRecord,
    VersionToken,
    parse,
    print_changelog,
)
from reissue_py.release import (
    bump_from_trailers,
    clear_fragments,
    finalize,
    generate_changelog,
    preview,
    reformat,
    reissue,
    update_changelog,
)

__version__ = "0.1.0"

__all__ = [
    "Changelog",
    "Segment",
    "VersionRecord",
    "VersionToken",
    "__version__",
    "bump_from_trailers",
    "clear_fragments",
    "finalize",
    "generate_changelog",
    "parse",
    "preview",
    "print_changelog",
    "reformat",
    "reissue",
    "update_changelog",
]
