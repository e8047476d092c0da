"""
Source acquisition for prebuildkit: resolution, fetching and patching.
"""

from .resolver import SourceDescriptor, resolve_source
from .fetcher import Fetcher, FetchResult, archive_name
from .patcher import SourcePatcher, PatchReport, fix_shebang, drop_lines

__all__ = [
    "SourceDescriptor",
    "resolve_source",
    "Fetcher",
    "FetchResult",
    "archive_name",
    "SourcePatcher",
    "PatchReport",
    "fix_shebang",
    "drop_lines",
]
