"""
prebuildkit - fetch, build and link a native library from a build script.
"""

__version__ = "0.1.0"
