"""eventrelay bridges — boundaries to external transports.

Each bridge exposes a small protocol the rest of the package depends on,
plus a local in-memory backend for tests and demos.
"""
