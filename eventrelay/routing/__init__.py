"""eventrelay routing — maps type tags to decode + handler fan-out.

The routing table is an immutable mapping from type tag to ``Route``.
Adding an event kind means adding one table entry; the router's control
flow does not change.
"""
