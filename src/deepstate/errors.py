"""Exceptions raised by deepstate.

Only construction can fail. Reads and writes raise whatever the underlying
node raises, and observer failures propagate to the writer unchanged.
"""


class InvalidArgument(TypeError, ValueError):
    """create_reactive() was given a non-structured state or a non-callable observer."""
