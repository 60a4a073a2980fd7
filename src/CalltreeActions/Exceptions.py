class CalltreeError(Exception):
    pass


class InvalidHandle(CalltreeError, LookupError):
    """
    A vertex or edge handle that was never issued by the call tree it was given to.
    """


class IoFailure(CalltreeError, OSError):
    """
    Writing the exported call tree to its output stream failed.
    The call tree itself is left untouched.
    """


class SnapshotNotFound(CalltreeError):
    pass
