"""
OFR Bootstrap — System Errors
===============================
If a registry invariant is violated at startup,
the system must refuse to serve.
"""


class SystemBootstrapError(Exception):
    """
    Raised when a critical registry invariant is violated during boot.

    If this exception is raised:
    - System MUST NOT start
    - No fallback
    - No warning-only mode
    - Error message must be explicit
    """

    def __init__(self, invariant: str, detail: str):
        self.invariant = invariant
        self.detail = detail
        super().__init__(
            f"OFR BOOTSTRAP FAILURE — {invariant}: {detail}"
        )
