class LaunchError(RuntimeError):
    """Raised when a kernel could not be launched (bad geometry or launcher failure)."""

    def __init__(self, kernel: str, reason: str, geometry=None):
        self.kernel = kernel
        self.reason = reason
        self.geometry = geometry
        msg = f"Failed to launch '{kernel}': {reason}"
        if geometry is not None:
            msg += f" ({geometry})"
        super().__init__(msg)


class ExecutionError(RuntimeError):
    """Raised at a synchronization point when enqueued work failed on the device."""
