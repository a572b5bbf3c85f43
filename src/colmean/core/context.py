"""
Execution contexts
* An execution context is the ordered queue every unit of work is issued on.
* The library never owns one: callers create it (or wrap the current CUDA stream) and pass it in.
* Work issued on the same context runs in issue order.
"""

import contextlib
from typing import Callable, List, Optional

import torch

from colmean.core.errors import ExecutionError, LaunchError
from colmean.device import Device
from colmean.utils.helpers import DEBUG
from colmean.utils.logging import default_logger


class ExecutionContext:
    device: str = Device.CPU

    def __init__(self, trace: bool = False):
        # names of launched units, in issue order (only kept when tracing)
        self.trace: Optional[List[str]] = [] if trace else None

    def scope(self):
        return contextlib.nullcontext()

    def launch(self, name: str, fn: Callable, *args, **kwargs):
        """Issues one unit of work and reports launch failures immediately."""
        if self.trace is not None:
            self.trace.append(name)
        if DEBUG >= 2:
            default_logger.debug(f"[{self.device}] launch {name}")

        try:
            with self.scope():
                return fn(*args, **kwargs)
        except LaunchError:
            raise
        except Exception as e:
            default_logger.error(f"Launch of '{name}' failed on {self.device}: {e}")
            raise LaunchError(name, str(e)) from e

    def synchronize(self):
        raise NotImplementedError(f"synchronize not implemented for {type(self)}")


class HostContext(ExecutionContext):
    """Synchronous context: every launched unit has finished when `launch` returns."""

    device = Device.CPU

    def synchronize(self):
        return


class StreamContext(ExecutionContext):
    """Wraps a caller-owned `torch.cuda.Stream` (defaults to the current stream)."""

    device = Device.CUDA

    def __init__(self, stream: Optional["torch.cuda.Stream"] = None, trace=False):
        super().__init__(trace=trace)
        self.stream = stream if stream is not None else torch.cuda.current_stream()

    def scope(self):
        return torch.cuda.stream(self.stream)

    def synchronize(self):
        # asynchronous kernel faults only become visible here
        try:
            self.stream.synchronize()
        except RuntimeError as e:
            default_logger.error(f"Asynchronous execution failed: {e}")
            raise ExecutionError(str(e)) from e


def current_context(device: str, trace: bool = False) -> ExecutionContext:
    device = device.upper()
    if device == Device.CUDA:
        return StreamContext(trace=trace)
    elif device == Device.CPU:
        return HostContext(trace=trace)
    raise ValueError(f"Unknown device '{device}'")
