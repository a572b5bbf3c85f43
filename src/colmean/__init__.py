from colmean.core.config import LaunchConfig
from colmean.core.context import (
    ExecutionContext,
    HostContext,
    StreamContext,
    current_context,
)
from colmean.core.errors import ExecutionError, LaunchError
from colmean.device import DEFAULT_DEVICE, Device, device_register_global
from colmean.stats import col_mean, mean, mean_add, mean_center

device_register_global()

__all__ = [
    "DEFAULT_DEVICE",
    "Device",
    "ExecutionContext",
    "ExecutionError",
    "HostContext",
    "LaunchConfig",
    "LaunchError",
    "StreamContext",
    "col_mean",
    "current_context",
    "mean",
    "mean_add",
    "mean_center",
]
