from typing import Optional

import torch
from jaxtyping import Float

from colmean.core.config import LaunchConfig
from colmean.core.context import ExecutionContext, current_context
from colmean.core.dtype import dtypes
from colmean.device import Device
from colmean.utils.helpers import DEBUG
from colmean.utils.logging import default_logger


def _get_backend(device: str, config: Optional[LaunchConfig]):
    return Device.get_backend(device)(config)


def _check_buffers(context: ExecutionContext, *buffers: torch.Tensor):
    device = Device.of(buffers[0])
    for b in buffers:
        default_logger.check_and_raise(
            f"All buffers must live on the same device, got {Device.of(b)} and {device}",
            ValueError,
            Device.of(b) == device,
        )
        default_logger.check_and_raise(
            "Buffers must be contiguous", ValueError, b.is_contiguous()
        )
        default_logger.check_and_raise(
            f"All buffers must share one dtype, got {b.dtype} and {buffers[0].dtype}",
            ValueError,
            b.dtype == buffers[0].dtype,
        )
    # raises NotImplementedError for non floating types
    dtypes.from_torch(buffers[0].dtype)
    default_logger.check_and_raise(
        f"Execution context targets {context.device} but buffers live on {device}",
        ValueError,
        context.device == device,
    )
    return device


def _check_dims(data: torch.Tensor, D: int, N: int):
    default_logger.check_and_raise(
        f"D and N must be positive, got D={D}, N={N}", ValueError, D > 0 and N > 0
    )
    default_logger.check_and_raise(
        f"Input holds {data.numel()} elements, needs at least N * D = {N * D}",
        ValueError,
        data.numel() >= N * D,
    )


def mean(
    mu: Float[torch.Tensor, "..."],  # noqa: F722
    data: Float[torch.Tensor, "..."],  # noqa: F722
    D: int,
    N: int,
    sample: bool,
    row_major: bool,
    context: ExecutionContext,
    config: Optional[LaunchConfig] = None,
) -> Float[torch.Tensor, "..."]:  # noqa: F722
    """Computes the mean of every column of an N x D matrix into `mu`.

    Args:
        mu: Output buffer of at least D elements, owned by the caller.
        data: Contiguous input buffer of at least N * D elements, read only.
        D: Number of columns.
        N: Number of rows.
        sample: Divide by N - 1 instead of N. Row-major only.
        row_major: True if the columns of a row are contiguous in `data`,
            False if the rows of a column are.
        context: Ordered execution context all work is issued on. On CUDA the
            call returns without waiting for the work to finish.
        config: Launch parameters, defaults to `LaunchConfig()`.

    Returns:
        `mu`, holding (or about to hold, once the context is synchronized)
        the D column means.

    Raises:
        ValueError: If a precondition on the buffers or dimensions is violated.
        NotImplementedError: For `sample=True` with column-major input or a
            non floating dtype.
        LaunchError: If a kernel could not be launched.
    """
    device = _check_buffers(context, mu, data)
    _check_dims(data, D, N)
    default_logger.check_and_raise(
        f"Output holds {mu.numel()} elements, needs at least D = {D}",
        ValueError,
        mu.numel() >= D,
    )
    if sample:
        # unsupported layout wins over the row count check
        default_logger.check_and_raise(
            "Sample mean (N - 1) is only supported for row-major input",
            NotImplementedError,
            row_major,
        )
        default_logger.check_and_raise(
            "Sample mean needs at least 2 rows", ValueError, N >= 2
        )

    if DEBUG >= 1:
        default_logger.debug(
            f"mean: D={D}, N={N}, sample={sample}, row_major={row_major}, device={device}"
        )

    return _get_backend(device, config).mean(
        mu.view(-1), data.view(-1), D, N, sample, row_major, context
    )


def col_mean(
    data: Float[torch.Tensor, "rows cols"],  # noqa: F722
    sample: bool = False,
    row_major: bool = True,
    context: Optional[ExecutionContext] = None,
    config: Optional[LaunchConfig] = None,
) -> Float[torch.Tensor, " D"]:  # noqa: F722
    """
    * Allocates the output and calls `mean`.
    * Row-major input has shape (N, D), column-major input is stored as (D, N).
    """
    default_logger.check_and_raise(
        f"col_mean expects a 2D tensor, got shape {tuple(data.shape)}",
        ValueError,
        data.dim() == 2,
    )
    if row_major:
        N, D = data.shape
    else:
        D, N = data.shape

    if context is None:
        context = current_context(Device.of(data))

    mu = torch.empty(D, dtype=data.dtype, device=data.device)
    return mean(mu, data, D, N, sample, row_major, context, config)


def _center(out, data, mu, D, N, row_major, context, config, subtract):
    _check_buffers(context, out, data, mu)
    _check_dims(data, D, N)
    default_logger.check_and_raise(
        f"Output holds {out.numel()} elements, needs at least N * D = {N * D}",
        ValueError,
        out.numel() >= N * D,
    )
    default_logger.check_and_raise(
        f"Mean vector holds {mu.numel()} elements, needs at least D = {D}",
        ValueError,
        mu.numel() >= D,
    )
    return _get_backend(Device.of(data), config).center(
        out.view(-1), data.view(-1), mu.view(-1), D, N, row_major, subtract, context
    )


def mean_center(
    out: torch.Tensor,
    data: torch.Tensor,
    mu: torch.Tensor,
    D: int,
    N: int,
    row_major: bool,
    context: ExecutionContext,
    config: Optional[LaunchConfig] = None,
) -> torch.Tensor:
    """Subtracts `mu[j]` from every element of column j (`out` may be `data`)."""
    return _center(out, data, mu, D, N, row_major, context, config, subtract=True)


def mean_add(
    out: torch.Tensor,
    data: torch.Tensor,
    mu: torch.Tensor,
    D: int,
    N: int,
    row_major: bool,
    context: ExecutionContext,
    config: Optional[LaunchConfig] = None,
) -> torch.Tensor:
    """Adds `mu[j]` back to every element of column j, undoing `mean_center`."""
    return _center(out, data, mu, D, N, row_major, context, config, subtract=False)
