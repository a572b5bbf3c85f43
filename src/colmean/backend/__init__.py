import time
from typing import Callable, Optional

# the torch interpreter submodule is bound as `torch` on this package, import names only
from torch import Tensor

from colmean.backend.torch import TorchInterpreter
from colmean.core.config import DEFAULT_CONFIG, LaunchConfig
from colmean.core.context import ExecutionContext
from colmean.core.geometry import LaunchGeometry
from colmean.utils.helpers import DEBUG
from colmean.utils.logging import default_logger


class Backend:
    """
    Dispatcher shared by every device
    * Picks the reduction topology from the layout flag and computes its launch geometry.
    * Issues every unit of work on the caller's execution context, in order.
    * Subclasses only provide the kernel executors.
    """

    def __init__(self, config: Optional[LaunchConfig] = None):
        self.config = config if config is not None else DEFAULT_CONFIG

    def launch(
        self,
        context: ExecutionContext,
        geometry: Optional[LaunchGeometry],
        name: str,
        fn: Callable,
        *args,
    ):
        if geometry is not None:
            geometry.validate()
            if DEBUG >= 1:
                default_logger.debug(f"{name}: {geometry}")

        st = 0.0
        if DEBUG >= 3:
            context.synchronize()
            st = time.perf_counter()

        context.launch(name, fn, *args)

        if self.config.sync_after_launch or DEBUG >= 3:
            context.synchronize()

        if DEBUG >= 3:
            et = time.perf_counter()
            default_logger.debug(f"{name} took {(et - st) * 1000:.2f} ms")

    def mean(
        self,
        mu: Tensor,
        data: Tensor,
        D: int,
        N: int,
        sample: bool,
        row_major: bool,
        context: ExecutionContext,
    ) -> Tensor:
        """
        Row-major: zero -> accumulate sums with atomics -> divide by N - 1 or N.
        Column-major: one program per column writes the mean directly.
        """
        if row_major:
            # nothing is issued if the grid cannot be launched
            geometry = LaunchGeometry.row_major(D, N, self.config).validate()
            # atomics accumulate into mu, so it must start from zero
            self.launch(context, None, "zero_fill", mu[:D].zero_)
            self.launch(
                context,
                geometry,
                geometry.kernel,
                self.exec_row_major,
                geometry,
                mu,
                data,
                D,
                N,
            )
            self.scale(mu, N - 1 if sample else N, D, context)
        else:
            if sample:
                raise NotImplementedError(
                    "Sample mean (N - 1) is only supported for row-major input"
                )
            geometry = LaunchGeometry.col_major(D, N, self.config)
            self.launch(
                context,
                geometry,
                geometry.kernel,
                self.exec_col_major,
                geometry,
                mu,
                data,
                D,
                N,
            )
        return mu

    def scale(self, x: Tensor, divisor: int, n: int, context: ExecutionContext):
        geometry = LaunchGeometry.elementwise(
            "scale_kernel", n, self.config.scale_block_size
        )
        self.launch(
            context, geometry, geometry.kernel, self.exec_scale, geometry, x, divisor, n
        )

    def center(
        self,
        out: Tensor,
        data: Tensor,
        mu: Tensor,
        D: int,
        N: int,
        row_major: bool,
        subtract: bool,
        context: ExecutionContext,
    ) -> Tensor:
        geometry = LaunchGeometry.elementwise(
            "center_kernel", N * D, self.config.scale_block_size
        )
        self.launch(
            context,
            geometry,
            geometry.kernel,
            self.exec_center,
            geometry,
            out,
            data,
            mu,
            D,
            N,
            row_major,
            subtract,
        )
        return out

    # ---------- Kernel executors ----------

    def exec_row_major(self, geometry, mu, data, D, N):
        raise NotImplementedError

    def exec_col_major(self, geometry, mu, data, D, N):
        raise NotImplementedError

    def exec_scale(self, geometry, x, divisor, n):
        raise NotImplementedError

    def exec_center(self, geometry, out, data, mu, D, N, row_major, subtract):
        raise NotImplementedError


class CPUBackend(Backend):
    """
    Interprets the kernels with torch (see TorchInterpreter)
    """

    def exec_row_major(self, geometry, mu, data, D, N):
        TorchInterpreter(geometry).run(
            data, mu, D, N, self.config.rows_per_block, self.config.tile_width
        )

    def exec_col_major(self, geometry, mu, data, D, N):
        TorchInterpreter(geometry).run(data, mu, N, self.config.threads_per_block)

    def exec_scale(self, geometry, x, divisor, n):
        TorchInterpreter(geometry).run(x, x, divisor, n)

    def exec_center(self, geometry, out, data, mu, D, N, row_major, subtract):
        TorchInterpreter(geometry).run(data, mu, out, D, N, row_major, subtract)


class CUDABackend(Backend):
    """
    Launches the Triton kernels, torch's current stream is the one of the context scope
    """

    def exec_row_major(self, geometry, mu, data, D, N):
        from colmean.backend.kernels.reduce import mean_row_major_kernel

        mean_row_major_kernel[geometry.grid](
            data,
            mu,
            D,
            N,
            ROWS_PER_BLOCK=self.config.rows_per_block,
            TILE_WIDTH=self.config.tile_width,
        )

    def exec_col_major(self, geometry, mu, data, D, N):
        from colmean.backend.kernels.reduce import mean_col_major_kernel

        mean_col_major_kernel[geometry.grid](
            data,
            mu,
            N,
            BLOCK_SIZE=self.config.threads_per_block,
        )

    def exec_scale(self, geometry, x, divisor, n):
        from colmean.backend.kernels.elementwise import scale_kernel

        scale_kernel[geometry.grid](x, x, divisor, n, BLOCK_SIZE=geometry.block)

    def exec_center(self, geometry, out, data, mu, D, N, row_major, subtract):
        from colmean.backend.kernels.elementwise import center_kernel

        center_kernel[geometry.grid](
            data,
            mu,
            out,
            D,
            N,
            N * D,
            ROW_MAJOR=row_major,
            SUBTRACT=subtract,
            BLOCK_SIZE=geometry.block,
        )
