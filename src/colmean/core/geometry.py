from dataclasses import dataclass
from typing import Tuple

from colmean.core.config import LaunchConfig
from colmean.core.errors import LaunchError
from colmean.utils.helpers import cdiv

# CUDA limits on grid dimensions (x, y, z)
MAX_GRID = (2**31 - 1, 65535, 65535)


@dataclass(frozen=True)
class LaunchGeometry:
    kernel: str
    grid: Tuple[int, ...]
    block: int

    def __str__(self):
        return f"grid={self.grid}, block={self.block}"

    @property
    def num_programs(self) -> int:
        total = 1
        for g in self.grid:
            total *= g
        return total

    def validate(self) -> "LaunchGeometry":
        if len(self.grid) == 0 or len(self.grid) > len(MAX_GRID):
            raise LaunchError(self.kernel, "grid must have 1 to 3 dimensions", self)
        for axis, (g, limit) in enumerate(zip(self.grid, MAX_GRID)):
            if g <= 0:
                raise LaunchError(self.kernel, f"grid axis {axis} has no blocks", self)
            if g > limit:
                raise LaunchError(
                    self.kernel, f"grid axis {axis} exceeds the limit of {limit}", self
                )
        if self.block <= 0:
            raise LaunchError(self.kernel, "block size must be positive", self)
        return self

    # ---------- Constructors ----------

    @staticmethod
    def row_major(D: int, N: int, config: LaunchConfig) -> "LaunchGeometry":
        # (row blocks, column tiles)
        # each row block covers rows_per_block * rows_per_thread rows before striding
        rows_per_program = config.rows_per_block * config.rows_per_thread
        return LaunchGeometry(
            kernel="mean_row_major_kernel",
            grid=(cdiv(N, rows_per_program), cdiv(D, config.tile_width)),
            block=config.threads_per_block,
        )

    @staticmethod
    def col_major(D: int, N: int, config: LaunchConfig) -> "LaunchGeometry":
        # one program per column
        return LaunchGeometry(
            kernel="mean_col_major_kernel",
            grid=(D,),
            block=config.threads_per_block,
        )

    @staticmethod
    def elementwise(kernel: str, n_elements: int, block_size: int) -> "LaunchGeometry":
        return LaunchGeometry(
            kernel=kernel,
            grid=(cdiv(n_elements, block_size),),
            block=block_size,
        )
