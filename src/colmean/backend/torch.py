import torch

from colmean.core.geometry import LaunchGeometry
from colmean.utils.helpers import DEBUG, cdiv
from colmean.utils.logging import default_logger


class TorchInterpreter:
    """
    Runs the Triton kernels of this package on CPU tensors
    * One loop iteration = one program (thread block) of the real launch grid.
    * Lanes inside a program are vectorized with torch ops.
    * Independent programs of the column-major kernel are batched together since they never share memory.
    """

    def __init__(self, geometry: LaunchGeometry):
        self.geometry = geometry

    def run(self, *args, **kwargs):
        op_map = {
            "mean_row_major_kernel": self.mean_row_major,
            "mean_col_major_kernel": self.mean_col_major,
            "scale_kernel": self.scale,
            "center_kernel": self.center,
        }
        if DEBUG >= 2:
            default_logger.debug(
                f"Interpreting {self.geometry.kernel} over {self.geometry.num_programs} programs"
            )
        return op_map[self.geometry.kernel](*args, **kwargs)

    def mean_row_major(self, X, MU, D, N, rows_per_block, tile_width):
        num_row_blocks, num_tiles = self.geometry.grid
        stride = rows_per_block * num_row_blocks
        mat = X[: N * D].view(N, D)

        sub_rows = torch.arange(rows_per_block)
        for row_block in range(num_row_blocks):
            # rows visited by each sub-row lane: (rows_per_block, visits)
            rows = (row_block * rows_per_block + sub_rows)[:, None] + torch.arange(
                0, N, stride
            )[None, :]
            row_mask = rows < N
            # registers of every lane in this row block, out-of-range rows contribute 0
            visited = torch.where(
                row_mask[..., None],
                mat[rows.clamp(max=N - 1)],
                torch.zeros((), dtype=mat.dtype),
            )
            lane_sums = visited.sum(dim=1)  # (rows_per_block, D)

            for tile in range(num_tiles):
                # columns >= D are never read nor written
                cols = torch.arange(tile * tile_width, min((tile + 1) * tile_width, D))
                n_cols = cols.numel()

                # block-local accumulator, every sub-row adds into the same slots
                shared = torch.zeros(tile_width, dtype=MU.dtype)
                for sub_row in range(rows_per_block):
                    shared[:n_cols] += lane_sums[sub_row, cols]

                # one atomic add per column into the global output
                MU.index_add_(0, cols, shared[:n_cols])

    def mean_col_major(self, X, MU, N, block_size):
        (D,) = self.geometry.grid
        cols = X[: N * D].view(D, N)

        # lane t of a program visits t, t + block_size, ...
        padded = torch.zeros((D, cdiv(N, block_size) * block_size), dtype=X.dtype)
        padded[:, :N] = cols
        lanes = padded.view(D, -1, block_size).sum(dim=1)  # (D, block_size)

        # pairwise tree reduction, block_size is a power of 2
        width = block_size
        while width > 1:
            width //= 2
            lanes[:, :width] += lanes[:, width : 2 * width]

        # lane 0 of each program writes its column once
        MU[:D] = lanes[:, 0] / N

    def scale(self, X, OUT, divisor, n_elements):
        # same rounding as scale_kernel, which divides by the integer divisor
        OUT[:n_elements] = X[:n_elements] / divisor

    def center(self, DATA, MU, OUT, D, N, row_major, subtract):
        if row_major:
            mat, out = DATA[: N * D].view(N, D), OUT[: N * D].view(N, D)
            mu = MU[:D][None, :]
        else:
            mat, out = DATA[: N * D].view(D, N), OUT[: N * D].view(D, N)
            mu = MU[:D][:, None]
        if subtract:
            torch.sub(mat, mu, out=out)
        else:
            torch.add(mat, mu, out=out)
