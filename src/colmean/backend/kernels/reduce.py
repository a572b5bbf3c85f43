import triton
import triton.language as tl


@triton.jit
def mean_row_major_kernel(
    X,  # pointer to the (N, D) input, columns contiguous within a row
    MU,  # pointer to the D column sums, must be zeroed beforehand
    D,  # number of columns
    N,  # number of rows
    ROWS_PER_BLOCK: tl.constexpr,  # threads_per_block // TILE_WIDTH
    TILE_WIDTH: tl.constexpr,
):
    # 1. Map program to (row block, column tile)
    row_block = tl.program_id(0)
    num_row_blocks = tl.num_programs(0)
    tile = tl.program_id(1)

    # 2. Lanes are laid out as (sub-row, sub-column)
    # sub-columns map directly to absolute columns of this tile
    sub_rows = tl.arange(0, ROWS_PER_BLOCK)
    cols = tile * TILE_WIDTH + tl.arange(0, TILE_WIDTH)
    col_mask = cols < D

    # 3. Grid-stride loop over rows, partial sums stay in registers
    stride = ROWS_PER_BLOCK * num_row_blocks
    _sum = tl.zeros([ROWS_PER_BLOCK, TILE_WIDTH], dtype=X.dtype.element_ty)

    for row_start in range(row_block * ROWS_PER_BLOCK, N, stride):
        rows = row_start + sub_rows
        mask = (rows[:, None] < N) & col_mask[None, :]
        # 64-bit offsets, N * D may not fit in int32
        offsets = rows.to(tl.int64)[:, None] * D + cols[None, :]
        _sum += tl.load(X + offsets, mask=mask, other=0.0)

    # 4. Block-local accumulator: one slot per column of the tile
    block_sum = tl.sum(_sum, axis=0)

    # 5. Many programs target the same columns, only atomics touch MU
    tl.atomic_add(MU + cols, block_sum, mask=col_mask)


@triton.jit
def mean_col_major_kernel(
    X,  # pointer to the input, rows contiguous within a column
    MU,  # pointer to the D means
    N,  # number of rows (reduction dimension size)
    BLOCK_SIZE: tl.constexpr,  # threads per block
):
    # 1. Map program to the column we are reducing
    col = tl.program_id(0)
    col_start_ptr = X + col.to(tl.int64) * N

    # 2. Each lane strides over the column by BLOCK_SIZE
    _sum = tl.zeros([BLOCK_SIZE], dtype=X.dtype.element_ty)

    for off in range(0, N, BLOCK_SIZE):
        rows = off + tl.arange(0, BLOCK_SIZE)
        mask = rows < N
        _sum += tl.load(col_start_ptr + rows, mask=mask, other=0.0)

    # 3. Tree reduction across the block, single write per column
    total = tl.sum(_sum, axis=0)
    tl.store(MU + col, total / N)
