import triton
import triton.language as tl


@triton.jit
def scale_kernel(
    X,
    OUT,
    divisor,  # integer, keeps float64 outputs exact (float scalars are passed as fp32)
    n_elements,
    BLOCK_SIZE: tl.constexpr,
):
    # OUT = X / divisor, X and OUT may alias
    pid = tl.program_id(0).to(tl.int64)
    offsets = pid * BLOCK_SIZE + tl.arange(0, BLOCK_SIZE)
    mask = offsets < n_elements

    x = tl.load(X + offsets, mask=mask)
    tl.store(OUT + offsets, x / divisor, mask=mask)


@triton.jit
def center_kernel(
    DATA,
    MU,
    OUT,
    D,
    N,
    n_elements,
    ROW_MAJOR: tl.constexpr,
    SUBTRACT: tl.constexpr,
    BLOCK_SIZE: tl.constexpr,
):
    pid = tl.program_id(0).to(tl.int64)
    offsets = pid * BLOCK_SIZE + tl.arange(0, BLOCK_SIZE)
    mask = offsets < n_elements

    # column of every element depends on the layout
    if ROW_MAJOR:
        cols = offsets % D
    else:
        cols = offsets // N

    x = tl.load(DATA + offsets, mask=mask)
    mu = tl.load(MU + cols, mask=mask)

    if SUBTRACT:
        y = x - mu
    else:
        y = x + mu

    tl.store(OUT + offsets, y, mask=mask)
