import numpy as np
import pytest
import torch

from colmean import HostContext, LaunchConfig, col_mean, current_context, mean

devices = ["cpu"] + (["cuda"] if torch.cuda.is_available() else [])


# --- Helper Function ---
def check(mu, expected, atol=1e-5, rtol=1e-5):
    """
    Compares a colmean output with a PyTorch reference.
    """
    if mu.device.type == "cuda":
        torch.cuda.synchronize()
    mu_np = mu.detach().cpu().numpy()
    ex_np = expected.detach().cpu().numpy()

    # Check shapes
    assert mu_np.shape == ex_np.shape, f"Shape mismatch: {mu_np.shape} vs {ex_np.shape}"

    # Check values
    np.testing.assert_allclose(mu_np, ex_np, atol=atol, rtol=rtol)


def run_mean(data, sample=False, row_major=True, config=None, mu=None):
    if row_major:
        N, D = data.shape
    else:
        D, N = data.shape
    if mu is None:
        mu = torch.empty(D, dtype=data.dtype, device=data.device)
    context = current_context(data.device.type)
    return mean(mu, data, D, N, sample, row_major, context, config)


# --- Basic Tests ---


@pytest.mark.parametrize("device", devices)
def test_mean_3x2_row_major(device):
    data = torch.tensor([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]], device=device)

    check(run_mean(data), torch.tensor([3.0, 4.0]))
    # (1 + 3 + 5) / 2, (2 + 4 + 6) / 2
    check(run_mean(data, sample=True), torch.tensor([4.5, 6.0]))


@pytest.mark.parametrize("device", devices)
def test_mean_3x2_col_major(device):
    # same logical matrix, rows contiguous within a column
    data = torch.tensor([[1.0, 3.0, 5.0], [2.0, 4.0, 6.0]], device=device)

    check(run_mean(data, row_major=False), torch.tensor([3.0, 4.0]))


@pytest.mark.parametrize("device", devices)
@pytest.mark.parametrize("shape", [(128, 256), (1000, 7), (3, 500), (4097, 65)])
def test_mean_row_major(device, shape):
    data = torch.randn(*shape, device=device)

    check(run_mean(data), data.mean(dim=0))


@pytest.mark.parametrize("device", devices)
@pytest.mark.parametrize("shape", [(128, 256), (1000, 7), (3, 500), (4097, 65)])
def test_mean_col_major(device, shape):
    data = torch.randn(*shape, device=device)

    # physical storage is (D, N)
    check(run_mean(data.T.contiguous(), row_major=False), data.mean(dim=0))


@pytest.mark.parametrize("device", devices)
def test_sample_mean_row_major(device):
    N, D = 300, 40
    data = torch.randn(N, D, device=device)

    check(run_mean(data, sample=True), data.sum(dim=0) / (N - 1))


@pytest.mark.parametrize("device", devices)
def test_float64(device):
    data = torch.randn(513, 33, dtype=torch.float64, device=device)

    check(run_mean(data), data.mean(dim=0), atol=1e-12, rtol=1e-12)
    check(
        run_mean(data.T.contiguous(), row_major=False),
        data.mean(dim=0),
        atol=1e-12,
        rtol=1e-12,
    )


def test_col_mean_allocates_output():
    data = torch.randn(64, 10)

    out = col_mean(data)
    assert out.shape == (10,)
    check(out, data.mean(dim=0))

    out = col_mean(data.T.contiguous(), row_major=False)
    assert out.shape == (10,)
    check(out, data.mean(dim=0))


# --- Properties ---


@pytest.mark.parametrize("device", devices)
def test_layout_equivalence(device):
    data = torch.randn(777, 45, device=device)

    row = run_mean(data)
    col = run_mean(data.T.contiguous(), row_major=False)
    check(row, col)


@pytest.mark.parametrize("device", devices)
@pytest.mark.parametrize("row_major", [True, False])
def test_idempotence(device, row_major):
    data = torch.randn(200, 50, device=device)
    if not row_major:
        data = data.T.contiguous()

    first = run_mean(data, row_major=row_major)
    second = run_mean(data, row_major=row_major)
    if device == "cpu":
        # host interpreter runs programs in a fixed order
        assert torch.equal(first, second)
    else:
        check(first, second)


@pytest.mark.parametrize("device", devices)
def test_row_major_output_is_zeroed_first(device):
    data = torch.randn(50, 20, device=device)
    mu = torch.full((20,), 123.0, device=device)

    check(run_mean(data, mu=mu), data.mean(dim=0))


# --- Edge Cases ---


@pytest.mark.parametrize("device", devices)
@pytest.mark.parametrize("row_major", [True, False])
def test_columns_not_multiple_of_tile(device, row_major):
    # D = 33 with tile width 32, slots past D must stay untouched
    N, D = 100, 33
    data = torch.randn(N, D, device=device)
    mu = torch.full((D + 8,), -7.0, device=device)

    src = data if row_major else data.T.contiguous()
    run_mean(src, row_major=row_major, mu=mu)

    check(mu[:D], data.mean(dim=0))
    check(mu[D:], torch.full((8,), -7.0))


@pytest.mark.parametrize("device", devices)
@pytest.mark.parametrize("row_major", [True, False])
def test_single_row(device, row_major):
    data = torch.tensor([[1.5, -2.0, 3.25]], device=device)
    src = data if row_major else data.T.contiguous()

    check(run_mean(src, row_major=row_major), data[0])


def test_single_column():
    data = torch.randn(1000, 1)

    check(run_mean(data), data.mean(dim=0))
    check(run_mean(data.T.contiguous(), row_major=False), data.mean(dim=0))


@pytest.mark.parametrize("tile_width", [8, 32, 64])
def test_tile_widths(tile_width):
    config = LaunchConfig(tile_width=tile_width)
    data = torch.randn(333, 100)

    check(run_mean(data, config=config), data.mean(dim=0))
    check(run_mean(data, sample=True, config=config), data.sum(dim=0) / 332)


@pytest.mark.parametrize(
    "config",
    [
        LaunchConfig(threads_per_block=64, tile_width=64),  # one sub-row per block
        LaunchConfig(rows_per_thread=100),  # long grid-stride loops
        LaunchConfig(threads_per_block=32, tile_width=4, rows_per_thread=1),
    ],
)
def test_launch_configs(config):
    data = torch.randn(2049, 37)

    check(run_mean(data, config=config), data.mean(dim=0))
    check(
        run_mean(data.T.contiguous(), row_major=False, config=config),
        data.mean(dim=0),
    )


# --- Rejected Calls ---


def test_sample_with_single_row_is_rejected():
    data = torch.randn(1, 5)
    with pytest.raises(ValueError):
        run_mean(data, sample=True)


def test_sample_col_major_is_unsupported():
    data = torch.randn(5, 10)
    with pytest.raises(NotImplementedError):
        run_mean(data, sample=True, row_major=False)


def test_sample_col_major_single_row_is_unsupported():
    # layout is reported before the row count
    data = torch.randn(5, 1)
    with pytest.raises(NotImplementedError):
        run_mean(data, sample=True, row_major=False)


def test_integer_dtype_is_unsupported():
    data = torch.arange(12, dtype=torch.int32).view(4, 3)
    with pytest.raises(NotImplementedError):
        run_mean(data)


@pytest.mark.parametrize(
    "D, N, mu_size, data_size",
    [
        (0, 4, 4, 16),  # no columns
        (4, 0, 4, 16),  # no rows
        (4, 4, 3, 16),  # output too small
        (4, 5, 4, 16),  # input too small
    ],
)
def test_invalid_dimensions(D, N, mu_size, data_size):
    mu = torch.empty(mu_size)
    data = torch.randn(data_size)
    with pytest.raises(ValueError):
        mean(mu, data, D, N, False, True, HostContext())


def test_mismatched_dtypes():
    mu = torch.empty(4, dtype=torch.float64)
    data = torch.randn(4, 4)
    with pytest.raises(ValueError):
        mean(mu, data, 4, 4, False, True, HostContext())


def test_non_contiguous_input():
    data = torch.randn(8, 8)[:, ::2]
    with pytest.raises(ValueError):
        mean(torch.empty(4), data, 4, 8, False, True, HostContext())


def test_col_mean_expects_2d():
    with pytest.raises(ValueError):
        col_mean(torch.randn(10))


# --- Large Scale System Test ---


@pytest.mark.slow
@pytest.mark.skipif(not torch.cuda.is_available(), reason="needs a CUDA device")
def test_large_mean():
    # 10,000 rows * 1,000 columns
    N, D = 10000, 1000
    data = torch.rand((N, D), device="cuda")

    check(run_mean(data), data.mean(dim=0), atol=1e-4, rtol=1e-4)
    check(
        run_mean(data.T.contiguous(), row_major=False),
        data.mean(dim=0),
        atol=1e-4,
        rtol=1e-4,
    )
