import time

import numpy as np
import torch

import colmean
from colmean.utils import progress_bar

# Set seed for reproducibility (so you can debug specific values)
np.random.seed(1337)
torch.manual_seed(1337)


def bench(fn, repeats: int, sync):
    # warmup (Triton compiles on first call)
    fn()
    sync()

    st = time.perf_counter()
    for _ in progress_bar(range(repeats), leave=False):
        fn()
    sync()
    return (time.perf_counter() - st) / repeats * 1000


def demo_col_mean():
    print("=== 🧪 Testing column means against torch.mean ===")

    device = "cuda" if torch.cuda.is_available() else "cpu"

    # Non-multiples of the tile width to catch masking bugs
    # the CPU path interprets every program, keep it small
    N = 100_003 if device == "cuda" else 4_099  # rows
    D = 333  # columns

    context = colmean.current_context(device)
    sync = context.synchronize

    raw = np.random.randn(N, D).astype(np.float32)
    x_row = torch.from_numpy(raw).to(device)
    x_col = x_row.T.contiguous()  # same values, column-major storage

    expected = x_row.mean(dim=0)
    print(f"Shape: ({N}, {D}) on {device}")

    for name, data, row_major in (
        ("row-major", x_row, True),
        ("column-major", x_col, False),
    ):
        mu = colmean.col_mean(data, row_major=row_major, context=context)
        sync()

        if np.allclose(mu.cpu().numpy(), expected.cpu().numpy(), atol=1e-4, rtol=1e-4):
            print(f"✅ {name} matched PyTorch!")
        else:
            print(f"❌ {name} mismatch!")
            print("Expected:\n", expected[:5])
            print("Got:\n", mu[:5])
            print("Max diff:", (mu - expected).abs().max().item())
            return

        ms = bench(
            lambda: colmean.col_mean(data, row_major=row_major, context=context),
            repeats=20,
            sync=sync,
        )
        print(f"   {name}: {ms:.3f} ms / call")

    ms = bench(lambda: x_row.mean(dim=0), repeats=20, sync=sync)
    print(f"   torch.mean: {ms:.3f} ms / call")


if __name__ == "__main__":
    demo_col_mean()
