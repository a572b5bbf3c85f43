import importlib

import torch


def test_backend_imports_directly():
    backend = importlib.import_module("colmean.backend")

    # the interpreter submodule must not shadow the torch package
    assert backend.Backend.mean.__annotations__["mu"] is torch.Tensor
    assert backend.CPUBackend is not None
    assert backend.CUDABackend is not None


def test_package_registers_backends():
    import colmean

    assert colmean.Device.get_backend("cpu").__name__ == "CPUBackend"
    assert colmean.Device.get_backend("cuda").__name__ == "CUDABackend"
