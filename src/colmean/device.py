import torch


# We see Device as a singleton class
class Device:
    CPU = "CPU"
    CUDA = "CUDA"

    _backends = {}

    @staticmethod
    def register(name: str, backend_cls):
        Device._backends[name] = backend_cls

    @staticmethod
    def get_backend(device_name: str):
        if not Device._backends:
            device_register_global()
        device_name = device_name.upper()
        if device_name not in Device._backends:
            raise ValueError(
                f"No backend registered for device '{device_name}', available: {list(Device._backends)}"
            )
        return Device._backends[device_name]

    @staticmethod
    def of(t: torch.Tensor) -> str:
        return t.device.type.upper()


def device_register_global():
    """
    just to avoid circular imports
    """
    from colmean.backend import (
        CPUBackend,
        CUDABackend,
    )

    Device.register(Device.CPU, CPUBackend)
    Device.register(Device.CUDA, CUDABackend)


DEFAULT_DEVICE = Device.CUDA if torch.cuda.is_available() else Device.CPU
