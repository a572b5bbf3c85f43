from dataclasses import dataclass

import torch


@dataclass(frozen=True)
class DType:
    name: str

    def __repr__(self):
        return f"dtypes.{self.name}"

    @property
    def torch_dtype(self) -> torch.dtype:
        return getattr(torch, self.name)


class dtypes:
    float32 = DType("float32")
    float64 = DType("float64")

    @staticmethod
    def supported():
        return (dtypes.float32, dtypes.float64)

    @staticmethod
    def from_torch(dtype: torch.dtype) -> DType:
        for d in dtypes.supported():
            if d.torch_dtype == dtype:
                return d
        raise NotImplementedError(
            f"{dtype} is not supported, use one of {dtypes.supported()}"
        )
