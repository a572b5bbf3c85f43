import os

from pydantic import BaseModel, field_validator, model_validator

from colmean.utils import env_flag, validate_config
from colmean.utils.helpers import is_power_of_2


class LaunchConfig(BaseModel):
    """Launch parameters shared by both reduction topologies.

    Attributes:
        threads_per_block: Number of lanes a single program (thread block) models.
            The column-major kernel uses it as its per-column stride, the
            row-major kernel splits it into `threads_per_block // tile_width`
            sub-rows. Defaults to 256.
        tile_width: Number of columns owned by one row-major program. Any power
            of two up to `threads_per_block` works. Defaults to 32.
        rows_per_thread: How many rows each row-major lane visits on average,
            used to size the row-block grid axis. Defaults to 4.
        scale_block_size: Block size of the elementwise passes (normalization,
            mean centering). Defaults to 1024.
        sync_after_launch: Synchronize the execution context after every launch
            so asynchronous failures surface at the faulty kernel. Slow, meant
            for debugging. Defaults to False.
    """

    threads_per_block: int = 256
    tile_width: int = 32
    rows_per_thread: int = 4
    scale_block_size: int = 1024
    sync_after_launch: bool = False

    @field_validator("threads_per_block", "tile_width", "scale_block_size")
    @classmethod
    def check_power_of_2(cls, v: int) -> int:
        if not is_power_of_2(v):
            raise ValueError(f"{v} must be a positive power of 2")
        return v

    @field_validator("rows_per_thread")
    @classmethod
    def check_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("rows_per_thread must be at least 1")
        return v

    @model_validator(mode="after")
    def check_tile_fits_block(self) -> "LaunchConfig":
        if self.tile_width > self.threads_per_block:
            raise ValueError(
                f"tile_width ({self.tile_width}) cannot exceed threads_per_block ({self.threads_per_block})"
            )
        return self

    @property
    def rows_per_block(self) -> int:
        """Sub-rows handled concurrently by one row-major program."""
        return self.threads_per_block // self.tile_width

    @classmethod
    def create(cls, **kwargs) -> "LaunchConfig":
        return validate_config(cls, **kwargs)

    @classmethod
    def from_env(cls, **kwargs) -> "LaunchConfig":
        """Builds a config, letting COLMEAN_* environment variables override defaults."""
        env_map = {
            "threads_per_block": "COLMEAN_TPB",
            "tile_width": "COLMEAN_TILE_WIDTH",
            "rows_per_thread": "COLMEAN_ROWS_PER_THREAD",
        }
        for field, var in env_map.items():
            if var in os.environ and field not in kwargs:
                kwargs[field] = int(os.environ[var])
        if "sync_after_launch" not in kwargs and env_flag("COLMEAN_SYNC"):
            kwargs["sync_after_launch"] = True
        return cls.create(**kwargs)


DEFAULT_CONFIG = LaunchConfig()
