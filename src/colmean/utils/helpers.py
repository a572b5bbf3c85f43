import functools
import os


@functools.lru_cache(maxsize=None)
def getenv(key, default=0):
    return type(default)(os.getenv(key, default))


def cdiv(a: int, b: int) -> int:
    # same as triton.cdiv, usable without importing triton on CPU hosts
    return -(-a // b)


def is_power_of_2(x: int) -> bool:
    return x > 0 and (x & (x - 1)) == 0


DEBUG = getenv("DEBUG")
