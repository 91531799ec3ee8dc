from typing import Union


def lowercase(value: str) -> str:
    return value.strip().lower()


def non_negative(value: Union[int, float]) -> None:
    if value < 0:
        raise ValueError("value must be non-negative, got %r" % (value,))


def integer(value: str) -> int:
    # int() raises ValueError, envier's own cast a TypeError
    return int(value.strip())


def number(value: str) -> float:
    return float(value.strip())
