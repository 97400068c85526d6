"""String helpers."""

from .main import pathcrypt


def random_string(
    length: int = 16,
    *,
    lowercase: bool = True,
    uppercase: bool = True,
    digits: bool = True,
    symbols: bool = True,
    exclude: str = "",
):
    return pathcrypt.generate_random_string(
        length,
        lowercase=lowercase,
        uppercase=uppercase,
        digits=digits,
        symbols=symbols,
        exclude=exclude,
    )


def random_strings(count: int, length: int = 16, **options):
    return [random_string(length, **options) for _ in range(count)]


__all__ = ["random_string", "random_strings"]
