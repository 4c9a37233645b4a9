"""
Exception types raised by light curve models.

Allocation failures surface as the built-in MemoryError and are never caught.
"""


class ModelLogicError(RuntimeError):
    """
    A light curve produced values that violate its documented postconditions
    (NaN, negative flux, wrong length). Indicates a bug; never retried.
    """


class BadParam(ValueError):
    """A model parameter was given a value outside its allowed range."""


class MissingParam(KeyError):
    """A model was requested without one of its required parameters."""

    def __init__(self, name: str, param: str):
        self.name = name
        self.param = param
        super().__init__(f"Light curve '{name}' requires parameter '{param}'.")

    def __str__(self) -> str:
        return self.args[0]
