"""Exceptions raised by the calculation engine and its request boundary."""
from __future__ import annotations


class HomeCalcError(Exception):
    """Base class for every error raised by :mod:`homecalc`."""


class InputValidationError(HomeCalcError, ValueError):
    """A request was rejected before it reached the engine."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class PolicyError(HomeCalcError, ValueError):
    """A policy document could not be read or validated."""


class CalculationError(HomeCalcError):
    """The engine failed to produce a result."""


class ConvergenceError(CalculationError):
    """The purchase-price solver hit its iteration cap in strict mode."""

    def __init__(self, iterations: int, delta: float) -> None:
        super().__init__(
            f"Purchase price did not converge after {iterations} iterations "
            f"(last change {delta:,.1f})"
        )
        self.iterations = iterations
        self.delta = delta
