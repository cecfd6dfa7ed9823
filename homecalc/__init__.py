"""Purchase-power calculator for first-time home buyers in Korea.

``calculate`` turns a :class:`CalculationInput` into a
:class:`CalculationResult`; policy tables can be swapped with
:func:`load_policy`.
"""
from importlib.metadata import PackageNotFoundError, version

from .engine import calculate
from .models import Borrower, CalculationInput, CalculationResult, JointHousehold, Region, SingleHousehold
from .policy import DEFAULT_POLICY, PolicyConfig, load_policy

try:
    __version__ = version("homecalc")
except PackageNotFoundError:  # pragma: no cover - source checkout
    __version__ = "0.1.0"

__all__ = [
    "Borrower",
    "CalculationInput",
    "CalculationResult",
    "DEFAULT_POLICY",
    "JointHousehold",
    "PolicyConfig",
    "Region",
    "SingleHousehold",
    "__version__",
    "calculate",
    "load_policy",
]
