from typing import Callable, Tuple, TypeVar

# Defining commonly used type annotations so that they do not need
# to be redefined elsewhere whenever they are used.
Instance = TypeVar("Instance")

PDFCallable = Callable[[float], float]
Bounds = Tuple[float, float]
