from typing import Callable, Optional

from numpy import ndarray

objective_t = Callable[[ndarray], float]
gradient_t = Callable[[ndarray], ndarray]
model_t = Callable[..., ndarray]
jacobian_t = Optional[Callable[..., ndarray]]
