from typing import Final


class Line_Search_Failed(Exception):
    pass


class Maximum_Iterations_Exceeded(Line_Search_Failed):
    unbounded: Final[bool]
    max_iter: Final[int]

    def __init__(self, max_iter: int, *, unbounded: bool) -> None:
        if unbounded:
            message = (
                f"line search did not find an upper bound within {max_iter} iterations,"
                " the objective is probably unbounded along the direction"
                " or the gradient is inconsistent with it"
            )
        else:
            message = f"line search did not satisfy the Wolfe conditions within {max_iter} iterations"
        super().__init__(message)
        self.unbounded = unbounded
        self.max_iter = max_iter


class Evaluation_Failed(Line_Search_Failed):
    step: Final[float]

    def __init__(self, step: float, what: str) -> None:
        super().__init__(f"the {what} is not finite at step {step}")
        self.step = step
