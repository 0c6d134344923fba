class ValidationError(ValueError):
    """Raised when user-supplied payment details are malformed."""


class StatusTransitionError(ValueError):
    """Raised when a participant's payment status cannot move to the requested state."""

    def __init__(self, index: int, current: str, target: str):
        self.index = index
        self.current = current
        self.target = target
        super().__init__(
            f"Participant {index + 1} is {current}; cannot mark as {target}"
        )
