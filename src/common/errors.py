class InternalError(Exception):
    def __init__(self, msg: str):
        super().__init__(f"internal error: {msg}")


class FlinqError(Exception):
    """Base class for every error a Flinq statement can fail with."""

    stage = "flinq"


class NestingDepthError(FlinqError):
    """
    A statement nested deeper than the Python stack allows. Lexing, parsing
    and evaluation all recurse, so the error carries the stage it hit.
    """

    def __init__(self, stage: str):
        super().__init__("maximum nesting depth exceeded")
        self.stage = stage
