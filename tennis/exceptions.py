class ScoreError(Exception):
    pass


class UnknownPlayerError(ScoreError, ValueError):
    pass


class StateDecodeError(ScoreError):
    pass
