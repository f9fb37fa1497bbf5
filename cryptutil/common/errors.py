# cryptutil/common/errors.py


class CryptUtilError(Exception):
    pass


class EntropySourceUnavailable(CryptUtilError):
    """The secure random device could not be opened or read, and insecure
    randomness has not been enabled."""


# Older name for the same failure
InsecureRandomUnavailable = EntropySourceUnavailable


class InvalidRange(CryptUtilError, ValueError):
    """An empty or malformed range was passed to a sampler."""


class LengthMismatch(CryptUtilError, ValueError):
    """Two byte strings that must be the same length were not."""


class InvalidExponent(CryptUtilError, ValueError):
    pass


class BackendUnavailable(CryptUtilError):
    """No big-integer backend could be constructed, not even the generic one."""
