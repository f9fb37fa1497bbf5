# cryptutil/crypto/mathlib.py
"""
Big-integer arithmetic behind a single interface.

BigIntBackend defines the operations the handshake code needs. Concrete
backends wrap whatever large-number library is available:

  GmpBackend           gmpy2 (optional, fastest)
  PyCryptodomeBackend  Crypto.Math.Numbers.Integer
  GenericBigIntBackend plain Python ints, square-and-multiply powmod

Values are opaque to callers: create them with init(), turn them back into
Python ints with to_int(), and never mix values from different backends.
"""
import logging
import threading
from abc import ABC, abstractmethod

from cryptutil.common.errors import BackendUnavailable, InvalidExponent, InvalidRange
from cryptutil.common.utils import binary_to_long
from cryptutil.crypto.entropy import get_bytes

try:
    import gmpy2
except ImportError:
    gmpy2 = None

try:
    from Crypto.Math.Numbers import Integer
except ImportError:
    Integer = None

logger = logging.getLogger(__name__)


def _parse(value, base: int) -> int:
    if isinstance(value, bool):
        raise TypeError("bool is not a valid big integer value")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value, base)
    raise TypeError(f"Cannot make a big integer from {type(value).__name__}")


def _trunc_div(x: int, y: int) -> int:
    q = abs(x) // abs(y)
    return -q if (x < 0) != (y < 0) else q


class BigIntBackend(ABC):
    name = None

    @classmethod
    def available(cls) -> bool:
        return True

    @abstractmethod
    def init(self, value, base: int = 10):
        """Makes a backend value from an int or a digit string in 'base'."""

    @abstractmethod
    def to_int(self, x) -> int:
        pass

    @abstractmethod
    def cmp(self, x, y) -> int:
        """-1, 0 or 1 as x is less than, equal to or greater than y."""

    def mod(self, base, modulus):
        """base mod modulus, in [0, modulus). 'modulus' must be positive."""
        if self.cmp(modulus, self.init(0)) <= 0:
            raise ValueError("modulus must be positive")
        return self._mod(base, modulus)

    @abstractmethod
    def _mod(self, base, modulus):
        pass

    @abstractmethod
    def mul(self, x, y):
        pass

    @abstractmethod
    def div(self, x, y):
        """Integer division truncating toward zero."""

    def powmod(self, base, exponent, modulus):
        """base ** exponent mod modulus for a non-negative exponent."""
        if self.cmp(exponent, self.init(0)) < 0:
            raise InvalidExponent("powmod does not accept negative exponents")
        if self.cmp(modulus, self.init(0)) <= 0:
            raise ValueError("modulus must be positive")
        return self._powmod(base, exponent, modulus)

    @abstractmethod
    def _powmod(self, base, exponent, modulus):
        pass

    def random(self, min, max):
        """
        A random value in [min, max].

        This is a convenience with a weaker guarantee than RangeSampler: the
        result is not corrected for modulo bias. Use
        cryptutil.crypto.sampler where uniformity matters.
        """
        if self.cmp(max, min) < 0:
            raise InvalidRange(f"Empty range: min={self.to_int(min)}, max={self.to_int(max)}")
        return self._random(min, max)

    @abstractmethod
    def _random(self, min, max):
        pass


class GenericBigIntBackend(BigIntBackend):
    """Works everywhere. powmod is built from cmp/mod/mul/div."""
    name = 'generic'

    def init(self, value, base: int = 10) -> int:
        return _parse(value, base)

    def to_int(self, x) -> int:
        return int(x)

    def cmp(self, x, y) -> int:
        if x > y:
            return 1
        elif x < y:
            return -1
        else:
            return 0

    def _mod(self, base, modulus):
        return base % modulus

    def mul(self, x, y):
        return x * y

    def div(self, x, y):
        return _trunc_div(x, y)

    def _powmod(self, base, exponent, modulus):
        # Square-and-multiply. At the top of each pass,
        # result * square**exponent == base**e0 (mod modulus).
        square = self._mod(base, modulus)
        result = self._mod(1, modulus)
        while self.cmp(exponent, 0) > 0:
            if self._mod(exponent, 2):
                result = self._mod(self.mul(result, square), modulus)
            square = self._mod(self.mul(square, square), modulus)
            exponent = self.div(exponent, 2)
        return result

    def _random(self, min, max):
        span = max - min + 1
        nbytes = (span.bit_length() + 7) // 8
        n = binary_to_long(b"\x00" + get_bytes(nbytes))
        return min + n % span


class GmpBackend(BigIntBackend):
    """Wraps gmpy2 (GMP)."""
    name = 'gmp'

    @classmethod
    def available(cls) -> bool:
        return gmpy2 is not None

    def init(self, value, base: int = 10):
        return gmpy2.mpz(_parse(value, base))

    def to_int(self, x) -> int:
        return int(x)

    def cmp(self, x, y) -> int:
        return (x > y) - (x < y)

    def _mod(self, base, modulus):
        return gmpy2.f_mod(base, modulus)

    def mul(self, x, y):
        return gmpy2.mul(x, y)

    def div(self, x, y):
        return gmpy2.t_div(x, y)

    def _powmod(self, base, exponent, modulus):
        return gmpy2.powmod(base, exponent, modulus)

    def _random(self, min, max):
        span = gmpy2.mpz(max) - min + 1
        seed = binary_to_long(b"\x00" + get_bytes(16))
        state = gmpy2.random_state(seed)
        return gmpy2.mpz(min) + gmpy2.mpz_random(state, span)


class PyCryptodomeBackend(BigIntBackend):
    """Wraps pycryptodome's Integer, which uses libgmp when it can find it."""
    name = 'pycryptodome'

    @classmethod
    def available(cls) -> bool:
        return Integer is not None

    def init(self, value, base: int = 10):
        return Integer(_parse(value, base))

    def to_int(self, x) -> int:
        return int(x)

    def cmp(self, x, y) -> int:
        if x > y:
            return 1
        elif x < y:
            return -1
        else:
            return 0

    def _mod(self, base, modulus):
        return Integer(base) % modulus

    def mul(self, x, y):
        return Integer(x) * y

    def div(self, x, y):
        x, y = Integer(x), Integer(y)
        # Integer's // floors; only differs from truncation for negatives
        if not (x.is_negative() or y.is_negative()):
            return x // y
        return Integer(_trunc_div(int(x), int(y)))

    def _powmod(self, base, exponent, modulus):
        return pow(Integer(base), exponent, modulus)

    def _random(self, min, max):
        return Integer.random_range(min_inclusive=int(min),
                                    max_inclusive=int(max),
                                    randfunc=get_bytes)


# Fastest first; the generic backend always works
DEFAULT_BACKENDS = (GmpBackend, PyCryptodomeBackend, GenericBigIntBackend)


class BackendSelector:
    """
    Picks the first available backend from 'candidates' on the first call to
    get_backend() and returns that same instance forever after. Availability
    is never re-checked.
    """

    def __init__(self, candidates=DEFAULT_BACKENDS):
        self.candidates = tuple(candidates)
        self._backend = None
        self._lock = threading.Lock()

    def get_backend(self) -> BigIntBackend:
        with self._lock:
            if self._backend is None:
                self._backend = self._select()
            return self._backend

    def _select(self) -> BigIntBackend:
        for candidate in self.candidates:
            if candidate.available():
                backend = candidate()
                logger.info("Using %s big integer backend", backend.name)
                return backend
            logger.debug("Big integer backend %s not available", candidate.name)
        raise BackendUnavailable(
            "No big integer backend available from: "
            + ", ".join(c.name for c in self.candidates)
        )


_selector = BackendSelector()


def get_backend() -> BigIntBackend:
    """The process-wide backend, selected on first use."""
    return _selector.get_backend()
