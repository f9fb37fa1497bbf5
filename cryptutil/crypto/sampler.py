# cryptutil/crypto/sampler.py
import logging
import threading

from cryptutil.common.errors import InvalidRange
from cryptutil.common.utils import long_to_binary, binary_to_long
from cryptutil.crypto.entropy import SecureRandomSource

logger = logging.getLogger(__name__)

# Max entries in the duplicate cache before it is cleared
DUPLICATE_CACHE_SIZE = 10


class RangeSampler:
    """
    Unbiased random integers and strings built on a SecureRandomSource.

    Drawing 'nbytes' random bytes gives a number in [0, 256**nbytes). Unless
    the range size r divides 256**nbytes, the values below
    (256**nbytes % r) would make 'n % r' favour the low end, so they are
    rejected and redrawn.
    """

    def __init__(self, source: SecureRandomSource = None):
        self.source = source if source is not None else SecureRandomSource()
        # r -> (duplicate, nbytes)
        self._duplicate_cache = {}
        self._cache_lock = threading.Lock()

    def cache_size(self) -> int:
        with self._cache_lock:
            return len(self._duplicate_cache)

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._duplicate_cache.clear()

    def _duplicate_info(self, r: int):
        with self._cache_lock:
            cached = self._duplicate_cache.get(r)
            if cached is not None:
                return cached

            rbytes = long_to_binary(r)
            if rbytes[0] == 0:
                nbytes = len(rbytes) - 1
            else:
                nbytes = len(rbytes)

            mxrand = 256 ** nbytes

            # If we get a number less than this, then it is in the
            # duplicated range.
            duplicate = mxrand % r

            if len(self._duplicate_cache) >= DUPLICATE_CACHE_SIZE:
                logger.debug("Duplicate cache full (%d entries), clearing", len(self._duplicate_cache))
                self._duplicate_cache.clear()

            self._duplicate_cache[r] = (duplicate, nbytes)
            return duplicate, nbytes

    def randrange(self, start: int, stop: int = None, step: int = 1) -> int:
        """
        Random integer from range(start, stop, step), like random.randrange.
        A single argument means range(0, start). 'step' must be positive.

        Raises InvalidRange if the range is empty.
        """
        if stop is None:
            stop = start
            start = 0

        if step <= 0:
            raise InvalidRange(f"step must be positive, got {step}")

        # Number of values start, start+step, ... that are < stop
        r = -((start - stop) // step)
        if r <= 0:
            raise InvalidRange(f"Empty range: start={start}, stop={stop}, step={step}")

        duplicate, nbytes = self._duplicate_info(r)

        while True:
            n = binary_to_long(b"\x00" + self.source.get_bytes(nbytes))
            # Keep looping if this value is in the low duplicated range
            if n >= duplicate:
                break

        return start + (n % r) * step

    def random_string(self, length: int, alphabet=None):
        """
        A string of 'length' characters chosen uniformly and independently
        from 'alphabet' (str or bytes; the result has the same type). With
        no alphabet, returns 'length' raw random bytes.
        """
        if length < 0:
            raise ValueError("length must be non-negative")
        if alphabet is None:
            return self.source.get_bytes(length)
        if len(alphabet) == 0:
            raise InvalidRange("Cannot pick characters from an empty alphabet")

        n = len(alphabet)
        picks = []
        for _ in range(length):
            i = self.randrange(n)
            picks.append(alphabet[i:i + 1])
        return alphabet[:0].join(picks)


_shared_sampler = None
_sampler_lock = threading.Lock()


def get_sampler() -> RangeSampler:
    """The process-wide sampler, created on first use."""
    global _shared_sampler
    with _sampler_lock:
        if _shared_sampler is None:
            _shared_sampler = RangeSampler()
        return _shared_sampler


def randrange(start: int, stop: int = None, step: int = 1) -> int:
    return get_sampler().randrange(start, stop, step)


def random_string(length: int, alphabet=None):
    return get_sampler().random_string(length, alphabet)
