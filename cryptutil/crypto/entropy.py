# cryptutil/crypto/entropy.py
import logging
import random

from cryptutil.common.config import get_config, ENV_USE_INSECURE_RAND
from cryptutil.common.errors import EntropySourceUnavailable
from cryptutil.common.utils import pack_word, WORD_SIZE

logger = logging.getLogger(__name__)


class SecureRandomSource:
    """
    Reads random bytes from a secure entropy device.

    If the device can't be read, get_bytes() fails with
    EntropySourceUnavailable. As a last resort, for non-critical systems,
    insecure randomness can be enabled (CRYPTUTIL_USE_INSECURE_RAND or
    configure(use_insecure_rand=True)) and bytes will come from the
    Mersenne Twister instead.

    Reads block until the device returns; there is no timeout.
    """

    def __init__(self, rand_source: str = None, use_insecure_rand: bool = None):
        # None means "ask the process config at call time"
        self._rand_source = rand_source
        self._use_insecure_rand = use_insecure_rand

    @property
    def rand_source(self) -> str:
        if self._rand_source is not None:
            return self._rand_source
        return get_config().rand_source

    @property
    def use_insecure_rand(self) -> bool:
        if self._use_insecure_rand is not None:
            return self._use_insecure_rand
        return get_config().use_insecure_rand

    def get_bytes(self, num_bytes: int) -> bytes:
        """Returns exactly 'num_bytes' random bytes."""
        if num_bytes < 0:
            raise ValueError("num_bytes must be non-negative")
        if num_bytes == 0:
            return b""

        path = self.rand_source
        try:
            with open(path, "rb") as f:
                data = f.read(num_bytes)
        except OSError as e:
            if not self.use_insecure_rand:
                logger.error("Cannot read random source %s: %s", path, e)
                raise EntropySourceUnavailable(
                    f"Cannot read random source {path!r}. Set {ENV_USE_INSECURE_RAND} "
                    f"to continue with insecure random."
                ) from e
            logger.warning("Random source %s unavailable (%s); using INSECURE random", path, e)
            return _insecure_bytes(num_bytes)

        if len(data) != num_bytes:
            raise EntropySourceUnavailable(
                f"Short read from {path!r}: wanted {num_bytes} bytes, got {len(data)}"
            )
        return data


def _insecure_bytes(num_bytes: int) -> bytes:
    words = [pack_word(random.getrandbits(32)) for _ in range(0, num_bytes, WORD_SIZE)]
    return b"".join(words)[:num_bytes]


_default_source = SecureRandomSource()


def get_bytes(num_bytes: int) -> bytes:
    """Random bytes from the default source, which follows the process config."""
    return _default_source.get_bytes(num_bytes)
