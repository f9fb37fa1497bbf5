# cryptutil/common/config.py
import logging
import os
import threading
from pydantic import BaseModel
from dotenv import load_dotenv, find_dotenv

logger = logging.getLogger(__name__)

DEFAULT_RAND_SOURCE = "/dev/urandom"

ENV_RAND_SOURCE = "CRYPTUTIL_RAND_SOURCE"
ENV_USE_INSECURE_RAND = "CRYPTUTIL_USE_INSECURE_RAND"

_TRUTHY = {"1", "true", "yes", "on"}


class CryptConfig(BaseModel):
    """
    Process-wide settings for the random source.

    rand_source: path of the device (or file) random bytes are read from.
    use_insecure_rand: allow falling back to a non-cryptographic PRNG when
        rand_source cannot be read. Only for non-critical systems.
    """
    rand_source: str = DEFAULT_RAND_SOURCE
    use_insecure_rand: bool = False


_config = None
_config_lock = threading.Lock()


def load_config(env_file=None) -> CryptConfig:
    """
    Builds a CryptConfig from the environment, after loading 'env_file'
    (or the nearest .env at or above the working directory) with python-dotenv.
    Variables already set in the environment win over the file.
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv(find_dotenv(usecwd=True))
    insecure = os.getenv(ENV_USE_INSECURE_RAND, "").strip().lower() in _TRUTHY
    config = CryptConfig(
        rand_source=os.getenv(ENV_RAND_SOURCE, DEFAULT_RAND_SOURCE),
        use_insecure_rand=insecure,
    )
    if config.use_insecure_rand:
        logger.warning("%s is set: insecure random fallback is ENABLED", ENV_USE_INSECURE_RAND)
    return config


def get_config() -> CryptConfig:
    global _config
    with _config_lock:
        if _config is None:
            _config = load_config()
        return _config


def configure(**overrides) -> CryptConfig:
    """
    Replaces the process-wide config. Fields not given keep their current
    values. Returns the new config.
    """
    global _config
    with _config_lock:
        current = _config if _config is not None else load_config()
        new_config = CryptConfig(**{**current.model_dump(), **overrides})
        if new_config.use_insecure_rand and not current.use_insecure_rand:
            logger.warning("Insecure random fallback ENABLED by configure(); "
                           "do not use this on systems that need real entropy")
        _config = new_config
        return _config


def reset_config() -> None:
    """Drops the cached config; the next get_config() reloads it."""
    global _config
    with _config_lock:
        _config = None
