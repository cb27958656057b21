"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for CredSeal happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. scrypt_log2_n -> SCRYPT_LOG2_N). Type coercion is built in.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved from environment. Rejects digest algorithms hashlib does not
      provide and scrypt costs the payload decoder would refuse to read back.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or vault/.
"""

import hashlib
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("credseal.config")

# Bounds shared with vault/codec.py. A payload header outside these ranges is
# rejected before key derivation, so the encoder must never produce one.
SCRYPT_LOG2_N_MIN = 10
SCRYPT_LOG2_N_MAX = 18
SCRYPT_R_MAX = 8
SCRYPT_P_MAX = 4

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'auth' / 'credseal.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Credential digest scheme
    # ------------------------------------------------------------------

    # md5 keeps records interchangeable with existing LEFT:DIGEST:RIGHT
    # stores (32 hex digest). Any hashlib name works for new deployments.
    credential_digest_algorithm: str = "md5"

    # ------------------------------------------------------------------
    # Data codec (scrypt cost, written into every payload header)
    # ------------------------------------------------------------------

    scrypt_log2_n: int = 15
    scrypt_r: int = 8
    scrypt_p: int = 1

    # ------------------------------------------------------------------
    # Storage / API
    # ------------------------------------------------------------------

    db_url: str = _DEFAULT_DB_URL
    verify_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_crypto_params(self) -> "Settings":
        """Fail fast at startup on a misconfigured digest or KDF cost.

        An unknown digest name would only surface on the first login attempt;
        a scrypt cost outside the decoder bounds would produce payloads that
        can never be decrypted.
        """
        self.credential_digest_algorithm = self.credential_digest_algorithm.strip().lower()
        # shake_* are variable-length and have no fixed hexdigest().
        name = self.credential_digest_algorithm
        if name not in hashlib.algorithms_available or name.startswith("shake_"):
            raise ValueError(
                f"CREDENTIAL_DIGEST_ALGORITHM {self.credential_digest_algorithm!r} is not supported by hashlib."
            )
        if not SCRYPT_LOG2_N_MIN <= self.scrypt_log2_n <= SCRYPT_LOG2_N_MAX:
            raise ValueError(f"SCRYPT_LOG2_N must be between {SCRYPT_LOG2_N_MIN} and {SCRYPT_LOG2_N_MAX}.")
        if not 1 <= self.scrypt_r <= SCRYPT_R_MAX:
            raise ValueError(f"SCRYPT_R must be between 1 and {SCRYPT_R_MAX}.")
        if not 1 <= self.scrypt_p <= SCRYPT_P_MAX:
            raise ValueError(f"SCRYPT_P must be between 1 and {SCRYPT_P_MAX}.")
        if self.scrypt_log2_n < 14 and not self.debug:
            logger.warning(
                "WARNING: SCRYPT_LOG2_N=%d is below the recommended minimum of 14. " "Use only for testing.",
                self.scrypt_log2_n,
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
