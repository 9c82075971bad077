import os
from typing import Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# Load .env from project root
load_dotenv()


def _csv_env(name: str, default: str) -> Tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _bool_env(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


VALID_CHAINS = _csv_env(
    "MINIAPP_VALID_CHAINS",
    "fuji,avalanche,alfajores,celo,monad-testnet,ethereum",
)
ALLOWED_PROTOCOLS = _csv_env("MINIAPP_ALLOWED_PROTOCOLS", "http,https")
MAX_ACTIONS = int(os.getenv("MINIAPP_MAX_ACTIONS", "4"))
MAX_STRING_LENGTH = int(os.getenv("MINIAPP_MAX_STRING_LENGTH", "1000"))
MAX_URL_LENGTH = int(os.getenv("MINIAPP_MAX_URL_LENGTH", "2000"))
MAX_DESCRIPTION_LENGTH = int(os.getenv("MINIAPP_MAX_DESCRIPTION_LENGTH", "2000"))
STRICT_PAYABLE_AMOUNT = _bool_env("MINIAPP_STRICT_PAYABLE_AMOUNT")


class ValidatorConfig(BaseModel):
    """
    Allow-lists and limits for one validation run.

    Defaults come from the environment (see module constants); tests and
    callers pass their own instance to swap the chain or protocol lists.
    """

    model_config = ConfigDict(frozen=True)

    valid_chains: Tuple[str, ...] = VALID_CHAINS
    allowed_protocols: Tuple[str, ...] = ALLOWED_PROTOCOLS
    max_actions: int = Field(default=MAX_ACTIONS, ge=1)
    max_string_length: int = Field(default=MAX_STRING_LENGTH, ge=1)
    max_url_length: int = Field(default=MAX_URL_LENGTH, ge=1)
    max_description_length: int = Field(default=MAX_DESCRIPTION_LENGTH, ge=1)
    # payable call without any amount: warning when False, MutabilityMismatch when True
    strict_payable_amount: bool = STRICT_PAYABLE_AMOUNT

    @classmethod
    def from_env(cls) -> "ValidatorConfig":
        return cls(
            valid_chains=_csv_env("MINIAPP_VALID_CHAINS", ",".join(VALID_CHAINS)),
            allowed_protocols=_csv_env("MINIAPP_ALLOWED_PROTOCOLS", ",".join(ALLOWED_PROTOCOLS)),
            max_actions=int(os.getenv("MINIAPP_MAX_ACTIONS", str(MAX_ACTIONS))),
            max_string_length=int(os.getenv("MINIAPP_MAX_STRING_LENGTH", str(MAX_STRING_LENGTH))),
            max_url_length=int(os.getenv("MINIAPP_MAX_URL_LENGTH", str(MAX_URL_LENGTH))),
            max_description_length=int(
                os.getenv("MINIAPP_MAX_DESCRIPTION_LENGTH", str(MAX_DESCRIPTION_LENGTH))
            ),
            strict_payable_amount=_bool_env(
                "MINIAPP_STRICT_PAYABLE_AMOUNT", str(STRICT_PAYABLE_AMOUNT)
            ),
        )


DEFAULT_CONFIG = ValidatorConfig()
