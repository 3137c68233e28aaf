from __future__ import annotations
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field

from .addresses import LeafEncoding


class Settings(BaseSettings):
    advisory_list_path: str = Field(
        default="./lists/advisory-whitelist.json", alias="ALLOWLIST_ADVISORY_PATH"
    )
    alpha_sale_list_path: str = Field(
        default="./lists/alpha-sale-whitelist.json", alias="ALLOWLIST_ALPHA_SALE_PATH"
    )

    # Optional fixed-size lists of random addresses the real lists are written over
    advisory_placeholder_path: Optional[str] = Field(
        default=None, alias="ALLOWLIST_ADVISORY_PLACEHOLDER_PATH"
    )
    alpha_sale_placeholder_path: Optional[str] = Field(
        default=None, alias="ALLOWLIST_ALPHA_SALE_PLACEHOLDER_PATH"
    )
    advisory_placeholder_size: int = Field(
        default=512, alias="ALLOWLIST_ADVISORY_PLACEHOLDER_SIZE"
    )
    alpha_sale_placeholder_size: int = Field(
        default=16384, alias="ALLOWLIST_ALPHA_SALE_PLACEHOLDER_SIZE"
    )

    output_dir: str = Field(default="./output", alias="ALLOWLIST_OUTPUT_DIR")

    leaf_encoding: LeafEncoding = Field(
        default=LeafEncoding.PACKED, alias="ALLOWLIST_LEAF_ENCODING"
    )
    # Must match the deployed verifier; OpenZeppelin MerkleProof expects False
    duplicate_odd: bool = Field(default=False, alias="ALLOWLIST_DUPLICATE_ODD")
    self_check: bool = Field(default=True, alias="ALLOWLIST_SELF_CHECK")

    signing_key_path: str = Field(
        default="./keys/ed25519_private.key", alias="ALLOWLIST_SIGNING_KEY_PATH"
    )
    signing_pubkey_path: str = Field(
        default="./keys/ed25519_public.key", alias="ALLOWLIST_SIGNING_PUBKEY_PATH"
    )

    log_level: str = Field(default="INFO", alias="ALLOWLIST_LOG_LEVEL")

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()  # load at import
