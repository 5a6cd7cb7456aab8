"""
Router configuration: explorer and chain endpoints, collaborators, credentials.

- Defaults match the public Succinct explorer and the zkVerify Volta testnet.
- Every field can be overridden from the environment (ZKV_*); the CLI loads a
  `.env` file first so credentials can live outside the shell history.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .exceptions import ConfigurationError

DEFAULT_API_BASE = "https://explorer.succinct.xyz"
DEFAULT_WS_URL = "wss://zkverify-volta-rpc.zkverify.io"
DEFAULT_RENDERER = "chromium-browser"
DEFAULT_SHRINKER = "sp1-zkv-shrink"
DEFAULT_PALLET = "SettlementSp1Pallet"

# Fallback VK for proof files without a "vk" field. Provenance unconfirmed:
# it may belong to one specific test program, so every use is logged.
DEFAULT_FALLBACK_VK = "50f8a2481aff84670a96db9126c7f4533f9f7e912129edfe3d35e4e81aa32472"

PROVE_MODES = frozenset({"external", "placeholder"})
MNEMONIC_ENV = "ZKV_MNEMONIC"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v not in (None, "") else default


def _ensure_scheme(url: str, allowed: tuple[str, ...], name: str) -> str:
    lower = url.lower()
    if not any(lower.startswith(f"{sch}://") for sch in allowed):
        raise ConfigurationError(f"{name} must start with {allowed}, got: {url!r}")
    return url


@dataclass(frozen=True)
class RouterConfig:
    api_base: str = DEFAULT_API_BASE
    ws_url: str = DEFAULT_WS_URL
    mnemonic: Optional[str] = field(default=None, repr=False)
    renderer_binary: str = DEFAULT_RENDERER
    prove_mode: str = "external"
    shrinker_binary: str = DEFAULT_SHRINKER
    default_vk: str = DEFAULT_FALLBACK_VK
    pallet: str = DEFAULT_PALLET
    http_timeout: Optional[float] = None

    def __post_init__(self) -> None:
        _ensure_scheme(self.api_base, ("http", "https"), "api_base")
        _ensure_scheme(self.ws_url, ("ws", "wss"), "ws_url")
        if self.prove_mode not in PROVE_MODES:
            raise ConfigurationError(
                f"prove_mode must be one of {sorted(PROVE_MODES)}, got: {self.prove_mode!r}"
            )

    @classmethod
    def from_env(cls, **overrides: Any) -> "RouterConfig":
        """
        Create config from environment variables:

        ZKV_API_BASE        explorer base URL (http/https)
        ZKV_WS_URL          substrate node websocket URL (ws/wss)
        ZKV_MNEMONIC        signing mnemonic (submit/remark only)
        ZKV_RENDERER        headless browser binary
        ZKV_PROVE_MODE      "external" or "placeholder"
        ZKV_SHRINKER        proof shrink binary (prove_mode=external)
        ZKV_DEFAULT_VK      VK used when a proof file has none
        ZKV_PALLET          verification pallet name
        ZKV_HTTP_TIMEOUT    float seconds for artifact downloads

        Keyword overrides win over the environment; None values are ignored.
        """
        timeout = _env("ZKV_HTTP_TIMEOUT")
        try:
            http_timeout = float(timeout) if timeout is not None else None
        except ValueError as exc:
            raise ConfigurationError(f"ZKV_HTTP_TIMEOUT is not a number: {timeout!r}") from exc

        data: Dict[str, Any] = {
            "api_base": _env("ZKV_API_BASE", DEFAULT_API_BASE),
            "ws_url": _env("ZKV_WS_URL", DEFAULT_WS_URL),
            "mnemonic": _env(MNEMONIC_ENV),
            "renderer_binary": _env("ZKV_RENDERER", DEFAULT_RENDERER),
            "prove_mode": _env("ZKV_PROVE_MODE", "external"),
            "shrinker_binary": _env("ZKV_SHRINKER", DEFAULT_SHRINKER),
            "default_vk": _env("ZKV_DEFAULT_VK", DEFAULT_FALLBACK_VK),
            "pallet": _env("ZKV_PALLET", DEFAULT_PALLET),
            "http_timeout": http_timeout,
        }
        data.update({k: v for k, v in overrides.items() if k in data})
        data = {k: v for k, v in data.items() if v is not None}
        return cls(**data)

    def require_mnemonic(self) -> str:
        if not self.mnemonic:
            raise ConfigurationError(
                f"{MNEMONIC_ENV} environment variable not found; set it in your .env file"
            )
        return self.mnemonic
