import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

DEFAULT_PORT = 3000
DEFAULT_BASE_URL = "https://app.splitser.com"
DEFAULT_PUBLIC_DIR = Path(__file__).resolve().parent / "public"


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read once at startup and never mutated."""

    list_id: str = ""
    master_api_key: str = ""
    default_split_between: Tuple[str, str] = ("", "")
    port: int = DEFAULT_PORT
    remote_base_url: str = DEFAULT_BASE_URL
    public_dir: Path = field(default=DEFAULT_PUBLIC_DIR)
    log_level: str = "INFO"


def _parse_port(raw: Optional[str]) -> int:
    if raw is None or not raw.strip():
        return DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer, got {raw!r}")
    if not 0 < port < 65536:
        raise ValueError(f"PORT out of range: {port}")
    return port


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment (plus a .env file when reading os.environ)"""
    if environ is None:
        load_dotenv()
        environ = os.environ

    public_dir = environ.get("PUBLIC_DIR")
    return Settings(
        list_id=environ.get("LIST_ID", ""),
        master_api_key=environ.get("MASTER_API_KEY", ""),
        default_split_between=(
            environ.get("DEFAULT_SPLIT_BETWEEN_1", ""),
            environ.get("DEFAULT_SPLIT_BETWEEN_2", ""),
        ),
        port=_parse_port(environ.get("PORT")),
        remote_base_url=environ.get("SPLITSER_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        public_dir=Path(public_dir) if public_dir else DEFAULT_PUBLIC_DIR,
        log_level=environ.get("LOG_LEVEL", "INFO").upper(),
    )
