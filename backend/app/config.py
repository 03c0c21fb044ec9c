import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

# Load .env from the backend dir; real environment variables win.
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    http_port: int = 8080
    https_port: int = 8443
    tls_cert_path: str = "/opt/tls/server.crt"
    tls_key_path: str = "/opt/tls/server.key"
    handshake_timeout_seconds: float = 10.0
    max_message_bytes: int = 1024
    send_timeout_seconds: float = 5.0
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = ("*",)

    @property
    def tls_enabled(self) -> bool:
        return os.path.isfile(self.tls_cert_path) and os.path.isfile(self.tls_key_path)


def _env(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def load_settings() -> Settings:
    defaults = Settings()
    return Settings(
        host=_env("HOST", defaults.host),
        http_port=int(_env("HTTP_PORT", str(defaults.http_port))),
        https_port=int(_env("HTTPS_PORT", str(defaults.https_port))),
        tls_cert_path=_env("TLS_CERT_PATH", defaults.tls_cert_path),
        tls_key_path=_env("TLS_KEY_PATH", defaults.tls_key_path),
        handshake_timeout_seconds=float(
            _env("HANDSHAKE_TIMEOUT_SECONDS", str(defaults.handshake_timeout_seconds))
        ),
        max_message_bytes=int(_env("MAX_MESSAGE_BYTES", str(defaults.max_message_bytes))),
        send_timeout_seconds=float(_env("SEND_TIMEOUT_SECONDS", str(defaults.send_timeout_seconds))),
        log_level=_env("LOG_LEVEL", defaults.log_level).upper(),
        cors_origins=tuple(
            origin.strip() for origin in _env("CORS_ORIGINS", "*").split(",") if origin.strip()
        ),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
