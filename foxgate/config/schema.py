"""Configuration schema using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings


class ServerConfig(BaseModel):
    """HTTP listener and queue configuration."""
    host: str = "127.0.0.1"
    port: int = 8080
    backlog: int = 64  # Max queued tasks before enqueue is rejected
    password: str = ""  # Static password the device authenticates with
    endpoint: str = "enqueue"  # Path of the client-facing enqueue route
    max_request_body_bytes: int = 1024 * 1024


class SessionConfig(BaseModel):
    """Client session password generation."""
    default_length: int = 16
    min_length: int = 10
    max_length: int = 256  # Upper bound for generated session passwords


class ConsoleConfig(BaseModel):
    """Interactive operator console."""
    enabled: bool = True
    history: bool = True  # Keep command history under the data dir


class Config(BaseSettings):
    """Root configuration for foxgate."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    console: ConsoleConfig = Field(default_factory=ConsoleConfig)

    def validation_errors(self) -> list[str]:
        """Return startup problems that make the settings unusable."""
        errors: list[str] = []
        if not self.server.password:
            errors.append("server password must not be empty")
        if self.server.backlog < 1:
            errors.append(f"backlog must be at least 1 (got {self.server.backlog})")
        if not 0 < self.server.port < 65536:
            errors.append(f"port must be between 1 and 65535 (got {self.server.port})")
        if not self.server.endpoint.strip("/"):
            errors.append("enqueue endpoint must not be empty")
        if self.session.min_length < 1:
            errors.append("session min_length must be positive")
        if self.session.default_length < self.session.min_length:
            errors.append("session default_length must not be below min_length")
        if self.session.max_length < self.session.default_length:
            errors.append("session max_length must not be below default_length")
        return errors

    model_config = ConfigDict(
        env_prefix="FOXGATE_",
        env_nested_delimiter="__"
    )
