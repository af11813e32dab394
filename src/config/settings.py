"""Hosting settings loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Event source the process serves
    lambda_event_source: str = "http_api_v2"  # rest_api | http_api_v2 | application_load_balancer

    # ASGI translation
    lifespan: str = "auto"  # auto | on | off
    api_gateway_base_path: str = "/"
    # Comma-separated response headers dropped from the Lambda envelope
    exclude_headers: str = ""

    # Response body encoding overrides, JSON objects of name -> "default" | "base64"
    response_content_encoding_for_content_type: dict[str, str] = {}
    response_content_encoding_for_content_encoding: dict[str, str] = {}

    # Set by the Lambda service
    aws_lambda_runtime_api: str = ""
    aws_lambda_function_name: str = ""

    # Logging
    log_level: str = "INFO"
    log_file: str = ""  # Empty = stdout only

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def exclude_headers_list(self) -> list[str]:
        return [h.strip().lower() for h in self.exclude_headers.split(",") if h.strip()]

    @property
    def running_in_lambda(self) -> bool:
        return bool(self.aws_lambda_function_name)


@lru_cache
def get_settings() -> Settings:
    return Settings()
