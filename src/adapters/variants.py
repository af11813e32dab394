"""Event-source variants — tag → Mangum translator lookup."""

from dataclasses import dataclass
from enum import Enum

from mangum.handlers import ALB, APIGateway, HTTPGateway
from mangum.types import LambdaHandler


class EventSource(str, Enum):
    REST_API = "rest_api"
    HTTP_API_V2 = "http_api_v2"
    APPLICATION_LOAD_BALANCER = "application_load_balancer"

    @classmethod
    def parse(cls, value: "str | EventSource") -> "EventSource":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "_")
        if key in _ALIASES:
            return _ALIASES[key]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown event source: {value}")


# CamelCase and short names accepted in configuration
_ALIASES = {
    "restapi": EventSource.REST_API,
    "httpapi": EventSource.HTTP_API_V2,
    "http_api": EventSource.HTTP_API_V2,
    "httpapiv2": EventSource.HTTP_API_V2,
    "applicationloadbalancer": EventSource.APPLICATION_LOAD_BALANCER,
    "alb": EventSource.APPLICATION_LOAD_BALANCER,
}


@dataclass(frozen=True)
class AdapterVariant:
    source: EventSource
    translator: type[LambdaHandler]  # builds the ASGI scope and the response envelope
    label: str
    describe_status: bool = False  # ALB responses carry "statusDescription"


REST_API = AdapterVariant(EventSource.REST_API, APIGateway, "API Gateway REST API")
HTTP_API_V2 = AdapterVariant(EventSource.HTTP_API_V2, HTTPGateway, "API Gateway HTTP API")
APPLICATION_LOAD_BALANCER = AdapterVariant(
    EventSource.APPLICATION_LOAD_BALANCER, ALB, "Application Load Balancer", describe_status=True
)

_variants: dict[EventSource, AdapterVariant] = {
    REST_API.source: REST_API,
    HTTP_API_V2.source: HTTP_API_V2,
    APPLICATION_LOAD_BALANCER.source: APPLICATION_LOAD_BALANCER,
}


def get_variant(source: "EventSource | str") -> AdapterVariant:
    """Look up the variant for an event source tag or name."""
    return _variants[EventSource.parse(source)]
