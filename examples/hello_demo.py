"""Document two handlers bound on a toy router and print the OpenAPI document.

Run:
  python examples/hello_demo.py            # YAML
  python examples/hello_demo.py --json     # JSON
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

import structlog

from route_docs.registry import (
    DocumentMeta,
    Registry,
    Route,
    Server,
    with_description,
    with_id,
    with_request,
    with_response,
    with_tags,
)
from route_docs.registry.export import dump_json, dump_yaml


@dataclass
class HelloFromRootResponse:
    message: str


@dataclass
class HelloFromTheGreatPostRequest:
    name: str
    foodie: bool
    date_of_birth: datetime


@dataclass
class HelloFromTheGreatPostResponse:
    message: str
    name: str
    foodie: bool
    date_of_birth: datetime


@dataclass
class HTTPError:
    code: int = field(metadata={"json": "-"})
    message: Any


class Router:
    """Stand-in for a web framework router: binds handlers, lists routes."""

    def __init__(self) -> None:
        self._routes: list[Route] = []

    def add(self, method: str, path: str, handler: Callable[..., Any], handler_id: str) -> None:
        self._routes.append(Route(method=method, path=path, handler_id=handler_id, name=handler.__name__))

    def routes(self) -> list[Route]:
        return list(self._routes)


def hello_from_root(request: Any) -> HelloFromRootResponse:
    return HelloFromRootResponse(message="Hello from the root endpoint!")


def hello_from_the_great_post(request: HelloFromTheGreatPostRequest) -> HelloFromTheGreatPostResponse:
    return HelloFromTheGreatPostResponse(
        message="Hello from the great post endpoint!",
        name=request.name,
        foodie=request.foodie,
        date_of_birth=request.date_of_birth,
    )


def _configure_logging() -> None:
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def main(argv: list[str]) -> None:
    _configure_logging()
    router = Router()
    registry = Registry()

    router.add(
        "GET",
        "/",
        registry.register(
            hello_from_root,
            with_id("helloFromRoot"),
            with_description("A simple hello world endpoint at the root path"),
            with_tags("example", "hello"),
            with_response(200, HelloFromRootResponse, "Successful response"),
            handler_id="hello_from_root",
        ),
        handler_id="hello_from_root",
    )
    router.add(
        "POST",
        "/the-great-post",
        registry.register(
            hello_from_the_great_post,
            with_description("A great POST endpoint that greets you"),
            with_tags("example"),
            with_request(HelloFromTheGreatPostRequest),
            with_response(200, HelloFromTheGreatPostResponse, "Successful response"),
            with_response(400, HTTPError, "Invalid request body"),
            handler_id="hello_from_the_great_post",
        ),
        handler_id="hello_from_the_great_post",
    )

    registry.resolve(router.routes())
    for op in registry.operations():
        sys.stderr.write(str(op) + "\n")

    document = registry.render(
        DocumentMeta(
            title="Echo API docs example",
            version="1.0.0",
            servers=(Server("http://localhost:8080", "Local development"),),
        )
    )
    sys.stdout.write(dump_json(document) + "\n" if "--json" in argv else dump_yaml(document))


if __name__ == "__main__":
    main(sys.argv[1:])
