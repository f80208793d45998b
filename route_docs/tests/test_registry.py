from __future__ import annotations

import threading

import pytest

from route_docs.registry import (
    OptionError,
    Registry,
    Route,
    with_description,
    with_id,
    with_parameter,
    with_request,
    with_response,
    with_summary,
    with_tags,
)
from route_docs.registry.model import UNRESOLVED, derive_operation_id
from route_docs.registry.store import OperationStore

from .payloads import GreatPostRequest, GreatPostResponse, HelloFromRootResponse


def hello(request):
    return {"message": "hello"}


def great_post(request):
    return {"message": "hello from the great post endpoint"}


# --- Operation store ---


def test_capture_applies_options_in_order():
    store = OperationStore()
    op = store.capture(
        "h1",
        [
            with_summary("first"),
            with_tags("a", "b", "a"),
            with_summary("second"),
            with_request(GreatPostRequest),
            with_request(GreatPostResponse),
        ],
    )

    assert op.summary == "second"
    assert op.tags == ["a", "b"]
    assert list(op.requests) == ["application/json"]
    assert op.requests["application/json"].body_type is GreatPostResponse
    assert op.method == ""
    assert op.path == ""


def test_snapshot_is_isolated_from_later_changes():
    store = OperationStore()
    store.capture("h1", [with_tags("a")])
    snapshot = store.snapshot()

    store.capture("h2")
    for op in store:
        op.tags.append("mutated")
        op.method = "GET"

    assert len(snapshot) == 1
    assert snapshot[0].tags == ["a"]
    assert snapshot[0].method == ""
    assert len(store) == 2


def test_invalid_options_fail_fast():
    with pytest.raises(OptionError):
        with_response(42, HelloFromRootResponse, "bad status")
    with pytest.raises(OptionError):
        with_request(GreatPostRequest, content_type="json")
    with pytest.raises(OptionError):
        with_parameter("id", "body")
    with pytest.raises(OptionError):
        OperationStore().capture("h1", ["not an option"])
    with pytest.raises(OptionError):
        OperationStore().capture("")


def test_duplicate_handler_id_is_rejected():
    store = OperationStore()
    store.capture("h1", [with_summary("first")])

    with pytest.raises(OptionError):
        store.capture("h1", [with_summary("second")])

    assert [op.summary for op in store.snapshot()] == ["first"]

    registry = Registry()
    registry.register(hello, handler_id="H1")
    with pytest.raises(OptionError):
        registry.register(great_post, handler_id="H1")


def test_concurrent_capture_records_each_operation_once():
    store = OperationStore()
    barrier = threading.Barrier(8)

    def register_batch(worker: int) -> None:
        barrier.wait()
        for index in range(50):
            store.capture(f"w{worker}-h{index}", [with_tags(f"worker-{worker}")])

    threads = [threading.Thread(target=register_batch, args=(worker,)) for worker in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    handler_ids = [op.handler_id for op in store.snapshot()]
    assert len(handler_ids) == 400
    assert set(handler_ids) == {f"w{worker}-h{index}" for worker in range(8) for index in range(50)}


def test_path_parameters_are_always_required():
    store = OperationStore()
    op = store.capture("h1", [with_parameter("id", "path", int), with_parameter("q", "query")])
    assert [(p.name, p.required) for p in op.parameters] == [("id", True), ("q", False)]


# --- Route resolution ---


def test_derived_ids():
    assert derive_operation_id("GET", "/") == "get-"
    assert derive_operation_id("POST", "/the-great-post") == "post-the-great-post"
    assert derive_operation_id("DELETE", "/users/:id/") == "delete-users-:id"


def test_resolve_fills_method_path_and_id():
    registry = Registry()
    registry.register(hello, with_response(200, HelloFromRootResponse, "ok"), handler_id="H1")
    registry.register(great_post, with_request(GreatPostRequest), handler_id="H2")

    diagnostics = registry.resolve(
        [Route("GET", "/", "H1"), Route("POST", "/the-great-post", "H2")]
    )

    assert diagnostics == []
    ops = {op.handler_id: op for op in registry.operations()}
    assert (ops["H1"].method, ops["H1"].path, ops["H1"].operation_id) == ("GET", "/", "get-")
    assert (ops["H2"].method, ops["H2"].path, ops["H2"].operation_id) == (
        "POST",
        "/the-great-post",
        "post-the-great-post",
    )


def test_resolve_is_idempotent():
    registry = Registry()
    registry.register(hello, handler_id="H1")
    registry.register(great_post, with_id("greatPost"), handler_id="H2")
    routes = [Route("get", "/", "H1"), Route("POST", "/the-great-post", "H2")]

    registry.resolve(routes)
    first = [(op.method, op.path, op.operation_id) for op in registry.operations()]
    registry.resolve(routes)
    second = [(op.method, op.path, op.operation_id) for op in registry.operations()]

    assert first == second == [("GET", "/", "get-"), ("POST", "/the-great-post", "greatPost")]


def test_resolve_supersedes_previous_pass():
    registry = Registry()
    registry.register(hello, handler_id="H1")

    registry.resolve([Route("GET", "/old", "H1")])
    registry.resolve([Route("GET", "/new", "H1")])
    assert registry.operations()[0].operation_id == "get-new"

    diagnostics = registry.resolve([])
    op = registry.operations()[0]
    assert (op.method, op.path, op.operation_id) == ("", "", "")
    assert [d.kind for d in diagnostics] == [UNRESOLVED]


def test_first_matching_route_wins():
    registry = Registry()
    registry.register(hello, handler_id="H1")

    registry.resolve([Route("GET", "/a", "H1"), Route("GET", "/b", "H1")])

    op = registry.operations()[0]
    assert (op.method, op.path) == ("GET", "/a")


def test_unresolved_operation_is_reported_not_raised():
    registry = Registry()
    registry.register(hello, handler_id="H1")
    registry.register(great_post, handler_id="orphan")

    diagnostics = registry.resolve([Route("GET", "/", "H1")])

    assert len(diagnostics) == 1
    assert diagnostics[0].kind == UNRESOLVED
    assert diagnostics[0].handler_id == "orphan"
    assert registry.unresolved() == diagnostics
    orphan = [op for op in registry.operations() if op.handler_id == "orphan"][0]
    assert orphan.method == ""
    assert orphan.path == ""


# --- Registration surface ---


def test_register_returns_handler_unchanged():
    registry = Registry()
    assert registry.register(hello, with_summary("hi")) is hello


def test_decorator_uses_qualified_name_by_default():
    registry = Registry()

    @registry.operation(with_description("decorated"))
    def handler(request):
        return None

    op = registry.operations()[0]
    assert op.handler_id == f"{__name__}.test_decorator_uses_qualified_name_by_default.<locals>.handler"
    assert op.description == "decorated"
    assert handler(None) is None


def test_registries_are_isolated():
    first = Registry()
    second = Registry()
    first.register(hello, handler_id="H1")

    assert len(first.operations()) == 1
    assert second.operations() == ()


def test_operation_string_lists_metadata():
    registry = Registry()
    registry.register(
        great_post,
        with_summary("Greets"),
        with_tags("example"),
        with_request(GreatPostRequest),
        with_response(400, None, "Invalid request body"),
        handler_id="H2",
    )
    registry.resolve([Route("POST", "/the-great-post", "H2")])

    text = str(registry.operations()[0])

    assert "Operation ID: post-the-great-post\n" in text
    assert "Method: POST\n" in text
    assert "Tags: example\n" in text
    assert "Content-Type: application/json, Body Type: route_docs.tests.payloads.GreatPostRequest" in text
    assert "Status Code: 400, Body Type: <nil>" in text
