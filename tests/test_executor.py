import asyncio

import httpx
import pytest

from pydantic import BaseModel

from promised_http import (
    EncodingError,
    Failure,
    HttpMethod,
    HttpTransport,
    JsonCodec,
    NoDataError,
    RequestExecutor,
    RequestSpec,
    Success,
    TransportError,
    UnexpectedFormatError,
    immediate_dispatcher,
)
from promised_http.transport.base import TransportRequest, TransportResponse


class User(BaseModel):
    id: int
    name: str


class ApiError(BaseModel):
    message: str


class DummyTransport:
    def __init__(
        self,
        response: TransportResponse | None = None,
        *,
        error: TransportError | None = None,
    ) -> None:
        self.response = response
        self.error = error
        self.sent: list[TransportRequest] = []

    async def send(self, request: TransportRequest) -> TransportResponse:
        self.sent.append(request)
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response

    async def close(self) -> None:  # pragma: no cover - not used
        pass


def respond(body: bytes | None, status: int = 200) -> DummyTransport:
    return DummyTransport(TransportResponse(status=status, body=body, headers={}))


def run(executor: RequestExecutor, spec: RequestSpec):
    return asyncio.run(executor.execute(spec, User, ApiError))


def test_body_matching_success_shape_yields_success() -> None:
    executor = RequestExecutor(respond(b'{"id":1,"name":"Ana"}'))
    outcome = run(executor, RequestSpec.get("https://api.test/user/1"))
    assert outcome == Success(User(id=1, name="Ana"))


def test_body_matching_error_shape_yields_domain_failure() -> None:
    executor = RequestExecutor(respond(b'{"message":"not found"}', status=404))
    outcome = run(executor, RequestSpec.get("https://api.test/user/1"))
    assert isinstance(outcome, Failure)
    assert outcome.error == ApiError(message="not found")
    assert outcome.is_domain_error


def test_body_matching_neither_shape_yields_unexpected_format() -> None:
    executor = RequestExecutor(respond(b'{"unexpected":true}'))
    outcome = run(executor, RequestSpec.get("https://api.test/user/1"))
    assert isinstance(outcome, Failure)
    assert isinstance(outcome.error, UnexpectedFormatError)
    assert str(outcome.error) == "Unexpected response format"
    assert outcome.error.context == b'{"unexpected":true}'
    assert not outcome.is_domain_error


def test_non_json_body_yields_unexpected_format() -> None:
    executor = RequestExecutor(respond(b"<html>oops</html>", status=502))
    outcome = run(executor, RequestSpec.get("https://api.test/user/1"))
    assert isinstance(outcome, Failure)
    assert isinstance(outcome.error, UnexpectedFormatError)


def test_success_shape_wins_regardless_of_status_code() -> None:
    for status in (400, 404, 500, 503):
        executor = RequestExecutor(respond(b'{"id":2,"name":"Bo"}', status=status))
        outcome = run(executor, RequestSpec.get("https://api.test/user/2"))
        assert outcome == Success(User(id=2, name="Bo"))


def test_success_shape_is_tried_before_error_shape() -> None:
    body = b'{"id":3,"name":"Cy","message":"also an error?"}'
    executor = RequestExecutor(respond(body))
    outcome = run(executor, RequestSpec.get("https://api.test/user/3"))
    assert isinstance(outcome, Success)
    assert outcome.value.name == "Cy"


def test_transport_error_is_reported_with_its_message() -> None:
    transport = DummyTransport(error=TransportError("The Internet connection appears to be offline."))
    executor = RequestExecutor(transport)
    outcome = run(executor, RequestSpec.get("https://api.test/user/1"))
    assert isinstance(outcome, Failure)
    assert isinstance(outcome.error, TransportError)
    assert outcome.error.message == "The Internet connection appears to be offline."


def test_missing_body_yields_no_data() -> None:
    for body in (None, b""):
        executor = RequestExecutor(respond(body, status=204))
        outcome = run(executor, RequestSpec.delete("https://api.test/user/1"))
        assert isinstance(outcome, Failure)
        assert isinstance(outcome.error, NoDataError)
        assert str(outcome.error) == "No data received"


def test_unencodable_body_fails_without_touching_transport() -> None:
    transport = respond(b'{"id":1,"name":"Ana"}')
    executor = RequestExecutor(transport)
    outcome = run(executor, RequestSpec.post("https://api.test/users", object()))
    assert isinstance(outcome, Failure)
    assert isinstance(outcome.error, EncodingError)
    assert str(outcome.error) == "Encoding error"
    assert transport.sent == []


def test_body_is_encoded_as_json_with_content_type() -> None:
    transport = respond(b'{"id":1,"name":"Ana"}')
    executor = RequestExecutor(transport)
    spec = RequestSpec.post(
        "https://api.test/users",
        User(id=1, name="Ana"),
        headers={"Authorization": "Bearer t", "X-Trace": "abc"},
    )
    run(executor, spec)
    sent = transport.sent[0]
    assert sent.method is HttpMethod.POST
    assert sent.url == "https://api.test/users"
    assert sent.body == b'{"id":1,"name":"Ana"}'
    assert sent.headers == {
        "Authorization": "Bearer t",
        "X-Trace": "abc",
        "Content-Type": "application/json",
    }


def test_request_without_body_has_no_content_type() -> None:
    transport = respond(b'{"id":1,"name":"Ana"}')
    run(RequestExecutor(transport), RequestSpec.get("https://api.test/user/1", headers={"A": "1"}))
    assert transport.sent[0].body is None
    assert transport.sent[0].headers == {"A": "1"}


def test_submit_delivers_exactly_one_outcome_later() -> None:
    received: list = []

    async def main() -> None:
        executor = RequestExecutor(respond(b'{"id":1,"name":"Ana"}'))
        task = executor.submit(RequestSpec.get("https://api.test/user/1"), User, ApiError, received.append)
        assert received == []
        assert executor.in_flight == 1
        await task
        await asyncio.sleep(0)
        assert executor.in_flight == 0

    asyncio.run(main())
    assert received == [Success(User(id=1, name="Ana"))]


def test_submit_never_reports_encoding_error_synchronously() -> None:
    received: list = []
    transport = respond(b"{}")

    async def main() -> None:
        executor = RequestExecutor(transport)
        task = executor.submit(
            RequestSpec.put("https://api.test/user/1", {1, object()}), User, ApiError, received.append
        )
        assert received == []
        await task
        await asyncio.sleep(0)

    asyncio.run(main())
    assert len(received) == 1
    assert isinstance(received[0].error, EncodingError)
    assert transport.sent == []


def test_submit_uses_configured_dispatcher() -> None:
    scheduled: list = []
    received: list = []

    def dispatcher(fn) -> None:
        scheduled.append(fn)

    async def main() -> None:
        executor = RequestExecutor(respond(b'{"message":"nope"}'), dispatcher=dispatcher)
        await executor.submit(RequestSpec.get("https://api.test/x"), User, ApiError, received.append)

    asyncio.run(main())
    assert received == []
    assert len(scheduled) == 1
    scheduled[0]()
    assert received == [Failure(ApiError(message="nope"))]


def test_deferred_settles_from_executor() -> None:
    successes: list = []
    failures: list = []
    settled: list = []

    async def main() -> None:
        executor = RequestExecutor(respond(b'{"message":"not found"}'))
        deferred = (
            executor.deferred(RequestSpec.get("https://api.test/user/9"), User, ApiError)
            .on_success(successes.append)
            .on_failure(failures.append)
            .on_settled(lambda: settled.append(True))
        )
        outcome = await deferred.as_future()
        assert outcome == Failure(ApiError(message="not found"))

    asyncio.run(main())
    assert successes == []
    assert failures == [ApiError(message="not found")]
    assert settled == [True]


def test_deferred_resolves_on_success_with_immediate_dispatcher() -> None:
    async def main():
        executor = RequestExecutor(respond(b'{"id":7,"name":"Di"}'), dispatcher=immediate_dispatcher)
        deferred = executor.deferred(RequestSpec.get("https://api.test/user/7"), User, ApiError)
        return await deferred.as_future()

    assert asyncio.run(main()) == Success(User(id=7, name="Di"))


class RaisingTransport:
    async def send(self, request: TransportRequest) -> TransportResponse:
        raise RuntimeError("socket pool exhausted")

    async def close(self) -> None:  # pragma: no cover - not used
        pass


class BrokenCodec(JsonCodec):
    def encode(self, value) -> bytes:
        raise KeyError("codec bug")


class ListLogger:
    def __init__(self) -> None:
        self.errors: list[str] = []

    def error(self, msg, *args, **kwargs) -> None:
        self.errors.append(msg % args)


def mock_http_transport() -> HttpTransport:
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"{}"))
    )
    return HttpTransport(client=client)


def test_mistyped_success_field_falls_through_to_error_shape() -> None:
    body = b'{"id":"1","name":"Ana","message":"id must be numeric"}'
    executor = RequestExecutor(respond(body, status=400))
    outcome = run(executor, RequestSpec.get("https://api.test/user/1"))
    assert outcome == Failure(ApiError(message="id must be numeric"))


def test_mistyped_body_matching_no_shape_is_unexpected() -> None:
    executor = RequestExecutor(respond(b'{"id":"1","name":"Ana"}', status=400))
    outcome = run(executor, RequestSpec.get("https://api.test/user/1"))
    assert isinstance(outcome, Failure)
    assert isinstance(outcome.error, UnexpectedFormatError)


@pytest.mark.parametrize("url", ["http://[::1/x", "http://a\x00b/"])
def test_malformed_url_yields_transport_failure(url: str) -> None:
    outcome = run(RequestExecutor(mock_http_transport()), RequestSpec.get(url))
    assert isinstance(outcome, Failure)
    assert isinstance(outcome.error, TransportError)


def test_malformed_url_still_settles_deferred() -> None:
    async def main():
        executor = RequestExecutor(mock_http_transport())
        deferred = executor.deferred(RequestSpec.get("http://[::1/x"), User, ApiError)
        return await asyncio.wait_for(deferred.as_future(), timeout=5)

    outcome = asyncio.run(main())
    assert isinstance(outcome, Failure)
    assert isinstance(outcome.error, TransportError)


def test_unexpected_transport_exception_becomes_failure() -> None:
    outcome = run(RequestExecutor(RaisingTransport()), RequestSpec.get("https://api.test/user/1"))
    assert isinstance(outcome, Failure)
    assert isinstance(outcome.error, TransportError)
    assert outcome.error.message == "RuntimeError: socket pool exhausted"
    assert isinstance(outcome.error.context, RuntimeError)


def test_crashed_request_task_rejects_deferred() -> None:
    async def main():
        executor = RequestExecutor(respond(b"{}"), codec=BrokenCodec())
        deferred = executor.deferred(RequestSpec.post("https://api.test/users", {"a": 1}), User, ApiError)
        return await asyncio.wait_for(deferred.as_future(), timeout=5)

    outcome = asyncio.run(main())
    assert isinstance(outcome, Failure)
    assert isinstance(outcome.error, TransportError)
    assert isinstance(outcome.error.context, KeyError)


def test_raising_callback_is_logged_and_reraised() -> None:
    sink = ListLogger()

    def callback(outcome) -> None:
        raise ValueError("view already gone")

    async def main() -> None:
        executor = RequestExecutor(
            respond(b'{"id":1,"name":"Ana"}'), dispatcher=immediate_dispatcher, logger=sink
        )
        task = executor.submit(RequestSpec.get("https://api.test/user/1"), User, ApiError, callback)
        with pytest.raises(ValueError):
            await task

    asyncio.run(main())
    assert sink.errors == ["Outcome callback for GET https://api.test/user/1 raised"]
