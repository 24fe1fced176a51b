import json
import unittest

from support import CannedResponse, RenderServer, unused_endpoint

from carbonapi_e2e.executor import QueryExecutor, build_url, parse_delay
from carbonapi_e2e.models import ScriptedQuery

SERIES_X = [{"target": "x", "datapoints": [[10, 0], [10, 60]], "tags": {"name": "x"}}]


def _query(endpoint: str, **overrides: object) -> ScriptedQuery:
    data = {
        "endpoint": endpoint,
        "URL": "/render/?target=x&format=json",
        "type": "GET",
        "delay": 0,
        "expectedResponse": {
            "httpCode": 200,
            "contentType": "application/json",
            "expectedResults": [{"metrics": SERIES_X}],
        },
    }
    data.update(overrides)
    return ScriptedQuery.model_validate(data)


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class TestParseDelay(unittest.TestCase):
    def test_valid_delays(self) -> None:
        self.assertEqual(parse_delay(0), 0.0)
        self.assertEqual(parse_delay(3), 3.0)
        self.assertEqual(parse_delay(0.25), 0.25)
        self.assertEqual(parse_delay("2"), 2.0)
        self.assertEqual(parse_delay("1.5s"), 1.5)

    def test_invalid_delays(self) -> None:
        for value in (-1, "soon", "", float("nan"), True, None, [1]):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    parse_delay(value)


class TestBuildUrl(unittest.TestCase):
    def test_query_parameters_are_sorted_and_preserved(self) -> None:
        url = build_url("http://127.0.0.1:8081", "/render/?target=b&format=json&target=a&from=-1h")
        self.assertEqual(url, "http://127.0.0.1:8081/render/?format=json&from=-1h&target=b&target=a")

    def test_blank_values_are_kept(self) -> None:
        self.assertEqual(build_url("http://h", "/metrics/find?query=&x=1"), "http://h/metrics/find?query=&x=1")

    def test_empty_path(self) -> None:
        self.assertEqual(build_url("http://h:1234", ""), "http://h:1234/")

    def test_special_characters_are_reencoded(self) -> None:
        url = build_url("http://h", "/render?target=sum(a.*.b)&format=json")
        self.assertEqual(url, "http://h/render?format=json&target=sum%28a.%2A.b%29")

    def test_invalid_urls(self) -> None:
        for endpoint, path in [
            ("127.0.0.1:8081", "/render"),
            ("ftp://h", "/render"),
            ("http://", "/render"),
            ("http://h:99999", "/render"),
            ("http://[::1", "/render"),
        ]:
            with self.subTest(endpoint=endpoint):
                with self.assertRaises(ValueError):
                    build_url(endpoint, path)


class TestQueryExecutor(unittest.TestCase):
    def test_matching_response_has_no_failures(self) -> None:
        body = json.dumps(SERIES_X).encode("utf-8")
        with RenderServer(CannedResponse(body=body)) as server:
            failures = QueryExecutor(sleep=RecordingSleep()).execute(_query(server.endpoint))
        self.assertEqual(failures, [])
        self.assertEqual(server.requests[0].method, "GET")
        self.assertEqual(server.requests[0].path, "/render/?format=json&target=x")

    def test_status_mismatch_is_the_only_failure(self) -> None:
        body = json.dumps(SERIES_X).encode("utf-8")
        with RenderServer(CannedResponse(status=404, body=body)) as server:
            failures = QueryExecutor(sleep=RecordingSleep()).execute(_query(server.endpoint))
        self.assertEqual(failures, ["unexpected status code, got 404, expected 200"])

    def test_content_type_mismatch_cascades(self) -> None:
        with RenderServer(CannedResponse(content_type="text/plain", body=b"oops")) as server:
            failures = QueryExecutor(sleep=RecordingSleep()).execute(_query(server.endpoint))
        self.assertEqual(len(failures), 2)
        self.assertIn("unexpected content-type, got text/plain", failures[0])
        self.assertEqual(failures[1], "unsupported content-type: got 'text/plain'")

    def test_delay_is_slept_before_request(self) -> None:
        sleep = RecordingSleep()
        body = json.dumps(SERIES_X).encode("utf-8")
        with RenderServer(CannedResponse(body=body)) as server:
            QueryExecutor(sleep=sleep).execute(_query(server.endpoint, delay=2))
        self.assertEqual(sleep.calls, [2.0])

    def test_post_sends_body(self) -> None:
        body = json.dumps(SERIES_X).encode("utf-8")
        with RenderServer(CannedResponse(body=body)) as server:
            failures = QueryExecutor(sleep=RecordingSleep()).execute(
                _query(server.endpoint, type="POST", body="target=x&format=json", URL="/render/")
            )
        self.assertEqual(failures, [])
        self.assertEqual(server.requests[0].method, "POST")
        self.assertEqual(server.requests[0].body, b"target=x&format=json")

    def test_get_sends_no_body(self) -> None:
        body = json.dumps(SERIES_X).encode("utf-8")
        with RenderServer(CannedResponse(body=body)) as server:
            QueryExecutor(sleep=RecordingSleep()).execute(_query(server.endpoint, body="ignored"))
        self.assertEqual(server.requests[0].body, b"")

    def test_malformed_delay_sends_nothing(self) -> None:
        sleep = RecordingSleep()
        with RenderServer() as server:
            failures = QueryExecutor(sleep=sleep).execute(_query(server.endpoint, delay="later"))
        self.assertEqual(len(failures), 1)
        self.assertTrue(failures[0].startswith("failed parse duration"))
        self.assertEqual(sleep.calls, [])
        self.assertEqual(server.requests, [])

    def test_malformed_url(self) -> None:
        failures = QueryExecutor(sleep=RecordingSleep()).execute(_query("not a url"))
        self.assertEqual(len(failures), 1)
        self.assertTrue(failures[0].startswith("failed to parse URL"))

    def test_connection_refused(self) -> None:
        failures = QueryExecutor(sleep=RecordingSleep()).execute(_query(unused_endpoint()))
        self.assertEqual(len(failures), 1)
        self.assertTrue(failures[0].startswith("failed to perform the request"))

    def test_only_first_expected_result_is_used(self) -> None:
        body = json.dumps(SERIES_X).encode("utf-8")
        query = _query(
            "placeholder",
            expectedResponse={
                "httpCode": 200,
                "contentType": "application/json",
                "expectedResults": [{"metrics": SERIES_X}, {"metrics": []}],
            },
        )
        with RenderServer(CannedResponse(body=body)) as server:
            query = query.model_copy(update={"endpoint": server.endpoint})
            failures = QueryExecutor(sleep=RecordingSleep()).execute(query)
        self.assertEqual(failures, [])

    def test_png_response(self) -> None:
        import hashlib

        png = b"\x89PNG fake"
        query = _query(
            "placeholder",
            URL="/render/?target=x&format=png",
            expectedResponse={
                "httpCode": 200,
                "contentType": "image/png",
                "expectedResults": [{"sha256": [hashlib.sha256(png).hexdigest()]}],
            },
        )
        with RenderServer(CannedResponse(content_type="image/png", body=png)) as server:
            query = query.model_copy(update={"endpoint": server.endpoint})
            failures = QueryExecutor(sleep=RecordingSleep()).execute(query)
        self.assertEqual(failures, [])

    def test_truncated_body_ends_query(self) -> None:
        body = json.dumps(SERIES_X).encode("utf-8")
        with RenderServer(CannedResponse(body=body, content_length=len(body) + 100)) as server:
            failures = QueryExecutor(sleep=RecordingSleep()).execute(_query(server.endpoint))
        self.assertEqual(len(failures), 1)
        self.assertTrue(failures[0].startswith("failed to read body"))

    def test_truncated_body_after_status_mismatch(self) -> None:
        body = json.dumps(SERIES_X).encode("utf-8")
        response = CannedResponse(status=500, body=body, content_length=len(body) + 100)
        with RenderServer(response) as server:
            failures = QueryExecutor(sleep=RecordingSleep()).execute(_query(server.endpoint))
        self.assertEqual(len(failures), 2)
        self.assertEqual(failures[0], "unexpected status code, got 500, expected 200")
        self.assertTrue(failures[1].startswith("failed to read body"))

    def test_method_is_sent_as_written(self) -> None:
        body = json.dumps(SERIES_X).encode("utf-8")
        with RenderServer(CannedResponse(body=body)) as server:
            failures = QueryExecutor(sleep=RecordingSleep()).execute(
                _query(server.endpoint, type="get", body="target=x")
            )
        self.assertEqual(failures, [])
        self.assertEqual(server.requests[0].method, "get")
        self.assertEqual(server.requests[0].body, b"target=x")

    def test_overflowing_datapoint_is_a_failure(self) -> None:
        body = ('[{"target": "x", "datapoints": [[1' + "0" * 400 + ", 0], [10, 60]]}]").encode("utf-8")
        with RenderServer(CannedResponse(body=body)) as server:
            failures = QueryExecutor(sleep=RecordingSleep()).execute(_query(server.endpoint))
        self.assertEqual(len(failures), 1)
        self.assertIn("failed to parse response", failures[0])


if __name__ == "__main__":
    unittest.main()
