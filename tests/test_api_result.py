from backup_client.api_result import DEFAULT_RETRY_AFTER_MILLIS, ApiResult
from tests.conftest import make_response


def test_do_dispatches_success_and_failure():
    ok = ApiResult(200, "body")
    failed = ApiResult(500, error_message="boom")

    assert ok.do(lambda r: ("ok", r.body), lambda r: ("failed", r.error_message)) == ("ok", "body")
    assert failed.do(lambda r: ("ok", r.body), lambda r: ("failed", r.error_message)) == ("failed", "boom")


def test_map_skips_failed_results():
    failed = ApiResult(500, "raw", error_message="boom")

    assert failed.map(lambda body: body.upper()) is failed


def test_from_response_resolves_location_and_retry_after():
    result = ApiResult.from_response(
        make_response(202, {}, headers={"Location": "/go/api/backups/7", "Retry-After": "2"}),
    )

    assert result.redirect_url == "http://gocd.test/go/api/backups/7"
    assert result.retry_after_millis == 2000


def test_infinite_retry_after_falls_back_to_default():
    result = ApiResult.from_response(make_response(202, {}, headers={"Retry-After": "inf"}))

    assert result.retry_after_millis == DEFAULT_RETRY_AFTER_MILLIS
