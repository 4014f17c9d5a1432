import json
import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from urllib.parse import parse_qs


REQUEST_ID_HEADER = "X-Request-Id"
SPAN_ID_HEADER = "X-Span-Id"
USER_ID_HEADER = "X-User-Id"

# 노이즈를 줄이기 위해 로그에서 제외할 엔드포인트 경로 목록
IGNORED_LOG_PATHS: set[str] = {"/health"}

# 요청 바디를 로그에 남길 때 값을 가리는 필드 (계좌 정보)
MASKED_BODY_FIELDS: frozenset[str] = frozenset({"account_number", "ifsc"})

MAX_BODY_LOG_LENGTH = 1024


def mask_body(text: str) -> str:
    """JSON 바디의 계좌 관련 필드를 마스킹한다. JSON 이 아니면 원문을 그대로 반환한다."""

    try:
        data = json.loads(text)
    except ValueError:
        return text

    def _mask(value: object) -> object:
        if isinstance(value, dict):
            return {
                key: ("***" if key in MASKED_BODY_FIELDS and item else _mask(item))
                for key, item in value.items()
            }
        if isinstance(value, list):
            return [_mask(item) for item in value]
        return value

    return json.dumps(_mask(data), ensure_ascii=False)


class RequestTraceMiddleware(BaseHTTPMiddleware):
    """공통 Request/Span ID 로그 미들웨어.

    - 들어오는 요청에서 X-Request-Id, X-Span-Id 를 읽고, 없으면 request_id만 새로 생성한다.
    - request.state 에 request_id, span_id 를 저장한다.
    - 응답 헤더에 동일한 값을 설정한다.
    - 게이트웨이가 넘겨준 X-User-Id 를 actor_uid 로 함께 기록한다.
    """

    def __init__(self, app, logger: logging.Logger | None = None) -> None:  # type: ignore[override]
        super().__init__(app)
        self._logger = logger or logging.getLogger("request_trace")

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id, span_id = self._extract_trace_ids(request)

        request.state.request_id = request_id
        request.state.span_id = span_id

        # 멀티파트(사진 업로드) 요청은 바디를 읽지 않는다.
        raw_body: str | None = None
        content_type = request.headers.get("content-type", "")
        if request.method in {"POST", "PUT", "PATCH", "DELETE"} and not content_type.startswith(
            "multipart/"
        ):
            try:
                body_bytes = await request.body()
            except Exception:
                body_bytes = b""
            if body_bytes:
                text = mask_body(body_bytes.decode("utf-8", errors="replace"))
                if len(text) > MAX_BODY_LOG_LENGTH:
                    text = text[:MAX_BODY_LOG_LENGTH]
                raw_body = text

        request.state.request_body = raw_body

        should_log = request.url.path not in IGNORED_LOG_PATHS

        start = time.monotonic()

        try:
            response = await call_next(request)
        except Exception:
            if should_log:
                self._logger.exception(
                    "request failed",
                    extra=self._build_log_extra(
                        request,
                        request_id,
                        span_id,
                        duration=time.monotonic() - start,
                    ),
                )
            raise

        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        response.headers.setdefault(SPAN_ID_HEADER, span_id)

        if should_log:
            self._logger.info(
                "completed request",
                extra=self._build_log_extra(
                    request,
                    request_id,
                    span_id,
                    status=response.status_code,
                    duration=time.monotonic() - start,
                ),
            )

        return response

    def _extract_trace_ids(self, request: Request) -> tuple[str, str]:
        request_id = request.headers.get(REQUEST_ID_HEADER)
        if not request_id:
            request_id = uuid.uuid4().hex

        span_id = request.headers.get(SPAN_ID_HEADER) or "0"
        return request_id, span_id

    def _build_log_extra(
        self,
        request: Request,
        request_id: str,
        span_id: str,
        status: int | None = None,
        duration: float | None = None,
    ) -> dict[str, object]:
        extra: dict[str, object] = {
            "request_id": request_id,
            "span_id": span_id,
            "method": request.method,
            "path": request.url.path,
        }

        actor_uid = request.headers.get(USER_ID_HEADER)
        if actor_uid:
            extra["actor_uid"] = actor_uid

        query = request.url.query
        if query:
            parsed = parse_qs(query, keep_blank_values=True)
            if parsed:
                extra["query_params"] = {
                    key: values[0] if len(values) == 1 else values
                    for key, values in parsed.items()
                }

        body = getattr(request.state, "request_body", None)
        if body:
            extra["body"] = body

        if status is not None:
            extra["status"] = status

        if duration is not None:
            extra["duration"] = f"{duration * 1000:.3f}ms"

        return extra
