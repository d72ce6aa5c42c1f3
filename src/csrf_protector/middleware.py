"""ASGI middleware putting the CSRF protector in front of an application.

Installs with ``app.add_middleware(CSRFProtectorMiddleware, protector=...)``.
For every HTTP request it validates the submitted token, applies the
failure action on a mismatch, rotates the token cookie, and runs text
responses through the HTML rewriter as they stream out.
"""

from __future__ import annotations

import codecs
from typing import Any

from starlette.datastructures import FormData, MutableHeaders
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from csrf_protector.authorizer import TOKEN_FIELD, RequestContext
from csrf_protector.cookies import RequestCookieStore
from csrf_protector.protector import CSRFProtector

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class CSRFProtectorMiddleware:
    def __init__(self, app: ASGIApp, protector: CSRFProtector) -> None:
        self.app = app
        self.protector = protector

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        cookies = RequestCookieStore(request.cookies, secure=request.url.scheme == "https")

        body = b""
        if request.method == "POST":
            body = await request.body()
            params = await _form_params(request)
        else:
            params = dict(request.query_params)

        submitted = params.get(TOKEN_FIELD)
        context = RequestContext(
            method=request.method,
            submitted_token=submitted if isinstance(submitted, str) else None,
            cookie_token=cookies.get(),
            host=request.headers.get("host", ""),
            request_uri=_request_uri(request),
            params=params,
            cookies=dict(request.cookies),
        )

        result = self.protector.authorize(context, cookies)
        if result is not None and result.terminates:
            response = cookies.apply(result.response)
            await response(scope, receive, send)
            return

        if result is not None and result.strip_params:
            scope = _strip_params(scope, context.request_type)
            body = b""

        if request.method == "POST":
            receive = _replay_body(body, receive)
        await self.app(scope, receive, self._wrap_send(send, cookies))

    def _wrap_send(self, send: Send, cookies: RequestCookieStore) -> Send:
        rewriter = None
        decoder = None
        encoder = None

        async def send_wrapper(message: Message) -> None:
            nonlocal rewriter, decoder, encoder
            if message["type"] == "http.response.start":
                headers = MutableHeaders(raw=list(message.get("headers", [])))
                cookie_header = cookies.header()
                if cookie_header is not None:
                    headers.append("set-cookie", cookie_header[1].decode("latin-1"))
                if _is_rewritable(headers):
                    encoding = _charset(headers)
                    decoder = codecs.getincrementaldecoder(encoding)(errors="surrogateescape")
                    encoder = codecs.getincrementalencoder(encoding)(errors="surrogateescape")
                    rewriter = self.protector.rewriter()
                    del headers["content-length"]
                message = {**message, "headers": headers.raw}
            elif message["type"] == "http.response.body" and rewriter is not None:
                final = not message.get("more_body", False)
                text = decoder.decode(message.get("body", b""), final=final)
                text = rewriter.feed(text, final=final)
                message = {**message, "body": encoder.encode(text, final=final)}
            await send(message)

        return send_wrapper


async def _form_params(request: Request) -> dict[str, Any]:
    content_type = request.headers.get("content-type", "")
    if content_type.split(";")[0].strip().lower() not in FORM_CONTENT_TYPES:
        return {}
    try:
        form: FormData = await request.form()
    except (HTTPException, MultiPartException):
        # Unparseable body: no submitted token, so the request is denied
        return {}
    params: dict[str, Any] = {}
    for key, value in form.multi_items():
        params[key] = value if isinstance(value, str) else (value.filename or "")
    await form.close()
    return params


def _request_uri(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def _strip_params(scope: Scope, request_type: str) -> Scope:
    scope = dict(scope)
    if request_type == "GET":
        scope["query_string"] = b""
    else:
        headers = MutableHeaders(scope=scope)
        headers["content-length"] = "0"
    return scope


def _replay_body(body: bytes, receive: Receive) -> Receive:
    sent = False

    async def replay() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


def _is_rewritable(headers: MutableHeaders) -> bool:
    content_type = headers.get("content-type", "").lower()
    return content_type.startswith("text/") and "content-encoding" not in headers


def _charset(headers: MutableHeaders) -> str:
    content_type = headers.get("content-type", "")
    for part in content_type.split(";")[1:]:
        name, _, value = part.strip().partition("=")
        if name.lower() == "charset" and value:
            charset = value.strip('"')
            try:
                return codecs.lookup(charset).name
            except LookupError:
                break
    return "utf-8"
