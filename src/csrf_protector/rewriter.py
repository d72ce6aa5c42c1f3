"""Outgoing HTML rewrite: load the client script and warn when JS is off.

One :class:`HtmlRewriter` is created per response and fed the body in
order. Nothing is injected until an ``<html`` tag has been seen, and each
injection happens at most once per response.
"""

from __future__ import annotations

import html
import re

from csrf_protector.config import ProtectorConfig

HTML_OPEN = re.compile(r"<html", re.IGNORECASE)
BODY_OPEN = re.compile(r"<body\b[^>]*>", re.IGNORECASE)
BODY_CLOSE = re.compile(r"</body>", re.IGNORECASE)

# Longest unterminated tag fragment carried over to the next chunk.
MAX_PENDING = 1024


def script_tag(url: str) -> str:
    return f'<script type="text/javascript" src="{html.escape(url, quote=True)}"></script>'


def noscript_block(message: str) -> str:
    return f"<noscript>{message}</noscript>"


class HtmlRewriter:
    def __init__(self, config: ProtectorConfig) -> None:
        self.notice = noscript_block(config.disabled_js_message)
        self.script = script_tag(config.js_resource_url)
        self.is_valid_html = False
        self.notice_injected = False
        self.script_injected = False
        self._pending = ""

    def feed(self, buffer: str, final: bool = True) -> str:
        """Rewrite one buffer of the response body.

        With ``final=False`` a trailing unterminated tag is held back until
        the next call, and the script is only appended at the end of the
        final buffer when no ``</body>`` showed up.
        """
        text = self._pending + buffer
        self._pending = ""
        if not final:
            text = self._hold_partial_tag(text)

        if not self.is_valid_html:
            if not HTML_OPEN.search(text):
                return text
            self.is_valid_html = True

        if not self.notice_injected:
            match = BODY_OPEN.search(text)
            if match:
                text = text[: match.end()] + self.notice + text[match.end():]
                self.notice_injected = True

        if not self.script_injected:
            match = BODY_CLOSE.search(text)
            if match:
                text = text[: match.start()] + self.script + text[match.start():]
                self.script_injected = True
            elif final:
                text += self.script
                self.script_injected = True

        return text

    def flush(self) -> str:
        """Finish the response; returns whatever is still owed to the client."""
        return self.feed("", final=True)

    def _hold_partial_tag(self, text: str) -> str:
        start = text.rfind("<")
        if start == -1 or text.find(">", start) != -1:
            return text
        if len(text) - start > MAX_PENDING:
            return text
        self._pending = text[start:]
        return text[:start]
