"""
State-based scanner for xoly templates.

Walks the template text left to right and produces a lazy, finite sequence of
tokens. Three sentinel characters drive the scanner: '<' (tag start), '>' (tag
end) and '#' (interpolation delimiter). Comments `<!--- ... --->` are removed
before any other classification and may be nested.

Given an `is_tag` predicate, markup whose name it rejects (HTML such as
`<a href="#url#">`) is scanned as literal text, so interpolations inside it
are found and a stray '<' never fails the scan.
"""

from __future__ import annotations

import enum
import logging
import re
from typing import Callable, Iterator, List, Optional

from .errors import MalformedAttributeError, ScanError
from .tokens import InterpolationToken, TagCloseToken, TagOpenToken, TextToken, Token

logger = logging.getLogger(__name__)

COMMENT_OPEN = "<!---"
COMMENT_CLOSE = "--->"

_SENTINEL = re.compile(r"[<#]")
_COMMENT_MARK = re.compile(r"<!---|--->")
_TAG_START = re.compile(r"<(/?)([A-Za-z][A-Za-z0-9_:.\-]*)")
_INTERPOLATION = re.compile(r"#([^#<>\n]*)#")


class ScanState(enum.Enum):
    """States of the scanner."""

    TEXT = "TEXT"
    TAG = "TAG"
    COMMENT = "COMMENT"
    INTERPOLATION = "INTERPOLATION"


class Scanner:
    """
    Single-pass scanner over one template text.

    Keeps only positional bookkeeping: offset, line and column. Literal text
    is accumulated until a tag or interpolation token has to be emitted, so
    text interrupted by a comment comes out as one TEXT token.
    """

    def __init__(self, text: str, is_tag: Optional[Callable[[str], bool]] = None):
        """
        Args:
            text: Template source
            is_tag: Tells whether a tag name belongs to the template language;
                without it every tag name does
        """
        self.text = text
        self.is_tag = is_tag
        self.length = len(text)
        self.position = 0
        self.line = 1
        self.column = 1
        self.state = ScanState.TEXT

        # Accumulated literal text and where it started
        self._pending: List[str] = []
        self._pending_start: Optional[tuple] = None

    def run(self) -> Iterator[Token]:
        """
        Produces tokens lazily.

        Yields:
            Tokens in source order

        Raises:
            ScanError: On an unterminated comment or tag
            MalformedAttributeError: On a quote left open at the end of input
        """
        count = 0

        while self.position < self.length:
            if self.state is ScanState.TEXT:
                self._scan_text()
            elif self.state is ScanState.COMMENT:
                self._skip_comment()
                self.state = ScanState.TEXT
            elif self.state is ScanState.TAG:
                token = self._scan_tag()
                self.state = ScanState.TEXT
                text_token = self._flush_text()
                if text_token is not None:
                    count += 1
                    yield text_token
                count += 1
                yield token
            elif self.state is ScanState.INTERPOLATION:
                token = self._scan_interpolation()
                self.state = ScanState.TEXT
                text_token = self._flush_text()
                if text_token is not None:
                    count += 1
                    yield text_token
                count += 1
                yield token

        text_token = self._flush_text()
        if text_token is not None:
            count += 1
            yield text_token

        logger.debug(f"Scanned {count} tokens from text of length {self.length}")

    # ---------------------------- states ----------------------------

    def _scan_text(self) -> None:
        """Consumes literal text up to the next sentinel and picks the next state."""
        match = _SENTINEL.search(self.text, self.position)
        if match is None:
            self._take_text(self.length - self.position)
            return

        self._take_text(match.start() - self.position)

        if self.text.startswith(COMMENT_OPEN, self.position):
            self.state = ScanState.COMMENT
        elif self.text[self.position] == "<":
            tag = _TAG_START.match(self.text, self.position)
            if tag is not None and (self.is_tag is None or self.is_tag(tag.group(2))):
                self.state = ScanState.TAG
            elif tag is not None:
                # Foreign markup: its name is text, the rest is scanned as usual
                self._take_text(tag.end() - self.position)
            else:
                # '<' not followed by a tag name ("a < b")
                self._take_text(1)
        elif _INTERPOLATION.match(self.text, self.position):
            self.state = ScanState.INTERPOLATION
        else:
            # Unmatched '#' is literal text
            self._take_text(1)

    def _skip_comment(self) -> None:
        """Skips a (possibly nested) comment starting at the current position."""
        start = self._here()
        self._advance(len(COMMENT_OPEN))
        depth = 1

        while depth:
            match = _COMMENT_MARK.search(self.text, self.position)
            if match is None:
                raise ScanError("Unterminated comment", **start)
            depth += 1 if match.group(0) == COMMENT_OPEN else -1
            self._advance(match.end() - self.position)

    def _scan_tag(self) -> Token:
        """Scans an opening or closing tag up to the matching '>' outside quotes."""
        start = self._here()
        match = _TAG_START.match(self.text, self.position)
        is_close = bool(match.group(1))
        source_name = match.group(2)
        self._advance(match.end() - self.position)

        parts: List[str] = []
        quote: Optional[str] = None

        while True:
            if self.position >= self.length:
                if quote is not None:
                    raise MalformedAttributeError(
                        f"Unterminated {quote} quote in tag <{source_name}>", **start
                    )
                raise ScanError(f"Tag <{source_name}> is not terminated with '>'", **start)

            if self.text.startswith(COMMENT_OPEN, self.position):
                self._skip_comment()
                continue

            char = self.text[self.position]
            self._advance(1)

            if quote is not None:
                if char == quote:
                    quote = None
            elif char in "\"'":
                quote = char
            elif char == ">":
                break
            parts.append(char)

        content = "".join(parts)
        raw = f"<{'/' if is_close else ''}{source_name}{content}>"
        name = source_name.lower()

        if is_close:
            return TagCloseToken(raw=raw, name=name, **start)

        attributes_raw = content.rstrip()
        self_closing = attributes_raw.endswith("/")
        if self_closing:
            attributes_raw = attributes_raw[:-1]
        return TagOpenToken(
            raw=raw,
            name=name,
            attributes_raw=attributes_raw,
            self_closing=self_closing,
            **start,
        )

    def _scan_interpolation(self) -> Token:
        start = self._here()
        match = _INTERPOLATION.match(self.text, self.position)
        self._advance(match.end() - self.position)
        return InterpolationToken(raw=match.group(0), expression=match.group(1), **start)

    # ---------------------------- bookkeeping ----------------------------

    def _here(self) -> dict:
        return {"offset": self.position, "line": self.line, "column": self.column}

    def _take_text(self, count: int) -> None:
        """Moves count characters into the pending literal text."""
        if count <= 0:
            return
        if self._pending_start is None:
            self._pending_start = (self.position, self.line, self.column)
        self._pending.append(self.text[self.position:self.position + count])
        self._advance(count)

    def _flush_text(self) -> Optional[TextToken]:
        if not self._pending:
            return None
        text = "".join(self._pending)
        offset, line, column = self._pending_start
        self._pending = []
        self._pending_start = None
        return TextToken(raw=text, text=text, offset=offset, line=line, column=column)

    def _advance(self, count: int) -> None:
        """
        Moves the position forward, keeping line and column numbers current.
        """
        chunk = self.text[self.position:self.position + count]
        newlines = chunk.count("\n")
        if newlines:
            self.line += newlines
            self.column = len(chunk) - chunk.rfind("\n")
        else:
            self.column += len(chunk)
        self.position += len(chunk)


class TokenStream:
    """
    Restartable lazy token sequence: every iteration scans the text afresh.
    """

    def __init__(self, text: str, is_tag: Optional[Callable[[str], bool]] = None):
        self.text = text
        self.is_tag = is_tag

    def __iter__(self) -> Iterator[Token]:
        return Scanner(self.text, self.is_tag).run()


def scan(text: str, is_tag: Optional[Callable[[str], bool]] = None) -> TokenStream:
    """
    Scans template text into tokens.

    Args:
        text: Template source
        is_tag: Predicate on tag names (e.g. TagRegistry.has_handler); names it
            rejects are scanned as literal text

    Returns:
        Lazy, restartable sequence of tokens
    """
    return TokenStream(text, is_tag)


__all__ = ["Scanner", "ScanState", "TokenStream", "scan", "COMMENT_OPEN", "COMMENT_CLOSE"]
