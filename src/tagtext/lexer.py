"""Tag markup lexer: converts source text into a flat token stream.

The lexer is total: anything that does not form a well-formed tag header is
literal text, so tokenizing never fails.
"""

from __future__ import annotations

from tagtext.tokens import ARG_ESCAPABLE, QUOTES, Position, Span, Token, TokenType, is_name_char, is_ws


class Lexer:
    """Tokenize tag markup into a stream of Token objects."""

    def __init__(self, source: str, *, positional: bool = False) -> None:
        self._source = source
        self._positional = positional
        self._escapable = "<\\{" if positional else "<\\"
        self._pos = 0
        self._line = 1
        self._col = 1
        self._tokens: list[Token] = []
        self._text: list[str] = []
        self._text_start: Position | None = None

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list."""
        while self._pos < len(self._source):
            ch = self._peek()
            if ch == "\\":
                self._lex_escape()
            elif ch == "<" and self._lex_tag():
                continue
            elif ch == "{" and self._positional and self._lex_marker():
                continue
            else:
                self._mark_text()
                self._text.append(self._advance())

        self._flush_text()
        self._emit(TokenType.EOF, "", "", self._current_pos())
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _current_pos(self) -> Position:
        return Position(self._line, self._col, self._pos)

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _advance_to(self, end: int) -> None:
        while self._pos < end:
            self._advance()

    def _emit(
        self,
        tt: TokenType,
        value: str,
        raw: str,
        start: Position,
        args: tuple[str, ...] = (),
        self_closing: bool = False,
    ) -> Token:
        tok = Token(tt, value, raw, Span(start, self._current_pos()), args, self_closing)
        self._tokens.append(tok)
        return tok

    # ------------------------------------------------------------------
    # Text runs
    # ------------------------------------------------------------------

    def _mark_text(self) -> None:
        if self._text_start is None:
            self._text_start = self._current_pos()

    def _flush_text(self) -> None:
        if self._text_start is None:
            return
        start = self._text_start
        raw = self._source[start.offset : self._pos]
        self._emit(TokenType.TEXT, "".join(self._text), raw, start)
        self._text.clear()
        self._text_start = None

    def _lex_escape(self) -> None:
        self._mark_text()
        self._advance()  # consume backslash
        if self._pos < len(self._source) and self._peek() in self._escapable:
            self._text.append(self._advance())
        else:
            # Backslash only escapes tag openers and itself
            self._text.append("\\")

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def _lex_tag(self) -> bool:
        """Try to lex a tag header at the current '<'. Return False to treat it as text."""
        scanned = self._scan_tag(self._pos)
        if scanned is None:
            return False
        end, closing, name, args, self_closing = scanned

        self._flush_text()
        start = self._current_pos()
        raw = self._source[self._pos : end]
        self._advance_to(end)
        tt = TokenType.TAG_CLOSE if closing else TokenType.TAG_OPEN
        self._emit(tt, name, raw, start, tuple(args), self_closing)
        return True

    def _lex_marker(self) -> bool:
        """Try to lex a positional marker ``{}`` or ``{N}``."""
        src = self._source
        j = self._pos + 1
        while j < len(src) and src[j].isdigit():
            j += 1
        if j >= len(src) or src[j] != "}":
            return False

        self._flush_text()
        start = self._current_pos()
        raw = src[self._pos : j + 1]
        self._advance_to(j + 1)
        self._emit(TokenType.TAG_OPEN, raw[1:-1], raw, start, (), True)
        return True

    def _skip_ws(self, j: int) -> int:
        while j < len(self._source) and is_ws(self._source[j]):
            j += 1
        return j

    def _scan_tag(self, i: int) -> tuple[int, bool, str, list[str], bool] | None:
        """Scan a tag header starting at index i (the '<').

        Returns (end index, closing, name, args, self_closing), or None when
        the text at i is not a well-formed tag.
        """
        src = self._source
        n = len(src)

        # No whitespace between '<' (or '</') and the name, so "a < b" stays text
        j = i + 1
        closing = False
        if j < n and src[j] == "/":
            closing = True
            j += 1

        name_start = j
        while j < n and is_name_char(src[j]):
            j += 1
        if j == name_start:
            return None
        name = src[name_start:j]

        args: list[str] = []
        self_closing = False
        j = self._skip_ws(j)

        while j < n:
            ch = src[j]
            if ch == ">":
                if closing and self_closing:
                    return None
                return j + 1, closing, name, args, self_closing
            if ch == "/" and not self_closing:
                k = self._skip_ws(j + 1)
                if k < n and src[k] == ">":
                    self_closing = True
                    j = k
                    continue
                return None
            if ch != ":" or self_closing:
                return None

            j += 1
            if j < n and src[j] in QUOTES:
                quoted = self._scan_quoted(j)
                if quoted is None:
                    return None
                value, j = quoted
                j = self._skip_ws(j)
            else:
                unquoted = self._scan_unquoted(j)
                if unquoted is None:
                    return None
                value, j, trailing_slash = unquoted
                if trailing_slash:
                    self_closing = True
            args.append(value)

        return None

    def _scan_quoted(self, j: int) -> tuple[str, int] | None:
        """Scan a quoted argument; returns (value, index after closing quote)."""
        src = self._source
        quote = src[j]
        k = j + 1
        chars: list[str] = []
        while k < len(src):
            c = src[k]
            if c == "\\" and k + 1 < len(src) and src[k + 1] in (quote, "\\"):
                chars.append(src[k + 1])
                k += 2
            elif c == quote:
                return "".join(chars), k + 1
            else:
                chars.append(c)
                k += 1
        return None

    def _scan_unquoted(self, j: int) -> tuple[str, int, bool] | None:
        """Scan an unquoted argument up to the next unescaped ':' or '>'.

        Returns (value, delimiter index, trailing_slash). A trailing
        unescaped '/' directly before '>' marks the tag self-closing and is
        not part of the value.
        """
        src = self._source
        k = j
        chars: list[str] = []
        last_was_slash = False
        while k < len(src):
            c = src[k]
            if c == "\\" and k + 1 < len(src) and src[k + 1] in ARG_ESCAPABLE:
                chars.append(src[k + 1])
                last_was_slash = False
                k += 2
                continue
            if c == "<":
                return None
            if c == ":":
                return "".join(chars), k, False
            if c == ">":
                if last_was_slash:
                    chars.pop()
                    return "".join(chars), k, True
                return "".join(chars), k, False
            chars.append(c)
            last_was_slash = c == "/"
            k += 1
        return None


def tokenize(source: str, *, positional: bool = False) -> list[Token]:
    """Convenience function: tokenize source text and return token list."""
    return Lexer(source, positional=positional).tokenize()
