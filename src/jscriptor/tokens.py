"""JScriptor tokenizer: lexes source into a flat token list."""

from __future__ import annotations


# Token type constants
TK_NUMBER = "NUMBER"
TK_STRING = "STRING"
TK_IDENT = "IDENT"
TK_OP = "OP"
TK_EOF = "EOF"

KEYWORDS: set[str] = {
    "const",
    "false",
    "return",
    "true",
}

# Multi-character operators, sorted by length descending for greedy matching
MULTI_OPS: list[str] = [
    "=>",
]

SINGLE_OPS: set[str] = {
    "+",
    "*",
    "|",
    "<",
    ">",
    "=",
    "(",
    ")",
    "[",
    "]",
    "{",
    "}",
    ",",
    ":",
    ";",
    "?",
}

ESCAPE_MAP: dict[str, str] = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    '"': '"',
    "'": "'",
    "0": "\0",
}


class TokenizeError(Exception):
    """Error during tokenization."""

    def __init__(self, msg: str, line: int, col: int, offset: int = 0):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        self.offset: int = offset
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Token:
    """A token with type, value, and position."""

    def __init__(self, type_: str, value: str, offset: int, line: int, col: int):
        self.type: str = type_
        self.value: str = value
        self.offset: int = offset
        self.line: int = line
        self.col: int = col

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.value)
            + ", "
            + str(self.line)
            + ", "
            + str(self.col)
            + ")"
        )


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_" or c == "$"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


def tokenize(source: str) -> list[Token]:
    """Tokenize JScriptor source into a flat list ending with TK_EOF."""
    tokens: list[Token] = []
    pos = 0
    line = 1
    col = 1
    length = len(source)

    while pos < length:
        c = source[pos]

        # Newlines
        if c == "\n":
            pos += 1
            line += 1
            col = 1
            continue

        # Whitespace
        if c == " " or c == "\t" or c == "\r":
            pos += 1
            col += 1
            continue

        # Line comment: //
        if c == "/" and pos + 1 < length and source[pos + 1] == "/":
            while pos < length and source[pos] != "\n":
                pos += 1
            continue

        start_pos = pos
        start_line = line
        start_col = col

        # Block comment: /* ... */
        if c == "/" and pos + 1 < length and source[pos + 1] == "*":
            pos += 2
            col += 2
            while pos < length and not (
                source[pos] == "*" and pos + 1 < length and source[pos + 1] == "/"
            ):
                if source[pos] == "\n":
                    line += 1
                    col = 1
                else:
                    col += 1
                pos += 1
            if pos >= length:
                raise TokenizeError(
                    "unterminated block comment", start_line, start_col, start_pos
                )
            pos += 2
            col += 2
            continue

        # Number: digits with an optional fractional part
        if _is_digit(c):
            while pos < length and _is_digit(source[pos]):
                pos += 1
                col += 1
            if pos + 1 < length and source[pos] == "." and _is_digit(source[pos + 1]):
                pos += 1
                col += 1
                while pos < length and _is_digit(source[pos]):
                    pos += 1
                    col += 1
            raw = source[start_pos:pos]
            tokens.append(Token(TK_NUMBER, raw, start_pos, start_line, start_col))
            continue

        # String literal: "..." or '...'
        if c == '"' or c == "'":
            quote = c
            pos += 1
            col += 1
            chars: list[str] = []
            while pos < length and source[pos] != quote:
                if source[pos] == "\n":
                    raise TokenizeError(
                        "unterminated string literal", start_line, start_col, start_pos
                    )
                if source[pos] == "\\":
                    pos += 1
                    col += 1
                    if pos >= length:
                        break
                    esc = source[pos]
                    if esc not in ESCAPE_MAP:
                        raise TokenizeError(
                            "invalid escape: \\" + esc, line, col, pos
                        )
                    chars.append(ESCAPE_MAP[esc])
                else:
                    chars.append(source[pos])
                pos += 1
                col += 1
            if pos >= length:
                raise TokenizeError(
                    "unterminated string literal", start_line, start_col, start_pos
                )
            pos += 1  # skip closing quote
            col += 1
            tokens.append(
                Token(TK_STRING, "".join(chars), start_pos, start_line, start_col)
            )
            continue

        # Identifier or keyword
        if _is_alpha(c):
            while pos < length and _is_alnum(source[pos]):
                pos += 1
                col += 1
            word = source[start_pos:pos]
            if word in KEYWORDS:
                tokens.append(Token(word, word, start_pos, start_line, start_col))
            else:
                tokens.append(Token(TK_IDENT, word, start_pos, start_line, start_col))
            continue

        # Multi-character operators
        matched = False
        for op in MULTI_OPS:
            op_len = len(op)
            if pos + op_len <= length and source[pos : pos + op_len] == op:
                tokens.append(Token(TK_OP, op, start_pos, start_line, start_col))
                pos += op_len
                col += op_len
                matched = True
                break
        if matched:
            continue

        # Single-character operators
        if c in SINGLE_OPS:
            tokens.append(Token(TK_OP, c, start_pos, start_line, start_col))
            pos += 1
            col += 1
            continue

        raise TokenizeError("unexpected character: " + repr(c), line, col, pos)

    tokens.append(Token(TK_EOF, "", pos, line, col))
    return tokens
