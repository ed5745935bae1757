"""
带引号字符串解码

将 "\"3\"" 这类被引号包裹、带反斜杠转义的字符串字面量还原为原始文本，
常用于数值存放在 JSON 字段中的场景。支持三种字面量:

    - "..."   双引号，解析反斜杠转义
    - '.'     单引号，解析转义，且必须恰好是一个字符
    - `...`   反引号，原样保留（去除 \\r）
"""

from ..models.exceptions import UnquoteError

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
}

_HEX_DIGITS = "0123456789abcdefABCDEF"


def unquote(text: str) -> str:
    """
    去掉一层引号并解析转义

    Args:
        text: 带引号的字符串字面量

    Returns:
        解码后的文本

    Raises:
        UnquoteError: 不是合法的字符串字面量
    """
    if len(text) < 2:
        raise UnquoteError(text)

    quote = text[0]
    if quote not in ('"', "'", "`") or text[-1] != quote:
        raise UnquoteError(text)
    body = text[1:-1]

    if quote == "`":
        if "`" in body:
            raise UnquoteError(text, "unexpected backquote")
        return body.replace("\r", "")

    if "\n" in body:
        raise UnquoteError(text, "newline in quoted string")

    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == quote:
            raise UnquoteError(text, "unescaped quote")
        if ch != "\\":
            out += ch.encode("utf-8")
            i += 1
            continue

        if i + 1 >= len(body):
            raise UnquoteError(text, "trailing backslash")
        esc = body[i + 1]
        i += 2

        if esc in _SIMPLE_ESCAPES:
            out += _SIMPLE_ESCAPES[esc].encode("utf-8")
        elif esc in ('"', "'"):
            # 只能转义当前使用的引号
            if esc != quote:
                raise UnquoteError(text, f"invalid escape \\{esc}")
            out += esc.encode("utf-8")
        elif esc == "x":
            out.append(_read_hex(body, i, 2, text))
            i += 2
        elif esc in ("u", "U"):
            size = 4 if esc == "u" else 8
            code = _read_hex(body, i, size, text)
            i += size
            if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
                raise UnquoteError(text, f"invalid code point \\{esc}{body[i - size:i]}")
            out += chr(code).encode("utf-8")
        elif esc in "01234567":
            digits = body[i - 1:i + 2]
            if len(digits) != 3 or any(d not in "01234567" for d in digits):
                raise UnquoteError(text, "invalid octal escape")
            value = int(digits, 8)
            if value > 255:
                raise UnquoteError(text, "octal escape out of range")
            out.append(value)
            i += 2
        else:
            raise UnquoteError(text, f"invalid escape \\{esc}")

    result = out.decode("utf-8", errors="replace")
    if quote == "'" and len(result) != 1:
        raise UnquoteError(text, "single-quoted literal must hold exactly one character")
    return result


def _read_hex(body: str, start: int, size: int, text: str) -> int:
    digits = body[start:start + size]
    if len(digits) != size or any(d not in _HEX_DIGITS for d in digits):
        raise UnquoteError(text, "invalid hex escape")
    return int(digits, 16)
