class CurlParseError(ValueError):
    """Базовая ошибка разбора curl-команды. Наследует ValueError -> 400 на границе."""

    code = "parse_error"

    def __init__(self, message: str, *, position: int | None = None):
        self.position = position
        if position is not None:
            message = f"{message} (позиция {position})"
        super().__init__(message)

    def to_dict(self):
        return {"error": str(self), "code": self.code}


class InvalidInput(CurlParseError):
    code = "invalid_input"


class UnterminatedQuote(CurlParseError):
    code = "unterminated_quote"


class TrailingEscape(CurlParseError):
    code = "trailing_escape"


class NotACurlCommand(CurlParseError):
    code = "not_a_curl_command"


class MissingFlagArgument(CurlParseError):
    code = "missing_flag_argument"

    def __init__(self, flag: str):
        self.flag = flag
        super().__init__(f"Ожидался аргумент после {flag}")
