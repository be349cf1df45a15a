import base64
import logging
import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import NamedTuple
from urllib.parse import parse_qsl, quote, urlparse, urlsplit

import requests
from requests.structures import CaseInsensitiveDict

from curl_errors import CurlParseError, InvalidInput, MissingFlagArgument, NotACurlCommand
from curl_tokenizer import tokenize

logger = logging.getLogger(__name__)

# requests выставит их сам
HOP_HEADERS = frozenset(("host", "content-length", "transfer-encoding"))

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"


class Action(Enum):
    SET_METHOD = "method"
    ADD_HEADER = "header"
    SET_BODY = "body"
    SET_URL = "url"
    SET_USER = "user"
    SET_HEAD = "head"
    SET_GET = "get"
    IGNORE = "ignore"


class FlagSpec(NamedTuple):
    action: Action
    takes_arg: bool = False
    mode: str | None = None
    option: str | None = None


def _build_flags():
    table = {}

    def add(spellings, spec):
        for s in spellings:
            table[s] = spec

    add(("-X", "--request"), FlagSpec(Action.SET_METHOD, True))
    add(("-H", "--header"), FlagSpec(Action.ADD_HEADER, True))
    add(("-d", "--data", "--data-raw", "--data-binary", "--data-ascii"),
        FlagSpec(Action.SET_BODY, True, mode="raw"))
    add(("--data-urlencode",), FlagSpec(Action.SET_BODY, True, mode="urlencode"))
    add(("-F", "--form", "--form-string"), FlagSpec(Action.SET_BODY, True, mode="form"))
    add(("--json",), FlagSpec(Action.SET_BODY, True, mode="json"))
    add(("--url",), FlagSpec(Action.SET_URL, True))
    add(("-u", "--user"), FlagSpec(Action.SET_USER, True))
    add(("-I", "--head"), FlagSpec(Action.SET_HEAD))
    add(("-G", "--get"), FlagSpec(Action.SET_GET))

    # ключи со значением: запоминаем в options, чтобы курсор не съехал
    for spellings in (
        ("-A", "--user-agent"),
        ("-b", "--cookie"),
        ("-c", "--cookie-jar"),
        ("-e", "--referer"),
        ("-o", "--output"),
        ("-x", "--proxy"),
        ("-U", "--proxy-user"),
        ("-m", "--max-time"),
        ("--connect-timeout",),
        ("-w", "--write-out"),
        ("-T", "--upload-file"),
        ("-E", "--cert"),
        ("--key",),
        ("--cacert",),
        ("--capath",),
        ("--resolve",),
        ("--connect-to",),
        ("--max-redirs",),
        ("-r", "--range"),
        ("-K", "--config"),
        ("--retry",),
        ("--retry-delay",),
        ("--limit-rate",),
        ("-z", "--time-cond"),
        ("-D", "--dump-header"),
        ("--interface",),
        ("--proto",),
        ("--proto-default",),
        ("-C", "--continue-at"),
        ("--oauth2-bearer",),
        ("--aws-sigv4",),
        ("--noproxy",),
        ("--unix-socket",),
    ):
        add(spellings, FlagSpec(Action.IGNORE, True, option=spellings[-1].lstrip("-")))

    # ключи без значения
    for spellings in (
        ("-k", "--insecure"),
        ("-L", "--location"),
        ("--location-trusted",),
        ("--compressed",),
        ("-s", "--silent"),
        ("-S", "--show-error"),
        ("-v", "--verbose"),
        ("-i", "--include"),
        ("-f", "--fail"),
        ("-g", "--globoff"),
        ("-N", "--no-buffer"),
        ("-O", "--remote-name"),
        ("-J", "--remote-header-name"),
        ("-n", "--netrc"),
        ("-#", "--progress-bar"),
        ("-0", "--http1.0"),
        ("--http1.1",),
        ("--http2",),
        ("--http3",),
        ("-4", "--ipv4"),
        ("-6", "--ipv6"),
        ("--path-as-is",),
        ("--raw",),
        ("--tr-encoding",),
    ):
        add(spellings, FlagSpec(Action.IGNORE, option=spellings[-1].lstrip("-")))

    return MappingProxyType(table)


FLAGS = _build_flags()


@dataclass(frozen=True)
class ParsedRequest:
    method: str = "GET"
    url: str = ""
    headers: Mapping = field(default_factory=CaseInsensitiveDict)
    body: str | None = None
    options: Mapping = field(default_factory=dict)

    def __post_init__(self):
        # свои копии только на чтение: результат не меняется после разбора
        object.__setattr__(self, "headers", MappingProxyType(CaseInsensitiveDict(self.headers)))
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    def __hash__(self):
        return hash((
            self.method,
            self.url,
            frozenset((k.lower(), v) for k, v in self.headers.items()),
            self.body,
            frozenset(self.options.items()),
        ))

    @property
    def body_type(self):
        if not self.body:
            return "none"
        stripped = self.body.strip()
        if stripped.startswith(("{", "[")):
            return "json"
        if "=" in stripped and "&" in stripped:
            return "form"
        return "raw"

    @property
    def query_params(self):
        return parse_qsl(urlsplit(self.url).query, keep_blank_values=True)

    def to_dict(self):
        return {
            "method": self.method,
            "url": self.url,
            "headers": dict(self.headers),
            "body": self.body,
        }

    def to_requests(self):
        """Неотправленный requests.Request, отправляет вызывающий."""
        headers = {k: v for k, v in self.headers.items() if k.lower() not in HOP_HEADERS}
        return requests.Request(method=self.method, url=self.url, headers=headers, data=self.body)


@dataclass(frozen=True)
class ParseOutcome:
    request: ParsedRequest | None = None
    error: CurlParseError | None = None

    def __post_init__(self):
        if (self.request is None) == (self.error is None):
            raise TypeError("ParseOutcome: нужен ровно один из request / error")

    @property
    def ok(self):
        return self.error is None

    def unwrap(self) -> ParsedRequest:
        if self.error is not None:
            raise self.error
        return self.request


def _urlencode_data(value: str) -> str:
    # как curl: name=content -> name=<encoded>, =content и content -> <encoded>
    name, sep, content = value.partition("=")
    if not sep:
        return quote(value, safe="")
    if not name:
        return quote(content, safe="")
    return f"{name}={quote(content, safe='')}"


def _looks_like_url(value: str) -> bool:
    return value.startswith(("http://", "https://")) or bool(urlparse(value).scheme)


class _RequestBuilder:
    def __init__(self):
        self.method = None
        self.url = None
        self.url_guessed = False
        self.headers = CaseInsensitiveDict()
        self.body_parts = []
        self.body_modes = set()
        self.head = False
        self.get = False
        self.options = {}

    def apply(self, spec, value):
        action = spec.action
        if action is Action.SET_METHOD:
            self.method = value.upper()
        elif action is Action.ADD_HEADER:
            self.add_header(value)
        elif action is Action.SET_BODY:
            if spec.mode == "urlencode":
                value = _urlencode_data(value)
            self.body_parts.append(value)
            self.body_modes.add(spec.mode)
        elif action is Action.SET_URL:
            self.url = value
            self.url_guessed = False
        elif action is Action.SET_USER:
            user, _, password = value.partition(":")
            token = base64.b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")
            self.headers["Authorization"] = f"Basic {token}"
        elif action is Action.SET_HEAD:
            self.head = True
        elif action is Action.SET_GET:
            self.get = True
        else:
            self.options[spec.option] = value if spec.takes_arg else True

    def add_header(self, raw):
        name, sep, value = raw.partition(":")
        name = name.strip()
        if not sep or not name:
            logger.debug("Некорректный заголовок пропущен: %r", raw)
            return
        # повтор имени: значение последнее, позиция первого
        self.headers[name] = value.strip()

    def positional(self, value):
        if self.url is None:
            self.url = value
            self.url_guessed = not _looks_like_url(value)
        elif self.url_guessed and _looks_like_url(value):
            # прежний кандидат, скорее всего, значение неизвестного ключа
            logger.debug("Аргумент %r заменён на URL %r", self.url, value)
            self.url = value
            self.url_guessed = False
        else:
            logger.debug("Лишний аргумент пропущен: %r", value)

    def finish(self):
        body = "&".join(self.body_parts) if self.body_parts else None
        url = self.url or ""

        if "form" in self.body_modes:
            self.headers.setdefault("Content-Type", FORM_CONTENT_TYPE)
        if "json" in self.body_modes:
            self.headers.setdefault("Content-Type", JSON_CONTENT_TYPE)

        if self.get and body is not None:
            url = url + ("&" if "?" in url else "?") + body
            body = None

        if self.method is not None:
            method = self.method
        elif self.head:
            method = "HEAD"
        elif self.get or body is None:
            method = "GET"
        else:
            method = "POST"

        return ParsedRequest(method=method, url=url, headers=self.headers, body=body, options=self.options)


def build(tokens) -> ParsedRequest:
    """
    Разбирает уже токенизированную команду curl.
    Поддержка:
      -X / --request METHOD
      -H / --header "Name: value"  (без ':' или с пустым именем пропускаем)
      -d / --data / --data-raw / --data-binary / --data-ascii (повторы склеиваем через &)
      --data-urlencode, -F / --form, --json
      --url URL, -u / --user user:pass (Basic)
      -I / --head, -G / --get
      склейки коротких ключей: -sSL, -XPOST, -sX POST
    Прочие известные ключи запоминаются в options, неизвестные пропускаются.
    """
    if not tokens or tokens[0].lower() != "curl":
        raise NotACurlCommand("Команда должна начинаться с curl")

    builder = _RequestBuilder()
    i = 1
    while i < len(tokens):
        t = tokens[i]
        i += 1

        def take_next(flag):
            nonlocal i
            if i >= len(tokens):
                raise MissingFlagArgument(flag)
            i += 1
            return tokens[i - 1]

        spec = FLAGS.get(t)
        if spec is not None:
            builder.apply(spec, take_next(t) if spec.takes_arg else None)
        elif t.startswith("-") and not t.startswith("--") and len(t) > 2:
            for pos in range(1, len(t)):
                flag = "-" + t[pos]
                spec = FLAGS.get(flag)
                if spec is None:
                    # дальше может быть значение неизвестного ключа
                    logger.debug("Неизвестный ключ %s в %r, остаток пропущен", flag, t)
                    break
                if spec.takes_arg:
                    value = t[pos + 1:] or take_next(flag)
                    builder.apply(spec, value)
                    break
                builder.apply(spec, None)
        elif t.startswith("-"):
            logger.debug("Неизвестный ключ пропущен: %s", t)
        else:
            builder.positional(t)

    return builder.finish()


def parse_curl(curl_cmd, max_length=None) -> ParsedRequest:
    if not isinstance(curl_cmd, str) or not curl_cmd.strip():
        raise InvalidInput("Пустая или некорректная команда curl")
    if max_length is not None and len(curl_cmd) > max_length:
        raise InvalidInput(f"Команда длиннее {max_length} символов")
    return build(tokenize(curl_cmd))


def try_parse(curl_cmd, max_length=None) -> ParseOutcome:
    try:
        return ParseOutcome(request=parse_curl(curl_cmd, max_length=max_length))
    except CurlParseError as e:
        return ParseOutcome(error=e)


def to_curl(req: ParsedRequest) -> str:
    """Обратно в однострочную команду curl (экспорт из UI)."""
    parts = ["curl", "-X", req.method]
    for name, value in req.headers.items():
        parts += ["-H", f"{name}: {value}"]
    if req.body is not None:
        parts += ["--data-raw", req.body]
    # --url: адрес, начинающийся с "-", не примут за ключ
    parts += ["--url", req.url]
    return " ".join(shlex.quote(p) for p in parts)
