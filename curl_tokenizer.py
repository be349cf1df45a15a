from typing import NamedTuple

from curl_errors import TrailingEscape, UnterminatedQuote

WHITESPACE = frozenset(" \t\r\n")
# внутри "..." обратный слэш снимается только перед этими символами
DQ_ESCAPABLE = frozenset('\\"$`')

UNQUOTED, SINGLE_QUOTED, DOUBLE_QUOTED, ESCAPE_UNQUOTED, ESCAPE_DOUBLE = range(5)


class Token(NamedTuple):
    value: str
    quoted: bool
    position: int


def scan(text: str) -> list[Token]:
    """
    Делит строку на слова по правилам POSIX shell (без запуска shell и без shlex).
    Поддержка:
      'одинарные' кавычки: всё буквально
      "двойные" кавычки: экранируются только \\ " $ `
      \\x вне кавычек: x буквально (в т.ч. пробел и кавычка)
      \\ + перевод строки: продолжение строки, работает как разделитель
      смежные куски без пробела склеиваются в одно слово: 'it'"'"'s' -> it's
    Один проход по символам, без возвратов.
    """
    tokens = []
    buf = []
    started = False
    quoted = False
    start = 0
    quote_pos = 0
    escape_pos = 0
    state = UNQUOTED

    def flush():
        nonlocal started, quoted
        # '' тоже даёт слово, пустое, как в shell
        if started:
            tokens.append(Token("".join(buf), quoted, start))
        buf.clear()
        started = False
        quoted = False

    def begin(pos):
        nonlocal started, start
        if not started:
            started = True
            start = pos

    def crlf_at(pos):
        return text[pos] == "\r" and text.startswith("\n", pos + 1)

    i = 0
    while i < len(text):
        ch = text[i]

        if state == UNQUOTED:
            if ch in WHITESPACE:
                flush()
            elif ch == "'" or ch == '"':
                begin(i)
                quoted = True
                quote_pos = i
                state = SINGLE_QUOTED if ch == "'" else DOUBLE_QUOTED
            elif ch == "\\":
                escape_pos = i
                state = ESCAPE_UNQUOTED
            else:
                begin(i)
                buf.append(ch)

        elif state == SINGLE_QUOTED:
            if ch == "'":
                state = UNQUOTED
            else:
                buf.append(ch)

        elif state == DOUBLE_QUOTED:
            if ch == '"':
                state = UNQUOTED
            elif ch == "\\":
                escape_pos = i
                state = ESCAPE_DOUBLE
            else:
                buf.append(ch)

        elif state == ESCAPE_UNQUOTED:
            if ch == "\n" or crlf_at(i):
                # многострочная вставка из терминала/DevTools
                flush()
                if ch == "\r":
                    i += 1
            else:
                begin(escape_pos)
                buf.append(ch)
            state = UNQUOTED

        else:  # ESCAPE_DOUBLE
            if ch == "\n":
                pass
            elif crlf_at(i):
                i += 1
            elif ch in DQ_ESCAPABLE:
                buf.append(ch)
            else:
                buf.append("\\")
                buf.append(ch)
            state = DOUBLE_QUOTED

        i += 1

    if state in (ESCAPE_UNQUOTED, ESCAPE_DOUBLE):
        raise TrailingEscape("Команда заканчивается символом \\", position=escape_pos)
    if state in (SINGLE_QUOTED, DOUBLE_QUOTED):
        raise UnterminatedQuote("Незакрытая кавычка", position=quote_pos)

    flush()
    return tokens


def tokenize(text: str) -> list[str]:
    return [t.value for t in scan(text)]
