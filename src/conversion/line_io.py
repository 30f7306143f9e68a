"""
Line I/O — Минимальный строковый протокол чтения/записи значений

Запись: отформатированная строка + "\\n".
Чтение: поглощение данных до "\\n" или конца потока, trim, разбор.

Поддерживаются текстовые (io.TextIOBase) и байтовые потоки; байтовые
кодируются в UTF-8.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Пустой, некорректный или недекодируемый ввод → None
2. Закрытый поток при чтении → None
3. Сбой чтения никогда не мутирует значение
"""

import io
import logging
from typing import IO, Any, Optional

_logger = logging.getLogger(__name__)

_ENCODING = "utf-8"


def _is_text_stream(stream: Any) -> bool:
    return isinstance(stream, io.TextIOBase) or "b" not in getattr(stream, "mode", "b")


def write_line(stream: IO, text: str) -> int:
    """
    Запись строки с завершающим переводом строки.

    Args:
        stream: Текстовый или байтовый поток
        text: Строка без перевода строки

    Returns:
        Количество записанных символов (текстовый поток) или байт
        (байтовый поток)
    """
    line = f"{text}\n"
    if _is_text_stream(stream):
        stream.write(line)
        return len(line)

    payload = line.encode(_ENCODING)
    stream.write(payload)
    return len(payload)


def read_line(stream: IO) -> Optional[str]:
    """
    Чтение одной строки до "\\n" или конца потока.

    Returns:
        Строка без окружающих пробелов или None (пустой ввод, закрытый
        поток, ошибка декодирования)
    """
    if getattr(stream, "closed", False):
        return None

    try:
        raw = stream.readline()
    except ValueError:
        # закрыт во время чтения или недекодируемый текст
        _logger.debug("line read failed on %r", stream)
        return None

    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode(_ENCODING)
        except UnicodeDecodeError:
            return None

    line = raw.strip()
    return line or None
