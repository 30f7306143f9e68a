"""
Conversion — Радикс-формы, строковый I/O и JSON-записи значений.

Модули:
- radix: форматирование и разбор в основаниях 2..62, place_radix_point
- line_io: минимальный построчный протокол чтения/записи
- records: записи {"kind", "base", "text", "precision"} с JSON Schema
"""
