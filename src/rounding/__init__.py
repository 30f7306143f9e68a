"""
Rounding — Режимы округления, ternary-коды и sticky-флаги исключений.

Модули:
- modes: RoundingMode, Ternary, RoundedResult
- flags: ExceptionFlags и процессный регистр STICKY_FLAGS
- tracker: выполнение float-операций в контексте gmpy2 с учётом флагов
"""
