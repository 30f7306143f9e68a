"""
Entropy — Источники случайности.

Модули:
- random_state: быстрый seedable генератор (НЕ для секретов)
- secure: криптографически стойкие целые и float в [0, 1)
"""
