"""
Core — Владение native-структурами, ошибки, конфигурация и контракты.

Не зависит от конкретных числовых типов: value-типы (src.numbers)
строятся поверх этого слоя.
"""
