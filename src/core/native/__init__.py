"""
Native — Владение native-структурами движка и протокол copy-on-write.

Модули:
- structs: раскладка структур поверх gmpy2
- handle: NativeHandle (init / copy / release)
- container: ValueContainer и базовый NativeValue
- native_int: диапазоны native integer и разложение на знак/модуль
"""
