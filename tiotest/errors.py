"""Ошибки запуска и соответствующие им коды выхода"""


class TiotestError(Exception):
    """Базовый класс для ошибок, завершающих запуск"""
    exit_code = 1


class ConfigurationError(TiotestError):
    """Неверный аргумент командной строки, ничего ещё не запущено"""
    exit_code = 1


class WorkerStartError(TiotestError):
    """Не удалось создать поток"""
    exit_code = 2


class IOFailure(TiotestError):
    """Ошибка открытия файла, короткое чтение/запись или сбой системного вызова"""
    exit_code = 3


class ConsistencyError(TiotestError):
    """Прочитанные данные не совпадают с контрольной суммой буфера"""
    exit_code = 4


class TimerError(TiotestError):
    """Сбой запроса времени или getrusage"""

    def __init__(self, message: str, exit_code: int):
        super().__init__(message)
        self.exit_code = exit_code
