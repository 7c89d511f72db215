"""Замер реального и процессорного времени интервала"""

import resource
import time
from dataclasses import dataclass, field

from .errors import TimerError


PROCESS_SCOPE = resource.RUSAGE_SELF
# только Linux, в остальных системах считается весь процесс
THREAD_SCOPE = getattr(resource, "RUSAGE_THREAD", resource.RUSAGE_SELF)


def _read_clocks(scope: int, where: str):
    try:
        real = time.time()
    except OSError as e:
        raise TimerError(f"Error in {where} from time(): {e}", 10)
    try:
        ru = resource.getrusage(scope)
    except (OSError, ValueError) as e:
        raise TimerError(f"Error in {where} from getrusage(): {e}", 11)
    return real, ru.ru_utime, ru.ru_stime


@dataclass
class Timing:
    """Отметки start/stop для real, user и system времени"""
    start_real: float = 0.0
    start_user: float = 0.0
    start_sys: float = 0.0
    stop_real: float = 0.0
    stop_user: float = 0.0
    stop_sys: float = 0.0
    scope: int = field(default=PROCESS_SCOPE, repr=False, compare=False)

    def start(self):
        self.start_real, self.start_user, self.start_sys = _read_clocks(self.scope, "timer_start")

    def stop(self):
        self.stop_real, self.stop_user, self.stop_sys = _read_clocks(self.scope, "timer_stop")

    def realtime(self) -> float:
        return round(self.stop_real - self.start_real, 6)

    def usertime(self) -> float:
        return round(self.stop_user - self.start_user, 6)

    def systime(self) -> float:
        return round(self.stop_sys - self.start_sys, 6)
