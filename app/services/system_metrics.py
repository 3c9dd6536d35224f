import os
import platform
import time

import psutil

from app.schemas.health import PlatformInfo
from app.schemas.insights import CpuUsage, MemoryUsage

_MB = 1024 * 1024


def format_uptime(seconds: float) -> str:
    """Render an uptime as "2d 3h 4m", dropping leading zero units."""
    minutes = int(seconds) // 60
    days, minutes = divmod(minutes, 24 * 60)
    hours, minutes = divmod(minutes, 60)
    if days:
        return f"{days}d {hours}h {minutes}m"
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


class SystemMetricsService:
    """Resource readings for the current process, sourced from psutil."""

    def __init__(self, process: psutil.Process | None = None):
        self._process = process or psutil.Process()

    def memory(self) -> MemoryUsage:
        rss = self._process.memory_info().rss
        total = psutil.virtual_memory().total
        return MemoryUsage(
            used=round(rss / _MB),
            total=round(total / _MB),
            percentage=round(self._process.memory_percent(), 2),
        )

    def raw_memory(self) -> dict[str, int]:
        info = self._process.memory_info()
        return {"rss": info.rss, "vms": info.vms}

    def cpu(self) -> CpuUsage:
        times = self._process.cpu_times()
        return CpuUsage(user=round(times.user, 2), system=round(times.system, 2))

    def uptime(self) -> float:
        return round(time.time() - self._process.create_time(), 2)

    def platform_info(self) -> PlatformInfo:
        return PlatformInfo(
            platform=platform.system().lower(),
            arch=platform.machine(),
            pythonVersion=platform.python_version(),
            pid=os.getpid(),
        )
