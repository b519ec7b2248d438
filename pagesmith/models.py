from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class ServerState(Enum):
    STARTING = "starting"
    RUNNING = "running"
    FAILED = "failed"
    TERMINATED = "terminated"


class WatchStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class Session:
    output_dir: Path              # Relative to the project root
    port: int = 8000
    watch_path: Optional[str] = None   # Source folder for live reload, relative to the root


@dataclass
class WatchState:
    folder: Path
    fingerprint: Optional[str] = None  # None until the first sample
    status: WatchStatus = WatchStatus.IDLE
