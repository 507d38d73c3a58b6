"""Estadísticas por stream, para logs."""

from __future__ import annotations


class StreamStats:
    """Contadores de un PayloadStream."""

    def __init__(self):
        self.pulls = 0
        self.payloads = 0
        self.timeouts = 0
        self.errors = 0

    def __str__(self) -> str:
        return (
            f"Stats: pulls={self.pulls} payloads={self.payloads} "
            f"timeouts={self.timeouts} errors={self.errors}"
        )
