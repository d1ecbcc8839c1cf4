"""
Runtime utilities (host guards, external command execution).
"""
from vyprovision.runtime.guards import detect_server_ip, require_root
from vyprovision.runtime.shell import CommandRunner

__all__ = [
    "CommandRunner",
    "detect_server_ip",
    "require_root",
]
