"""
hostctl - 保留格式的 hosts 文件读写与增删查
"""

__version__ = "1.0.0"
__author__ = "hostctl Project"

from hostctl.app import HostCtl
from hostctl.config import Config
from hostctl.errors import (
    BackupError,
    EmptyStoreError,
    HostctlError,
    HostsIOError,
    ParseError,
    RangeError,
    RestoreError,
    ValidationError,
)
from hostctl.hosts_manager import HostsFileManager
from hostctl.models import HostEntry, new_host_entry, parse_host_entry_line
from hostctl.tokenizer import tokenize

__all__ = [
    "HostCtl",
    "Config",
    "HostsFileManager",
    "HostEntry",
    "new_host_entry",
    "parse_host_entry_line",
    "tokenize",
    "HostctlError",
    "ParseError",
    "ValidationError",
    "RangeError",
    "EmptyStoreError",
    "HostsIOError",
    "BackupError",
    "RestoreError",
]
