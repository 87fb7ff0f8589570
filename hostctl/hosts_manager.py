"""
Hosts 文件管理模块：有序条目存储、序列化与带回滚的同步
"""

import copy
import os
import threading
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, List, Optional, Union

from hostctl.errors import (
    BackupError,
    EmptyStoreError,
    HostsIOError,
    ParseError,
    RangeError,
    RestoreError,
    ValidationError,
)
from hostctl.locks import ReadWriteLock
from hostctl.models import HostEntry, is_comment, parse_host_entry_line, parse_ip
from hostctl.tokenizer import to_text

DEFAULT_FILE_MODE = 0o644

PathLike = Union[str, Path]


def load_entries(lines: Iterable[Union[str, bytes]]) -> List[HostEntry]:
    """
    将行序列解析为条目列表

    空行被跳过；连续的注释行累积为下一个映射条目的头部。
    文件末尾没有后续条目的注释行会被丢弃。

    参数:
        lines: 原始行（str 或 bytes）

    返回:
        位置已按顺序分配的条目列表

    异常:
        ParseError: 任意一行无效，带 1 起始的行号
    """
    entries: List[HostEntry] = []
    pending_header: List[str] = []

    for lineno, raw in enumerate(lines, start=1):
        try:
            text = to_text(raw).strip()
        except UnicodeDecodeError as e:
            raise ParseError(f"无法解码: {e}", lineno=lineno) from e

        if not text:
            continue

        if is_comment(text):
            pending_header.append(text)
            continue

        try:
            entry = parse_host_entry_line(text)
        except (ParseError, ValidationError) as e:
            raise ParseError(str(e), lineno=lineno) from e

        entry.header = pending_header
        pending_header = []
        entry.position = len(entries)
        entries.append(entry)

    return entries


def _open_for_write(path: Path, mode: int) -> BinaryIO:
    """截断并以二进制写方式打开文件，新建时使用给定权限"""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    return os.fdopen(fd, "wb")


class HostsFileManager:
    """
    hosts 条目的有序存储

    线程安全：增删与加载持有写锁，查询、序列化与同步持有读锁，
    同步另外由 sync_lock 串行化。
    每次结构变更后所有条目的 position 重新计算为 0..n-1，
    调用方不应跨变更缓存 position。
    """

    def __init__(
        self,
        hosts_path: Optional[PathLike] = None,
        entries: Optional[Iterable[HostEntry]] = None,
        read_only: bool = False,
    ):
        """
        初始化存储

        参数:
            hosts_path: 后端文件路径；为 None 时存储不能同步到磁盘
            entries: 初始条目，逐个校验并复制
            read_only: 只读存储拒绝 sync()

        异常:
            ValidationError: 初始条目无效
        """
        self.hosts_path = Path(hosts_path) if hosts_path is not None else None
        self.read_only = read_only
        self.lock = ReadWriteLock()
        self.sync_lock = threading.Lock()

        self._entries: List[HostEntry] = []
        for entry in entries or []:
            entry = copy.deepcopy(entry)
            entry.validate()
            self._entries.append(entry)
        self._update_positions()

    @classmethod
    def open(cls, hosts_path: PathLike, read_only: bool = False) -> "HostsFileManager":
        """
        从文件构造存储

        可写模式下文件不存在时以 0644 权限创建；只读模式下不创建。

        异常:
            HostsIOError: 无法打开或读取文件
            ParseError: 文件中有无效行
        """
        manager = cls(hosts_path, read_only=read_only)
        if not read_only:
            manager._ensure_exists()
        manager.reload()
        return manager

    @classmethod
    def read(cls, stream: Iterable[Union[str, bytes]], hosts_path: Optional[PathLike] = None) -> "HostsFileManager":
        """
        从内存中的字节流（或任意行迭代器）构造存储

        也接受整段 str/bytes 文本。

        异常:
            ParseError: 流中有无效行
        """
        if isinstance(stream, (str, bytes)):
            stream = stream.splitlines()

        manager = cls(hosts_path)
        with manager.lock.write_locked():
            manager._entries = load_entries(stream)
        return manager

    def _ensure_exists(self) -> None:
        try:
            mode = DEFAULT_FILE_MODE
            if self.hosts_path.exists():
                mode = self.hosts_path.stat().st_mode & 0o7777
            fd = os.open(self.hosts_path, os.O_CREAT | os.O_RDWR, mode)
            os.close(fd)
        except OSError as e:
            raise HostsIOError(f"打开 hosts 文件失败: {self.hosts_path}: {e}") from e

    def reload(self) -> None:
        """
        重新读取后端文件并整体替换条目

        解析失败时保留当前条目不变。

        异常:
            HostsIOError: 没有后端文件或读取失败
            ParseError: 文件中有无效行
        """
        if self.hosts_path is None:
            raise HostsIOError("存储没有后端文件")

        with self.sync_lock, self.lock.write_locked():
            try:
                with open(self.hosts_path, "rb") as f:
                    entries = load_entries(f)
            except OSError as e:
                raise HostsIOError(f"读取 hosts 文件失败: {self.hosts_path}: {e}") from e

            self._entries = entries

    def _update_positions(self) -> None:
        for n, entry in enumerate(self._entries):
            entry.position = n

    def __len__(self) -> int:
        with self.lock.read_locked():
            return len(self._entries)

    def add(self, entry: HostEntry, position: int = -1) -> None:
        """
        在指定位置插入条目

        参数:
            entry: 要插入的条目，先校验再复制进存储
            position: -1 或当前长度表示追加，0 表示放在最前，
                其他值表示插入到当前位于该位置的条目之前

        异常:
            ValidationError: 条目无效，存储不变
            RangeError: position 不在 [-1, len] 内
        """
        entry = copy.deepcopy(entry)
        entry.validate()

        with self.lock.write_locked():
            size = len(self._entries)
            if position < -1 or position > size:
                raise RangeError(position, size)

            if position == -1:
                position = size
            self._entries.insert(position, entry)
            self._update_positions()

    def delete(self, position: int) -> None:
        """
        删除指定位置的条目

        参数:
            position: -1 表示最后一个，0 表示第一个，其他值表示该位置

        异常:
            RangeError: position < -1 或 position >= len（空存储上 -1 为无操作）
        """
        with self.lock.write_locked():
            size = len(self._entries)
            if position < -1 or position >= size:
                raise RangeError(position, size)

            if size == 0:
                return

            del self._entries[position]
            self._update_positions()

    def _scan(self, match: Callable[[HostEntry], bool], first_only: bool) -> List[HostEntry]:
        with self.lock.read_locked():
            if not self._entries:
                raise EmptyStoreError("存储中没有条目")

            found = []
            for entry in self._entries:
                if entry.is_comment_only or not match(entry):
                    continue
                found.append(copy.deepcopy(entry))
                if first_only:
                    break
            return found

    def _ip_matcher(self, ip: str) -> Callable[[HostEntry], bool]:
        # 空存储的检查优先于地址格式检查
        with self.lock.read_locked():
            if not self._entries:
                raise EmptyStoreError("存储中没有条目")

        if parse_ip(ip) is None:
            raise ValidationError(f"指定的 IP 地址无效: {ip}", field="ip_address")
        return lambda entry: str(entry.ip_address) == ip

    def get_by_ip(self, ip: str) -> List[HostEntry]:
        """
        按 IP 查找第一个匹配的条目

        返回:
            最多包含一个条目的列表；没有匹配时为空列表

        异常:
            EmptyStoreError: 存储为空
            ValidationError: ip 不是有效地址
        """
        return self._scan(self._ip_matcher(ip), first_only=True)

    def find_all_by_ip(self, ip: str) -> List[HostEntry]:
        """按 IP 查找全部匹配的条目"""
        return self._scan(self._ip_matcher(ip), first_only=False)

    def get_by_hostname(self, hostname: str) -> List[HostEntry]:
        """
        按主机名查找第一个匹配的条目

        异常:
            EmptyStoreError: 存储为空
        """
        return self._scan(lambda entry: entry.hostname == hostname, first_only=True)

    def find_all_by_hostname(self, hostname: str) -> List[HostEntry]:
        return self._scan(lambda entry: entry.hostname == hostname, first_only=False)

    def get_by_alias(self, alias: str) -> List[HostEntry]:
        """
        按别名查找第一个匹配的条目

        异常:
            EmptyStoreError: 存储为空
        """
        return self._scan(lambda entry: alias in entry.aliases, first_only=True)

    def find_all_by_alias(self, alias: str) -> List[HostEntry]:
        return self._scan(lambda entry: alias in entry.aliases, first_only=False)

    def entries(self) -> List[HostEntry]:
        """返回全部条目的副本"""
        with self.lock.read_locked():
            return copy.deepcopy(self._entries)

    def _write_entries(self, sink: BinaryIO) -> int:
        count = 0
        for entry in self._entries:
            count += sink.write(entry.render().encode("utf-8"))
        return count

    def write(self, sink: BinaryIO) -> int:
        """
        将全部条目按顺序写入字节输出

        空存储不写入任何字节。

        返回:
            写入的字节数
        """
        with self.lock.read_locked():
            return self._write_entries(sink)

    def sync(self) -> int:
        """
        将内存中的条目写回后端文件

        写入前先读取原内容作为备份；打开或写入失败时尽力恢复原内容，
        并且无论恢复是否成功都抛出原始失败。

        返回:
            写入的字节数

        异常:
            HostsIOError: 没有后端文件、只读、stat 失败，或写入失败（已回滚）
            BackupError: 无法读取原内容作为备份
            RestoreError: 写入失败且恢复原内容也失败
        """
        if self.hosts_path is None:
            raise HostsIOError("存储没有后端文件，无法同步")
        if self.read_only:
            raise HostsIOError(f"hosts 文件以只读方式打开: {self.hosts_path}")

        # 同一时刻只允许一个同步写文件
        with self.sync_lock, self.lock.read_locked():
            # 1. 获取当前权限
            try:
                mode = self.hosts_path.stat().st_mode & 0o7777
            except OSError as e:
                raise HostsIOError(f"stat hosts 文件失败: {self.hosts_path}: {e}") from e

            # 2. 读取原内容作为备份
            try:
                backup = self.hosts_path.read_bytes()
            except OSError as e:
                raise BackupError(f"读取原文件以创建备份失败: {self.hosts_path}: {e}") from e

            # 3. 截断写入
            try:
                with _open_for_write(self.hosts_path, mode) as f:
                    return self._write_entries(f)

            except Exception as e:
                # 4. 出错时恢复原内容
                try:
                    with _open_for_write(self.hosts_path, mode) as f:
                        f.write(backup)
                except OSError as restore_error:
                    raise RestoreError(e, restore_error) from e

                raise HostsIOError(f"写入 hosts 文件失败，已恢复原内容: {self.hosts_path}: {e}") from e
