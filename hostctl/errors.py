"""
hostctl 异常定义
"""

from typing import Optional


class HostctlError(Exception):
    """所有 hostctl 异常的基类"""


class ParseError(HostctlError):
    """
    行解析失败

    属性:
        lineno: 源文件中的行号（从 1 开始），未知时为 None
    """

    def __init__(self, message: str, lineno: Optional[int] = None):
        self.lineno = lineno
        if lineno is not None:
            message = f"第 {lineno} 行条目无效: {message}"
        super().__init__(message)


class ValidationError(HostctlError):
    """
    条目语义无效（IP、主机名、别名或注释不合法）

    属性:
        field: 出错的字段名，例如 "ip_address"、"hostname"、"aliases[2]"
    """

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class RangeError(HostctlError):
    """位置参数超出存储范围"""

    def __init__(self, position: int, size: int):
        self.position = position
        self.size = size
        super().__init__(f"位置超出范围: {position}（当前共 {size} 条）")


class EmptyStoreError(HostctlError):
    """对空存储执行查询"""


class HostsIOError(HostctlError):
    """后端文件的打开、stat、读取或写入失败"""


class BackupError(HostsIOError):
    """写入前读取原文件作为安全备份失败，无法保证回滚"""


class RestoreError(HostsIOError):
    """
    写入失败后恢复原内容也失败，新旧内容可能都已丢失

    属性:
        original: 导致回滚的写入异常
        restore: 恢复时发生的异常
    """

    def __init__(self, original: BaseException, restore: BaseException):
        self.original = original
        self.restore = restore
        super().__init__(
            f"写入 hosts 文件失败: {original}；恢复原内容也失败: {restore}"
        )
