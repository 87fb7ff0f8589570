"""
hostctl 数据模型：hosts 文件条目及其校验
"""

import ipaddress
import re
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional, Union

from hostctl.errors import ParseError, ValidationError
from hostctl.tokenizer import COMMENT_PREFIX, tokenize

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

# 主机名与别名的合法字符
NAME_PATTERN = re.compile(r"[A-Za-z0-9._-]+")

# hosts 文件消费方兼容的行终止符
LINE_TERMINATOR = "\r\n"


def normalize(item: Optional[str]) -> str:
    """去掉首尾空白，None 视为空串"""
    if not item:
        return ""
    return item.strip()


def is_comment(item: Optional[str]) -> bool:
    """裁剪后以 '#' 开头即视为注释"""
    return normalize(item).startswith(COMMENT_PREFIX)


def is_valid_name(name: Optional[str]) -> bool:
    """主机名/别名必须是非空的 [A-Za-z0-9._-] 串"""
    return NAME_PATTERN.fullmatch(normalize(name)) is not None


def parse_ip(value: Union[str, IPAddress, None]) -> Optional[IPAddress]:
    """
    解析 IPv4/IPv6 地址

    返回:
        解析后的地址对象；None、空串或无效地址返回 None
    """
    if value is None:
        return None
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    try:
        return ipaddress.ip_address(normalize(value))
    except ValueError:
        return None


@dataclass
class HostEntry:
    """
    代表 hosts 文件中的一个逻辑行

    属性:
        ip_address: IP 地址（v4 或 v6），纯注释行为 None
        hostname: 规范主机名
        aliases: 按优先级排列的别名
        comment: 行尾注释；纯注释行时为整行注释
        header: 紧邻该条目之前的注释行，写出时放在条目前
        position: 条目在存储中的位置，由存储在每次变更后重新计算
        is_comment_only: 该行是否只是注释，由 validate() 计算
        canonical_line: 规范化后的行文本，由 validate() 计算，不要手动修改
    """

    ip_address: Union[str, IPAddress, None] = None
    hostname: str = ""
    aliases: List[str] = field(default_factory=list)
    comment: str = ""
    header: List[str] = field(default_factory=list)
    position: int = field(default=-1, compare=False)
    is_comment_only: bool = False
    canonical_line: str = field(default="", compare=False)

    def validate(self) -> None:
        """
        校验条目并重新计算 is_comment_only 与 canonical_line

        异常:
            ValidationError: 条目既不是合法的纯注释行，也不是合法的映射行
        """
        self.hostname = normalize(self.hostname)
        self.aliases = [normalize(alias) for alias in (self.aliases or [])]
        self.comment = normalize(self.comment)
        if isinstance(self.header, str):
            self.header = self.header.splitlines()
        self.header = [normalize(line) for line in (self.header or [])]

        for line in self.header:
            if not is_comment(line):
                raise ValidationError(f"头部注释行必须以 '#' 开头: {line}", field="header")

        if is_comment(self.hostname):
            raise ValidationError(f"主机名不能是注释: {self.hostname}", field="hostname")

        for n, alias in enumerate(self.aliases, start=1):
            if is_comment(alias):
                raise ValidationError(f"别名 {n} 不能是注释: {alias}", field=f"aliases[{n}]")

        ip = parse_ip(self.ip_address)

        # 纯注释行
        if ip is None and not is_valid_name(self.hostname) and not self.aliases and is_comment(self.comment):
            self.ip_address = None
            self.is_comment_only = True
            self.canonical_line = self.comment
            return

        if ip is None:
            raise ValidationError(f"没有有效的 IP 地址: {self.ip_address!r}", field="ip_address")

        if not is_valid_name(self.hostname):
            raise ValidationError(f"缺少主机名或主机名无效: {self.hostname!r}", field="hostname")

        for n, alias in enumerate(self.aliases, start=1):
            if not is_valid_name(alias):
                raise ValidationError(f"别名 {n} 无效: {alias!r}", field=f"aliases[{n}]")

        if self.comment and not is_comment(self.comment):
            raise ValidationError(f"行尾注释必须以 '#' 开头: {self.comment}", field="comment")

        self.ip_address = ip
        self.is_comment_only = False

        fields = [str(ip), self.hostname]
        if self.aliases:
            fields.append(" ".join(self.aliases))
        if self.comment:
            fields.append(self.comment)
        self.canonical_line = "\t".join(fields)

    def to_hosts_text(self) -> str:
        """
        转换为 hosts 文件文本

        格式: [头部注释行\\r\\n...]<规范行>\\r\\n

        返回:
            以 CRLF 结尾的文本
        """
        self.validate()
        return self.render()

    def render(self) -> str:
        """按已计算的头部与规范行输出文本，不重新校验"""
        lines = self.header + [self.canonical_line]
        return "".join(line + LINE_TERMINATOR for line in lines)

    def write(self, sink: BinaryIO) -> int:
        """将条目写入字节输出，返回写入的字节数"""
        return sink.write(self.to_hosts_text().encode("utf-8"))

    def __str__(self) -> str:
        if self.is_comment_only:
            return self.comment
        names = " ".join([self.hostname] + self.aliases)
        return f"{names} -> {self.ip_address}"


def parse_host_entry_line(line: Union[str, bytes]) -> HostEntry:
    """
    将一行 hosts 文本解析为条目

    参数:
        line: 原始行（str 或 UTF-8 bytes）

    返回:
        已校验的 HostEntry

    异常:
        ParseError: 空行，或 IP/主机名/别名字段格式错误
        ValidationError: 字段格式正确但条目整体无效（例如只有 IP 没有主机名）
    """
    if not line:
        raise ParseError("无效的行: 空行")

    tokens = tokenize(line)
    if not tokens:
        raise ParseError(f"未解析到任何字段: {line!r}")

    entry = HostEntry()
    for n, token in enumerate(tokens):
        # 之后的全部内容都属于注释
        if token.startswith(COMMENT_PREFIX):
            entry.comment = token
            break

        if n == 0:
            ip = parse_ip(token)
            if ip is None:
                raise ParseError(f"无效的 IP 地址: {token}")
            entry.ip_address = ip
        elif n == 1:
            if not is_valid_name(token):
                raise ParseError(f"无效的主机名: {token}")
            entry.hostname = token
        else:
            if not is_valid_name(token):
                raise ParseError(f"无效的别名: {token}")
            entry.aliases.append(token)

    entry.validate()
    return entry


def new_host_entry(ip_address: str, hostname: str, comment: str = "", *aliases: str) -> HostEntry:
    """
    由字段值构造条目

    不以 '#' 开头的非空注释会自动加上 "# " 前缀。

    参数:
        ip_address: IP 地址字符串
        hostname: 主机名
        comment: 行尾注释，可为空
        aliases: 别名

    返回:
        已校验的 HostEntry

    异常:
        ValidationError: 字段无效
    """
    comment = normalize(comment)
    if comment and not comment.startswith(COMMENT_PREFIX):
        comment = f"{COMMENT_PREFIX} {comment}"

    entry = HostEntry(
        ip_address=ip_address,
        hostname=hostname,
        aliases=list(aliases),
        comment=comment,
    )
    entry.validate()
    return entry
