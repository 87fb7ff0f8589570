"""
hostctl 主应用模块
"""

import logging
import sys
from typing import List, Optional

from hostctl.config import Config
from hostctl.errors import HostctlError
from hostctl.hosts_manager import HostsFileManager
from hostctl.models import HostEntry, new_host_entry


class HostCtl:
    """
    主应用控制器，协调配置、日志与条目存储

    - 按配置打开 hosts 文件
    - 执行增删查操作并在每次变更后同步到磁盘
    - 负责全部日志输出，核心存储本身不记录日志
    """

    def __init__(self, config: Config):
        """
        初始化应用

        参数:
            config: 应用配置

        异常:
            ValueError: 如果配置无效
            HostctlError: 如果无法打开或解析 hosts 文件
        """
        self.config = config
        self.config.validate()

        self.logger = self._setup_logging()

        mode = "只读" if config.read_only else "读写"
        self.logger.debug(f"正在以{mode}方式打开 hosts 文件: {config.hosts_file_path}")
        try:
            self.hosts_manager = HostsFileManager.open(
                config.hosts_file_path,
                read_only=config.read_only
            )
        except Exception as e:
            self.logger.error(f"打开 hosts 文件失败: {e}")
            raise

        self.logger.debug(f"已加载 {len(self.hosts_manager)} 条主机记录")

    def _setup_logging(self) -> logging.Logger:
        """
        配置日志系统

        返回:
            配置好的日志记录器实例
        """
        logger = logging.getLogger('hostctl')
        logger.setLevel(self.config.log_level)

        # 避免重复的处理器
        if logger.handlers:
            return logger

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(self.config.log_level)

        # 格式: 时间戳 - 名称 - 级别 - 消息
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)

        logger.addHandler(handler)
        return logger

    def _revert(self) -> None:
        """丢弃未能写入磁盘的内存变更，使存储与文件一致"""
        try:
            self.hosts_manager.reload()
        except HostctlError as e:
            self.logger.error(f"重新加载 hosts 文件失败，内存与磁盘可能不一致: {e}")

    def _sync(self) -> int:
        try:
            written = self.hosts_manager.sync()
        except Exception as e:
            self.logger.error(f"同步 hosts 文件失败: {e}")
            raise

        self.logger.debug(f"已写入 {written} 字节到 {self.config.hosts_file_path}")
        return written

    def list_entries(self) -> List[HostEntry]:
        """返回当前全部条目"""
        return self.hosts_manager.entries()

    def add_entry(
        self,
        ip_address: str,
        hostname: str,
        aliases: Optional[List[str]] = None,
        comment: str = "",
        position: int = -1
    ) -> HostEntry:
        """
        添加一条映射并同步到磁盘

        返回:
            新增条目（position 为插入后的位置）
        """
        entry = new_host_entry(ip_address, hostname, comment, *(aliases or []))
        try:
            self.hosts_manager.add(entry, position)
            self._sync()
        except HostctlError:
            self._revert()
            raise

        entries = self.hosts_manager.entries()
        added = entries[-1] if position == -1 else entries[position]
        self.logger.info(f"已添加主机记录: {added} (位置 {added.position})")
        return added

    def delete_entry(self, position: int) -> None:
        """删除指定位置的条目并同步到磁盘"""
        try:
            self.hosts_manager.delete(position)
            self._sync()
        except HostctlError:
            self._revert()
            raise

        self.logger.info(f"已删除位置 {position} 的主机记录")

    def find(
        self,
        ip_address: Optional[str] = None,
        hostname: Optional[str] = None,
        alias: Optional[str] = None,
        find_all: bool = False
    ) -> List[HostEntry]:
        """
        按 IP、主机名或别名查找条目，只能指定其中一个

        参数:
            find_all: 返回全部匹配，而不是第一个
        """
        criteria = [c for c in (ip_address, hostname, alias) if c is not None]
        if len(criteria) != 1:
            raise ValueError("必须且只能指定 ip_address、hostname、alias 中的一个")

        manager = self.hosts_manager
        if ip_address is not None:
            lookup = manager.find_all_by_ip if find_all else manager.get_by_ip
            return lookup(ip_address)
        if hostname is not None:
            lookup = manager.find_all_by_hostname if find_all else manager.get_by_hostname
            return lookup(hostname)
        lookup = manager.find_all_by_alias if find_all else manager.get_by_alias
        return lookup(alias)

    def import_from(self, source_path: str) -> int:
        """
        将另一个 hosts 文件的全部条目追加到当前文件并同步

        返回:
            导入的条目数
        """
        source = HostsFileManager.open(source_path, read_only=True)
        entries = source.entries()
        try:
            for entry in entries:
                self.hosts_manager.add(entry, -1)
            self._sync()
        except HostctlError:
            self._revert()
            raise

        self.logger.info(f"已从 {source_path} 导入 {len(entries)} 条主机记录")
        return len(entries)
