#!/usr/bin/env python3
"""
hostctl - 主入口点

查看和编辑 hosts 文件条目，文件路径与日志级别从环境变量读取。
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# 将当前目录添加到路径以导入 hostctl 模块
sys.path.insert(0, str(Path(__file__).parent))

from hostctl import Config, HostCtl, HostctlError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hostctl", description="hosts 文件管理")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="列出全部条目")

    add = commands.add_parser("add", help="添加映射")
    add.add_argument("ip")
    add.add_argument("hostname")
    add.add_argument("aliases", nargs="*")
    add.add_argument("--comment", default="")
    add.add_argument("--position", type=int, default=-1)

    delete = commands.add_parser("delete", help="删除指定位置的条目")
    delete.add_argument("position", type=int)

    find = commands.add_parser("find", help="按 IP、主机名或别名查找")
    group = find.add_mutually_exclusive_group(required=True)
    group.add_argument("--ip")
    group.add_argument("--hostname")
    group.add_argument("--alias")
    find.add_argument("--all", action="store_true", help="返回全部匹配")

    imp = commands.add_parser("import", help="从另一个 hosts 文件导入全部条目")
    imp.add_argument("source")

    return parser


def print_entries(entries) -> None:
    for entry in entries:
        print(f"{entry.position}\t{entry.canonical_line}")


def main(argv: Optional[List[str]] = None) -> None:
    """主入口点"""
    args = build_parser().parse_args(argv)

    # 从环境变量加载配置
    config = Config.from_env()

    try:
        hostctl = HostCtl(config)
    except (HostctlError, ValueError) as e:
        print(f"初始化 hostctl 失败: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "list":
            print_entries(hostctl.list_entries())
        elif args.command == "add":
            hostctl.add_entry(args.ip, args.hostname, args.aliases, args.comment, args.position)
        elif args.command == "delete":
            hostctl.delete_entry(args.position)
        elif args.command == "find":
            print_entries(hostctl.find(args.ip, args.hostname, args.alias, find_all=args.all))
        elif args.command == "import":
            hostctl.import_from(args.source)
    except HostctlError as e:
        hostctl.logger.error(f"{args.command} 失败: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
