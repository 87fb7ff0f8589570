"""
hosts 文件行分词模块
"""

import re
from typing import List, Union

# 行首尾只裁剪水平空白
HORIZONTAL_WHITESPACE = " \t"
COMMENT_PREFIX = "#"

_FIELD = re.compile(r"\S+")


def to_text(line: Union[str, bytes]) -> str:
    """将原始行转换为去掉行终止符的文本"""
    if isinstance(line, bytes):
        line = line.decode("utf-8")
    return line.rstrip("\r\n")


def tokenize(line: Union[str, bytes]) -> List[str]:
    """
    将一行原始文本拆分为字段序列

    字段按空白分隔。一旦某个字段以 '#' 开头，该字段及其后的全部内容
    （保留内部空白）合并为一个注释字段，不再继续拆分。

    参数:
        line: 原始行（str 或 UTF-8 bytes）

    返回:
        字段列表；空行或仅含空白的行返回空列表
    """
    text = to_text(line).strip(HORIZONTAL_WHITESPACE)

    tokens: List[str] = []
    for match in _FIELD.finditer(text):
        if match.group().startswith(COMMENT_PREFIX):
            tokens.append(text[match.start():].rstrip())
            break
        tokens.append(match.group())

    return tokens
