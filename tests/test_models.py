"""条目模型与校验测试"""

import io
import ipaddress

import pytest

from hostctl.errors import ParseError, ValidationError
from hostctl.models import (
    HostEntry,
    is_comment,
    is_valid_name,
    new_host_entry,
    parse_host_entry_line,
)


class TestNameRules:
    """验证名称语法与注释识别"""

    @pytest.mark.parametrize("name", ["localhost", "host_one", "a.b-c", "X9"])
    def test_valid_names(self, name: str) -> None:
        assert is_valid_name(name)

    @pytest.mark.parametrize("name", ["", "bad/host", "with space", "#foo", "ü"])
    def test_invalid_names(self, name: str) -> None:
        assert not is_valid_name(name)

    def test_is_comment_trims_first(self) -> None:
        assert is_comment("  # note")
        assert not is_comment("note #")
        assert not is_comment(None)


class TestNewHostEntry:
    """验证由字段值构造条目"""

    def test_alias_without_comment(self) -> None:
        """空注释不输出注释字段"""
        entry = new_host_entry("127.0.0.1", "localhost", "", "loopback")
        assert entry.canonical_line == "127.0.0.1\tlocalhost\tloopback"
        assert entry.to_hosts_text() == "127.0.0.1\tlocalhost\tloopback\r\n"

    def test_plain_comment_gets_prefix(self) -> None:
        entry = new_host_entry("127.0.0.1", "localhost", "loopback addr")
        assert entry.comment == "# loopback addr"
        assert entry.canonical_line == "127.0.0.1\tlocalhost\t# loopback addr"

    def test_all_fields(self) -> None:
        entry = new_host_entry("10.0.0.1", "web", "#prod", "www", "api")
        assert entry.canonical_line == "10.0.0.1\tweb\twww api\t#prod"
        assert entry.ip_address == ipaddress.ip_address("10.0.0.1")
        assert not entry.is_comment_only

    def test_ipv6(self) -> None:
        entry = new_host_entry("::1", "localhost6")
        assert entry.canonical_line == "::1\tlocalhost6"

    def test_invalid_ip(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            new_host_entry("999.1.1.1", "host")
        assert excinfo.value.field == "ip_address"

    def test_invalid_hostname(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            new_host_entry("1.1.1.1", "bad/host")
        assert excinfo.value.field == "hostname"

    def test_invalid_alias_reports_index(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            new_host_entry("1.1.1.1", "host", "", "ok", "bad/alias")
        assert excinfo.value.field == "aliases[2]"


class TestValidate:
    """验证直接构造的条目"""

    def test_comment_only_entry(self) -> None:
        entry = HostEntry(is_comment_only=True, comment="# just a note")
        entry.validate()
        assert entry.is_comment_only
        assert entry.canonical_line == "# just a note"

    def test_comment_only_requires_hash(self) -> None:
        entry = HostEntry(is_comment_only=True, comment="just a note")
        with pytest.raises(ValidationError):
            entry.validate()

    def test_empty_entry_is_invalid(self) -> None:
        with pytest.raises(ValidationError):
            HostEntry().validate()

    @pytest.mark.parametrize("ip", ["1.1.1.1", None, "garbage"])
    def test_hostname_comment_rejected(self, ip) -> None:
        """主机名像注释时无论 IP 是否有效都失败"""
        entry = HostEntry(ip_address=ip, hostname="#foo", comment="# c")
        with pytest.raises(ValidationError) as excinfo:
            entry.validate()
        assert excinfo.value.field == "hostname"

    @pytest.mark.parametrize("ip", ["1.1.1.1", None])
    def test_alias_comment_rejected(self, ip) -> None:
        entry = HostEntry(ip_address=ip, hostname="host", aliases=["a1", "#foo"])
        with pytest.raises(ValidationError) as excinfo:
            entry.validate()
        assert excinfo.value.field == "aliases[2]"

    def test_missing_hostname(self) -> None:
        entry = HostEntry(ip_address="1.1.1.1")
        with pytest.raises(ValidationError) as excinfo:
            entry.validate()
        assert excinfo.value.field == "hostname"

    def test_trailing_comment_must_be_comment_shaped(self) -> None:
        entry = HostEntry(ip_address="1.1.1.1", hostname="host", comment="note")
        with pytest.raises(ValidationError) as excinfo:
            entry.validate()
        assert excinfo.value.field == "comment"

    def test_canonical_line_recomputed_after_mutation(self) -> None:
        entry = new_host_entry("1.1.1.1", "host")
        entry.aliases.append("h")
        entry.validate()
        assert entry.canonical_line == "1.1.1.1\thost\th"

    def test_header_emitted_before_line(self) -> None:
        entry = HostEntry(ip_address="1.1.1.1", hostname="host", header=["# one", "# two"])
        assert entry.to_hosts_text() == "# one\r\n# two\r\n1.1.1.1\thost\r\n"

    def test_header_given_as_text(self) -> None:
        """字符串形式的头部按行拆分，而不是逐字符处理"""
        entry = HostEntry(ip_address="1.1.1.1", hostname="host", header="# one\n# two")
        assert entry.to_hosts_text() == "# one\r\n# two\r\n1.1.1.1\thost\r\n"
        assert entry.header == ["# one", "# two"]

    def test_header_must_be_comments(self) -> None:
        entry = HostEntry(ip_address="1.1.1.1", hostname="host", header=["oops"])
        with pytest.raises(ValidationError) as excinfo:
            entry.validate()
        assert excinfo.value.field == "header"

    def test_write_returns_byte_count(self) -> None:
        sink = io.BytesIO()
        entry = new_host_entry("1.1.1.1", "host")
        count = entry.write(sink)
        assert sink.getvalue() == b"1.1.1.1\thost\r\n"
        assert count == len(sink.getvalue())


class TestParseHostEntryLine:
    """验证行解析"""

    def test_full_mapping_line(self) -> None:
        entry = parse_host_entry_line("1.1.1.1   host_one  h1 h2   #  first  one ")
        assert str(entry.ip_address) == "1.1.1.1"
        assert entry.hostname == "host_one"
        assert entry.aliases == ["h1", "h2"]
        assert entry.comment == "#  first  one"
        assert entry.canonical_line == "1.1.1.1\thost_one\th1 h2\t#  first  one"

    def test_canonicalization_is_idempotent(self) -> None:
        first = parse_host_entry_line("  ::1 \t ip6-localhost ip6-loopback # v6 ")
        second = parse_host_entry_line(first.canonical_line)
        assert second.canonical_line == first.canonical_line
        assert second == first

    def test_bytes_line(self) -> None:
        entry = parse_host_entry_line(b"2.2.2.2\thost_two\r\n")
        assert entry.canonical_line == "2.2.2.2\thost_two"

    def test_comment_line(self) -> None:
        entry = parse_host_entry_line("  # a comment line")
        assert entry.is_comment_only
        assert entry.ip_address is None
        assert entry.canonical_line == "# a comment line"

    def test_comment_right_after_hostname(self) -> None:
        entry = parse_host_entry_line("1.1.1.1 host #c")
        assert entry.aliases == []
        assert entry.canonical_line == "1.1.1.1\thost\t#c"

    @pytest.mark.parametrize("line", ["", "   ", "\t"])
    def test_empty_line(self, line: str) -> None:
        with pytest.raises(ParseError):
            parse_host_entry_line(line)

    def test_invalid_ip_is_parse_error(self) -> None:
        """无效 IP 不会被降级为注释"""
        with pytest.raises(ParseError):
            parse_host_entry_line("not-an-ip host")

    def test_invalid_hostname_token(self) -> None:
        with pytest.raises(ParseError):
            parse_host_entry_line("1.1.1.1 bad/host")

    def test_invalid_alias_token(self) -> None:
        with pytest.raises(ParseError):
            parse_host_entry_line("1.1.1.1 host ok bad!alias")

    def test_ip_without_hostname(self) -> None:
        with pytest.raises(ValidationError):
            parse_host_entry_line("1.1.1.1")
