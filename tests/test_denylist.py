"""
Denylist loader tests

Tests YAML loading and validation of extra denylist rows.
"""

import pytest

from texguard.lib.denylist import DenylistError, DenylistEntry, denylist_load
from texguard.lib.validator import validate
from texguard.models import ArgFormat, DenyAction, DirectiveSpec, argformat_decode


class TestLoad:
    """Test loading rows from YAML files"""

    def test_rows_loaded_in_order(self, tmp_path):
        """Rows keep file order and their fields"""
        path = tmp_path / "denylist.yaml"
        path.write_text(
            "denylist:\n"
            "  - name: '\\special'\n"
            "    nargs: 1\n"
            "  - name: '\\let'\n"
            "    nargs: 2\n"
            "    format: [alpha, alpha]\n"
            "    action: abort\n"
        )
        rows = denylist_load(path)
        assert [row.name for row in rows] == [r"\special", r"\let"]
        assert rows[0].nargs == 1
        assert rows[0].action == DenyAction.APPLY
        assert rows[1].arg_formats == (ArgFormat.ALPHA, ArgFormat.ALPHA)
        assert rows[1].action == DenyAction.ABORT

    def test_integer_format_code(self, tmp_path):
        """An integer format is read digit by digit"""
        path = tmp_path / "denylist.yaml"
        path.write_text("denylist:\n  - name: '\\mydef'\n    nargs: 2\n    format: 20\n")
        rows = denylist_load(path)
        assert rows[0].arg_formats == (ArgFormat.UNTIL_BRACE, ArgFormat.LATEX)

    def test_loaded_rows_validate(self, tmp_path):
        """Loaded rows neutralize like built-in ones"""
        path = tmp_path / "denylist.yaml"
        path.write_text("denylist:\n  - name: '\\special'\n    nargs: 1\n    display: 'nope'\n")
        rows = denylist_load(path)
        assert validate(r"a \special{x} b", rows) == 1

    def test_empty_file(self, tmp_path):
        """An empty file has no rows"""
        path = tmp_path / "denylist.yaml"
        path.write_text("")
        assert denylist_load(path) == ()


class TestLoadErrors:
    """Test that bad files raise DenylistError"""

    def test_missing_file(self, tmp_path):
        """A missing file is an error"""
        with pytest.raises(DenylistError, match="not found"):
            denylist_load(tmp_path / "nope.yaml")

    def test_unparsable(self, tmp_path):
        """Broken YAML is an error"""
        path = tmp_path / "denylist.yaml"
        path.write_text("denylist: [\n")
        with pytest.raises(DenylistError, match="Failed to parse"):
            denylist_load(path)

    def test_wrong_layout(self, tmp_path):
        """The top level must be a mapping with a denylist list"""
        path = tmp_path / "denylist.yaml"
        path.write_text("- name: x\n")
        with pytest.raises(DenylistError, match="expected"):
            denylist_load(path)

    @pytest.mark.parametrize("row", [
        "  - nargs: 1\n",
        "  - name: '\\x'\n    nargs: 12\n",
        "  - name: '\\x'\n    format: [bogus]\n    nargs: 1\n",
        "  - name: '\\x'\n    action: explode\n",
        "  - name: '\\x'\n    nargs: 1\n    optional_pos: 4\n",
    ])
    def test_bad_row(self, tmp_path, row):
        """Each invalid row is reported with its index"""
        path = tmp_path / "denylist.yaml"
        path.write_text("denylist:\n" + row)
        with pytest.raises(DenylistError, match="row 1"):
            denylist_load(path)


class TestSelfMatchingRows:
    """Test rows whose replacement would contain the directive again"""

    @pytest.mark.parametrize("row", [
        "  - name: '\\mbox'\n    nargs: 1\n",
        "  - name: '\\underline'\n    nargs: 1\n",
        "  - name: input\n    nargs: 1\n",
        "  - name: '\\foo'\n    display: '\\foo blocked'\n",
    ])
    def test_rejected(self, tmp_path, row):
        """Such rows are reported as invalid"""
        path = tmp_path / "denylist.yaml"
        path.write_text("denylist:\n" + row)
        with pytest.raises(DenylistError, match="own replacement"):
            denylist_load(path)

    def test_longer_control_word_allowed(self):
        """\\text only appears inside \\textbackslash, which is a longer word"""
        spec = DenylistEntry(name=r"\text", nargs=1).spec_make()
        assert spec.name == r"\text"

    def test_ignored_row_allowed(self):
        """IGNORE rows never insert a notice"""
        entry = DenylistEntry(name=r"\mbox", nargs=1, action="ignore")
        assert entry.action == DenyAction.IGNORE


class TestSpecs:
    """Test row construction"""

    def test_entry_to_spec(self):
        """DenylistEntry converts to a DirectiveSpec"""
        spec = DenylistEntry(name=r"\x", nargs=1, optional_pos=0).spec_make()
        assert spec == DirectiveSpec(r"\x", nargs=1, optional_pos=0, arg_formats=(ArgFormat.LATEX,))

    def test_argformat_decode(self):
        """Leftmost digit is the first argument; unknown digits are ALPHA"""
        assert argformat_decode(20, 2) == (ArgFormat.UNTIL_BRACE, ArgFormat.LATEX)
        assert argformat_decode(0, 2) == (ArgFormat.LATEX, ArgFormat.LATEX)
        assert argformat_decode(5, 1) == (ArgFormat.ALPHA,)
        assert argformat_decode(18, 2) == (ArgFormat.ALPHA, ArgFormat.UNTIL_WHITESPACE)

    def test_invalid_spec(self):
        """Bad rows raise ValueError"""
        with pytest.raises(ValueError):
            DirectiveSpec("")
        with pytest.raises(ValueError):
            DirectiveSpec(r"\x", nargs=10)
        with pytest.raises(ValueError):
            DirectiveSpec(r"\x", nargs=1, optional_pos=2)
