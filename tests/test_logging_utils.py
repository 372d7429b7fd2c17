from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from watchlink.logging_utils import (
    LogBlockBuilder,
    _items,
    _to_text,
    configure_logging,
    render_fields_block,
    render_section_block,
)


class TestHelpers:
    def test_items_accepts_mapping_and_sequence(self):
        assert _items({"a": 1}) == [("a", 1)]
        assert _items([("z", 1), ("a", 2)]) == [("z", 1), ("a", 2)]

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, ""),
            ("  padded  ", "padded"),
            (["tt1", "tt2"], "tt1, tt2"),
            (42, "42"),
        ],
    )
    def test_to_text(self, value, expected):
        assert _to_text(value) == expected


class TestLogBlockBuilder:
    def test_title_is_underlined(self):
        builder = LogBlockBuilder("Symlink Created", pad_top=False)

        assert builder.render() == "Symlink Created\n---------------"

    def test_pad_top_adds_blank_line(self):
        assert render_fields_block("Title", {}).startswith("\nTitle")

    def test_fields_are_aligned(self):
        block = render_fields_block("Matched Movies", {"Count": 2, "IDs": ["tt1", "tt2"]}, pad_top=False)
        lines = block.splitlines()

        assert lines[2] == "    Count   : 2"
        assert lines[3] == "    IDs     : tt1, tt2"

    def test_long_values_wrap(self):
        block = render_fields_block("Title", {"Source": "x " * 120}, pad_top=False)

        assert len(block.splitlines()) > 3

    def test_empty_section_uses_placeholder(self):
        block = render_section_block("Processing Completed", [("Failures", [])], pad_top=False)

        assert "Failures:" in block
        assert "(none)" in block

    def test_section_lists_bullets_after_fields(self):
        block = render_section_block(
            "Processing Completed",
            [("Created", ["/out/Alpha", "/out/Delta"])],
            fields={"Outcome": "completed"},
            pad_top=False,
        )

        lines = block.splitlines()
        assert lines[2].strip() == "Outcome : completed"
        assert "    - /out/Alpha" in lines
        assert "    - /out/Delta" in lines


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers = list(root.handlers)
        level = root.level
        yield
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)

    def test_installs_single_rich_handler(self):
        configure_logging(logging.INFO)
        configure_logging(logging.INFO)

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RichHandler)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_log_file_receives_debug_output(self, tmp_path):
        log_file = tmp_path / "logs" / "watchlink.log"
        configure_logging(logging.INFO, log_file=log_file)

        logging.getLogger("watchlink.test").debug("detail line")
        for handler in logging.getLogger().handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "detail line" in text
        assert "watchlink.test" in text
