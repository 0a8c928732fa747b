# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import io

from gdrive_upload.workflow import escape_data, format_command, set_failed


def test_escape_data_encodes_runner_delimiters():
    assert escape_data("100% done\r\nnext") == "100%25 done%0D%0Anext"


def test_format_command():
    assert format_command("error", "File x.txt already exists.") == "::error::File x.txt already exists."


def test_set_failed_writes_single_line():
    buf = io.StringIO()
    set_failed("line one\nline two", stream=buf)
    assert buf.getvalue() == "::error::line one%0Aline two\n"


def test_set_failed_defaults_to_stdout(capsys):
    set_failed("boom")
    assert capsys.readouterr().out == "::error::boom\n"
