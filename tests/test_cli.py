import json

from pdf_reading_order.cli import build_arg_parser, config_from_args, main

from builders import two_column_rows


def _write_document(tmp_path):
    fragments = [
        {"text": text, "x": x, "y": y, "fontSize": 10}
        for y, items in two_column_rows(10)
        for text, x in items
    ]
    path = tmp_path / "doc.json"
    path.write_text(
        json.dumps({"pages": [{"pageIndex": 0, "width": 612, "height": 792, "fragments": fragments}]}),
        encoding="utf-8",
    )
    return path


def test_text_output_with_column_markers(tmp_path):
    doc = _write_document(tmp_path)
    out = tmp_path / "out.txt"
    assert main([str(doc), "-o", str(out), "--show-columns"]) == 0
    content = out.read_text(encoding="utf-8")
    assert "=== PAGE 1 ===" in content
    body = [line for line in content.splitlines() if line.startswith("[")]
    assert body[0] == "[L] left column line 0 of body text"
    assert body[10] == "[R] right column line 0 of body text"
    assert len(body) == 20


def test_json_output(tmp_path):
    doc = _write_document(tmp_path)
    out = tmp_path / "out.json"
    assert main([str(doc), "-o", str(out), "--format", "json"]) == 0
    records = json.loads(out.read_text(encoding="utf-8"))
    assert len(records) == 20
    assert records[0]["column"] == "left"
    assert records[-1]["column"] == "right"
    assert records[0]["pageIndex"] == 0


def test_stdout_output(tmp_path, capsys):
    doc = _write_document(tmp_path)
    assert main([str(doc), "-o", "-", "--double-newline"]) == 0
    captured = capsys.readouterr()
    assert "left column line 9 of body text\n\nright column line 0 of body text" in captured.out


def test_missing_input_reports_error(tmp_path, capsys):
    assert main([str(tmp_path / "missing.pdf"), "-o", str(tmp_path / "out.txt")]) == 1
    assert "Error:" in capsys.readouterr().err


def test_config_from_args():
    args = build_arg_parser().parse_args(["in.pdf", "--bucket-size", "3", "--min-column-gap", "90"])
    config = config_from_args(args)
    assert config.bucket_size == 3
    assert config.min_column_gap == 90
    assert config.heading_lookahead == 18
