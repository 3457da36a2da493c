from pdf_reading_order.engine import analyze_document, collect_page_lines, collect_text_lines
from pdf_reading_order.models import Column, Document, Page
from pdf_reading_order.repairs import run_repair_pipeline

from builders import page_from_rows, single_column_rows, texts, two_column_rows


def test_empty_page():
    lines, layout = collect_page_lines(Page(page_index=0, width=612, height=792))
    assert lines == []
    assert not layout.is_multi_column
    assert collect_text_lines(Document()) == []


def test_zero_width_page_reads_top_down():
    page = page_from_rows(two_column_rows(3), width=0)
    result = analyze_document(Document(pages=[page]))
    assert not result.layouts[0].is_multi_column
    assert texts(result.lines) == [
        "left column line 0 of body text right column line 0 of body text",
        "left column line 1 of body text right column line 1 of body text",
        "left column line 2 of body text right column line 2 of body text",
    ]


def test_single_column_page_keeps_reading_order():
    page = page_from_rows(single_column_rows(10))
    lines = collect_text_lines(Document(pages=[page]))
    assert texts(lines) == [f"line {k} of a single column body" for k in range(10)]
    assert all(line.column is None for line in lines)


def test_two_column_page_reads_column_by_column():
    page = page_from_rows(two_column_rows(10))
    result = analyze_document(Document(pages=[page]))
    layout = result.layouts[0]
    assert layout.is_multi_column and layout.row_based and layout.column_major
    assert layout.split_x == 320
    assert result.global_split_x == 320
    assert texts(result.lines) == [f"left column line {k} of body text" for k in range(10)] + [
        f"right column line {k} of body text" for k in range(10)
    ]
    assert [line.column for line in result.lines] == [Column.LEFT] * 10 + [Column.RIGHT] * 10


def test_reference_marker_stays_with_left_column():
    rows = two_column_rows(10) + [(400.0, [("the final results", 72.0), ("[6]", 165.0), ("comparison of methods", 320.0)])]
    lines = collect_text_lines(Document(pages=[page_from_rows(rows)]))
    by_text = {line.text: line for line in lines}
    assert by_text["the final results [6]"].column is Column.LEFT
    assert by_text["comparison of methods"].column is Column.RIGHT


def test_numbered_headings_read_in_order():
    rows = [(700.0, [("2. Methods", 72.0)])]
    rows += two_column_rows(8, top=600)
    rows += [(450.0, [("2.2 Data", 320.0)]), (440.0, [("2.1 Setup", 72.0)])]
    rows += two_column_rows(7, top=420)
    order = texts(collect_text_lines(Document(pages=[page_from_rows(rows)])))
    assert order.index("2. Methods") < order.index("2.1 Setup") < order.index("2.2 Data")


def test_every_line_emitted_once_across_pages():
    pages = [
        page_from_rows(single_column_rows(6), page_index=0),
        page_from_rows(two_column_rows(10), page_index=1),
    ]
    result = analyze_document(Document(pages=pages))
    assert len(result.lines) == 26
    assert len({(line.page_index, line.text) for line in result.lines}) == 26
    assert [line.page_index for line in result.lines] == [0] * 6 + [1] * 20
    assert not result.layouts[0].is_multi_column
    assert result.layouts[1].is_multi_column


def test_repairs_are_stable_on_engine_output():
    result = analyze_document(Document(pages=[page_from_rows(two_column_rows(10))]))
    assert run_repair_pipeline(result.lines, result.layouts) == result.lines
