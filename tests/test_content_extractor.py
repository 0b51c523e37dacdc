import base64
import pytest
from conftest import make_docx, make_pdf, make_xlsx
from insightflow.core.exceptions import ExtractionError
from insightflow.models.schemas import FileCategory
from insightflow.services.content_extractor import (
    TRUNCATION_MARKER,
    classify_file,
    resolve_mime_type,
    truncate_text
)


def test_truncate_text_appends_marker_after_cap():
    text = "x" * 2500
    result = truncate_text(text, 2000)
    assert len(result) == 2000 + len(TRUNCATION_MARKER)
    assert result.endswith(TRUNCATION_MARKER)


def test_truncate_text_keeps_short_text():
    assert truncate_text("short", 2000) == "short"
    assert truncate_text("x" * 2000, 2000) == "x" * 2000


@pytest.mark.parametrize("filename,mime_type,expected", [
    ("photo.png", "image/png", FileCategory.IMAGE),
    ("report.xlsx", "application/octet-stream", FileCategory.SPREADSHEET),
    ("legacy.xls", "application/vnd.ms-excel", FileCategory.SPREADSHEET),
    ("scan.pdf", "application/pdf", FileCategory.DOCUMENT),
    ("no_extension", "application/pdf", FileCategory.DOCUMENT),
    ("memo.docx", "application/octet-stream", FileCategory.WORD),
    ("sales.csv", "text/csv", FileCategory.TEXT),
    ("notes.md", "text/markdown", FileCategory.TEXT),
])
def test_classify_file(filename, mime_type, expected):
    assert classify_file(filename, mime_type) == expected


def test_resolve_mime_type_guesses_from_extension():
    assert resolve_mime_type("chart.png", None) == "image/png"
    assert resolve_mime_type("chart.png", "application/octet-stream") == "image/png"
    assert resolve_mime_type("data.csv", "text/csv") == "text/csv"
    assert resolve_mime_type("unknown.zzz", None) == "application/octet-stream"


@pytest.mark.asyncio
async def test_plain_text_is_not_modified(extractor):
    uploaded = await extractor.extract("sales.txt", b"Revenue: 100, 200, 150", "text/plain")
    assert uploaded.content == "Revenue: 100, 200, 150"
    assert uploaded.category == FileCategory.TEXT
    assert uploaded.name == "sales.txt"
    assert uploaded.id


@pytest.mark.asyncio
async def test_long_plain_text_is_not_capped(extractor):
    data = ("a" * 10000).encode()
    uploaded = await extractor.extract("big.txt", data, "text/plain")
    assert len(uploaded.content) == 10000


@pytest.mark.asyncio
async def test_image_is_base64_without_truncation(extractor):
    data = bytes(range(256)) * 100
    uploaded = await extractor.extract("chart.png", data, "image/png")
    assert uploaded.category == FileCategory.IMAGE
    assert uploaded.mime_type == "image/png"
    assert base64.b64decode(uploaded.content) == data


@pytest.mark.asyncio
async def test_spreadsheet_reads_only_first_sheet(extractor):
    data = make_xlsx({
        "Revenue": [["Month", "Value"], ["Jan", 100], ["Feb", 200]],
        "Costs": [["Month", "Value"], ["Jan", 50]],
        "Notes": [["ignored"]],
    })
    uploaded = await extractor.extract("report.xlsx", data, None)

    assert uploaded.category == FileCategory.SPREADSHEET
    assert uploaded.content.count("--- Sheet:") == 1
    assert "--- Sheet: Revenue ---" in uploaded.content
    assert "Costs" not in uploaded.content
    assert "Notes" not in uploaded.content
    assert "Jan,100" in uploaded.content


@pytest.mark.asyncio
async def test_spreadsheet_csv_is_capped(extractor):
    rows = [[f"row{i}", i * 1000] for i in range(1000)]
    data = make_xlsx({"Data": rows})
    uploaded = await extractor.extract("big.xlsx", data, None)

    header = "\n--- Sheet: Data ---\n"
    assert uploaded.content.startswith(header)
    assert uploaded.content.endswith(TRUNCATION_MARKER)
    assert len(uploaded.content) == len(header) + 2000 + len(TRUNCATION_MARKER)


@pytest.mark.asyncio
async def test_pdf_reads_only_first_page(extractor):
    data = make_pdf(["Quarter one revenue 100", "Quarter two revenue 200", "Quarter three revenue 300"])
    uploaded = await extractor.extract("report.pdf", data, "application/pdf")

    assert uploaded.category == FileCategory.DOCUMENT
    assert uploaded.content.count("--- PDF Page") == 1
    assert "--- PDF Page 1 ---" in uploaded.content
    assert "Quarter one revenue 100" in uploaded.content
    assert "200" not in uploaded.content


@pytest.mark.asyncio
async def test_unreadable_pdf_yields_placeholder(extractor):
    uploaded = await extractor.extract("broken.pdf", b"definitely not a pdf", "application/pdf")
    assert uploaded.content == "[PDF READ ERROR: broken.pdf]"


@pytest.mark.asyncio
async def test_docx_keeps_paragraphs_and_tables(extractor):
    data = make_docx(["Quarterly review", "Margins improved"], [["Region", "Sales"], ["North", "120"]])
    uploaded = await extractor.extract("memo.docx", data, None)

    assert uploaded.category == FileCategory.WORD
    assert "Quarterly review" in uploaded.content
    assert "[TABLE]\nRegion | Sales\nNorth | 120\n[/TABLE]" in uploaded.content


@pytest.mark.asyncio
async def test_corrupt_spreadsheet_raises_extraction_error(extractor):
    with pytest.raises(ExtractionError):
        await extractor.extract("bad.xlsx", b"not a workbook", None)


@pytest.mark.asyncio
async def test_batch_drops_failed_files_and_keeps_order(extractor):
    progress = []
    uploads = [
        ("first.txt", b"alpha", "text/plain"),
        ("bad.xlsx", b"not a workbook", None),
        ("second.csv", b"a,b\n1,2", "text/csv"),
    ]
    files = await extractor.extract_batch(uploads, lambda status, message, pct: progress.append(message))

    assert [f.name for f in files] == ["first.txt", "second.csv"]
    assert progress == ["Processing: first.txt...", "Processing: bad.xlsx...", "Processing: second.csv..."]


@pytest.mark.asyncio
async def test_batch_can_end_empty(extractor):
    files = await extractor.extract_batch([("bad.xlsx", b"garbage", None)])
    assert files == []
