"""Tests for DocxTemplate document-level operations."""

import zipfile
from pathlib import Path

import pytest

from python_docx_pdf import DocxPackage, DocxTemplate
from python_docx_pdf.errors import EncodingError, NotFoundError, RowBoundaryError

WORD_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"


def para(text: str) -> str:
    return f"<w:p><w:r><w:t>{text}</w:t></w:r></w:p>"


def create_test_docx(
    path: Path,
    body: str,
    headers: tuple[str, ...] = (),
    footers: tuple[str, ...] = (),
) -> Path:
    """Create a .docx whose body, headers and footers hold the given paragraph XML."""
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(
            "word/document.xml",
            f'<w:document xmlns:w="{WORD_NS}"><w:body>{body}</w:body></w:document>',
        )
        for i, header in enumerate(headers, start=1):
            zf.writestr(f"word/header{i}.xml", f'<w:hdr xmlns:w="{WORD_NS}">{header}</w:hdr>')
        for i, footer in enumerate(footers, start=1):
            zf.writestr(f"word/footer{i}.xml", f'<w:ftr xmlns:w="{WORD_NS}">{footer}</w:ftr>')
    return path


class RecordingConverter:
    """Converter stand-in that keeps what it was asked to convert."""

    name = "Recording"

    def __init__(self):
        self.paths = []
        self.documents = []

    def convert(self, path):
        path = Path(path)
        self.paths.append(path)
        self.documents.append(path.read_bytes())
        return b"%PDF-1.4 fake"


@pytest.fixture
def template_path(tmp_path):
    body = (
        para("Dear ${name},")
        + para("${CLONEME}")
        + para("Item ${item}")
        + para("${/CLONEME}")
        + para("${DELETEME}")
        + para("This should be deleted.")
        + para("${/DELETEME}")
        + "<w:tbl><w:tr>"
        + "<w:tc>" + para("${userId}") + "</w:tc>"
        + "<w:tc>" + para("${userName}") + "</w:tc>"
        + "</w:tr></w:tbl>"
        + para("Signed, ${name}")
    )
    return create_test_docx(
        tmp_path / "letter.docx",
        body,
        headers=(para("Header for ${name}"),),
        footers=(para("Page footer ${company}"),),
    )


class TestSetValue:
    """Tests for DocxTemplate.set_value."""

    def test_replaces_in_body_headers_and_footers(self, template_path):
        template = DocxTemplate(template_path)

        assert template.set_value("name", "Brad Jones") == 3
        assert template.set_value("company", "Acme & Sons") == 1

        assert template.parts.body.count("Brad Jones") == 2
        assert "Header for Brad Jones" in template.parts.headers[1]
        assert "Acme &amp; Sons" in template.parts.footers[1]

    def test_limit_applies_per_part(self, template_path):
        """Test the limit caps replacements in each part separately."""
        template = DocxTemplate(template_path)

        assert template.set_value("name", "Brad", limit=1) == 2
        assert "Signed, ${name}" in template.parts.body
        assert "Header for Brad" in template.parts.headers[1]

    def test_missing_tag_returns_zero(self, template_path):
        template = DocxTemplate(template_path)
        body = template.parts.body

        assert template.set_value("missing", "x") == 0
        assert template.parts.body == body

    def test_invalid_value_changes_nothing(self, template_path):
        template = DocxTemplate(template_path)
        body = template.parts.body

        with pytest.raises(EncodingError):
            template.set_value("name", "bad\x00value")

        assert template.parts.body == body

    def test_set_values(self, template_path):
        template = DocxTemplate(template_path)

        assert template.set_values({"name": "Brad", "company": "Acme"}) == 4
        assert template.placeholders().count("name") == 0


class TestBlocks:
    """Tests for DocxTemplate block operations."""

    def test_clone_block_returns_block(self, template_path):
        template = DocxTemplate(template_path)

        block = template.clone_block("CLONEME", 3)

        assert block == para("Item ${item}")
        for i in (1, 2, 3):
            assert f"Item ${{item_{i}}}" in template.parts.body
        assert "${CLONEME}" not in template.parts.body

    def test_clone_block_without_replace(self, template_path):
        template = DocxTemplate(template_path)
        body = template.parts.body

        assert template.clone_block("CLONEME", 3, replace=False) == para("Item ${item}")
        assert template.parts.body == body

    def test_clone_missing_block(self, template_path):
        template = DocxTemplate(template_path)

        assert template.clone_block("MISSING") is None

    def test_delete_block(self, template_path):
        template = DocxTemplate(template_path)

        assert template.delete_block("DELETEME") is True
        assert "This should be deleted." not in template.parts.body
        assert template.delete_block("DELETEME") is False

    def test_replace_block(self, template_path):
        template = DocxTemplate(template_path)

        assert template.replace_block("DELETEME", para("Replacement")) is True
        assert "Replacement" in template.parts.body
        assert "${/DELETEME}" not in template.parts.body

    def test_replace_missing_block(self, template_path):
        template = DocxTemplate(template_path)

        assert template.replace_block("MISSING", para("x")) is False


class TestCloneRow:
    """Tests for DocxTemplate.clone_row."""

    def test_clone_then_fill(self, template_path):
        template = DocxTemplate(template_path)

        template.clone_row("userId", 3)
        template.set_value("userName_2", "Ann")

        body = template.parts.body
        assert body.count("</w:tr>") == 3
        assert "${userName_1}" in body
        assert "Ann" in body
        assert "${userName_3}" in body

    def test_missing_tag_raises_and_keeps_body(self, template_path):
        template = DocxTemplate(template_path)
        body = template.parts.body

        with pytest.raises(NotFoundError):
            template.clone_row("absentTag", 5)

        assert template.parts.body == body

    def test_tag_outside_table(self, template_path):
        with pytest.raises(RowBoundaryError):
            DocxTemplate(template_path).clone_row("name", 2)

    def test_rows_only_searched_in_body(self, template_path):
        """Test a tag that occurs only in a footer is not found."""
        template = DocxTemplate(template_path)

        with pytest.raises(NotFoundError):
            template.clone_row("company", 2)


class TestPlaceholders:
    """Tests for DocxTemplate.placeholders."""

    def test_lists_all_parts_in_order(self, template_path):
        template = DocxTemplate(template_path)

        assert template.placeholders() == [
            "name",
            "CLONEME",
            "item",
            "DELETEME",
            "userId",
            "userName",
            "company",
        ]


class TestSave:
    """Tests for saving and generating."""

    def test_save_to_new_path(self, template_path, tmp_path):
        template = DocxTemplate(template_path)
        template.set_value("name", "Brad")

        output = template.save(tmp_path / "out.docx")

        assert output == tmp_path / "out.docx"
        assert "Dear Brad," in DocxPackage.open(output).load().body
        assert "${name}" in DocxPackage.open(template_path).load().body

    def test_save_defaults_to_source(self, template_path):
        template = DocxTemplate(template_path)
        template.set_value("name", "Brad")

        assert template.save() == template_path
        assert "Dear Brad," in DocxPackage.open(template_path).load().body

    def test_save_in_memory_needs_path(self, template_path):
        template = DocxTemplate(template_path.read_bytes())

        with pytest.raises(ValueError):
            template.save()

    def test_save_to_bytes(self, template_path):
        template = DocxTemplate(template_path)
        template.set_value("company", "Acme")

        data = template.save_to_bytes()

        assert "Page footer Acme" in DocxTemplate(data).parts.footers[1]

    def test_generate_hands_docx_to_converter(self, template_path):
        """Test the converter receives the filled document named after the source."""
        converter = RecordingConverter()
        template = DocxTemplate(template_path, converter=converter)
        template.set_value("name", "Brad")

        pdf = template.generate()

        assert pdf == b"%PDF-1.4 fake"
        assert converter.paths[0].name == "letter.docx"
        assert not converter.paths[0].exists()
        assert "Dear Brad," in DocxPackage.from_bytes(converter.documents[0]).load().body
