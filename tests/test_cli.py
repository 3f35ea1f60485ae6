"""Tests for the typer CLI."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from resume_studio.cli import app

runner = CliRunner()


@pytest.fixture
def db(tmp_path):
    return str(tmp_path / "cli.db")


def _invoke(db: str, *args: str):
    return runner.invoke(app, ["--db", db, "--owner", "ana", *args])


def _create(db: str, title: str = "Meu CV", *extra: str) -> str:
    result = _invoke(db, "new", title, *extra)
    assert result.exit_code == 0, result.output
    return result.output.split()[-1]


def _stored(db: str, resume_id: str) -> dict:
    result = _invoke(db, "show", resume_id, "--json")
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


class TestResumeCommands:
    def test_new_and_show(self, db):
        resume_id = _create(db, "Meu CV", "--template", "modern")
        data = _stored(db, resume_id)
        assert data["title"] == "Meu CV"
        assert data["templateId"] == "modern"
        assert data["content"]["header"]["fullName"] == "Nome Completo"

    def test_show_summary(self, db):
        resume_id = _create(db)
        result = _invoke(db, "show", resume_id)
        assert result.exit_code == 0
        assert "Nome Completo" in result.output
        assert "Experiência" in result.output

    def test_list_empty(self, db):
        result = _invoke(db, "list")
        assert result.exit_code == 0
        assert "No résumés yet" in result.output

    def test_list_scoped_to_owner(self, db):
        _create(db)
        other = runner.invoke(app, ["--db", db, "--owner", "bruno", "list"])
        assert "No résumés yet" in other.output

    def test_templates(self, db):
        result = _invoke(db, "templates")
        for name in ("minimal", "modern", "professional", "executive", "creative"):
            assert name in result.output

    def test_set_template(self, db):
        resume_id = _create(db)
        result = _invoke(db, "set-template", resume_id, "executive")
        assert result.exit_code == 0
        assert _stored(db, resume_id)["templateId"] == "executive"

    def test_theme(self, db):
        resume_id = _create(db)
        result = _invoke(db, "theme", resume_id, "--primary", "f60", "--spacing", "compact")
        assert result.exit_code == 0, result.output
        theme = _stored(db, resume_id)["theme"]
        assert theme["primaryColor"] == "#FF6600"
        assert theme["spacing"] == "compact"
        assert theme["font"] == "sourceSans"

    @pytest.mark.parametrize(
        "option,value", [("--primary", "blue"), ("--font", "comicSans"), ("--size", "huge")]
    )
    def test_theme_rejects_invalid_values(self, db, option, value):
        resume_id = _create(db)
        result = _invoke(db, "theme", resume_id, option, value)
        assert result.exit_code == 1
        assert "Invalid" in result.output

    def test_paginate(self, db):
        resume_id = _create(db)
        result = _invoke(db, "paginate", resume_id)
        assert result.exit_code == 0
        assert "fits on one page" in result.output

    def test_duplicate_and_delete(self, db):
        resume_id = _create(db)
        result = _invoke(db, "duplicate", resume_id)
        assert "Meu CV (Copia)" in result.output
        copy_id = result.output.split()[-1]

        result = _invoke(db, "delete", copy_id, "--yes")
        assert result.exit_code == 0
        assert _invoke(db, "show", copy_id).exit_code == 1

    def test_delete_asks_for_confirmation(self, db):
        resume_id = _create(db)
        result = runner.invoke(app, ["--db", db, "--owner", "ana", "delete", resume_id], input="n\n")
        assert result.exit_code == 0
        assert _stored(db, resume_id)["title"] == "Meu CV"

    def test_unknown_resume_exits_with_error(self, db):
        result = _invoke(db, "show", "missing")
        assert result.exit_code == 1
        assert "Resume not found." in result.output

    def test_empty_title_exits_with_error(self, db):
        result = _invoke(db, "new", "  ")
        assert result.exit_code == 1


class TestOutputCommands:
    def test_preview_writes_html(self, db, tmp_path):
        resume_id = _create(db)
        target = tmp_path / "out" / "preview.html"
        result = _invoke(db, "preview", resume_id, "--output", str(target))
        assert result.exit_code == 0
        assert "Nome Completo" in target.read_text(encoding="utf-8")

    def test_export_docx(self, db, tmp_path):
        resume_id = _create(db)
        result = _invoke(db, "export", resume_id, "--format", "docx", "--output", str(tmp_path))
        assert result.exit_code == 0, result.output
        files = list(tmp_path.glob("Curriculo_Nome_Completo_*.docx"))
        assert len(files) == 1

    def test_export_pdf_with_fpdf(self, db, tmp_path):
        resume_id = _create(db)
        result = _invoke(db, "export", resume_id, "--output", str(tmp_path), "--engine", "fpdf")
        assert result.exit_code == 0, result.output
        (pdf,) = tmp_path.glob("*.pdf")
        assert pdf.read_bytes().startswith(b"%PDF")

    def test_export_unknown_format(self, db, tmp_path):
        resume_id = _create(db)
        result = _invoke(db, "export", resume_id, "--format", "odt", "--output", str(tmp_path))
        assert result.exit_code == 1
        assert "Unknown format" in result.output

    def test_import_missing_file(self, db, tmp_path):
        resume_id = _create(db)
        result = _invoke(db, "import-template", resume_id, str(tmp_path / "nope.pdf"))
        assert result.exit_code == 1
        assert "File not found" in result.output


class TestVersionCommands:
    def test_save_list_restore(self, db):
        resume_id = _create(db)
        saved = _invoke(db, "version", "save", resume_id, "Original")
        assert saved.exit_code == 0
        version_id = saved.output.split()[-1]

        _invoke(db, "set-template", resume_id, "creative")
        listed = _invoke(db, "version", "list", resume_id)
        assert "Original" in listed.output

        restored = _invoke(db, "version", "restore", resume_id, version_id)
        assert restored.exit_code == 0
        assert _stored(db, resume_id)["templateId"] == "minimal"

    def test_list_without_versions(self, db):
        resume_id = _create(db)
        result = _invoke(db, "version", "list", resume_id)
        assert "No versions saved." in result.output


class TestContentCommands:
    def test_header(self, db):
        resume_id = _create(db)
        result = _invoke(db, "header", resume_id, "--name", "Ana Souza", "--website", "")
        assert result.exit_code == 0, result.output
        header = _stored(db, resume_id)["content"]["header"]
        assert header["fullName"] == "Ana Souza"
        assert header["website"] == ""
        assert header["role"] == "Cargo desejado"

    def test_section_add_move_column_break(self, db):
        resume_id = _create(db)
        added = _invoke(db, "section", "add", resume_id, "custom", "--title", "Prêmios", "--position", "2")
        assert added.exit_code == 0, added.output
        assert "section 2" in added.output

        assert _invoke(db, "section", "move", resume_id, "2", "1").exit_code == 0
        assert _invoke(db, "section", "column", resume_id, "1", "right").exit_code == 0
        assert _invoke(db, "section", "break", resume_id, "3").exit_code == 0

        sections = _stored(db, resume_id)["content"]["sections"]
        assert [s["title"] for s in sections[:3]] == ["Prêmios", "Resumo", "Experiência"]
        assert sections[0]["layoutColumn"] == "right"
        assert sections[2]["pageBreakBefore"] is True

        assert _invoke(db, "section", "break", resume_id, "3", "--off").exit_code == 0
        assert _stored(db, resume_id)["content"]["sections"][2]["pageBreakBefore"] is False

    def test_section_rename_and_remove(self, db):
        resume_id = _create(db)
        assert _invoke(db, "section", "rename", resume_id, "1", "Perfil").exit_code == 0
        assert _invoke(db, "section", "remove", resume_id, "2").exit_code == 0
        sections = _stored(db, resume_id)["content"]["sections"]
        assert sections[0]["title"] == "Perfil"
        assert sections[1]["type"] == "education"

    def test_item_add_set_list_remove(self, db):
        resume_id = _create(db)
        added = _invoke(db, "item", "add", resume_id, "2", "-f", "role=Analista", "-f", "company=Acme")
        assert added.exit_code == 0, added.output
        assert "Added item 2" in added.output

        assert _invoke(db, "item", "set", resume_id, "2", "2", "-f", "endDate=2020").exit_code == 0
        listed = _invoke(db, "item", "list", resume_id, "2")
        assert "company: Acme" in listed.output
        assert "endDate: 2020" in listed.output

        assert _invoke(db, "item", "remove", resume_id, "2", "1").exit_code == 0
        items = _stored(db, resume_id)["content"]["sections"][1]["items"]
        assert [item["fields"]["role"] for item in items] == ["Analista"]

    @pytest.mark.parametrize(
        "args,message",
        [
            (("section", "column", "{id}", "1", "middle"), "Unknown column"),
            (("section", "add", "{id}", "awards"), "Unknown section type"),
            (("section", "move", "{id}", "1", "99"), "Position must be between"),
            (("section", "remove", "{id}", "42"), "Section not found"),
            (("item", "add", "{id}", "2", "-f", "empresa=Acme"), "Unknown field"),
            (("item", "add", "{id}", "2", "-f", "role"), "Expected KEY=VALUE"),
        ],
    )
    def test_invalid_edits_exit_with_error(self, db, args, message):
        resume_id = _create(db)
        result = _invoke(db, *(arg.format(id=resume_id) for arg in args))
        assert result.exit_code == 1
        assert message in result.output

    def test_set_content_from_show_json(self, db, tmp_path):
        resume_id = _create(db)
        data = _stored(db, resume_id)
        data["content"]["header"]["fullName"] = "Bia Lima"
        data["content"]["sections"] = data["content"]["sections"][:2]
        data["content"]["sections"][1]["layoutColumn"] = "left"
        source = tmp_path / "cv.json"
        source.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

        result = _invoke(db, "set-content", resume_id, str(source))
        assert result.exit_code == 0, result.output
        content = _stored(db, resume_id)["content"]
        assert content["header"]["fullName"] == "Bia Lima"
        assert len(content["sections"]) == 2
        assert content["sections"][1]["layoutColumn"] == "left"

    def test_set_content_invalid_json(self, db, tmp_path):
        resume_id = _create(db)
        source = tmp_path / "cv.json"
        source.write_text("{not json", encoding="utf-8")
        result = _invoke(db, "set-content", resume_id, str(source))
        assert result.exit_code == 1
        assert "Invalid JSON" in result.output


class TestImportCommand:
    @pytest.fixture
    def claude(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
        message = MagicMock()
        message.stop_reason = "end_turn"
        message.usage.input_tokens = 1200
        message.usage.output_tokens = 340
        message.content = [MagicMock(text='{"title": "Importado", "templateId": "creative"}')]
        with patch("resume_studio.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            mock_cls.return_value.messages.create = AsyncMock(return_value=message)
            yield mock_cls.return_value

    def test_import_reports_token_usage(self, db, tmp_path, claude):
        resume_id = _create(db)
        source = tmp_path / "modelo.txt"
        source.write_text("Currículo modelo", encoding="utf-8")
        result = _invoke(db, "import-template", resume_id, str(source))
        assert result.exit_code == 0, result.output
        assert "Tokens: 1200 input / 340 output" in result.output
        assert _stored(db, resume_id)["templateId"] == "creative"

    def test_corrupt_pdf_is_a_clean_error(self, db, tmp_path, claude):
        resume_id = _create(db)
        source = tmp_path / "modelo.pdf"
        source.write_bytes(b"not really a document")
        result = _invoke(db, "import-template", resume_id, str(source))
        assert result.exit_code == 1
        assert "Could not read the PDF file." in result.output
        claude.messages.create.assert_not_called()
