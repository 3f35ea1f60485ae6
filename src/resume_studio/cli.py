"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import webbrowser
from contextlib import contextmanager
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from resume_studio import __version__
from resume_studio.config import AppConfig, load_config
from resume_studio.errors import InvalidInputError, ResumeStudioError
from resume_studio.export import PDF_ENGINES
from resume_studio.importer.documents import TemplateFile
from resume_studio.importer.normalizer import normalize_hex_color
from resume_studio.models.content import (
    FONT_OPTIONS,
    FONT_SIZE_LEVELS,
    LAYOUT_COLUMNS,
    SECTION_TYPES,
    SPACING_OPTIONS,
)
from resume_studio.models.editing import find_section
from resume_studio.rendering import available_templates
from resume_studio.service import ResumeService
from resume_studio.store.resume_store import ResumeStore

app = typer.Typer(
    name="resume-studio",
    help="Build, theme and export résumés from structured content.",
    no_args_is_help=True,
)
version_app = typer.Typer(help="Save, list and restore named résumé versions.", no_args_is_help=True)
app.add_typer(version_app, name="version")
section_app = typer.Typer(help="Add, remove, reorder and place résumé sections.", no_args_is_help=True)
app.add_typer(section_app, name="section")
item_app = typer.Typer(help="List, add, edit and remove section items.", no_args_is_help=True)
app.add_typer(item_app, name="item")
console = Console()

_state: dict = {"db": None, "owner": None}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    db: Path = typer.Option(None, "--db", help="SQLite database path (overrides config.yaml)"),
    owner: str = typer.Option(None, "--owner", help="Owner id of the résumés to work with"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    _state["db"] = db
    _state["owner"] = owner


def _owner() -> str:
    return _state.get("owner") or os.environ.get("RESUME_STUDIO_OWNER", "local")


def _service(config: AppConfig | None = None) -> ResumeService:
    config = config or load_config()
    db_path = _state.get("db") or config.store.resolved_db_path
    return ResumeService(ResumeStore(db_path), config)


@contextmanager
def _errors():
    """Print domain errors in red and exit with status 1."""
    try:
        yield
    except ResumeStudioError as exc:
        console.print(f"[red]{escape(exc.message)}[/red]")
        raise typer.Exit(1)


@app.command()
def new(
    title: str = typer.Argument(help="Résumé title"),
    template: str = typer.Option("minimal", "--template", "-t", help="Template id"),
) -> None:
    """Create a résumé seeded with the sample content."""
    with _errors():
        resume = _service().create_resume(_owner(), title, template)
    console.print(f"[green]Created {resume.title}[/green] [dim]{resume.id}[/dim]")


@app.command("list")
def list_resumes() -> None:
    """List your résumés, most recently updated first."""
    resumes = _service().list_resumes(_owner())
    if not resumes:
        console.print("[yellow]No résumés yet. Create one with `resume-studio new`.[/yellow]")
        return

    table = Table("ID", "Title", "Template", "Updated")
    for resume in resumes:
        table.add_row(resume.id, resume.title, resume.template_id, resume.updated_at.strftime("%Y-%m-%d %H:%M"))
    console.print(table)


@app.command()
def show(
    resume_id: str = typer.Argument(help="Résumé id"),
    as_json: bool = typer.Option(False, "--json", help="Print the stored JSON"),
) -> None:
    """Show a résumé's header and sections."""
    with _errors():
        resume = _service().get_resume(_owner(), resume_id)

    if as_json:
        console.print_json(resume.model_dump_json(by_alias=True))
        return

    header = resume.content.header
    theme = resume.theme
    console.print(Panel(
        f"[bold]{escape(header.full_name)}[/bold]\n{escape(header.role)}\n"
        f"{escape(' | '.join(header.contact_values()))}\n\n"
        f"Template: {resume.template_id} | Theme: {theme.primary_color} {theme.secondary_color} "
        f"{theme.text_color} {theme.font} {theme.spacing} {theme.font_size_level}",
        title=escape(resume.title),
    ))
    for index, section in enumerate(resume.content.sections, 1):
        flags = []
        if section.page_break_before:
            flags.append("page break")
        if section.layout_column != "auto":
            flags.append(section.layout_column)
        suffix = f" [dim]({', '.join(flags)})[/dim]" if flags else ""
        kind = escape(f"[{section.type}]")
        console.print(f"  {index}. [bold]{escape(section.title)}[/bold] {kind} {len(section.items)} item(s){suffix}")


@app.command()
def templates() -> None:
    """List available layout templates."""
    for name in available_templates():
        console.print(f"  [bold]{name}[/bold]")


@app.command("set-template")
def set_template(
    resume_id: str = typer.Argument(help="Résumé id"),
    template: str = typer.Argument(help="Template id"),
) -> None:
    """Switch a résumé's layout template."""
    with _errors():
        resume = _service().update_resume(_owner(), resume_id, template_id=template)
    console.print(f"[green]{resume.title} now uses the {resume.template_id} template[/green]")


@app.command()
def theme(
    resume_id: str = typer.Argument(help="Résumé id"),
    primary: str = typer.Option(None, "--primary", help="Primary color (hex)"),
    secondary: str = typer.Option(None, "--secondary", help="Secondary color (hex)"),
    text: str = typer.Option(None, "--text", help="Text color (hex)"),
    font: str = typer.Option(None, "--font", help=f"One of: {', '.join(FONT_OPTIONS)}"),
    spacing: str = typer.Option(None, "--spacing", help=f"One of: {', '.join(SPACING_OPTIONS)}"),
    size: str = typer.Option(None, "--size", help=f"One of: {', '.join(FONT_SIZE_LEVELS)}"),
) -> None:
    """Change theme colors, font, spacing or font size."""
    with _errors():
        service = _service()
        current = service.get_resume(_owner(), resume_id).theme
        updates: dict[str, str] = {}
        for attr, value in (("primary_color", primary), ("secondary_color", secondary), ("text_color", text)):
            if value is None:
                continue
            color = normalize_hex_color(value, "")
            if not color:
                raise InvalidInputError(f"Invalid color: {value!r}")
            updates[attr] = color
        for attr, value, allowed in (
            ("font", font, FONT_OPTIONS),
            ("spacing", spacing, SPACING_OPTIONS),
            ("font_size_level", size, FONT_SIZE_LEVELS),
        ):
            if value is None:
                continue
            if value not in allowed:
                raise InvalidInputError(f"Invalid {attr}: {value!r}. Choose one of: {', '.join(allowed)}")
            updates[attr] = value
        resume = service.update_resume(_owner(), resume_id, theme=current.model_copy(update=updates))
    console.print(f"[green]Theme updated for {resume.title}[/green]")


# ---------------------------------------------------------------------------
# Content editing
# ---------------------------------------------------------------------------


def _parse_fields(pairs: list[str] | None) -> dict[str, str]:
    """``["role=Dev", "company=Acme"]`` -> ``{"role": "Dev", "company": "Acme"}``."""
    fields: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise InvalidInputError(f"Expected KEY=VALUE, got {pair!r}")
        fields[key.strip()] = value
    return fields


@app.command()
def header(
    resume_id: str = typer.Argument(help="Résumé id"),
    name: str = typer.Option(None, "--name", help="Full name"),
    role: str = typer.Option(None, "--role", help="Role or headline"),
    email: str = typer.Option(None, "--email"),
    phone: str = typer.Option(None, "--phone"),
    location: str = typer.Option(None, "--location"),
    website: str = typer.Option(None, "--website"),
    linkedin: str = typer.Option(None, "--linkedin"),
    github: str = typer.Option(None, "--github"),
) -> None:
    """Edit header fields (pass "" to clear one)."""
    values = {
        "full_name": name,
        "role": role,
        "email": email,
        "phone": phone,
        "location": location,
        "website": website,
        "linked_in": linkedin,
        "github": github,
    }
    with _errors():
        resume = _service().update_header(
            _owner(), resume_id, {key: value for key, value in values.items() if value is not None}
        )
    console.print(f"[green]Header updated for {escape(resume.title)}[/green]")


@section_app.command("add")
def section_add(
    resume_id: str = typer.Argument(help="Résumé id"),
    section_type: str = typer.Argument(help=f"One of: {', '.join(SECTION_TYPES)}"),
    title: str = typer.Option(None, "--title", help="Section title (default per type)"),
    position: int = typer.Option(None, "--position", "-p", help="1-based position (default: last)"),
) -> None:
    """Add a section holding one empty item."""
    with _errors():
        resume = _service().add_section(_owner(), resume_id, section_type, title, position)
    sections = resume.content.sections
    index = len(sections) if position is None else min(max(position, 1), len(sections))
    console.print(f"[green]Added {escape(sections[index - 1].title)} as section {index}[/green]")


@section_app.command("remove")
def section_remove(
    resume_id: str = typer.Argument(help="Résumé id"),
    section: str = typer.Argument(help="Section number or id"),
) -> None:
    """Remove a section and its items."""
    with _errors():
        _service().remove_section(_owner(), resume_id, section)
    console.print("[green]Section removed[/green]")


@section_app.command("move")
def section_move(
    resume_id: str = typer.Argument(help="Résumé id"),
    section: str = typer.Argument(help="Section number or id"),
    position: int = typer.Argument(help="New 1-based position"),
) -> None:
    """Reorder a section."""
    with _errors():
        resume = _service().move_section(_owner(), resume_id, section, position)
    moved = resume.content.sections[position - 1]
    console.print(f"[green]{escape(moved.title)} is now section {position}[/green]")


@section_app.command("rename")
def section_rename(
    resume_id: str = typer.Argument(help="Résumé id"),
    section: str = typer.Argument(help="Section number or id"),
    title: str = typer.Argument(help="New title"),
) -> None:
    """Change a section's title."""
    with _errors():
        _service().rename_section(_owner(), resume_id, section, title)
    console.print("[green]Section renamed[/green]")


@section_app.command("break")
def section_break(
    resume_id: str = typer.Argument(help="Résumé id"),
    section: str = typer.Argument(help="Section number or id"),
    enabled: bool = typer.Option(True, "--on/--off", help="Start the section on a new page"),
) -> None:
    """Toggle the manual page break before a section."""
    with _errors():
        _service().set_page_break(_owner(), resume_id, section, enabled)
    console.print(f"[green]Page break {'on' if enabled else 'off'}[/green]")


@section_app.command("column")
def section_column(
    resume_id: str = typer.Argument(help="Résumé id"),
    section: str = typer.Argument(help="Section number or id"),
    column: str = typer.Argument(help=f"One of: {', '.join(LAYOUT_COLUMNS)}"),
) -> None:
    """Pin a section to the left or right column (creative and two-column layouts)."""
    with _errors():
        _service().set_layout_column(_owner(), resume_id, section, column)
    console.print(f"[green]Column set to {column}[/green]")


@item_app.command("list")
def item_list(
    resume_id: str = typer.Argument(help="Résumé id"),
    section: str = typer.Argument(help="Section number or id"),
) -> None:
    """List a section's items and their fields."""
    with _errors():
        resume = _service().get_resume(_owner(), resume_id)
        target = find_section(resume.content, section)
    if not target.items:
        console.print("[yellow]No items.[/yellow]")
        return
    for index, item in enumerate(target.items, 1):
        console.print(f"  {index}. [dim]{item.id}[/dim]")
        for key, value in item.fields.items():
            console.print(f"     {escape(key)}: {escape(value)}")


@item_app.command("add")
def item_add(
    resume_id: str = typer.Argument(help="Résumé id"),
    section: str = typer.Argument(help="Section number or id"),
    fields: list[str] = typer.Option(None, "--field", "-f", help="KEY=VALUE, repeatable"),
) -> None:
    """Append an item to a section."""
    with _errors():
        resume = _service().add_item(_owner(), resume_id, section, _parse_fields(fields))
        count = len(find_section(resume.content, section).items)
    console.print(f"[green]Added item {count}[/green]")


@item_app.command("set")
def item_set(
    resume_id: str = typer.Argument(help="Résumé id"),
    section: str = typer.Argument(help="Section number or id"),
    item: str = typer.Argument(help="Item number or id"),
    fields: list[str] = typer.Option(None, "--field", "-f", help="KEY=VALUE, repeatable"),
    replace: bool = typer.Option(False, "--replace", help="Clear the fields not given"),
) -> None:
    """Edit an item's fields."""
    with _errors():
        _service().update_item(_owner(), resume_id, section, item, _parse_fields(fields), replace=replace)
    console.print("[green]Item updated[/green]")


@item_app.command("remove")
def item_remove(
    resume_id: str = typer.Argument(help="Résumé id"),
    section: str = typer.Argument(help="Section number or id"),
    item: str = typer.Argument(help="Item number or id"),
) -> None:
    """Remove an item from a section."""
    with _errors():
        _service().remove_item(_owner(), resume_id, section, item)
    console.print("[green]Item removed[/green]")


@app.command("set-content")
def set_content(
    resume_id: str = typer.Argument(help="Résumé id"),
    file: Path = typer.Argument(help="JSON file: content, or the output of `show --json`"),
) -> None:
    """Replace a résumé's header and sections with edited JSON."""
    if not file.exists():
        console.print(f"[red]File not found: {file}[/red]")
        raise typer.Exit(1)

    with _errors():
        try:
            data = json.loads(file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise InvalidInputError(f"Invalid JSON in {file.name}: {exc.msg} (line {exc.lineno})") from exc
        resume = _service().load_content(_owner(), resume_id, data)
    console.print(f"[green]Loaded {len(resume.content.sections)} section(s) into {escape(resume.title)}[/green]")


@app.command()
def paginate(resume_id: str = typer.Argument(help="Résumé id")) -> None:
    """Insert estimated page breaks where sections would overflow a page."""
    with _errors():
        resume = _service().paginate(_owner(), resume_id)
    breaks = [s.title for s in resume.content.sections if s.page_break_before]
    if breaks:
        console.print(f"[green]Page breaks before: {', '.join(breaks)}[/green]")
    else:
        console.print("[green]Everything fits on one page.[/green]")


@app.command()
def preview(
    resume_id: str = typer.Argument(help="Résumé id"),
    output: Path = typer.Option(None, "--output", "-o", help="HTML output path"),
    open_browser: bool = typer.Option(False, "--open", help="Open the preview in a browser"),
) -> None:
    """Render a résumé to an HTML preview file."""
    with _errors():
        service = _service()
        resume = service.get_resume(_owner(), resume_id)
        html = service.render_html(_owner(), resume_id)

    if output is None:
        output = Path(f"./output/{resume.id}.html")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(html, encoding="utf-8")
    console.print(f"[green]HTML saved: {output}[/green]")
    if open_browser:
        webbrowser.open(output.resolve().as_uri())


@app.command()
def export(
    resume_id: str = typer.Argument(help="Résumé id"),
    fmt: str = typer.Option("pdf", "--format", "-f", help="pdf or docx"),
    output: Path = typer.Option(Path("./output"), "--output", "-o", help="Output directory"),
    engine: str = typer.Option(None, "--engine", help=f"PDF engine: {', '.join(PDF_ENGINES)}"),
) -> None:
    """Export a résumé as PDF or DOCX."""
    with _errors():
        service = _service()
        if fmt == "pdf":
            with console.status("Rendering PDF..."):
                filename, data = service.export_pdf(_owner(), resume_id, engine=engine)
        elif fmt == "docx":
            filename, data = service.export_docx(_owner(), resume_id)
        else:
            raise InvalidInputError(f"Unknown format: {fmt!r}. Use pdf or docx.")

    output.mkdir(parents=True, exist_ok=True)
    path = output / filename
    path.write_bytes(data)
    console.print(f"[green]{fmt.upper()} saved: {path}[/green]")


@app.command("import-template")
def import_template(
    resume_id: str = typer.Argument(help="Résumé id"),
    file: Path = typer.Argument(help="Template file (PNG/JPG/GIF/WEBP/PDF/DOCX/TXT)"),
    provider: str = typer.Option(None, "--provider", help="AI provider (anthropic)"),
    model: str = typer.Option(None, "--model", help="Model override"),
) -> None:
    """Rebuild a résumé from a template file with Claude."""
    if not file.exists():
        console.print(f"[red]File not found: {file}[/red]")
        raise typer.Exit(1)

    document = TemplateFile(file_name=file.name, data=file.read_bytes())
    with _errors():
        service = _service()
        with console.status("Analyzing template..."):
            resume = asyncio.run(
                service.import_template(_owner(), resume_id, document, provider=provider, model=model)
            )
        usage = service.llm.get_token_summary()
    console.print(
        f"[green]Imported {len(resume.content.sections)} section(s) into {resume.title} "
        f"({resume.template_id})[/green]"
    )
    console.print(f"[dim]Tokens: {usage['input']} input / {usage['output']} output[/dim]")


@app.command()
def duplicate(resume_id: str = typer.Argument(help="Résumé id")) -> None:
    """Copy a résumé (title gets a " (Copia)" suffix)."""
    with _errors():
        resume = _service().duplicate_resume(_owner(), resume_id)
    console.print(f"[green]Created {resume.title}[/green] [dim]{resume.id}[/dim]")


@app.command()
def delete(
    resume_id: str = typer.Argument(help="Résumé id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a résumé and all of its versions."""
    with _errors():
        service = _service()
        resume = service.get_resume(_owner(), resume_id)
        if not yes and not typer.confirm(f"Delete {resume.title}?"):
            raise typer.Exit(0)
        service.delete_resume(_owner(), resume_id)
    console.print(f"[green]Deleted {resume.title}[/green]")


@version_app.command("save")
def version_save(
    resume_id: str = typer.Argument(help="Résumé id"),
    name: str = typer.Argument(help="Version name"),
) -> None:
    """Snapshot the résumé under a name."""
    with _errors():
        version = _service().create_version(_owner(), resume_id, name)
    console.print(f"[green]Saved version {version.name}[/green] [dim]{version.id}[/dim]")


@version_app.command("list")
def version_list(resume_id: str = typer.Argument(help="Résumé id")) -> None:
    """List saved versions, newest first."""
    with _errors():
        versions = _service().list_versions(_owner(), resume_id)
    if not versions:
        console.print("[yellow]No versions saved.[/yellow]")
        return

    table = Table("ID", "Name", "Template", "Created")
    for version in versions:
        table.add_row(
            version.id,
            version.name,
            version.snapshot.template_id,
            version.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@version_app.command("restore")
def version_restore(
    resume_id: str = typer.Argument(help="Résumé id"),
    version_id: str = typer.Argument(help="Version id"),
) -> None:
    """Overwrite the résumé with a saved version."""
    with _errors():
        resume = _service().restore_version(_owner(), resume_id, version_id)
    console.print(f"[green]Restored {resume.title}[/green]")


@app.command()
def info() -> None:
    """Show version and configuration."""
    config = load_config()
    db_path = _state.get("db") or config.store.resolved_db_path
    layout_count = len(available_templates())
    console.print(Panel(
        f"resume-studio {__version__}\n"
        f"Database: {db_path}\n"
        f"PDF engine: {config.export.pdf_engine} (fallback {'on' if config.export.fallback else 'off'})\n"
        f"Model: {config.llm.model} ({config.llm.timeout:g}s timeout)\n"
        f"Templates: {layout_count}",
        title="resume-studio",
    ))


if __name__ == "__main__":
    app()
