"""Streamlit editor UI for resume-studio.

Pick or create a résumé, edit its header and sections, switch template and
theme, preview the rendered page, rebuild it from a template file with
Claude, manage versions and download PDF/DOCX.
"""

from __future__ import annotations

import asyncio
import logging
import os

logger = logging.getLogger(__name__)

import nest_asyncio
import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv

load_dotenv()
nest_asyncio.apply()

# Streamlit Cloud: sync st.secrets -> os.environ so the Claude client can read it
if "ANTHROPIC_API_KEY" not in os.environ:
    try:
        os.environ["ANTHROPIC_API_KEY"] = st.secrets["ANTHROPIC_API_KEY"]
    except (KeyError, FileNotFoundError):
        pass

from resume_studio.config import load_config
from resume_studio.errors import ResumeStudioError
from resume_studio.importer.documents import TemplateFile
from resume_studio.models import editing
from resume_studio.models.content import (
    FONT_OPTIONS,
    FONT_SIZE_LEVELS,
    LAYOUT_COLUMNS,
    SECTION_FIELDS,
    SECTION_TYPES,
    SPACING_OPTIONS,
    TEMPLATE_IDS,
)
from resume_studio.models.defaults import default_section_title
from resume_studio.service import ResumeService
from resume_studio.store.resume_store import ResumeStore

OWNER_ID = os.environ.get("RESUME_STUDIO_OWNER", "local")

FONT_LABELS = {"sourceSans": "Source Sans 3", "merriweather": "Merriweather", "montserrat": "Montserrat"}
COLUMN_LABELS = {"auto": "Automática", "left": "Esquerda", "right": "Direita"}
HEADER_LABELS = {
    "full_name": "Nome",
    "role": "Cargo",
    "email": "E-mail",
    "phone": "Telefone",
    "location": "Localização",
    "website": "Website",
    "linked_in": "LinkedIn",
    "github": "GitHub",
}

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="Resume Studio",
    page_icon=":page_facing_up:",
    layout="wide",
)


@st.cache_resource
def _get_service() -> ResumeService:
    config = load_config()
    return ResumeService(ResumeStore(config.store.resolved_db_path), config)


def _report(exc: ResumeStudioError) -> None:
    st.error(exc.message)


def _run(action, *args, **kwargs) -> bool:
    """Call a service action, showing domain errors instead of a traceback."""
    try:
        action(*args, **kwargs)
    except ResumeStudioError as e:
        _report(e)
        return False
    return True


def _header_form(resume) -> None:
    header = resume.content.header
    with st.form(f"header_{resume.id}"):
        cols = st.columns(2)
        values = {
            attr: cols[index % 2].text_input(label, getattr(header, attr), max_chars=160)
            for index, (attr, label) in enumerate(HEADER_LABELS.items())
        }
        if st.form_submit_button("Salvar cabeçalho", type="primary"):
            if _run(service.update_header, OWNER_ID, resume.id, values):
                st.rerun()


def _typed_rows(section) -> list[dict]:
    keys = SECTION_FIELDS[section.type]
    rows = [{"id": item.id, **{key: item.fields.get(key, "") for key in keys}} for item in section.items]
    # An empty table would lose its columns.
    return rows or [{"id": None, **{key: "" for key in keys}}]


def _custom_text(item) -> str:
    return "\n".join(f"{key}: {value}" for key, value in item.fields.items())


def _custom_fields(text: str | None) -> dict[str, str]:
    fields: dict[str, str] = {}
    for line in (text or "").splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip():
            fields[key.strip()] = value.strip()
    return fields


def _section_editor(resume, index: int, section) -> None:
    count = len(resume.content.sections)
    # Fresh widget keys after every save so pending table edits are not replayed.
    stamp = f"{section.id}_{resume.updated_at.isoformat()}"
    with st.expander(f"{index}. {section.title}"):
        with st.form(f"section_{section.id}"):
            title = st.text_input("Título", section.title, max_chars=60)
            cols = st.columns(2)
            column = cols[0].selectbox(
                "Coluna",
                LAYOUT_COLUMNS,
                index=LAYOUT_COLUMNS.index(section.layout_column),
                format_func=COLUMN_LABELS.get,
                help="Usada pelos templates com colunas",
            )
            page_break = cols[1].checkbox("Nova página antes desta seção", section.page_break_before)

            if section.type == "custom":
                # Custom items are edited as "Campo: valor" lines; an emptied item is removed.
                rows = []
                for number, item in enumerate(section.items, 1):
                    text = st.text_area(f"Item {number}", _custom_text(item), key=f"item_{item.id}_{stamp}")
                    rows.append({"id": item.id, **_custom_fields(text)})
                text = st.text_area("Novo item", "", key=f"new_item_{stamp}")
                rows.append({"id": None, **_custom_fields(text)})
            else:
                edited = st.data_editor(
                    _typed_rows(section),
                    num_rows="dynamic",
                    column_config={"id": None},
                    key=f"items_{stamp}",
                    use_container_width=True,
                )
                # New rows come back with None or NaN cells.
                rows = [{key: value if isinstance(value, str) else None for key, value in row.items()} for row in edited]

            if st.form_submit_button("Salvar seção", type="primary"):
                try:
                    content = editing.rename_section(resume.content, section.id, title)
                    content = editing.set_layout_column(content, section.id, column)
                    content = editing.set_page_break(content, section.id, page_break)
                    content = editing.replace_items(content, section.id, rows)
                    service.update_resume(OWNER_ID, resume.id, content=content)
                except ResumeStudioError as e:
                    _report(e)
                else:
                    st.rerun()

        actions = st.columns(3)
        if actions[0].button("Subir", key=f"up_{section.id}", disabled=index == 1, use_container_width=True):
            if _run(service.move_section, OWNER_ID, resume.id, section.id, index - 1):
                st.rerun()
        if actions[1].button("Descer", key=f"down_{section.id}", disabled=index == count, use_container_width=True):
            if _run(service.move_section, OWNER_ID, resume.id, section.id, index + 1):
                st.rerun()
        if actions[2].button("Remover seção", key=f"remove_{section.id}", use_container_width=True):
            if _run(service.remove_section, OWNER_ID, resume.id, section.id):
                st.rerun()


def _content_editor(resume) -> None:
    st.subheader("Cabeçalho")
    _header_form(resume)

    st.subheader("Seções")
    for index, section in enumerate(resume.content.sections, 1):
        _section_editor(resume, index, section)

    cols = st.columns([2, 1])
    new_type = cols[0].selectbox(
        "Nova seção",
        SECTION_TYPES,
        format_func=default_section_title,
        key=f"new_section_{resume.id}",
    )
    if cols[1].button("Adicionar seção", use_container_width=True):
        if _run(service.add_section, OWNER_ID, resume.id, new_type):
            st.rerun()


service = _get_service()

# ---------------------------------------------------------------------------
# Sidebar: résumé picker
# ---------------------------------------------------------------------------

with st.sidebar:
    st.title("Resume Studio")
    st.caption("Currículos com templates, temas e exportação PDF/DOCX")

    resumes = service.list_resumes(OWNER_ID)
    labels = {r.id: f"{r.title} ({r.template_id})" for r in resumes}
    selected_id = st.selectbox(
        "Currículo",
        options=list(labels),
        format_func=labels.get,
        index=0 if labels else None,
        placeholder="Nenhum currículo",
    )

    with st.expander("Novo currículo", expanded=not resumes):
        new_title = st.text_input("Título", max_chars=120)
        new_template = st.selectbox("Template", TEMPLATE_IDS, key="new_template")
        if st.button("Criar", use_container_width=True):
            try:
                created = service.create_resume(OWNER_ID, new_title, new_template)
            except ResumeStudioError as e:
                _report(e)
            else:
                st.success(f"Criado: {created.title}")
                st.rerun()

if not selected_id:
    st.info("Crie um currículo na barra lateral para começar.")
    st.stop()

resume = service.get_resume(OWNER_ID, selected_id)

# ---------------------------------------------------------------------------
# Template & theme
# ---------------------------------------------------------------------------

st.header(resume.title)
controls, preview_col = st.columns([1, 2])

with controls:
    st.subheader("Template e tema")
    template_id = st.radio(
        "Template",
        TEMPLATE_IDS,
        index=TEMPLATE_IDS.index(resume.template_id),
        horizontal=True,
    )
    theme = resume.theme
    primary = st.color_picker("Cor primária", theme.primary_color)
    secondary = st.color_picker("Cor secundária", theme.secondary_color)
    text_color = st.color_picker("Cor do texto", theme.text_color)
    font = st.selectbox("Fonte", FONT_OPTIONS, index=FONT_OPTIONS.index(theme.font), format_func=FONT_LABELS.get)
    spacing = st.selectbox("Espaçamento", SPACING_OPTIONS, index=SPACING_OPTIONS.index(theme.spacing))
    size = st.selectbox("Tamanho da fonte", FONT_SIZE_LEVELS, index=FONT_SIZE_LEVELS.index(theme.font_size_level))

    if st.button("Salvar aparência", type="primary", use_container_width=True):
        new_theme = theme.model_copy(update={
            "primary_color": primary.upper(),
            "secondary_color": secondary.upper(),
            "text_color": text_color.upper(),
            "font": font,
            "spacing": spacing,
            "font_size_level": size,
        })
        try:
            service.update_resume(OWNER_ID, resume.id, template_id=template_id, theme=new_theme)
        except ResumeStudioError as e:
            _report(e)
        else:
            st.rerun()

    if st.button("Paginação automática", use_container_width=True):
        try:
            service.paginate(OWNER_ID, resume.id)
        except ResumeStudioError as e:
            _report(e)
        else:
            st.rerun()

    # -----------------------------------------------------------------------
    # AI template import
    # -----------------------------------------------------------------------

    st.divider()
    st.subheader("Importar template com IA")
    if "import_usage" in st.session_state:
        st.caption(st.session_state["import_usage"])
    template_file = st.file_uploader(
        "Arquivo de template",
        type=["png", "jpg", "jpeg", "gif", "webp", "pdf", "docx", "txt", "md"],
        help="Imagem, PDF, DOCX ou texto (até 8MB)",
    )
    if template_file is not None and st.button("Analisar e aplicar", use_container_width=True):
        document = TemplateFile(
            file_name=template_file.name,
            data=template_file.getvalue(),
            mime_type=template_file.type or "",
        )
        with st.spinner("Analisando template..."):
            try:
                asyncio.run(service.import_template(OWNER_ID, resume.id, document))
            except ResumeStudioError as e:
                _report(e)
            else:
                usage = service.llm.get_token_summary()
                st.session_state["import_usage"] = (
                    f"Última importação: {usage['input']} tokens de entrada, {usage['output']} de saída"
                )
                st.rerun()

    # -----------------------------------------------------------------------
    # Versions
    # -----------------------------------------------------------------------

    st.divider()
    st.subheader("Versões")
    version_name = st.text_input("Nome da versão", max_chars=120)
    if st.button("Salvar versão", use_container_width=True):
        try:
            service.create_version(OWNER_ID, resume.id, version_name)
        except ResumeStudioError as e:
            _report(e)
        else:
            st.success("Versão salva")

    for version in service.list_versions(OWNER_ID, resume.id):
        cols = st.columns([3, 1])
        cols[0].write(f"**{version.name}** · {version.created_at:%Y-%m-%d %H:%M}")
        if cols[1].button("Restaurar", key=f"restore_{version.id}"):
            if _run(service.restore_version, OWNER_ID, resume.id, version.id):
                st.rerun()

    # -----------------------------------------------------------------------
    # Manage
    # -----------------------------------------------------------------------

    st.divider()
    manage = st.columns(2)
    if manage[0].button("Duplicar", use_container_width=True):
        if _run(service.duplicate_resume, OWNER_ID, resume.id):
            st.rerun()
    if manage[1].button("Excluir", use_container_width=True):
        if _run(service.delete_resume, OWNER_ID, resume.id):
            st.rerun()

# ---------------------------------------------------------------------------
# Preview, downloads & content editor
# ---------------------------------------------------------------------------

with preview_col:
    preview_tab, content_tab = st.tabs(["Visualização", "Conteúdo"])

with content_tab:
    _content_editor(resume)

with preview_tab:
    downloads = st.columns(2)
    pdf_key = f"pdf_{resume.id}_{resume.updated_at.isoformat()}"
    if pdf_key not in st.session_state:
        if downloads[0].button("Gerar PDF", use_container_width=True):
            with st.spinner("Gerando PDF..."):
                try:
                    st.session_state[pdf_key] = service.export_pdf(OWNER_ID, resume.id)
                except ResumeStudioError as e:
                    logger.warning("PDF export failed: %s", e.message)
                    _report(e)
                else:
                    st.rerun()
    else:
        pdf_name, pdf_bytes = st.session_state[pdf_key]
        downloads[0].download_button(
            "Baixar PDF",
            data=pdf_bytes,
            file_name=pdf_name,
            mime="application/pdf",
            use_container_width=True,
        )

    docx_name, docx_bytes = service.export_docx(OWNER_ID, resume.id)
    downloads[1].download_button(
        "Baixar DOCX",
        data=docx_bytes,
        file_name=docx_name,
        mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        use_container_width=True,
    )

    components.html(service.render_html(OWNER_ID, resume.id), height=1160, scrolling=True)
