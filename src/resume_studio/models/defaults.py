"""Seed content and theme for new résumés."""

from __future__ import annotations

from resume_studio.models.content import (
    HeaderContent,
    ResumeContent,
    ResumeSection,
    ResumeTheme,
    SectionItem,
)

_DEFAULT_SECTION_TITLES: dict[str, str] = {
    "summary": "Resumo",
    "experience": "Experiência",
    "education": "Educação",
    "skills": "Habilidades",
    "projects": "Projetos",
    "certifications": "Certificações",
    "languages": "Idiomas",
    "custom": "Nova seção",
}


def default_section_title(section_type: str) -> str:
    return _DEFAULT_SECTION_TITLES.get(section_type, "Seção")


def default_theme() -> ResumeTheme:
    return ResumeTheme()


def _section(section_type: str, *items: dict[str, str]) -> ResumeSection:
    return ResumeSection(
        type=section_type,
        title=default_section_title(section_type),
        items=[SectionItem(fields=fields) for fields in items],
    )


def build_default_content() -> ResumeContent:
    """Sample résumé every new document starts from (fresh ids on each call)."""
    return ResumeContent(
        header=HeaderContent(
            full_name="Nome Completo",
            role="Cargo desejado",
            email="email@exemplo.com",
            phone="(11) 99999-9999",
            location="Cidade, Estado",
            website="",
            linked_in="linkedin.com/in/seuperfil",
            github="github.com/seuusuario",
        ),
        sections=[
            _section(
                "summary",
                {"text": "Profissional com foco em resultados, colaboração e melhoria contínua."},
            ),
            _section(
                "experience",
                {
                    "role": "Desenvolvedor Full Stack",
                    "company": "Empresa Exemplo",
                    "startDate": "2022-01",
                    "endDate": "Atual",
                    "location": "Remoto",
                    "description": "Atuação em APIs, frontend React e automações internas.",
                },
            ),
            _section(
                "education",
                {
                    "degree": "Bacharelado em Ciência da Computação",
                    "institution": "Universidade Exemplo",
                    "startDate": "2018",
                    "endDate": "2021",
                    "description": "Foco em engenharia de software e estruturas de dados.",
                },
            ),
            _section("skills", {"name": "TypeScript, React, Node.js, PostgreSQL"}),
            _section(
                "projects",
                {
                    "name": "Gerador de Currículos",
                    "link": "https://github.com/exemplo",
                    "description": "Aplicação web com exportação em PDF/DOCX.",
                },
            ),
            _section("certifications", {"name": "AWS Cloud Practitioner", "issuer": "Amazon", "year": "2024"}),
            _section(
                "languages",
                {"language": "Português", "level": "Nativo"},
                {"language": "Inglês", "level": "Avançado"},
            ),
        ],
    )
