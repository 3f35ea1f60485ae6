"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from resume_studio.clients.llm_client import LLMClient, LLMResponse
from resume_studio.config import AppConfig, StoreConfig
from resume_studio.models.content import (
    HeaderContent,
    ResumeContent,
    ResumeSection,
    ResumeTheme,
    SectionItem,
)
from resume_studio.service import ResumeService
from resume_studio.store.resume_store import ResumeStore


def _make_section(section_type: str, *items: dict[str, str], title: str = "", **kwargs) -> ResumeSection:
    return ResumeSection(
        type=section_type,
        title=title or section_type.capitalize(),
        items=[SectionItem(fields=fields) for fields in items],
        **kwargs,
    )


@pytest.fixture
def make_section():
    """Factory for sections: make_section("skills", {"name": "Go"}, title="Stack")."""
    return _make_section


@pytest.fixture
def sample_header() -> HeaderContent:
    return HeaderContent(
        full_name="Ana Souza",
        role="Engenheira de Dados",
        email="ana@exemplo.com",
        phone="(11) 98888-7777",
        location="São Paulo, SP",
        website="https://ana.dev",
        linked_in="linkedin.com/in/anasouza",
        github="github.com/anasouza",
    )


@pytest.fixture
def sample_content(sample_header) -> ResumeContent:
    return ResumeContent(
        header=sample_header,
        sections=[
            _make_section("summary", {"text": "Engenheira de dados com foco em pipelines confiáveis."}, title="Resumo"),
            _make_section(
                "experience",
                {
                    "role": "Engenheira de Dados",
                    "company": "Banco Exemplo",
                    "startDate": "2021-03",
                    "endDate": "Atual",
                    "location": "Remoto",
                    "description": "Pipelines em Airflow e Spark.",
                },
                title="Experiência",
            ),
            _make_section(
                "education",
                {
                    "degree": "Bacharelado em Estatística",
                    "institution": "USP",
                    "startDate": "2014",
                    "endDate": "2018",
                    "description": "",
                },
                title="Educação",
            ),
            _make_section("skills", {"name": "Python, SQL; Spark\nAirflow"}, title="Habilidades"),
            _make_section(
                "projects",
                {"name": "Data Lake", "link": "https://github.com/ana/lake", "description": "Ingestão em lote."},
                title="Projetos",
            ),
            _make_section("certifications", {"name": "GCP Data Engineer", "issuer": "Google", "year": "2023"}, title="Certificações"),
            _make_section("languages", {"language": "Inglês", "level": "Fluente"}, title="Idiomas"),
            _make_section("custom", {"Voluntariado": "ONG Código Aberto", "Hobby": ""}, title="Outros"),
        ],
    )


@pytest.fixture
def sample_theme() -> ResumeTheme:
    return ResumeTheme(primary_color="#0A66C2", secondary_color="#1A3A5F", text_color="#1C1E21")


@pytest.fixture
def store(tmp_path) -> ResumeStore:
    return ResumeStore(tmp_path / "resumes.db")


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    return AppConfig(store=StoreConfig(db_path=str(tmp_path / "resumes.db")))


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client answering with an empty JSON object."""
    client = AsyncMock(spec=LLMClient)
    response = LLMResponse(text="{}", input_tokens=100, output_tokens=50)
    client.generate = AsyncMock(return_value=response)
    client.generate_from_document = AsyncMock(return_value=response)
    return client


@pytest.fixture
def service(store, app_config, mock_llm_client) -> ResumeService:
    return ResumeService(store, app_config, llm=mock_llm_client)
