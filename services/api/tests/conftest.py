"""Shared fixtures: in-memory SQLite store, mocked Mobgran API, sample documents."""

import copy
import json
from typing import Any

import httpx
import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from mobgran_sync.models import Cavalete, Item, Offer
from mobgran_sync.services.mobgran_client import MobgranClient
from mobgran_sync.stores import postgres

OFFER_LINK = "https://www.mobgran.com/app/conferencia/?p=link&o=cae15fe7-86a3-4a7b-9a4d-5ed91ae6d568/"
OFFER_ID = "cae15fe7-86a3-4a7b-9a4d-5ed91ae6d568"
API_URL = "https://mobgran.test/app/api/link-produto"


def make_item(codigo: str, **extra: Any) -> dict[str, Any]:
    item = {
        "codigo": codigo,
        "bloco": "B-100",
        "nomeEspessura": "2cm",
        "nomeClassificacao": "Comercial",
        "nomeAcabamento": "Polido",
        "comprimento": 3.05,
        "altura": 1.9,
        "largura": 0.02,
        "peso": 320.5,
        "metragem": 5.795,
        "tipoMetragem": "m2",
    }
    item.update(extra)
    return item


def make_cavalete(codigo: str, itens: list[dict[str, Any]] | None, **extra: Any) -> dict[str, Any]:
    cavalete = {
        "codigo": codigo,
        "bloco": "B-100",
        "nomeMaterial": "Branco Siena",
        "nomeEspessura": "2cm",
        "nomeClassificacao": "Comercial",
        "nomeAcabamento": "Polido",
        "comprimento": 3.05,
        "altura": 1.9,
        "largura": 0.3,
        "peso": 1450,
        "metragem": 17.385,
        "tipoMetragem": "m2",
        "imagemPrincipal": {
            "nome": f"{codigo}.jpg",
            "url": f"https://cdn.mobgran.test/{codigo}.jpg",
            "urlMin": f"https://cdn.mobgran.test/{codigo}_min.jpg",
        },
        "itens": itens,
    }
    cavalete.update(extra)
    return cavalete


def make_document(cavaletes: list[dict[str, Any]], **extra: Any) -> dict[str, Any]:
    document = {
        "situacao": "Disponível",
        "nomeEmpresa": "Granitos Serra Azul",
        "urlLogo": "https://cdn.mobgran.test/logo.png",
        "cavaletes": cavaletes,
    }
    document.update(extra)
    return document


@pytest.fixture
def two_cavalete_document() -> dict[str, Any]:
    """2 cavaletes with 3 and 1 items."""
    return make_document(
        [
            make_cavalete("CV-1", [make_item("CH-1"), make_item("CH-2"), make_item("CH-3")]),
            make_cavalete("CV-2", [make_item("CH-4")]),
        ]
    )


@pytest.fixture
def one_empty_cavalete_document() -> dict[str, Any]:
    """1 cavalete with 0 items."""
    return make_document([make_cavalete("CV-9", [])], situacao="Reservado")


class MobgranStub:
    """Mock transport for the Mobgran API that records every request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: Any = None
        self.error: Exception | None = None

    def respond(self, body: Any, status_code: int = 200) -> None:
        self.body = copy.deepcopy(body)
        self.status_code = status_code
        self.error = None

    def fail(self, error: Exception) -> None:
        self.error = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, content=json.dumps(self.body))
        return httpx.Response(self.status_code, text=self.body or "")


@pytest.fixture
def mobgran_stub() -> MobgranStub:
    return MobgranStub()


@pytest.fixture
async def mobgran_client(mobgran_stub: MobgranStub):
    """MobgranClient wired to the stub transport."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(mobgran_stub.handler))
    client = MobgranClient(base_url=API_URL, timeout=5, http_client=http_client)
    yield client
    await client.close()


@pytest.fixture
async def db(monkeypatch: pytest.MonkeyPatch):
    """Point the postgres store at a fresh in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(postgres.Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(postgres, "_engine", engine)
    monkeypatch.setattr(postgres, "_session_factory", session_factory)
    yield session_factory
    await engine.dispose()


@pytest.fixture
def count_rows(db: async_sessionmaker[AsyncSession]):
    """Return (offers, cavaletes, items) row counts."""

    async def _count() -> tuple[int, int, int]:
        async with db() as session:
            offers = (await session.execute(select(func.count()).select_from(Offer))).scalar_one()
            cavaletes = (await session.execute(select(func.count()).select_from(Cavalete))).scalar_one()
            items = (await session.execute(select(func.count()).select_from(Item))).scalar_one()
        return offers, cavaletes, items

    return _count
