"""Schemas for the Mobgran link-produto document (consumed, never produced).

Only the fields the sync engine writes to typed columns are modelled; the
rest of the body is kept verbatim in offers.document. Unknown keys are ignored
so new provider fields don't break imports.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _UpstreamModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _none_to_empty_list(v: object) -> object:
    # The provider sends null instead of [] for empty collections
    return [] if v is None else v


def _none_to_empty_str(v: object) -> object:
    return "" if v is None else v


class ImagemPrincipal(_UpstreamModel):
    """Principal image descriptor of a cavalete."""

    nome: str | None = None
    url: str | None = None
    url_min: str | None = Field(alias="urlMin", default=None)

    def is_empty(self) -> bool:
        return not (self.nome or self.url or self.url_min)


class UpstreamItem(_UpstreamModel):
    """A single slab."""

    codigo: str = ""
    bloco: str = ""
    nome_espessura: str | None = Field(alias="nomeEspessura", default=None)
    nome_classificacao: str | None = Field(alias="nomeClassificacao", default=None)
    nome_acabamento: str | None = Field(alias="nomeAcabamento", default=None)
    comprimento: Decimal | None = None
    altura: Decimal | None = None
    largura: Decimal | None = None
    peso: Decimal | None = None
    metragem: Decimal | None = None
    tipo_metragem: str | None = Field(alias="tipoMetragem", default=None)

    @field_validator("codigo", "bloco", mode="before")
    @classmethod
    def codes_not_null(cls, v: object) -> object:
        return _none_to_empty_str(v)


class UpstreamCavalete(_UpstreamModel):
    """A slab group with its items."""

    codigo: str = ""
    bloco: str = ""
    nome_material: str | None = Field(alias="nomeMaterial", default=None)
    nome_espessura: str | None = Field(alias="nomeEspessura", default=None)
    nome_classificacao: str | None = Field(alias="nomeClassificacao", default=None)
    nome_acabamento: str | None = Field(alias="nomeAcabamento", default=None)
    comprimento: Decimal | None = None
    altura: Decimal | None = None
    largura: Decimal | None = None
    peso: Decimal | None = None
    metragem: Decimal | None = None
    tipo_metragem: str | None = Field(alias="tipoMetragem", default=None)
    imagem_principal: ImagemPrincipal | None = Field(alias="imagemPrincipal", default=None)
    itens: list[UpstreamItem] = Field(default_factory=list)

    @field_validator("codigo", "bloco", mode="before")
    @classmethod
    def codes_not_null(cls, v: object) -> object:
        return _none_to_empty_str(v)

    @field_validator("itens", mode="before")
    @classmethod
    def itens_not_null(cls, v: object) -> object:
        return _none_to_empty_list(v)


class OfferDocument(_UpstreamModel):
    """Top-level document returned by GET /app/api/link-produto/{id}."""

    situacao: str | None = None
    nome_empresa: str | None = Field(alias="nomeEmpresa", default=None)
    url_logo: str | None = Field(alias="urlLogo", default=None)
    cavaletes: list[UpstreamCavalete] = Field(default_factory=list)

    @field_validator("cavaletes", mode="before")
    @classmethod
    def cavaletes_not_null(cls, v: object) -> object:
        return _none_to_empty_list(v)

    def is_empty(self) -> bool:
        """True when the provider answered but described no offer at all."""
        return not (self.situacao or self.nome_empresa or self.cavaletes)

    @property
    def item_count(self) -> int:
        return sum(len(c.itens) for c in self.cavaletes)
