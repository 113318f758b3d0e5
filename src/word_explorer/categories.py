"""
Static semantic categories used to adjust raw similarity.

The default table is Portuguese. Categories are checked in declaration
order and the first one containing a word (canonical or related) wins.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, NamedTuple


GENERAL_CATEGORY = "general"
GENERAL_WEIGHT = 1.0


class CategoryMatch(NamedTuple):
    name: str
    weight: float


@dataclass(frozen=True)
class Category:
    """A named cluster of canonical and related words."""

    name: str
    weight: float
    words: tuple[str, ...]
    related: tuple[str, ...] = ()

    def contains(self, word: str) -> bool:
        return word in self.words or word in self.related


DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(
        name="realeza",
        weight=2.0,
        words=(
            "rei", "rainha", "príncipe", "princesa", "imperador", "imperatriz",
            "monarca", "coroa", "trono", "palácio", "reino", "império", "nobre",
            "duque", "duquesa", "conde", "condessa", "barão", "baronesa",
        ),
        related=(
            "poder", "governo", "autoridade", "estado", "país", "comandar",
            "liderar", "soberano", "majestade", "real", "nobreza",
        ),
    ),
    Category(
        name="família",
        weight=2.5,
        words=(
            "pai", "mãe", "filho", "filha", "irmão", "irmã", "avô", "avó",
            "bisavô", "bisavó", "tio", "tia", "primo", "prima", "marido",
            "esposa", "namorado", "namorada", "noivo", "noiva", "família",
            "parente", "cunhado", "cunhada", "sogro", "sogra",
        ),
        related=(
            "amor", "carinho", "casa", "lar", "união", "relacionamento",
            "casamento", "parentesco", "laço", "vínculo",
        ),
    ),
    Category(
        name="pessoas",
        weight=2.0,
        words=(
            "homem", "mulher", "criança", "jovem", "adulto", "adulta", "idoso",
            "idosa", "bebê", "menino", "menina", "rapaz", "moça", "pessoa",
            "gente", "indivíduo", "ser", "humano", "cidadão", "cidadã",
        ),
        related=(
            "vida", "sociedade", "comunidade", "população", "humanidade",
            "gênero", "idade",
        ),
    ),
    Category(
        name="profissões",
        weight=2.0,
        words=(
            "médico", "médica", "doutora", "enfermeiro", "enfermeira",
            "professor", "professora", "engenheiro", "engenheira", "advogado",
            "advogada", "policial", "bombeiro", "bombeira", "dentista",
            "veterinário", "veterinária", "cozinheiro", "cozinheira", "garçom",
            "garçonete", "motorista", "piloto", "soldado", "artista", "músico",
            "escritor", "escritora", "jornalista", "arquiteto", "arquiteta",
            "psicólogo", "psicóloga", "farmacêutico", "farmacêutica",
            "contador", "contadora",
        ),
        related=(
            "trabalho", "carreira", "profissão", "emprego", "salário",
            "ocupação", "ofício", "especialista",
        ),
    ),
    Category(
        name="emoções",
        weight=2.5,
        words=(
            "amor", "felicidade", "tristeza", "raiva", "medo", "alegria",
            "saudade", "esperança", "paz", "paixão", "ódio", "inveja", "ciúme",
            "carinho", "amizade", "bondade", "compaixão", "gratidão",
            "ansiedade", "nervosismo", "calma", "serenidade", "entusiasmo",
            "melancolia",
        ),
        related=(
            "sentimento", "coração", "alma", "espírito", "emocional", "afeto",
            "humor", "estado",
        ),
    ),
    Category(
        name="objetos",
        weight=1.5,
        words=(
            "casa", "carro", "livro", "telefone", "computador", "mesa",
            "cadeira", "cama", "sofá", "televisão", "roupa", "sapato",
            "relógio", "chave", "dinheiro", "porta", "janela", "espelho",
            "lâmpada", "geladeira",
        ),
        related=(
            "objeto", "coisa", "item", "material", "produto", "utensílio",
            "ferramenta", "equipamento",
        ),
    ),
    Category(
        name="natureza",
        weight=2.0,
        words=(
            "água", "fogo", "terra", "ar", "sol", "lua", "estrela", "nuvem",
            "chuva", "vento", "árvore", "flor", "planta", "animal", "cachorro",
            "gato", "pássaro", "peixe", "borboleta", "abelha", "floresta",
            "montanha", "rio", "mar", "oceano",
        ),
        related=(
            "natural", "ambiente", "mundo", "planeta", "universo", "ecologia",
            "vida", "selvagem",
        ),
    ),
    Category(
        name="abstratos",
        weight=1.8,
        words=(
            "vida", "morte", "tempo", "espaço", "conhecimento", "sabedoria",
            "verdade", "mentira", "liberdade", "justiça", "poder", "força",
            "energia", "destino", "sorte", "futuro", "passado", "presente",
        ),
        related=(
            "conceito", "ideia", "pensamento", "filosofia", "abstrato",
            "teoria", "princípio",
        ),
    ),
)

# Display palette for list badges and graph nodes.
DEFAULT_COLORS: dict[str, str] = {
    "realeza": "#f59e0b",
    "família": "#ef4444",
    "pessoas": "#10b981",
    "profissões": "#8b5cf6",
    "emoções": "#f97316",
    "objetos": "#6b7280",
    "natureza": "#059669",
    "abstratos": "#7c3aed",
    GENERAL_CATEGORY: "#374151",
}


class CategoryModel:
    """Immutable, ordered category table."""

    def __init__(self, categories: Iterable[Category] = DEFAULT_CATEGORIES) -> None:
        self.categories: tuple[Category, ...] = tuple(
            Category(
                name=category.name,
                weight=float(category.weight),
                words=tuple(w.strip().lower() for w in category.words),
                related=tuple(w.strip().lower() for w in category.related),
            )
            for category in categories
        )
        names = [category.name for category in self.categories]
        if len(set(names)) != len(names):
            raise ValueError("Category names must be unique")
        if GENERAL_CATEGORY in names:
            raise ValueError(f"{GENERAL_CATEGORY!r} is reserved for unmatched words")

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> CategoryModel:
        """Build a model from ``{name: {"weight", "words", "related"}}``."""
        categories = []
        for name, entry in data.items():
            if not isinstance(entry, dict) or not isinstance(entry.get("words"), list):
                raise ValueError(f"Category {name!r} needs a 'words' list")
            categories.append(
                Category(
                    name=name,
                    weight=float(entry.get("weight", GENERAL_WEIGHT)),
                    words=tuple(str(w) for w in entry["words"]),
                    related=tuple(str(w) for w in entry.get("related", [])),
                )
            )
        return cls(categories)

    @classmethod
    def from_json(cls, path: str | Path) -> CategoryModel:
        return cls.from_mapping(json.loads(Path(path).read_text(encoding="utf-8")))

    def category_of(self, word: str) -> CategoryMatch:
        lowered = word.strip().lower()
        for category in self.categories:
            if category.contains(lowered):
                return CategoryMatch(category.name, category.weight)
        return CategoryMatch(GENERAL_CATEGORY, GENERAL_WEIGHT)

    def vocabulary(self) -> list[str]:
        """All canonical and related words, deduplicated in table order."""
        seen: dict[str, None] = {}
        for category in self.categories:
            for word in (*category.words, *category.related):
                seen.setdefault(word, None)
        return list(seen)

    def colors(self) -> dict[str, str]:
        return {
            name: color
            for name, color in DEFAULT_COLORS.items()
            if name == GENERAL_CATEGORY or any(c.name == name for c in self.categories)
        }

    def stats(self) -> dict[str, Any]:
        per_category = {
            category.name: {
                "words": len(category.words),
                "related": len(category.related),
                "total": len(category.words) + len(category.related),
                "weight": category.weight,
            }
            for category in self.categories
        }
        return {
            "total_words": sum(entry["total"] for entry in per_category.values()),
            "unique_words": len(self.vocabulary()),
            "categories": per_category,
        }
