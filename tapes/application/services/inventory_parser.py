"""
Parser de la planilla de inventario (Google Sheets -> Tape).

La planilla no tiene esquema fijo: la primera fila son encabezados y las
columnas se descubren por substring (case-insensitive). Se mantiene libre
de I/O para poder testearlo facilmente; list_tapes es el unico punto que
toca la fuente externa.

Politica de errores:
- Planilla vacia o encabezados irresolubles -> StructuralError (fatal).
- Fila invalida -> SyncWarning con el numero de fila; la fila se descarta.
- IDs duplicados -> se descartan TODAS las filas con ese id (segunda pasada).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from loguru import logger

from tapes.application.interfaces.sources import InventorySource
from tapes.domain.entities import Accepted, Outcome, Rejected, SyncWarning, Tape
from tapes.shared.exceptions import StructuralError, TransportError

# Substrings que identifican cada columna. El orden importa: un encabezado
# se asigna a la primera columna que matchea.
REQUIRED_COLUMNS = ("id", "title", "year", "runtime")
OPTIONAL_COLUMNS = ("contributor",)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class RowParseError(ValueError):
    """Una fila no se pudo convertir en Tape."""


@dataclass(frozen=True)
class ColumnMap:
    """
    Indice (0 = columna A) de cada valor que nos interesa en una fila.

    tags mapea nombre de tag -> indice de su columna.
    """

    id: int
    title: int
    year: int
    runtime: int
    contributor: Optional[int] = None
    tags: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ColumnResolution:
    """Resultado de resolver encabezados: columns si ok, error si no."""

    columns: Optional[ColumnMap] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.columns is not None


@dataclass(frozen=True)
class InventoryResult:
    """Cintas validas ordenadas por id + warnings en orden de fila."""

    tapes: List[Tape]
    warnings: List[SyncWarning]


def parse_tag_heading(heading: str) -> str:
    """
    Retorna el nombre de tag de un encabezado "Pregunta?", o "" si no es tag.

    Se eliminan espacios y se pasa a minusculas: "Arts + Crafts?" -> "arts+crafts".
    """
    normalized = heading.replace(" ", "").lower()
    # El primer "?" tiene que ser el ultimo caracter
    if len(normalized) > 1 and normalized.find("?") == len(normalized) - 1:
        return normalized[:-1]
    return ""


def resolve_columns(headings: Sequence[str]) -> ColumnResolution:
    """
    Construye el ColumnMap a partir de la fila de encabezados.

    Falla si falta alguna columna obligatoria (incluso las opcionales a
    nivel de valor, como year) o si una columna aparece mas de una vez.
    La columna contributor puede faltar: todas las cintas quedan sin contributor.
    """
    indices: Dict[str, int] = {}
    tags: Dict[str, int] = {}
    for i, heading in enumerate(headings):
        tag = parse_tag_heading(heading)
        if tag:
            tags[tag] = i
            continue
        lowered = heading.lower()
        # contributor primero: "Contributor ID" no debe contar como id
        for name in OPTIONAL_COLUMNS + REQUIRED_COLUMNS:
            if name in lowered:
                if name in indices:
                    return ColumnResolution(error=f"duplicate index for '{name}' column")
                indices[name] = i
                break

    for name in REQUIRED_COLUMNS:
        if name not in indices:
            return ColumnResolution(error=f"could not resolve '{name}' column")

    return ColumnResolution(
        columns=ColumnMap(
            id=indices["id"],
            title=indices["title"],
            year=indices["year"],
            runtime=indices["runtime"],
            contributor=indices.get("contributor"),
            tags=tags,
        )
    )


def read_cell(values: Sequence[str], index: int) -> str:
    """Valor de la celda o "" si la fila viene recortada antes de esa columna."""
    if 0 <= index < len(values):
        return values[index]
    return ""


def _parse_int(name: str, raw: str) -> int:
    if not _INTEGER_RE.fullmatch(raw):
        raise RowParseError(f"'{name}' value must be an integer (got '{raw}')")
    return int(raw)


def _parse_optional_positive(name: str, raw: str) -> Optional[int]:
    # Celda vacia = desconocido, no cero
    if raw == "":
        return None
    value = _parse_int(name, raw)
    if value <= 0:
        raise RowParseError(f"'{name}' int value must be positive (got {value})")
    return value


def parse_row(columns: ColumnMap, values: Sequence[str], row_number: int) -> Tape:
    """
    Convierte una fila en Tape o lanza RowParseError.

    No valida unicidad del id: eso se hace sobre el conjunto completo.
    """
    id_value = read_cell(values, columns.id)
    if id_value == "":
        raise RowParseError("'id' value is required")
    tape_id = _parse_int("id", id_value)

    title = read_cell(values, columns.title)
    if title == "":
        raise RowParseError("'title' value is required")

    year = _parse_optional_positive("year", read_cell(values, columns.year))
    runtime = _parse_optional_positive("runtime", read_cell(values, columns.runtime))

    contributor = None
    if columns.contributor is not None:
        contributor = read_cell(values, columns.contributor) or None

    tags = frozenset(
        tag for tag, index in columns.tags.items() if read_cell(values, index).strip()
    )

    return Tape(
        id=tape_id,
        title=title,
        year=year,
        runtime_minutes=runtime,
        contributor_id=contributor,
        tags=tags,
        row_number=row_number,
    )


def classify_row(columns: ColumnMap, values: Sequence[str], row_number: int) -> Outcome[Tape]:
    """Accepted(tape) o Rejected(warning) para una fila."""
    try:
        return Accepted(parse_row(columns, values, row_number))
    except RowParseError as e:
        return Rejected(SyncWarning(location=row_number, message=str(e)))


def _exclude_duplicate_ids(candidates: List[Tape]) -> tuple[List[Tape], List[SyncWarning]]:
    groups: Dict[int, List[Tape]] = {}
    for tape in candidates:
        groups.setdefault(tape.id, []).append(tape)

    unique: List[Tape] = []
    duplicates: List[List[Tape]] = []
    for group in groups.values():
        if len(group) == 1:
            unique.append(group[0])
        else:
            duplicates.append(group)

    # Un solo warning por id, ubicado en la segunda aparicion
    duplicates.sort(key=lambda group: group[1].row_number)
    warnings = [
        SyncWarning(
            location=group[1].row_number,
            message=(
                f"duplicate tape ID {group[0].id}: used by both "
                f"'{group[1].title}' and '{group[0].title}'; accepting neither"
            ),
        )
        for group in duplicates
    ]
    unique.sort(key=lambda tape: tape.id)
    return unique, warnings


def parse_inventory(grid: Sequence[Sequence[str]]) -> InventoryResult:
    """
    Parsea la grilla completa de la planilla.

    Raises:
        StructuralError: si la grilla esta vacia o los encabezados no resuelven.
    """
    if len(grid) == 0:
        raise StructuralError("inventory spreadsheet has no values")

    resolution = resolve_columns(grid[0])
    if not resolution.ok:
        raise StructuralError(
            f"failed to parse headings from first row of inventory spreadsheet: {resolution.error}"
        )
    columns = resolution.columns

    candidates: List[Tape] = []
    warnings: List[SyncWarning] = []
    for row_number, values in enumerate(grid[1:], start=2):
        outcome = classify_row(columns, values, row_number)
        if isinstance(outcome, Rejected):
            warnings.append(outcome.warning)
        else:
            candidates.append(outcome.value)

    tapes, duplicate_warnings = _exclude_duplicate_ids(candidates)
    return InventoryResult(tapes=tapes, warnings=warnings + duplicate_warnings)


def list_tapes(source: InventorySource) -> InventoryResult:
    """
    Lee la planilla desde la fuente y la parsea.

    Raises:
        TransportError: si la fuente no responde.
        StructuralError: si la planilla no tiene la forma esperada.
    """
    try:
        grid = source.get_values()
    except Exception as e:
        raise TransportError(
            f"failed to get values from inventory spreadsheet: {e}", source="sheets"
        ) from e

    result = parse_inventory(grid)
    logger.info(
        f"Inventario parseado: {len(result.tapes)} cintas validas, "
        f"{len(result.warnings)} warnings"
    )
    return result
