# backend/rentals/domain/kanban.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, TypeVar

T = TypeVar("T")

CAPTACION_STAGES: tuple[str, ...] = (
    "Viviendas Prophero",
    "Listo para Alquilar",
    "Publicado",
    "Inquilino aceptado",
    "Pendiente de trámites",
)

PORTFOLIO_STAGES: tuple[str, ...] = (
    "Alquilado",
    "Actualización de Renta (IPC)",
    "Gestión de Renovación",
    "Finalización y Salida",
)

KANBAN_STAGES: dict[str, tuple[str, ...]] = {
    "captacion": CAPTACION_STAGES,
    "portfolio": PORTFOLIO_STAGES,
}

PUBLISHED_STAGE = "Publicado"


@dataclass(frozen=True)
class LeadColumn:
    id: str
    title: str
    phases: tuple[str, ...]


LEAD_COLUMNS: tuple[LeadColumn, ...] = (
    LeadColumn("perfil-cualificado", "Perfil cualificado", ("Perfil cualificado",)),
    LeadColumn("visita-agendada", "Visita agendada", ("Visita agendada",)),
    LeadColumn("recogiendo-informacion", "Recogiendo Información", ("Recogiendo Información",)),
    LeadColumn("calificacion-en-curso", "Calificación en curso", ("Calificación en curso",)),
    LeadColumn("calificacion-aprobada", "Inquilino presentado", ("Inquilino presentado", "Calificación aprobada")),
    LeadColumn("inquilino-aceptado", "Inquilino aceptado", ("Inquilino aceptado",)),
)


def stages_for(kanban_type: Optional[str]) -> tuple[str, ...]:
    if kanban_type is None:
        return CAPTACION_STAGES + PORTFOLIO_STAGES
    try:
        return KANBAN_STAGES[kanban_type]
    except KeyError:
        raise ValueError(f"Unknown kanbanType: {kanban_type}") from None


def lead_column_id(phase: Optional[str]) -> str:
    for col in LEAD_COLUMNS:
        if phase in col.phases:
            return col.id
    return LEAD_COLUMNS[0].id


def group_property_cards(
    rows: Iterable[T], stages: Iterable[str], *, stage_of: Callable[[T], Optional[str]]
) -> list[dict[str, Any]]:
    stages = list(stages)
    buckets: dict[str, list[T]] = {s: [] for s in stages}
    for row in rows:
        st = stage_of(row)
        if st in buckets:
            buckets[st].append(row)
    return [{"id": s, "title": s, "items": buckets[s], "count": len(buckets[s])} for s in stages]


def group_lead_cards(rows: Iterable[T], *, phase_of: Callable[[T], Optional[str]]) -> list[dict[str, Any]]:
    buckets: dict[str, list[T]] = {c.id: [] for c in LEAD_COLUMNS}
    for row in rows:
        buckets[lead_column_id(phase_of(row))].append(row)
    return [{"id": c.id, "title": c.title, "items": buckets[c.id], "count": len(buckets[c.id])} for c in LEAD_COLUMNS]
