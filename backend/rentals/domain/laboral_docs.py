# backend/rentals/domain/laboral_docs.py
from __future__ import annotations

import copy
from typing import Any, Optional

LABORAL_FOLDER = "laboral_financial"
IDENTITY_FOLDER = "identity"

OBLIGATORY_FIELDS: dict[str, str] = {
    "ultima_nomina": "Última nómina",
    "vida_laboral": "Vida laboral",
    "contrato_laboral": "Contrato laboral",
    "ultimo_irpf": "Último IRPF presentado",
    "ultimo_iva": "Último IVA",
    "certificado_administracion_publica": "Certificado de administración pública",
    "justificante_bancario": "Justificante bancario",
    "demostracion_ingresos": "Demostración de ingresos",
    "justificantes_bancarios_3_meses": "Justificantes bancarios de los ingresos obtenidos en los últimos 3 meses",
    "matricula_curso_carnet_estudiante": "Matrícula del curso o carnet de estudiante en vigor",
    "demostracion_ingresos_avalista": "Demostración de ingresos propios o de un avalista",
}

COMPLEMENTARY_DOC_TYPES: tuple[str, ...] = (
    "Saldo en cuenta bancaria",
    "Fondo de inversión / ahorro",
    "Fondo de pensión privado",
    "Ayudas",
    "Rentas de alquiler",
    "Otros",
)
OTHER_DOC_TYPE = "Otros"

EMPLOYMENT_FIELDS = ("employment_status", "employment_contract_type")

_SALARIED = ("Empleado", "Funcionario")

_BY_CONTRACT: dict[str, list[str]] = {
    "Contrato indefinido": ["ultima_nomina"],
    "Contrato temporal": ["ultima_nomina", "vida_laboral"],
    "Contrato laboral reciente": ["contrato_laboral"],
}

_BY_STATUS: dict[str, list[str]] = {
    "Autónomo": ["ultimo_irpf", "ultimo_iva"],
    "Pensionista": ["certificado_administracion_publica", "justificante_bancario"],
    "Ingresos en el exterior": ["demostracion_ingresos", "justificantes_bancarios_3_meses"],
    "Estudiante": ["matricula_curso_carnet_estudiante", "demostracion_ingresos_avalista"],
    "Desempleado": ["demostracion_ingresos_avalista"],
}


def obligatory_field_keys(employment_status: Optional[str], employment_contract_type: Optional[str]) -> list[str]:
    if not employment_status:
        return []
    if employment_status in _SALARIED:
        return list(_BY_CONTRACT.get(employment_contract_type or "", []))
    return list(_BY_STATUS.get(employment_status, []))


def normalize_docs(raw: Any) -> dict[str, Any]:
    """{obligatory: {}, complementary: []} shape, copied so edits are detected on save."""
    docs = copy.deepcopy(raw) if isinstance(raw, dict) else {}
    if not isinstance(docs.get("obligatory"), dict):
        docs["obligatory"] = {}
    if not isinstance(docs.get("complementary"), list):
        docs["complementary"] = []
    return docs


def employment_changed(current: dict[str, Any], updates: dict[str, Any]) -> bool:
    return any(k in updates and updates[k] != current.get(k) for k in EMPLOYMENT_FIELDS)
