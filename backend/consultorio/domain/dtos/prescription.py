from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..fields import FieldErrors, parse_int
from ..result import Err, Ok, Result


@dataclass(frozen=True)
class SavePrescriptionDto:
    patientId: int
    medications: str

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> Result[SavePrescriptionDto]:
        errors = FieldErrors()

        raw_patient = data.get("patientId")
        patient_id = None
        if raw_patient in (None, "", 0):
            errors.add("patientId", "ID del paciente es requerido")
        else:
            patient_id = parse_int(raw_patient)
            if patient_id is None:
                errors.add("patientId", "ID del paciente debe ser un número")

        medications = data.get("medications")
        if medications in (None, ""):
            errors.add("medications", "Las medicaciones son requeridas")
        elif not isinstance(medications, str):
            errors.add("medications", "Las medicaciones deben ser texto")
        elif not medications.strip():
            errors.add("medications", "Las medicaciones no pueden estar vacías")

        if errors:
            return Err(tuple(errors.messages))
        return Ok(cls(patientId=patient_id, medications=medications.strip()))
