from __future__ import annotations
from typing import Dict, List

# -----------------------------
# Tables
# -----------------------------
ATHLETES_TABLE = "athletes"
WORKOUT_LOGS_TABLE = "workout_logs"
PROGRESS_TABLE = "athlete_progress"

# -----------------------------
# Athlete fields
# -----------------------------
LIFT_FIELDS: List[str] = [
    "snatch_rm", "clean_rm", "back_squat", "front_squat",
    "bench_press", "deadlift", "shoulder_press", "push_press",
]
BENCHMARK_FIELDS: List[str] = ["karen", "burpees_100"]
METRIC_FIELDS: List[str] = LIFT_FIELDS + BENCHMARK_FIELDS

PAYMENT_STATUSES = ["active", "pending"]
DEFAULT_PAYMENT_STATUS = "pending"

# Row the dashboard's "New Athlete" button starts from
NEW_ATHLETE_DEFAULTS: Dict[str, str] = {
    "name": "Nuevo Atleta",
    "payment_status": "pending",
    "cut_day": "01",
    "snatch_rm": "0",
    "clean_rm": "0",
}

ACCESS_CODE_LENGTH = 4

# -----------------------------
# Import: canonical fields + header aliases
# -----------------------------
# canonical -> label shown in the mapping editor ("" means ignore)
IMPORT_FIELDS: Dict[str, str] = {
    "": "-- Ignorar --",
    "name": "Nombre",
    "cut_day": "Fecha de Corte",
    "referral_source": "Como Llegó",
    "back_squat": "Back Squat",
    "bench_press": "Bench Press",
    "deadlift": "Deadlift",
    "shoulder_press": "Shoulder Press",
    "front_squat": "Front Squat",
    "clean_rm": "Clean",
    "snatch_rm": "Snatch",
    "push_press": "Push Press",
    "karen": "Karen",
    "burpees_100": "100 Burpees",
    "access_code": "Código de Acceso",
}

HEADER_ALIASES: Dict[str, List[str]] = {
    # canonical -> lower-case aliases (Spanish / English)
    "name": ["clientes", "cliente", "nombre", "name", "athlete", "atleta"],
    "cut_day": ["fecha de corte", "fecha_de_corte", "corte", "cut day", "cut_day"],
    "referral_source": ["como llego", "como llegó", "referido", "referral", "referral source"],
    "back_squat": ["back squat", "backsquat", "back_squat"],
    "bench_press": ["bench press", "benchpress", "bench", "bench_press"],
    "deadlift": ["deadlift", "peso muerto"],
    "shoulder_press": ["shoulder press", "shoulder p", "press hombro", "shoulder_press"],
    "front_squat": ["front squat", "frontsquat", "front_squat"],
    "clean_rm": ["clean", "clean rm", "clean_rm"],
    "snatch_rm": ["snatch", "snatch rm", "snatch_rm", "arranque"],
    "push_press": ["push press", "pushpress", "push_press"],
    "karen": ["karen"],
    "burpees_100": ["100 burpees", "burpees", "burpees_100"],
    "access_code": ["access code", "access_code", "codigo", "código", "pin"],
}

# flat lookup: alias -> canonical
ALIAS_LOOKUP: Dict[str, str] = {
    alias: canon for canon, aliases in HEADER_ALIASES.items() for alias in aliases
}

# ---------------------
# Normalization helpers
# ---------------------
def normalize_header(h) -> str:
    if h is None:
        return ""
    return str(h).strip().lower()

def is_metric_field(field: str) -> bool:
    return field in METRIC_FIELDS
