# roster_core/config.py
from __future__ import annotations
import os
import textwrap
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel

from .constants import ATHLETES_TABLE, PROGRESS_TABLE, WORKOUT_LOGS_TABLE

# ===== App defaults =====
DEFAULT_CONFIG = {
    "supabase_url": "",
    "supabase_key": "",
    "athletes_table": ATHLETES_TABLE,
    "workout_logs_table": WORKOUT_LOGS_TABLE,
    "progress_table": PROGRESS_TABLE,
    "fixtures_path": "assets/fixtures.yaml",
    "logs_fetch_limit": 100,
}

class AppConfig(BaseModel):
    supabase_url: str = ""
    supabase_key: str = ""
    athletes_table: str = ATHLETES_TABLE
    workout_logs_table: str = WORKOUT_LOGS_TABLE
    progress_table: str = PROGRESS_TABLE
    fixtures_path: str = "assets/fixtures.yaml"
    logs_fetch_limit: int = 100

    @property
    def remote_configured(self) -> bool:
        # both set and the URL looks like a real endpoint
        return bool(self.supabase_url and self.supabase_url.startswith("http") and self.supabase_key)

_ENV_KEYS = {
    "supabase_url": "SUPABASE_URL",
    "supabase_key": "SUPABASE_KEY",
    "athletes_table": "ROSTER_ATHLETES_TABLE",
    "workout_logs_table": "ROSTER_WORKOUT_LOGS_TABLE",
    "progress_table": "ROSTER_PROGRESS_TABLE",
    "fixtures_path": "ROSTER_FIXTURES_PATH",
}

def load_config(env: Optional[Mapping[str, str]] = None,
                secrets: Optional[Mapping[str, Any]] = None) -> AppConfig:
    """
    Secrets (Streamlit's st.secrets) win over the environment; anything
    missing from both keeps its DEFAULT_CONFIG value.
    """
    env = os.environ if env is None else env
    secrets = secrets or {}
    values = dict(DEFAULT_CONFIG)
    for field, key in _ENV_KEYS.items():
        if secrets.get(key):
            values[field] = str(secrets[key])
        elif env.get(key):
            values[field] = env[key]
    # anon key is accepted under its Supabase name too
    if not values["supabase_key"]:
        values["supabase_key"] = str(secrets.get("SUPABASE_ANON_KEY") or env.get("SUPABASE_ANON_KEY") or "")
    return AppConfig(**values)

# ===== Demo fixtures (local-only mode) =====
DEFAULT_FIXTURES_YAML = textwrap.dedent("""\
athletes:
  - id: "1"
    name: DEMO John Doe
    avatar_url: null
    payment_status: pending
    cut_day: "05"
    snatch_rm: "95"
    clean_rm: "115"
    access_code: JD01
  - id: "2"
    name: DEMO Sarah Connor
    avatar_url: null
    payment_status: active
    cut_day: "15"
    snatch_rm: "65"
    clean_rm: "85"
    access_code: SC02
  - id: "3"
    name: DEMO Mike Tyson
    avatar_url: null
    payment_status: pending
    cut_day: "01"
    snatch_rm: "105"
    clean_rm: "135"
    access_code: MT03
workout_logs: []
athlete_progress: []
""")

def parse_fixtures(text: str) -> Dict[str, List[Dict[str, Any]]]:
    obj = yaml.safe_load(text) or {}
    if not isinstance(obj, dict):
        raise ValueError("Fixtures must be a mapping of table name -> list of rows.")
    for table, rows in obj.items():
        if not isinstance(rows, list):
            raise ValueError(f"Fixture table {table} must be a list of rows.")
    return {str(t): [_text_keys(dict(r)) for r in rows] for t, rows in obj.items()}

# unquoted YAML ids load as ints; the stores compare ids as text
_KEY_COLUMNS = ("id", "athlete_id")

def _text_keys(row: Dict[str, Any]) -> Dict[str, Any]:
    for k in _KEY_COLUMNS:
        if row.get(k) is not None:
            row[k] = str(row[k])
    return row

def load_fixtures(path: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
    if path and os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            return parse_fixtures(f.read())
    return parse_fixtures(DEFAULT_FIXTURES_YAML)
