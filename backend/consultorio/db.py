import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    rut TEXT,
    name TEXT NOT NULL,
    lastName TEXT NOT NULL,
    username TEXT NOT NULL UNIQUE,
    email TEXT NOT NULL UNIQUE,
    emailValidated INTEGER NOT NULL DEFAULT 0,
    password TEXT NOT NULL,
    token TEXT,
    phone TEXT,
    address TEXT,
    zipCode TEXT,
    city TEXT,
    img TEXT,
    signature TEXT,
    expirationDate TEXT,
    createdAt TEXT NOT NULL,
    updatedAt TEXT,
    isActive INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS patients (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    rut TEXT NOT NULL,
    nombres TEXT NOT NULL,
    apellidos TEXT NOT NULL,
    fecha_nacimiento TEXT NOT NULL,
    telefono TEXT NOT NULL,
    email TEXT NOT NULL,
    direccion TEXT NOT NULL,
    ciudad TEXT NOT NULL,
    codigo_postal TEXT,
    alergias TEXT,
    medicamentos_actuales TEXT,
    enfermedades_cronicas TEXT,
    cirugias_previas TEXT,
    hospitalizaciones_previas TEXT,
    notas_medicas TEXT,
    id_doctor INTEGER NOT NULL REFERENCES users(id),
    createdat TEXT NOT NULL,
    updatedat TEXT,
    isactive INTEGER NOT NULL DEFAULT 1
);
CREATE UNIQUE INDEX IF NOT EXISTS patients_rut_doctor_unique
    ON patients (rut, id_doctor) WHERE isactive = 1;

CREATE TABLE IF NOT EXISTS budgets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    patient_id INTEGER NOT NULL REFERENCES patients(id) ON DELETE CASCADE,
    user_id INTEGER NOT NULL REFERENCES users(id),
    total_amount REAL NOT NULL DEFAULT 0,
    status TEXT NOT NULL DEFAULT 'pendiente',
    budget_type TEXT NOT NULL DEFAULT 'odontologico',
    created_at TEXT NOT NULL,
    updated_at TEXT
);
CREATE UNIQUE INDEX IF NOT EXISTS budgets_patient_active_unique
    ON budgets (patient_id) WHERE status = 'activo';

CREATE TABLE IF NOT EXISTS budget_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    budget_id INTEGER NOT NULL REFERENCES budgets(id) ON DELETE CASCADE,
    pieza TEXT,
    accion TEXT NOT NULL,
    valor REAL NOT NULL,
    orden INTEGER NOT NULL DEFAULT 0,
    status TEXT NOT NULL DEFAULT 'pending',
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS treatments (
    id_tratamiento INTEGER PRIMARY KEY AUTOINCREMENT,
    id_paciente INTEGER NOT NULL REFERENCES patients(id),
    id_doctor INTEGER NOT NULL REFERENCES users(id),
    fecha_control TEXT NOT NULL,
    hora_control TEXT NOT NULL,
    fecha_proximo_control TEXT,
    hora_proximo_control TEXT,
    nombre_servicio TEXT NOT NULL,
    producto TEXT,
    lote_producto TEXT,
    fecha_venc_producto TEXT,
    dilucion TEXT,
    foto1 TEXT,
    foto2 TEXT,
    descripcion TEXT,
    budget_item_id INTEGER REFERENCES budget_items(id) ON DELETE SET NULL,
    status TEXT NOT NULL DEFAULT 'pending',
    created_at TEXT NOT NULL,
    updated_at TEXT,
    is_active INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS prescriptions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    patient_id INTEGER NOT NULL REFERENCES patients(id) ON DELETE CASCADE,
    user_id INTEGER NOT NULL REFERENCES users(id),
    medications TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS appointments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    doctor_id INTEGER NOT NULL REFERENCES users(id),
    patient_id INTEGER REFERENCES patients(id),
    guest_name TEXT,
    guest_email TEXT,
    guest_phone TEXT,
    guest_rut TEXT,
    title TEXT NOT NULL,
    description TEXT,
    appointment_date TEXT NOT NULL,
    duration INTEGER NOT NULL DEFAULT 60,
    status TEXT NOT NULL DEFAULT 'pending',
    type TEXT NOT NULL DEFAULT 'consultation',
    notes TEXT,
    cancellation_reason TEXT,
    confirmation_token TEXT UNIQUE,
    confirmed_at TEXT,
    reminder_sent INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS notifications (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    type TEXT NOT NULL,
    doctor_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    appointment_id INTEGER REFERENCES appointments(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    message TEXT NOT NULL,
    patient_name TEXT,
    appointment_date TEXT,
    is_read INTEGER NOT NULL DEFAULT 0,
    read_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS locations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL REFERENCES users(id),
    name TEXT NOT NULL,
    address TEXT NOT NULL,
    city TEXT NOT NULL,
    google_calendar_id TEXT,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS services (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL REFERENCES users(id),
    nombre TEXT NOT NULL,
    tipo TEXT NOT NULL,
    valor REAL NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS audit_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    patient_id INTEGER NOT NULL REFERENCES patients(id) ON DELETE CASCADE,
    entity_type TEXT NOT NULL,
    entity_id INTEGER NOT NULL,
    action TEXT NOT NULL,
    old_values TEXT,
    new_values TEXT,
    changed_by INTEGER NOT NULL REFERENCES users(id),
    notes TEXT,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_audit_logs_patient_id ON audit_logs (patient_id);
"""


def now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


class Database:
    """Acceso a SQLite: una conexión por operación, filas devueltas como dict."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._ensure()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _ensure(self) -> None:
        with self.connect() as conn:
            conn.executescript(SCHEMA)
        logger.info("Esquema de base de datos verificado en %s", self.path)

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Conexión transaccional: commit al salir, rollback si hay excepción."""
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        with self.connect() as conn:
            row = conn.execute(sql, params).fetchone()
        return dict(row) if row else None

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        with self.connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [dict(r) for r in rows]

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Ejecuta una sentencia y devuelve la cantidad de filas afectadas."""
        with self.connect() as conn:
            return conn.execute(sql, params).rowcount

    def insert(self, table: str, values: Mapping[str, Any], conn: Optional[sqlite3.Connection] = None) -> int:
        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        sql = f"INSERT INTO {table} ({columns}) VALUES ({placeholders})"
        if conn is not None:
            return conn.execute(sql, tuple(values.values())).lastrowid
        with self.connect() as own:
            return own.execute(sql, tuple(values.values())).lastrowid

    def update(
        self,
        table: str,
        values: Mapping[str, Any],
        where: str,
        params: Sequence[Any] = (),
        conn: Optional[sqlite3.Connection] = None,
    ) -> int:
        assignments = ", ".join(f"{column} = ?" for column in values)
        sql = f"UPDATE {table} SET {assignments} WHERE {where}"
        args = tuple(values.values()) + tuple(params)
        if conn is not None:
            return conn.execute(sql, args).rowcount
        with self.connect() as own:
            return own.execute(sql, args).rowcount
