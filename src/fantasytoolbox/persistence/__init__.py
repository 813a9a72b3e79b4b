"""Persistence layer for linked ESPN credentials and league selections."""

from __future__ import annotations

import sqlite3
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class EspnCredentials:
    swid: str
    espn_s2: str
    league_id: str
    league_year: int
    team_id: Optional[int] = None

    @property
    def cookie_header(self) -> str:
        return f"SWID={self.swid}; espn_s2={self.espn_s2}"


@dataclass
class ConnectionStatus:
    user_email: str
    has_auth: bool
    has_league: bool
    league_id: Optional[str]
    league_year: Optional[int]
    team_id: Optional[int]
    updated_at: Optional[datetime]

    @property
    def connected(self) -> bool:
        return self.has_auth and self.has_league


class CredentialStore:
    """SQLite-backed store of per-user ESPN cookies and league data."""

    def __init__(self, db_path: Path | str):
        self._use_uri = False
        if isinstance(db_path, str) and db_path.startswith("file:"):
            self.db_path: Path | str = db_path
            self._use_uri = True
        else:
            self.db_path = Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = sqlite3.connect(self.db_path)
            except sqlite3.OperationalError:
                fallback_dir = Path(tempfile.gettempdir()) / "fantasytoolbox-runtime"
                fallback_dir.mkdir(parents=True, exist_ok=True)
                fallback = fallback_dir / "fantasytoolbox.sqlite"
                conn = sqlite3.connect(fallback)
                self.db_path = fallback
                self._create_schema(conn)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                email TEXT PRIMARY KEY,
                created_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS espn_auth (
                email TEXT PRIMARY KEY REFERENCES users(email),
                swid TEXT NOT NULL,
                espn_s2 TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS league_data (
                email TEXT PRIMARY KEY REFERENCES users(email),
                league_id TEXT NOT NULL,
                league_year INTEGER NOT NULL,
                team_id INTEGER,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.commit()

    @staticmethod
    def _normalize_email(email: str) -> str:
        normalized = email.strip().lower()
        if not normalized:
            raise ValueError("email must not be empty")
        return normalized

    def _ensure_user(self, conn: sqlite3.Connection, email: str, now_iso: str) -> None:
        conn.execute(
            "INSERT OR IGNORE INTO users (email, created_at) VALUES (?, ?)",
            (email, now_iso),
        )

    def upsert_espn_auth(self, email: str, *, swid: str, espn_s2: str) -> None:
        email = self._normalize_email(email)
        now_iso = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            self._ensure_user(conn, email, now_iso)
            conn.execute(
                """
                INSERT INTO espn_auth (email, swid, espn_s2, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(email) DO UPDATE SET
                    swid = excluded.swid,
                    espn_s2 = excluded.espn_s2,
                    updated_at = excluded.updated_at
                """,
                (email, swid.strip(), espn_s2.strip(), now_iso),
            )
            conn.commit()

    def upsert_league_data(
        self,
        email: str,
        *,
        league_id: str,
        league_year: int,
        team_id: Optional[int] = None,
    ) -> None:
        email = self._normalize_email(email)
        now_iso = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            self._ensure_user(conn, email, now_iso)
            conn.execute(
                """
                INSERT INTO league_data (email, league_id, league_year, team_id, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(email) DO UPDATE SET
                    league_id = excluded.league_id,
                    league_year = excluded.league_year,
                    team_id = excluded.team_id,
                    updated_at = excluded.updated_at
                """,
                (email, league_id.strip(), int(league_year), team_id, now_iso),
            )
            conn.commit()

    def get_credentials(self, email: str) -> Optional[EspnCredentials]:
        """Return credentials only when SWID, espn_s2, league id and year are all set."""

        email = self._normalize_email(email)
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT a.swid, a.espn_s2, l.league_id, l.league_year, l.team_id
                FROM espn_auth a JOIN league_data l ON l.email = a.email
                WHERE a.email = ?
                """,
                (email,),
            ).fetchone()
        if row is None:
            return None
        if not row["swid"] or not row["espn_s2"] or not row["league_id"] or not row["league_year"]:
            return None
        return EspnCredentials(
            swid=row["swid"],
            espn_s2=row["espn_s2"],
            league_id=row["league_id"],
            league_year=int(row["league_year"]),
            team_id=row["team_id"],
        )

    def get_status(self, email: str) -> ConnectionStatus:
        email = self._normalize_email(email)
        with self._connect() as conn:
            auth = conn.execute(
                "SELECT swid, espn_s2, updated_at FROM espn_auth WHERE email = ?", (email,)
            ).fetchone()
            league = conn.execute(
                "SELECT league_id, league_year, team_id, updated_at FROM league_data WHERE email = ?",
                (email,),
            ).fetchone()

        def _parse_ts(value: Optional[str]) -> Optional[datetime]:
            return datetime.fromisoformat(value) if value else None

        timestamps = [
            ts for ts in (
                _parse_ts(auth["updated_at"]) if auth else None,
                _parse_ts(league["updated_at"]) if league else None,
            )
            if ts is not None
        ]
        return ConnectionStatus(
            user_email=email,
            has_auth=bool(auth and auth["swid"] and auth["espn_s2"]),
            has_league=bool(league and league["league_id"] and league["league_year"]),
            league_id=league["league_id"] if league else None,
            league_year=league["league_year"] if league else None,
            team_id=league["team_id"] if league else None,
            updated_at=max(timestamps) if timestamps else None,
        )

    def clear(self, email: str) -> None:
        email = self._normalize_email(email)
        with self._connect() as conn:
            conn.execute("DELETE FROM espn_auth WHERE email = ?", (email,))
            conn.execute("DELETE FROM league_data WHERE email = ?", (email,))
            conn.commit()


__all__ = ["ConnectionStatus", "CredentialStore", "EspnCredentials"]
