"""
Index Store

SQLite-backed persistence for indexed files and their embedded chunks:
- indexed_files: one row per (owner, workspace, file), full record as JSON
- code_chunks: chunks tagged with the generation they belong to
- file_symbols: exported/imported symbol names for dependency lookups
- workspaces: detected project structure per indexed workspace

A file's chunk set is replaced by writing a new generation, pointing the file
row at it and deleting the old one, all inside a single transaction. Readers
only ever see chunks whose generation matches their file row.
"""

from __future__ import annotations

import json
import os
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, Iterator, Protocol, runtime_checkable

from codectx.analyzer.models import ChunkMetadata, ChunkType
from codectx.embeddings.models import parse_embedding
from codectx.embeddings.similarity import cosine_similarity
from codectx.index.models import (
    CodeChunk,
    FileSummary,
    IndexedFile,
    LanguageStat,
    SimilarChunk,
    SimilarityFilters,
    UpsertOutcome,
    WorkspaceRecord,
    WorkspaceStatistics,
    utc_now,
)
from codectx.scanner.models import ProjectStructure
from codectx.shared.domain.exceptions import StoreTransactionError
from codectx.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

SYMBOL_EXPORT = "export"
SYMBOL_IMPORT = "import"

INDEX_SCHEMA = """
CREATE TABLE IF NOT EXISTS indexed_files (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id TEXT NOT NULL,
    workspace_path TEXT NOT NULL,
    file_path TEXT NOT NULL,
    relative_path TEXT NOT NULL,
    language TEXT NOT NULL,
    content_hash TEXT NOT NULL,
    line_count INTEGER DEFAULT 0,
    framework TEXT,
    exports TEXT,            -- JSON array
    key_functions TEXT,      -- JSON array
    record TEXT NOT NULL,    -- IndexedFile as camelCase JSON
    indexed_at TEXT NOT NULL,
    generation INTEGER NOT NULL DEFAULT 1,

    UNIQUE(owner_id, workspace_path, file_path)
);

CREATE INDEX IF NOT EXISTS idx_files_owner ON indexed_files(owner_id);
CREATE INDEX IF NOT EXISTS idx_files_relative ON indexed_files(owner_id, relative_path);

CREATE TABLE IF NOT EXISTS code_chunks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    file_id INTEGER NOT NULL,
    generation INTEGER NOT NULL,
    chunk_type TEXT NOT NULL,  -- file, function, class
    name TEXT NOT NULL,
    start_line INTEGER NOT NULL,
    end_line INTEGER NOT NULL,
    content TEXT NOT NULL,
    content_hash TEXT NOT NULL,
    embedding TEXT NOT NULL,   -- JSON numeric array
    embedding_source TEXT NOT NULL,
    embedding_model TEXT NOT NULL,
    metadata TEXT,             -- JSON

    FOREIGN KEY (file_id) REFERENCES indexed_files(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_chunks_file ON code_chunks(file_id, generation);

CREATE TABLE IF NOT EXISTS file_symbols (
    file_id INTEGER NOT NULL,
    symbol TEXT NOT NULL,
    kind TEXT NOT NULL,        -- export, import

    FOREIGN KEY (file_id) REFERENCES indexed_files(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_symbols_lookup ON file_symbols(symbol, kind);

CREATE TABLE IF NOT EXISTS workspaces (
    owner_id TEXT NOT NULL,
    workspace_path TEXT NOT NULL,
    structure TEXT,            -- ProjectStructure JSON
    last_indexed_at TEXT NOT NULL,

    PRIMARY KEY (owner_id, workspace_path)
);
"""

_SUMMARY_COLUMNS = (
    "f.file_path, f.relative_path, f.workspace_path, f.language, f.line_count, "
    "f.exports, f.key_functions, f.framework, f.indexed_at"
)


@runtime_checkable
class IndexStore(Protocol):
    """Protocol for index stores."""

    def upsert(self, file: IndexedFile, chunks: list[CodeChunk], force: bool = False) -> UpsertOutcome:
        ...

    def get_file_hash(self, owner_id: str, workspace_path: str, file_path: str) -> str | None:
        ...

    def query_by_file(self, owner_id: str, path: str) -> list[IndexedFile]:
        ...

    def query_similar(
        self,
        owner_id: str,
        vector: list[float],
        filters: SimilarityFilters | None = None,
        top_k: int = 10,
        min_similarity: float = 0.0,
        fallback_weight: float = 1.0,
    ) -> list[SimilarChunk]:
        ...

    def sweep(self, owner_id: str, workspace_path: str, live_file_paths: Iterable[str]) -> int:
        ...

    def find_exporters(self, owner_id: str, symbol: str, limit: int = 3) -> list[FileSummary]:
        ...

    def find_importers(self, owner_id: str, symbol: str, limit: int = 3) -> list[FileSummary]:
        ...

    def list_files(self, owner_id: str, workspace_path: str | None = None) -> list[FileSummary]:
        ...

    def workspace_statistics(self, owner_id: str) -> WorkspaceStatistics:
        ...

    def save_workspace_structure(self, owner_id: str, workspace_path: str, structure: ProjectStructure) -> None:
        ...

    def count_chunks(self, owner_id: str, file_path: str | None = None) -> int:
        ...


class SQLiteIndexStore:
    """
    SQLite implementation of IndexStore.

    One connection shared by every caller, serialized by a lock, so upserts
    running from executor threads never interleave partial writes.

    Examples:
        >>> store = SQLiteIndexStore(":memory:")
        >>> store.count_chunks("alice")
        0
    """

    def __init__(self, db_path: str = ":memory:"):
        """
        Open (or create) the index database.

        Args:
            db_path: Path to SQLite database, or ":memory:"
        """
        if db_path != ":memory:":
            parent = os.path.dirname(os.path.abspath(db_path))
            os.makedirs(parent, exist_ok=True)

        self.db_path = db_path
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(db_path, check_same_thread=False, isolation_level=None)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
            self._conn.executescript(INDEX_SCHEMA)
        except sqlite3.Error as e:
            raise StoreTransactionError(f"Cannot open index store {db_path}: {e}", {"db_path": db_path}) from e

        logger.info("index_store_opened", db_path=db_path)

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Run a write block atomically. Any sqlite failure rolls back."""
        with self._lock:
            try:
                self._conn.execute("BEGIN IMMEDIATE")
                yield self._conn
                self._conn.execute("COMMIT")
            except sqlite3.Error as e:
                self._rollback()
                logger.error("index_store_transaction_failed", operation=operation, error=str(e))
                raise StoreTransactionError(f"{operation} failed: {e}", {"operation": operation}) from e
            except BaseException:
                self._rollback()
                raise

    def _rollback(self) -> None:
        if self._conn.in_transaction:
            self._conn.execute("ROLLBACK")

    def _read(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise StoreTransactionError(f"Index query failed: {e}", {"sql": sql.split()[0]}) from e

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # =========================================================================
    # Writes
    # =========================================================================

    def upsert(self, file: IndexedFile, chunks: list[CodeChunk], force: bool = False) -> UpsertOutcome:
        """
        Insert or replace a file record together with its full chunk set.

        Returns UNCHANGED without writing when the stored hash matches and
        *force* is False.

        Raises:
            StoreTransactionError: The write was rolled back; the previous
                entry is still authoritative.
        """
        with self._transaction("upsert") as conn:
            existing = conn.execute(
                "SELECT id, content_hash, generation FROM indexed_files "
                "WHERE owner_id = ? AND workspace_path = ? AND file_path = ?",
                (file.owner_id, file.workspace_path, file.file_path),
            ).fetchone()

            if existing and existing["content_hash"] == file.content_hash and not force:
                return UpsertOutcome.UNCHANGED

            generation = existing["generation"] + 1 if existing else 1
            record = file.model_copy(update={"generation": generation, "indexed_at": utc_now()})
            row = (
                record.relative_path,
                record.language.value,
                record.content_hash,
                record.line_count,
                record.metadata.framework,
                json.dumps(record.exports),
                json.dumps(record.key_functions()),
                json.dumps(record.to_json()),
                record.indexed_at.isoformat(),
                generation,
            )

            if existing:
                file_id = existing["id"]
                conn.execute(
                    "UPDATE indexed_files SET relative_path = ?, language = ?, content_hash = ?, line_count = ?, "
                    "framework = ?, exports = ?, key_functions = ?, record = ?, indexed_at = ?, generation = ? "
                    "WHERE id = ?",
                    row + (file_id,),
                )
            else:
                cursor = conn.execute(
                    "INSERT INTO indexed_files (relative_path, language, content_hash, line_count, framework, "
                    "exports, key_functions, record, indexed_at, generation, owner_id, workspace_path, file_path) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    row + (file.owner_id, file.workspace_path, file.file_path),
                )
                file_id = cursor.lastrowid

            conn.executemany(
                "INSERT INTO code_chunks (file_id, generation, chunk_type, name, start_line, end_line, content, "
                "content_hash, embedding, embedding_source, embedding_model, metadata) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [
                    (
                        file_id,
                        generation,
                        chunk.chunk_type.value,
                        chunk.name,
                        chunk.start_line,
                        chunk.end_line,
                        chunk.content,
                        chunk.content_hash,
                        json.dumps(chunk.embedding.vector),
                        chunk.embedding.source,
                        chunk.embedding.model,
                        json.dumps(chunk.metadata.to_json()),
                    )
                    for chunk in chunks
                ],
            )
            conn.execute("DELETE FROM code_chunks WHERE file_id = ? AND generation != ?", (file_id, generation))

            conn.execute("DELETE FROM file_symbols WHERE file_id = ?", (file_id,))
            symbols = [(file_id, name, SYMBOL_EXPORT) for name in dict.fromkeys(record.exports)]
            symbols += [(file_id, name, SYMBOL_IMPORT) for name in record.imported_names]
            conn.executemany("INSERT INTO file_symbols (file_id, symbol, kind) VALUES (?, ?, ?)", symbols)

        outcome = UpsertOutcome.UPDATED if existing else UpsertOutcome.CREATED
        logger.debug("file_upserted", file=file.file_path, outcome=outcome.value, chunks=len(chunks))
        return outcome

    def sweep(self, owner_id: str, workspace_path: str, live_file_paths: Iterable[str]) -> int:
        """Delete every file of the workspace absent from *live_file_paths*. Chunks cascade."""
        live = set(live_file_paths)
        with self._transaction("sweep") as conn:
            rows = conn.execute(
                "SELECT id, file_path FROM indexed_files WHERE owner_id = ? AND workspace_path = ?",
                (owner_id, workspace_path),
            ).fetchall()
            doomed = [(row["id"],) for row in rows if row["file_path"] not in live]
            conn.executemany("DELETE FROM indexed_files WHERE id = ?", doomed)

        if doomed:
            logger.info("stale_files_swept", owner_id=owner_id, workspace=workspace_path, deleted=len(doomed))
        return len(doomed)

    def save_workspace_structure(self, owner_id: str, workspace_path: str, structure: ProjectStructure) -> None:
        with self._transaction("save_workspace_structure") as conn:
            conn.execute(
                "INSERT INTO workspaces (owner_id, workspace_path, structure, last_indexed_at) VALUES (?, ?, ?, ?) "
                "ON CONFLICT(owner_id, workspace_path) DO UPDATE SET "
                "structure = excluded.structure, last_indexed_at = excluded.last_indexed_at",
                (owner_id, workspace_path, json.dumps(structure.to_json()), utc_now().isoformat()),
            )

    # =========================================================================
    # Reads
    # =========================================================================

    def get_file_hash(self, owner_id: str, workspace_path: str, file_path: str) -> str | None:
        rows = self._read(
            "SELECT content_hash FROM indexed_files WHERE owner_id = ? AND workspace_path = ? AND file_path = ?",
            (owner_id, workspace_path, file_path),
        )
        return rows[0]["content_hash"] if rows else None

    def query_by_file(self, owner_id: str, path: str) -> list[IndexedFile]:
        """Records whose absolute or relative path equals *path*, most recently indexed first."""
        rows = self._read(
            "SELECT record FROM indexed_files WHERE owner_id = ? AND (file_path = ? OR relative_path = ?) "
            "ORDER BY indexed_at DESC",
            (owner_id, path, path),
        )
        return [IndexedFile.from_json(json.loads(row["record"])) for row in rows]

    def query_similar(
        self,
        owner_id: str,
        vector: list[float],
        filters: SimilarityFilters | None = None,
        top_k: int = 10,
        min_similarity: float = 0.0,
        fallback_weight: float = 1.0,
    ) -> list[SimilarChunk]:
        """
        Rank active chunks by cosine similarity to *vector*.

        Ties are broken by the most recent indexed_at. Chunks embedded with
        the fallback have their similarity multiplied by *fallback_weight*
        before the *min_similarity* cut.
        """
        filters = filters or SimilarityFilters()
        sql = [
            "SELECT c.chunk_type, c.name, c.start_line, c.end_line, c.content, c.embedding, c.embedding_source, "
            "c.embedding_model, c.metadata, f.file_path, f.relative_path, f.workspace_path, f.language, f.indexed_at "
            "FROM code_chunks c JOIN indexed_files f ON c.file_id = f.id AND c.generation = f.generation "
            "WHERE f.owner_id = ?"
        ]
        params: list = [owner_id]
        if filters.workspace_path:
            sql.append("AND f.workspace_path = ?")
            params.append(filters.workspace_path)
        if filters.language:
            sql.append("AND f.language = ?")
            params.append(filters.language.value)
        if filters.chunk_type:
            sql.append("AND c.chunk_type = ?")
            params.append(filters.chunk_type.value)
        if filters.exclude_file:
            sql.append("AND f.file_path != ? AND f.relative_path != ?")
            params.extend([filters.exclude_file, filters.exclude_file])
        if filters.embedding_model:
            sql.append("AND c.embedding_model = ?")
            params.append(filters.embedding_model)

        ranked: list[SimilarChunk] = []
        for row in self._read(" ".join(sql), tuple(params)):
            embedding = parse_embedding(
                {"source": row["embedding_source"], "vector": json.loads(row["embedding"]), "model": row["embedding_model"]}
            )
            score = cosine_similarity(vector, embedding.vector)
            if embedding.is_fallback:
                score *= fallback_weight
            if score < min_similarity:
                continue
            ranked.append(
                SimilarChunk(
                    file_path=row["file_path"],
                    relative_path=row["relative_path"],
                    workspace_path=row["workspace_path"],
                    language=row["language"],
                    chunk_type=ChunkType(row["chunk_type"]),
                    name=row["name"],
                    start_line=row["start_line"],
                    end_line=row["end_line"],
                    content=row["content"],
                    similarity=round(score, 6),
                    embedding_source=embedding.source,
                    metadata=ChunkMetadata.from_json(json.loads(row["metadata"] or "{}")),
                    indexed_at=datetime.fromisoformat(row["indexed_at"]),
                )
            )

        ranked.sort(key=lambda c: (c.similarity, c.indexed_at), reverse=True)
        return ranked[:top_k]

    def find_exporters(self, owner_id: str, symbol: str, limit: int = 3) -> list[FileSummary]:
        """Files exporting *symbol*, most recently indexed first."""
        return self._files_with_symbol(owner_id, symbol, SYMBOL_EXPORT, limit)

    def find_importers(self, owner_id: str, symbol: str, limit: int = 3) -> list[FileSummary]:
        """Files importing *symbol*, most recently indexed first."""
        return self._files_with_symbol(owner_id, symbol, SYMBOL_IMPORT, limit)

    def _files_with_symbol(self, owner_id: str, symbol: str, kind: str, limit: int) -> list[FileSummary]:
        rows = self._read(
            f"SELECT DISTINCT {_SUMMARY_COLUMNS} FROM indexed_files f "
            "JOIN file_symbols s ON s.file_id = f.id "
            "WHERE f.owner_id = ? AND s.symbol = ? AND s.kind = ? "
            "ORDER BY f.indexed_at DESC LIMIT ?",
            (owner_id, symbol, kind, limit),
        )
        return [_row_to_summary(row) for row in rows]

    def list_files(self, owner_id: str, workspace_path: str | None = None) -> list[FileSummary]:
        sql = f"SELECT {_SUMMARY_COLUMNS} FROM indexed_files f WHERE f.owner_id = ?"
        params: tuple = (owner_id,)
        if workspace_path:
            sql += " AND f.workspace_path = ?"
            params += (workspace_path,)
        rows = self._read(sql + " ORDER BY f.relative_path", params)
        return [_row_to_summary(row) for row in rows]

    def workspace_statistics(self, owner_id: str) -> WorkspaceStatistics:
        """Totals, per-language breakdown, top-3 frameworks and saved structures."""
        totals = self._read(
            "SELECT COUNT(*) AS files, COALESCE(SUM(line_count), 0) AS lines FROM indexed_files WHERE owner_id = ?",
            (owner_id,),
        )[0]
        languages = self._read(
            "SELECT language, COUNT(*) AS files, AVG(line_count) AS avg_lines FROM indexed_files "
            "WHERE owner_id = ? GROUP BY language ORDER BY files DESC, language",
            (owner_id,),
        )
        frameworks = self._read(
            "SELECT framework, COUNT(*) AS files FROM indexed_files "
            "WHERE owner_id = ? AND framework IS NOT NULL GROUP BY framework ORDER BY files DESC, framework LIMIT 3",
            (owner_id,),
        )
        workspaces = self._read(
            "SELECT workspace_path, structure, last_indexed_at FROM workspaces WHERE owner_id = ? "
            "ORDER BY workspace_path",
            (owner_id,),
        )

        return WorkspaceStatistics(
            total_files=totals["files"],
            total_lines=totals["lines"],
            languages=[
                LanguageStat(
                    language=row["language"],
                    file_count=row["files"],
                    average_lines=round(row["avg_lines"] or 0.0, 1),
                )
                for row in languages
            ],
            frameworks=[row["framework"] for row in frameworks],
            workspaces=[
                WorkspaceRecord(
                    workspace_path=row["workspace_path"],
                    structure=ProjectStructure.from_json(json.loads(row["structure"] or "{}")),
                    last_indexed_at=datetime.fromisoformat(row["last_indexed_at"]),
                )
                for row in workspaces
            ],
        )

    def count_chunks(self, owner_id: str, file_path: str | None = None) -> int:
        """Active-generation chunks for the owner, optionally for one file."""
        sql = (
            "SELECT COUNT(*) AS n FROM code_chunks c "
            "JOIN indexed_files f ON c.file_id = f.id AND c.generation = f.generation WHERE f.owner_id = ?"
        )
        params: tuple = (owner_id,)
        if file_path:
            sql += " AND (f.file_path = ? OR f.relative_path = ?)"
            params += (file_path, file_path)
        return self._read(sql, params)[0]["n"]


def _row_to_summary(row: sqlite3.Row) -> FileSummary:
    return FileSummary(
        file_path=row["file_path"],
        relative_path=row["relative_path"],
        workspace_path=row["workspace_path"],
        language=row["language"],
        line_count=row["line_count"],
        exports=json.loads(row["exports"] or "[]"),
        key_functions=json.loads(row["key_functions"] or "[]"),
        framework=row["framework"],
        indexed_at=datetime.fromisoformat(row["indexed_at"]),
    )
