"""SQLite-backed annotation persistence."""

import json
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Iterable, List

from text_annotator.core import Annotation, AnnotationKind, SpanAnchors, TextAnchor
from text_annotator.services.persistence.annotation_repository import AnnotationRepository


class SqliteAnnotationRepository(AnnotationRepository):
    """Owns the SQLite connection, schema and annotation row mapping.

    Writes arrive from worker threads, so the connection is shared across
    threads and every statement runs under a lock.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        self.connection = sqlite3.connect(self.db_path, check_same_thread=False)
        self.connection.row_factory = sqlite3.Row

    def ensure_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        with self._lock:
            cur = self.connection.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS annotations (
                    id TEXT PRIMARY KEY,
                    document_id TEXT NOT NULL,
                    kind TEXT NOT NULL CHECK(kind IN ('vocabulary', 'sentence')),
                    primary_text TEXT NOT NULL,
                    context TEXT NOT NULL DEFAULT '',
                    translation TEXT,
                    examples TEXT NOT NULL DEFAULT '[]',
                    start_block_id TEXT NOT NULL,
                    start_offset INTEGER NOT NULL,
                    end_block_id TEXT NOT NULL,
                    end_offset INTEGER NOT NULL,
                    created_at TIMESTAMP NOT NULL
                );
                """
            )
            cur.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_annotations_document
                ON annotations(document_id);
                """
            )
            self.connection.commit()

    def persist(self, record: Annotation) -> None:
        self.persist_batch([record])

    def unpersist(self, annotation_id: str) -> None:
        self.unpersist_batch([annotation_id])

    def persist_batch(self, records: Iterable[Annotation]) -> None:
        rows = [self._to_row(record) for record in records]
        if not rows:
            return
        with self._lock:
            with self.connection:
                self.connection.executemany(
                    """
                    INSERT INTO annotations (
                        id, document_id, kind, primary_text, context, translation, examples,
                        start_block_id, start_offset, end_block_id, end_offset, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        translation = excluded.translation,
                        examples = excluded.examples,
                        start_block_id = excluded.start_block_id,
                        start_offset = excluded.start_offset,
                        end_block_id = excluded.end_block_id,
                        end_offset = excluded.end_offset
                    """,
                    rows,
                )

    def unpersist_batch(self, annotation_ids: Iterable[str]) -> None:
        ids = [(annotation_id,) for annotation_id in annotation_ids]
        if not ids:
            return
        with self._lock:
            with self.connection:
                self.connection.executemany("DELETE FROM annotations WHERE id = ?", ids)

    def load(self, document_id: str) -> List[Annotation]:
        with self._lock:
            cur = self.connection.execute(
                "SELECT * FROM annotations WHERE document_id = ? ORDER BY created_at",
                (document_id,),
            )
            rows = cur.fetchall()
        return [self._from_row(row) for row in rows]

    def close(self) -> None:
        with self._lock:
            self.connection.close()

    @staticmethod
    def _to_row(record: Annotation) -> tuple:
        return (
            record.id,
            record.document_id,
            record.kind.value,
            record.primary_text,
            record.context,
            record.translation,
            json.dumps(record.examples, ensure_ascii=False),
            record.anchors.start.block_id,
            record.anchors.start.offset,
            record.anchors.end.block_id,
            record.anchors.end.offset,
            record.created_at.isoformat(),
        )

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Annotation:
        return Annotation(
            id=row["id"],
            kind=AnnotationKind(row["kind"]),
            primary_text=row["primary_text"],
            context=row["context"],
            anchors=SpanAnchors(
                start=TextAnchor(row["start_block_id"], row["start_offset"]),
                end=TextAnchor(row["end_block_id"], row["end_offset"]),
            ),
            document_id=row["document_id"],
            translation=row["translation"],
            examples=json.loads(row["examples"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
