"""
FAISS vector index.

Named collections of (id, vector, payload) points with a fixed dimension and
cosine metric. Vectors are L2-normalized on the way in, so an exact
inner-product index (IndexFlatIP) returns cosine similarity. String point ids
are mapped to int64 labels through IndexIDMap2, which lets upserts replace
existing points in place.

Upsert is all-or-nothing: the whole batch is validated before anything is
written, and a failed write or save restores the collection as it was.

Collections are optionally persisted to `<persist_directory>/<name>.faiss`
plus a `<name>.json` sidecar holding the schema, id mapping and payloads,
either after every mutation (autosave) or on persist().

Dependencies: faiss-cpu, numpy, docsearch.boundary.vdb.vector_schemas
System role: Vector store for chunk embeddings
"""

import json
import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path

import faiss
import numpy as np

from docsearch.boundary.vdb.vector_schemas import (
    CollectionInfo,
    Distance,
    ScoredPoint,
    VectorPayload,
    VectorPoint,
)
from docsearch.core.exceptions import SchemaConflictError, ValidationError, VectorStoreError

logger = logging.getLogger(__name__)


@dataclass
class _Collection:
    """In-memory state of one collection."""

    name: str
    dimension: int
    metric: Distance
    index: faiss.IndexIDMap2
    labels: dict[str, int] = field(default_factory=dict)
    point_ids: dict[int, str] = field(default_factory=dict)
    payloads: dict[int, dict] = field(default_factory=dict)
    next_label: int = 0
    dirty: bool = False

    @classmethod
    def empty(cls, name: str, dimension: int, metric: Distance) -> "_Collection":
        return cls(
            name=name,
            dimension=dimension,
            metric=metric,
            index=faiss.IndexIDMap2(faiss.IndexFlatIP(dimension)),
        )

    def info(self) -> CollectionInfo:
        return CollectionInfo(
            name=self.name,
            dimension=self.dimension,
            metric=self.metric,
            points_count=len(self.labels),
        )


class FaissVectorIndex:
    """
    Collection-oriented vector index backed by FAISS.

    Thread-safe: all collection mutations and reads hold one re-entrant lock.
    Callers on an event loop should run these methods via asyncio.to_thread.
    """

    def __init__(self, persist_directory: str | None = None, autosave: bool = True) -> None:
        """
        Initialize index, loading persisted collections if any.

        Args:
            persist_directory: Directory for persistence (None keeps everything in memory)
            autosave: Save a collection after every mutation. When False, changed
                collections are only written by persist().
        """
        self._persist_dir = Path(persist_directory) if persist_directory else None
        self._autosave = autosave
        self._collections: dict[str, _Collection] = {}
        self._lock = threading.RLock()

        if self._persist_dir is not None:
            self._persist_dir.mkdir(parents=True, exist_ok=True)
            self._load_all()

    @property
    def persist_directory(self) -> Path | None:
        """Directory collections are saved to, or None when in memory only."""
        return self._persist_dir

    @property
    def autosave(self) -> bool:
        return self._autosave

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def ensure_collection(
        self,
        name: str,
        dimension: int,
        metric: Distance | str = Distance.COSINE,
    ) -> CollectionInfo:
        """
        Create a collection unless it already exists with the same schema.

        Args:
            name: Collection name
            dimension: Vector dimension
            metric: Similarity metric

        Returns:
            CollectionInfo: Schema of the (existing or created) collection

        Raises:
            ValidationError: Invalid dimension or unsupported metric
            SchemaConflictError: Existing collection has another dimension/metric
        """
        if dimension <= 0:
            raise ValidationError("dimension must be positive", field="dimension")
        try:
            metric = Distance(metric)
        except ValueError as e:
            raise ValidationError(f"Unsupported metric: {metric}", field="metric") from e

        with self._lock:
            existing = self._collections.get(name)
            if existing is not None:
                if existing.dimension != dimension or existing.metric != metric:
                    raise SchemaConflictError(
                        name,
                        expected={"dimension": dimension, "metric": metric.value},
                        actual={"dimension": existing.dimension, "metric": existing.metric.value},
                    )
                logger.debug(
                    f"{__name__}:ensure_collection - Collection already exists",
                    extra={"collection": name},
                )
                return existing.info()

            collection = _Collection.empty(name, dimension, metric)
            self._collections[name] = collection
            try:
                self._changed(collection)
            except VectorStoreError:
                del self._collections[name]
                raise
            logger.info(
                f"{__name__}:ensure_collection - Collection created",
                extra={"collection": name, "dimension": dimension, "metric": metric.value},
            )
            return collection.info()

    def get_collection(self, name: str) -> CollectionInfo | None:
        """Return the collection schema, or None if it does not exist."""
        with self._lock:
            collection = self._collections.get(name)
            return collection.info() if collection else None

    def count(self, name: str) -> int:
        """Number of points stored in a collection."""
        with self._lock:
            return len(self._require(name, "count").labels)

    # ------------------------------------------------------------------
    # Points
    # ------------------------------------------------------------------

    def upsert(self, name: str, points: list[VectorPoint]) -> list[str]:
        """
        Insert points, overwriting any existing point with the same id.

        The batch is rejected as a whole when any point is invalid; the error
        details carry the offending ids under "failed_ids". When the write or
        its autosave fails, the collection is put back as it was.

        Args:
            name: Collection name
            points: Points to write (later duplicates in the batch win)

        Returns:
            list[str]: Ids written, in first-seen order

        Raises:
            VectorStoreError: Unknown collection, invalid vectors or write failure
        """
        if not points:
            return []

        with self._lock:
            collection = self._require(name, "upsert")

            latest: dict[str, VectorPoint] = {}
            for point in points:
                latest[point.id] = point
            ids = list(latest)

            matrix = self._validated_matrix(
                collection, [latest[i].vector for i in ids], ids, "upsert"
            )

            replaced = [i for i in ids if i in collection.labels]
            replaced_labels = [collection.labels[i] for i in replaced]
            # Replaced ids keep their label so ties still resolve by first insertion
            labels = self._allocate_labels(collection, ids)

            backup = self._snapshot(collection, replaced_labels)
            previous_payloads = {label: collection.payloads[label] for label in replaced_labels}
            previous_next_label = collection.next_label
            try:
                if replaced_labels:
                    collection.index.remove_ids(np.array(replaced_labels, dtype=np.int64))
                collection.index.add_with_ids(matrix, labels)

                for point_id, label in zip(ids, labels.tolist()):
                    collection.labels[point_id] = label
                    collection.point_ids[label] = point_id
                    collection.payloads[label] = latest[point_id].payload.model_dump()
                collection.next_label += len(ids) - len(replaced)

                self._changed(collection)
            except Exception as e:
                self._restore(collection, backup, labels)
                for point_id, label in zip(ids, labels.tolist()):
                    if label in previous_payloads:
                        collection.payloads[label] = previous_payloads[label]
                    else:
                        collection.labels.pop(point_id, None)
                        collection.point_ids.pop(label, None)
                        collection.payloads.pop(label, None)
                collection.next_label = previous_next_label
                raise VectorStoreError(
                    f"Failed to upsert points: {e}",
                    operation="upsert",
                    details={"collection": name, "failed_ids": ids},
                ) from e

        logger.info(
            f"{__name__}:upsert - Points upserted",
            extra={"collection": name, "point_count": len(ids), "replaced": len(replaced)},
        )
        return ids

    def search(
        self,
        name: str,
        query_vector: list[float],
        limit: int,
    ) -> list[ScoredPoint]:
        """
        Nearest-neighbour search by cosine similarity.

        FAISS picks among equal scores by storage order, which changes when a
        point is overwritten. The search is widened until every point tied
        with the last kept score is fetched, then ties are ordered by label.

        Args:
            name: Collection name
            query_vector: Query embedding
            limit: Maximum number of results (> 0)

        Returns:
            list[ScoredPoint]: Results by descending score; ties keep insertion order

        Raises:
            ValidationError: limit <= 0
            VectorStoreError: Unknown collection or invalid query vector
        """
        if limit <= 0:
            raise ValidationError("limit must be positive", field="limit")

        with self._lock:
            collection = self._require(name, "search")
            total = collection.index.ntotal
            if total == 0:
                return []

            query = self._validated_matrix(collection, [query_vector], ["<query>"], "search")
            k = min(limit, total)
            scores, labels = self._raw_search(collection, query, k)
            boundary = scores[0][k - 1]
            while k < total and labels[0][-1] != -1 and scores[0][-1] >= boundary:
                k = min(k * 2, total)
                scores, labels = self._raw_search(collection, query, k)

            hits = [
                (float(score), int(label))
                for score, label in zip(scores[0].tolist(), labels[0].tolist())
                if label != -1
            ]
            hits.sort(key=lambda hit: (-hit[0], hit[1]))

            return [
                ScoredPoint(
                    id=collection.point_ids[label],
                    score=score,
                    payload=VectorPayload(**collection.payloads[label]),
                )
                for score, label in hits[:limit]
            ]

    def delete_by_document(self, name: str, document_id: str) -> int:
        """
        Delete every point whose payload belongs to a document.

        Args:
            name: Collection name
            document_id: Document ID stored in the payloads

        Returns:
            int: Number of points removed

        Raises:
            VectorStoreError: Unknown collection or write failure (nothing removed)
        """
        with self._lock:
            collection = self._require(name, "delete")
            labels = [
                label
                for label, payload in collection.payloads.items()
                if payload.get("document_id") == document_id
            ]
            if not labels:
                return 0

            backup = self._snapshot(collection, labels)
            removed = {
                label: (collection.point_ids[label], collection.payloads[label])
                for label in labels
            }
            label_array = np.array(labels, dtype=np.int64)
            try:
                collection.index.remove_ids(label_array)
                for label in labels:
                    point_id = collection.point_ids.pop(label)
                    collection.labels.pop(point_id, None)
                    collection.payloads.pop(label, None)
                self._changed(collection)
            except Exception as e:
                self._restore(collection, backup, label_array)
                for label, (point_id, payload) in removed.items():
                    collection.labels[point_id] = label
                    collection.point_ids[label] = point_id
                    collection.payloads[label] = payload
                raise VectorStoreError(
                    f"Delete failed: {e}",
                    operation="delete",
                    details={"collection": name, "document_id": document_id},
                ) from e

        logger.info(
            f"{__name__}:delete_by_document - Points deleted",
            extra={"collection": name, "document_id": document_id, "point_count": len(labels)},
        )
        return len(labels)

    def persist(self) -> None:
        """Write every collection changed since its last save (no-op in memory)."""
        with self._lock:
            for collection in self._collections.values():
                if collection.dirty:
                    self._save(collection)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require(self, name: str, operation: str) -> _Collection:
        collection = self._collections.get(name)
        if collection is None:
            raise VectorStoreError(
                f"Collection '{name}' does not exist",
                operation=operation,
                details={"collection": name},
            )
        return collection

    @staticmethod
    def _raw_search(
        collection: _Collection, query: np.ndarray, k: int
    ) -> tuple[np.ndarray, np.ndarray]:
        try:
            return collection.index.search(query, k)
        except Exception as e:
            raise VectorStoreError(
                f"Search failed: {e}",
                operation="search",
                details={"collection": collection.name},
            ) from e

    @staticmethod
    def _validated_matrix(
        collection: _Collection,
        vectors: list[list[float]],
        ids: list[str],
        operation: str,
    ) -> np.ndarray:
        failed: list[str] = []
        rows = []
        for point_id, vector in zip(ids, vectors):
            row = np.asarray(vector, dtype=np.float32)
            norm = float(np.linalg.norm(row)) if row.ndim == 1 else 0.0
            if (
                row.ndim != 1
                or row.shape[0] != collection.dimension
                or not np.all(np.isfinite(row))
                or norm == 0.0
            ):
                failed.append(point_id)
                continue
            rows.append(row / norm)

        if failed:
            raise VectorStoreError(
                "Vectors must be finite, non-zero and match the collection dimension",
                operation=operation,
                details={
                    "collection": collection.name,
                    "dimension": collection.dimension,
                    "failed_ids": failed,
                },
            )
        return np.ascontiguousarray(np.vstack(rows), dtype=np.float32)

    @staticmethod
    def _allocate_labels(collection: _Collection, ids: list[str]) -> np.ndarray:
        labels = []
        next_label = collection.next_label
        for point_id in ids:
            if point_id in collection.labels:
                labels.append(collection.labels[point_id])
            else:
                labels.append(next_label)
                next_label += 1
        return np.array(labels, dtype=np.int64)

    @staticmethod
    def _snapshot(collection: _Collection, labels: list[int]) -> tuple[np.ndarray, np.ndarray]:
        label_array = np.array(labels, dtype=np.int64)
        if label_array.size == 0:
            return label_array, np.empty((0, collection.dimension), dtype=np.float32)
        vectors = np.vstack([collection.index.reconstruct(int(label)) for label in label_array])
        return label_array, vectors.astype(np.float32)

    @staticmethod
    def _restore(
        collection: _Collection,
        backup: tuple[np.ndarray, np.ndarray],
        attempted: np.ndarray,
    ) -> None:
        # Drop whatever part of the failed batch landed, then put the old points back
        collection.index.remove_ids(attempted)
        labels, vectors = backup
        if labels.size:
            collection.index.add_with_ids(vectors, labels)

    def _changed(self, collection: _Collection) -> None:
        collection.dirty = True
        if self._autosave:
            self._save(collection)

    def _save(self, collection: _Collection) -> None:
        if self._persist_dir is None:
            collection.dirty = False
            return
        index_path = self._persist_dir / f"{collection.name}.faiss"
        meta_path = self._persist_dir / f"{collection.name}.json"
        try:
            meta = {
                "name": collection.name,
                "dimension": collection.dimension,
                "metric": collection.metric.value,
                "next_label": collection.next_label,
                "points": [
                    {"id": point_id, "label": label, "payload": collection.payloads[label]}
                    for point_id, label in collection.labels.items()
                ],
            }
            # Write both files aside first so a failure never leaves a half-written file
            index_tmp = index_path.with_name(index_path.name + ".tmp")
            meta_tmp = meta_path.with_name(meta_path.name + ".tmp")
            faiss.write_index(collection.index, str(index_tmp))
            meta_tmp.write_text(json.dumps(meta), encoding="utf-8")
            os.replace(index_tmp, index_path)
            os.replace(meta_tmp, meta_path)
        except Exception as e:
            raise VectorStoreError(
                f"Failed to persist collection: {e}",
                operation="persist",
                details={"collection": collection.name, "path": str(index_path)},
            ) from e
        collection.dirty = False

    def _load_all(self) -> None:
        for meta_path in sorted(self._persist_dir.glob("*.json")):
            index_path = meta_path.with_suffix(".faiss")
            if not index_path.exists():
                logger.warning(
                    f"{__name__}:_load_all - Sidecar without index, skipping",
                    extra={"path": str(meta_path)},
                )
                continue

            meta = json.loads(meta_path.read_text(encoding="utf-8"))
            collection = _Collection(
                name=meta["name"],
                dimension=int(meta["dimension"]),
                metric=Distance(meta["metric"]),
                index=faiss.read_index(str(index_path)),
                next_label=int(meta["next_label"]),
            )
            for entry in meta["points"]:
                label = int(entry["label"])
                collection.labels[entry["id"]] = label
                collection.point_ids[label] = entry["id"]
                collection.payloads[label] = entry["payload"]
            self._reconcile(collection)
            self._collections[collection.name] = collection

    @staticmethod
    def _reconcile(collection: _Collection) -> None:
        # The index and its sidecar are replaced one after the other; drop anything
        # only one of them knows about
        stored = set(faiss.vector_to_array(collection.index.id_map).tolist())
        known = set(collection.point_ids)

        orphan_labels = sorted(stored - known)
        if orphan_labels:
            collection.index.remove_ids(np.array(orphan_labels, dtype=np.int64))
        missing_labels = known - stored
        for label in missing_labels:
            point_id = collection.point_ids.pop(label)
            collection.labels.pop(point_id, None)
            collection.payloads.pop(label, None)

        if orphan_labels or missing_labels:
            collection.dirty = True
            logger.warning(
                f"{__name__}:_reconcile - Index and sidecar disagreed, dropped stray points",
                extra={
                    "collection": collection.name,
                    "orphan_vectors": len(orphan_labels),
                    "missing_vectors": len(missing_labels),
                },
            )
