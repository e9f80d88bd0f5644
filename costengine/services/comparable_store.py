"""Historical comparable project store.

Stores completed projects by category. Records returned by a store never
carry a similarity score; scores are computed per request by the matcher.

Implementations:
- InMemoryComparableStore: process-local, copy-on-write per category
- FirestoreComparableStore: /comparableProjects documents with a
  ``category`` field
"""

import inspect
import threading
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

import structlog
from firebase_admin import firestore

from costengine.config.errors import ComparableStoreError
from costengine.models.estimate import ComparableProject
from costengine.models.project import Project, ProjectCategory

logger = structlog.get_logger(__name__)


# Historical projects shipped with the in-memory store
SEED_COMPARABLES: Dict[ProjectCategory, List[ComparableProject]] = {
    ProjectCategory.COMMERCIAL: [
        ComparableProject(
            title="Oakland Office Building",
            location="Oakland, CA",
            completed_date=date(2023, 6, 15),
            size=15000,
            cost=3750000,
            cost_per_sq_ft=250,
        ),
        ComparableProject(
            title="San Francisco Retail Center",
            location="San Francisco, CA",
            completed_date=date(2023, 9, 20),
            size=8500,
            cost=2550000,
            cost_per_sq_ft=300,
        ),
        ComparableProject(
            title="Sacramento Warehouse",
            location="Sacramento, CA",
            completed_date=date(2024, 1, 10),
            size=25000,
            cost=3750000,
            cost_per_sq_ft=150,
        ),
    ],
}


def comparable_from_completed(
    project: Project,
    actual_cost: float,
    completed_at: date,
) -> ComparableProject:
    """
    Build a historical record from a completed project.

    Args:
        project: The completed project
        actual_cost: Final cost of the project
        completed_at: Completion date

    Returns:
        ComparableProject without a similarity score
    """
    size = project.specifications.square_footage or 0
    return ComparableProject(
        title=project.title or project.id or "Untitled project",
        location=project.location.label(),
        completed_date=completed_at,
        size=size,
        cost=actual_cost,
        cost_per_sq_ft=actual_cost / (size or 1),
    )


class ComparableStore(ABC):
    """Read access to historical projects, plus recording completions."""

    @abstractmethod
    async def get_by_category(self, category: ProjectCategory) -> List[ComparableProject]:
        """Return records for a category in store order (empty if none)."""

    @abstractmethod
    async def record_completed(
        self,
        project: Project,
        actual_cost: float,
        completed_at: Optional[date] = None,
    ) -> ComparableProject:
        """Add a completed project to the store and return the new record."""


class InMemoryComparableStore(ComparableStore):
    """Process-local store.

    Each category maps to an immutable tuple. Writers build a new tuple and
    swap it in, so readers always see a complete list.
    """

    def __init__(
        self,
        records: Optional[Dict[ProjectCategory, Iterable[ComparableProject]]] = None,
    ):
        """Initialize the store.

        Args:
            records: Initial records by category. Defaults to SEED_COMPARABLES;
                pass an empty dict for an empty store.
        """
        source = SEED_COMPARABLES if records is None else records
        self._records: Dict[ProjectCategory, Tuple[ComparableProject, ...]] = {
            ProjectCategory(category): tuple(
                r.model_copy(update={"similarity": None}) for r in items
            )
            for category, items in source.items()
        }
        self._write_lock = threading.Lock()

    async def get_by_category(self, category: ProjectCategory) -> List[ComparableProject]:
        return list(self._records.get(ProjectCategory(category), ()))

    async def record_completed(
        self,
        project: Project,
        actual_cost: float,
        completed_at: Optional[date] = None,
    ) -> ComparableProject:
        record = comparable_from_completed(project, actual_cost, completed_at or date.today())
        with self._write_lock:
            current = self._records.get(project.category, ())
            self._records[project.category] = current + (record,)

        logger.info(
            "comparable_recorded",
            category=project.category.value,
            title=record.title,
            size=record.size,
            cost=record.cost,
        )
        return record


class FirestoreComparableStore(ComparableStore):
    """Firestore-backed store.

    Note: Firebase Admin SDK for Python is synchronous. Methods are
    marked async for interface compatibility but operations are sync.
    """

    COLLECTION_COMPARABLES = "comparableProjects"

    def __init__(self, db=None):
        """Initialize FirestoreComparableStore.

        Args:
            db: Optional Firestore client. If not provided, uses default.
        """
        self._db = db

    @property
    def db(self):
        """Get Firestore client (lazy initialization)."""
        if self._db is None:
            self._db = firestore.client()
        return self._db

    async def _maybe_await(self, result: Any) -> Any:
        """Await result if it is awaitable (supports AsyncMock in unit tests)."""
        if inspect.isawaitable(result):
            return await result
        return result

    @staticmethod
    def _doc_to_comparable(data: Dict[str, Any]) -> ComparableProject:
        completed = data.get("completedDate")
        if isinstance(completed, datetime):
            completed = completed.date()
        return ComparableProject(
            title=data.get("title", "Untitled project"),
            location=data.get("location", ""),
            completed_date=completed,
            size=data.get("size", 0),
            cost=data.get("cost", 0),
            cost_per_sq_ft=data.get("costPerSqFt", 0),
        )

    async def get_by_category(self, category: ProjectCategory) -> List[ComparableProject]:
        """Fetch records for a category, oldest record first.

        Store order is ``createdAt`` ascending; the matcher breaks score ties
        on it. Documents without ``createdAt`` are not returned. The query
        needs a composite index on (category, createdAt).

        Raises:
            ComparableStoreError: If the Firestore query fails.
        """
        category = ProjectCategory(category)
        try:
            query = self.db.collection(self.COLLECTION_COMPARABLES).where(
                "category", "==", category.value
            ).order_by("createdAt")
            docs = query.stream()
            results: List[ComparableProject] = []
            for doc in docs:
                try:
                    results.append(self._doc_to_comparable(doc.to_dict() or {}))
                except (ValueError, TypeError) as e:
                    logger.warning("comparable_doc_skipped", doc_id=doc.id, error=str(e))
            return results
        except Exception as e:
            logger.error("comparables_query_failed", category=category.value, error=str(e))
            raise ComparableStoreError(
                message=f"Failed to query comparables: {str(e)}",
                category=category.value
            )

    async def record_completed(
        self,
        project: Project,
        actual_cost: float,
        completed_at: Optional[date] = None,
    ) -> ComparableProject:
        """Write a completed project.

        Raises:
            ComparableStoreError: If the Firestore write fails.
        """
        record = comparable_from_completed(project, actual_cost, completed_at or date.today())
        data = {
            "category": project.category.value,
            "title": record.title,
            "location": record.location,
            "completedDate": datetime.combine(record.completed_date, datetime.min.time()),
            "size": record.size,
            "cost": record.cost,
            "costPerSqFt": record.cost_per_sq_ft,
            "projectId": project.id,
            "createdAt": firestore.SERVER_TIMESTAMP,
        }
        try:
            doc_ref = self.db.collection(self.COLLECTION_COMPARABLES).document()
            await self._maybe_await(doc_ref.set(data))
        except Exception as e:
            logger.error("comparable_write_failed", category=project.category.value, error=str(e))
            raise ComparableStoreError(
                message=f"Failed to record comparable: {str(e)}",
                category=project.category.value
            )

        logger.info("comparable_recorded", category=project.category.value, title=record.title)
        return record
