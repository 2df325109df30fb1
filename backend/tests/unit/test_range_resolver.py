from __future__ import annotations

from datetime import timedelta
from pathlib import Path
import tempfile
import threading
import unittest
from unittest import mock

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from app.db.models import UNKNOWN_RANGE_NAME, Assignment, Range
from app.db.session import build_engine
from app.services.ranges import resolver as resolver_module
from app.services.ranges.errors import RangeResolutionError, ValidationError
from app.services.ranges.resolver import (
    CreateStatus,
    ModelCount,
    RangeResolver,
    create_range,
)


class RangeResolverTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        SQLModel.metadata.create_all(self.engine)
        self.resolver = RangeResolver()

    def _ranges(self, session: Session) -> list[Range]:
        return list(session.exec(select(Range)).all())

    def test_resolve_creates_then_reuses(self) -> None:
        with Session(self.engine) as session:
            created = self.resolver.resolve(session, "Tesla Model Y", 1)
            again = self.resolver.resolve(session, "Tesla Model Y", 1)
            other_category = self.resolver.resolve(session, "Tesla Model Y", 2)
            self.assertEqual(created.id, again.id)
            self.assertNotEqual(created.id, other_category.id)
            self.assertEqual(len(self._ranges(session)), 2)

    def test_resolve_rejects_blank_name(self) -> None:
        with Session(self.engine) as session:
            with self.assertRaises(ValidationError):
                self.resolver.resolve(session, "   ", 1)

    def test_create_reports_conflict_instead_of_raising(self) -> None:
        with Session(self.engine) as session:
            first = create_range(session, "Tesla Model Y", 1)
            second = create_range(session, "Tesla Model Y", 1)
            self.assertIs(first.status, CreateStatus.created)
            self.assertIsNotNone(first.range.id)
            self.assertIs(second.status, CreateStatus.conflict)
            self.assertIsNone(second.range)
            self.assertEqual(second.error.status_code, 409)
            # la sessione resta utilizzabile dopo il rollback
            self.assertEqual(len(self._ranges(session)), 1)

    def test_conflict_is_resolved_by_refetch(self) -> None:
        with Session(self.engine) as session:
            winner = Range(name="Tesla Model Y", category_id=1)
            session.add(winner)
            session.commit()
            session.refresh(winner)

            real_find = resolver_module.find_range
            with mock.patch.object(
                resolver_module,
                "find_range",
                side_effect=[None, real_find(session, "Tesla Model Y", 1)],
            ) as patched:
                resolved = self.resolver.resolve(session, "Tesla Model Y", 1)

            self.assertEqual(patched.call_count, 2)
            self.assertEqual(resolved.id, winner.id)
            self.assertEqual(len(self._ranges(session)), 1)

    def test_second_miss_after_conflict_is_an_error(self) -> None:
        with Session(self.engine) as session:
            session.add(Range(name="Tesla Model Y", category_id=1))
            session.commit()
            with mock.patch.object(resolver_module, "find_range", return_value=None):
                with self.assertRaises(RangeResolutionError):
                    self.resolver.resolve(session, "Tesla Model Y", 1)

    def test_ensure_unknown_range_is_idempotent(self) -> None:
        with Session(self.engine) as session:
            first = self.resolver.ensure_unknown_range(session, 3)
            second = self.resolver.ensure_unknown_range(session, 3)
            self.assertEqual(first.id, second.id)
            self.assertEqual(first.name, UNKNOWN_RANGE_NAME)
            self.assertEqual(first.category_id, 3)

    def test_map_to_ranges_skips_invalid_pairs_and_keeps_order(self) -> None:
        counts = [
            ModelCount(model_name="Honda Accord", count=3),
            ModelCount(model_name="", count=5),
            ModelCount(model_name="Ford F-250", count=0),
            ModelCount(model_name="Mazda Miata", count=-2),
            ModelCount(model_name="Ford F-250", count=2),
        ]
        with Session(self.engine) as session:
            resolved = self.resolver.map_to_ranges(session, 1, counts)
            self.assertEqual(
                [(item.range_name, item.quantity) for item in resolved],
                [("Honda Accord", 3), ("Ford F-250", 2)],
            )
            self.assertEqual(len(self._ranges(session)), 2)

    def test_map_to_ranges_isolates_failures(self) -> None:
        real_resolve = RangeResolver.resolve

        def flaky(resolver, session, name, category_id):
            if name == "Broken Model":
                raise RangeResolutionError("boom", range_name=name)
            return real_resolve(resolver, session, name, category_id)

        counts = [
            ModelCount(model_name="Broken Model", count=1),
            ModelCount(model_name="Honda Accord", count=4),
        ]
        with Session(self.engine) as session:
            with mock.patch.object(RangeResolver, "resolve", autospec=True, side_effect=flaky):
                resolved = self.resolver.map_to_ranges(session, 1, counts)
        self.assertEqual([item.range_name for item in resolved], ["Honda Accord"])

    def test_new_records_are_stamped_in_utc(self) -> None:
        range_ = Range(name="Honda Accord", category_id=1)
        assignment = Assignment(lister_id=1, category_id=1, quantity=3)
        self.assertEqual(range_.created_at.utcoffset(), timedelta(0))
        self.assertEqual(assignment.created_at.utcoffset(), timedelta(0))
        self.assertEqual(assignment.updated_at.utcoffset(), timedelta(0))

        with Session(self.engine) as session:
            resolved = self.resolver.map_to_ranges(
                session, 1, [ModelCount(model_name="Honda Accord", count=3)]
            )
            self.assertEqual([(item.range_name, item.quantity) for item in resolved], [("Honda Accord", 3)])
            self.assertEqual(len(self._ranges(session)), 1)


class RangeCreateRaceTestCase(unittest.TestCase):
    """Due thread creano lo stesso Range su un DB SQLite su file."""

    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        db_path = Path(self._temp_dir.name) / "race.sqlite"
        self.engine = build_engine(f"sqlite:///{db_path}")
        SQLModel.metadata.create_all(self.engine)

    def tearDown(self) -> None:
        self.engine.dispose()
        self._temp_dir.cleanup()

    def test_concurrent_resolve_returns_same_range(self) -> None:
        barrier = threading.Barrier(2)
        first_lookup = threading.local()
        real_find = resolver_module.find_range
        real_create = resolver_module.create_range
        outcomes: list[CreateStatus] = []
        results: list[int] = []
        errors: list[BaseException] = []

        def racing_find(session, name, category_id):
            # La prima lettura di ogni thread "non vede" il range: entrambi provano a crearlo
            if not getattr(first_lookup, "done", False):
                first_lookup.done = True
                barrier.wait(timeout=10)
                return None
            return real_find(session, name, category_id)

        def recording_create(session, name, category_id):
            outcome = real_create(session, name, category_id)
            outcomes.append(outcome.status)
            return outcome

        def worker() -> None:
            try:
                with Session(self.engine) as session:
                    record = RangeResolver().resolve(session, "Tesla Model Y", 1)
                    results.append(record.id)
            except BaseException as exc:  # pragma: no cover - riportato sotto
                errors.append(exc)

        with mock.patch.object(resolver_module, "find_range", side_effect=racing_find), \
                mock.patch.object(resolver_module, "create_range", side_effect=recording_create):
            threads = [threading.Thread(target=worker) for _ in range(2)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=30)

        self.assertEqual(errors, [])
        self.assertEqual(len(results), 2)
        self.assertEqual(results[0], results[1])
        self.assertEqual(sorted(outcomes), [CreateStatus.conflict, CreateStatus.created])
        with Session(self.engine) as session:
            self.assertEqual(len(session.exec(select(Range)).all()), 1)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
