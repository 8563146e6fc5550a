import threading
import time
import unittest
from datetime import datetime, timedelta, timezone

from content_api.db import InMemoryContentStore, SqlContentStore
from content_api.records import ContentFilter
from shared.types import Language, Section


class TickingClock:
    """Advances one second per call so timestamps are strictly ordered."""

    def __init__(self, start=datetime(2025, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


class FrozenClock:
    def __init__(self, value=datetime(2025, 1, 1, tzinfo=timezone.utc)):
        self.value = value

    def __call__(self):
        return self.value


class GatedClock(TickingClock):
    """Blocks inside the call once armed, until released."""

    def __init__(self):
        super().__init__()
        self.armed = False
        self.entered = threading.Event()
        self.release = threading.Event()

    def __call__(self):
        if self.armed:
            self.armed = False
            self.entered.set()
            self.release.wait(timeout=5)
        return super().__call__()


def _data(title, section="slideshow", language="en", **extra):
    return {"title": title, "body": f"{title} body", "section": section,
            "language": language, **extra}


class ContentStoreContract:
    """Behavior both stores must share; subclasses provide make_store()."""

    def make_store(self, clock=None):
        raise NotImplementedError

    def setUp(self):
        self.clock = TickingClock()
        self.store = self.make_store(self.clock)

    def test_create_applies_defaults(self):
        record = self.store.create(
            {"title": "Hero EN", "body": "Welcome", "section": "hero"}
        )
        self.assertTrue(record.id)
        self.assertEqual(record.section, Section.HERO)
        self.assertEqual(record.language, Language.EN)
        self.assertEqual(record.order, 0)
        self.assertEqual(record.image_url, "")
        self.assertTrue(record.is_active)
        self.assertEqual(record.metadata, {})
        self.assertEqual(record.created_at, record.updated_at)

    def test_ids_are_unique(self):
        ids = {self.store.create(_data(f"item {i}")).id for i in range(10)}
        self.assertEqual(len(ids), 10)

    def test_ids_not_reused_after_delete(self):
        first = self.store.create(_data("first"))
        self.store.delete(first.id)
        second = self.store.create(_data("second"))
        self.assertNotEqual(first.id, second.id)

    def test_find_orders_by_order_then_created_at(self):
        later = self.store.create(_data("b", order=1))
        first_zero = self.store.create(_data("a", order=0))
        second_zero = self.store.create(_data("c", order=0))
        titles = [r.title for r in self.store.find()]
        self.assertEqual(titles, ["a", "c", "b"])
        self.assertLess(first_zero.created_at, second_zero.created_at)
        self.assertEqual(later.order, 1)

    def test_find_breaks_identical_timestamps_by_creation(self):
        store = self.make_store(FrozenClock())
        for title in ("one", "two", "three"):
            store.create(_data(title))
        self.assertEqual([r.title for r in store.find()], ["one", "two", "three"])

    def test_find_filters_are_conjunctive(self):
        self.store.create(_data("en slide"))
        self.store.create(_data("ar slide", language="ar"))
        self.store.create(_data("en hero", section="hero"))
        self.store.create(_data("hidden", is_active=False))

        results = self.store.find(
            ContentFilter(section=Section.SLIDESHOW, language=Language.EN)
        )
        self.assertEqual([r.title for r in results], ["en slide", "hidden"])

        results = self.store.find(
            ContentFilter(
                section=Section.SLIDESHOW, language=Language.EN, is_active=True
            )
        )
        self.assertEqual([r.title for r in results], ["en slide"])
        self.assertEqual(len(self.store.find()), 4)

    def test_find_by_id(self):
        record = self.store.create(_data("lookup"))
        self.assertEqual(self.store.find_by_id(record.id).title, "lookup")
        self.assertIsNone(self.store.find_by_id("doesnotexist"))

    def test_update_merges_shallowly_and_refreshes_updated_at(self):
        record = self.store.create(
            _data("old", order=3, metadata={"teacher": "Ms. A", "type": "video"})
        )
        updated = self.store.update(record.id, {"title": "new"})
        self.assertEqual(updated.title, "new")
        self.assertEqual(updated.body, record.body)
        self.assertEqual(updated.order, 3)
        self.assertEqual(updated.section, record.section)
        self.assertEqual(updated.metadata, {"teacher": "Ms. A", "type": "video"})
        self.assertEqual(updated.created_at, record.created_at)
        self.assertGreater(updated.updated_at, record.updated_at)

        replaced = self.store.update(record.id, {"metadata": {"type": "pdf"}})
        self.assertEqual(replaced.metadata, {"type": "pdf"})

    def test_update_ignores_immutable_fields(self):
        record = self.store.create(_data("fixed"))
        updated = self.store.update(
            record.id, {"id": "other", "created_at": datetime(2000, 1, 1)}
        )
        self.assertEqual(updated.id, record.id)
        self.assertEqual(updated.created_at, record.created_at)

    def test_update_missing_id_does_not_create(self):
        self.assertIsNone(self.store.update("doesnotexist", {"title": "ghost"}))
        self.assertEqual(self.store.find(), [])

    def test_delete_returns_prior_value(self):
        record = self.store.create(_data("bye"))
        deleted = self.store.delete(record.id)
        self.assertEqual(deleted.title, "bye")
        self.assertIsNone(self.store.find_by_id(record.id))
        self.assertIsNone(self.store.delete(record.id))

    def test_returned_records_are_detached(self):
        record = self.store.create(_data("copy", metadata={"tags": ["a"]}))
        record.metadata["tags"].append("b")
        record.title = "mutated"
        stored = self.store.find_by_id(record.id)
        self.assertEqual(stored.title, "copy")
        self.assertEqual(stored.metadata, {"tags": ["a"]})


class InMemoryContentStoreTests(ContentStoreContract, unittest.TestCase):
    def make_store(self, clock=None):
        return InMemoryContentStore(clock=clock or TickingClock())

    def test_ids_are_sequential(self):
        ids = [self.store.create(_data(f"item {i}")).id for i in range(3)]
        self.assertEqual(ids, ["1", "2", "3"])

    def test_reset_keeps_counter(self):
        self.store.create(_data("a"))
        self.store.reset()
        self.assertEqual(self.store.find(), [])
        self.assertEqual(self.store.create(_data("b")).id, "2")

    def test_concurrent_update_and_delete_keep_records_consistent(self):
        clock = GatedClock()
        store = InMemoryContentStore(clock=clock)
        for title in ("a", "b", "c"):
            store.create(_data(title))

        clock.armed = True
        updater = threading.Thread(target=store.update, args=("2", {"title": "B"}))
        updater.start()
        self.assertTrue(clock.entered.wait(timeout=5))
        deleter = threading.Thread(target=store.delete, args=("1",))
        deleter.start()
        time.sleep(0.05)
        clock.release.set()
        updater.join(timeout=5)
        deleter.join(timeout=5)

        records = store.find()
        self.assertEqual([r.title for r in records], ["B", "c"])
        self.assertEqual([r.id for r in records], ["2", "3"])
        self.assertIsNone(store.find_by_id("1"))


class SqlContentStoreTests(ContentStoreContract, unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL store.
    """

    def make_store(self, clock=None):
        return SqlContentStore(
            "sqlite+pysqlite:///:memory:", clock=clock or TickingClock()
        )

    def test_database_name_overrides_url(self):
        store = SqlContentStore("sqlite+pysqlite:///ignored.db", database_name=":memory:")
        self.assertEqual(store.engine.url.database, ":memory:")


class BackendEquivalenceTests(unittest.TestCase):
    """The same operations give the same logical results in both modes."""

    def _run_script(self, store):
        a = store.create(_data("slide b", order=1, metadata={"videoLink": "x"}))
        b = store.create(_data("slide a", order=0, image_url=None))
        c = store.create(_data("hero", section="hero", language="ar"))
        store.update(a.id, {"order": 0, "is_active": False})
        store.update(c.id, {"metadata": {"teacher": "Mr. B"}})
        store.delete(b.id)
        store.create(_data("slide c", order=0))
        results = []
        for filters in (
            None,
            ContentFilter(is_active=True),
            ContentFilter(section=Section.SLIDESHOW),
            ContentFilter(language=Language.AR),
        ):
            results.append(
                [{k: v for k, v in r.as_dict().items() if k != "id"}
                 for r in store.find(filters)]
            )
        return results

    def test_in_memory_and_sql_agree(self):
        memory = InMemoryContentStore(clock=TickingClock())
        sql = SqlContentStore("sqlite+pysqlite:///:memory:", clock=TickingClock())
        self.assertEqual(self._run_script(memory), self._run_script(sql))


if __name__ == "__main__":
    unittest.main()
