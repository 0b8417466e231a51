import json
import threading
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from snapper.db import ImageRecord, InMemoryDbClient
from snapper.queue import InMemoryRefreshQueue, RefreshJob
from snapper.refresher import (
    ExecutorRefreshDispatcher,
    PointerRefresher,
    PointerResolver,
    QueueRefreshDispatcher,
)
from snapper.storage import InMemoryStorageClient

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
EIGHT_HOURS = timedelta(hours=8)


class RecordingDispatcher:
    def __init__(self):
        self.submitted = []

    def submit(self, image_id, validity):
        self.submitted.append((image_id, validity))


class PointerRefresherTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.storage = InMemoryStorageClient()
        self.refresher = PointerRefresher(self.db, self.storage, clock=lambda: NOW)
        self.db.add_image(ImageRecord(id="img-1", group_id=1, filename="a.jpg"))

    def test_refresh_signs_compressed_object_and_persists(self):
        pointer = self.refresher.refresh("img-1", EIGHT_HOURS)

        self.assertIsNotNone(pointer)
        self.assertEqual(self.storage.presign_calls, [("compressed_img-1", 8 * 60 * 60)])
        # Ten minutes of slack before the URL really expires.
        self.assertEqual(pointer.expire_time, NOW + timedelta(hours=7, minutes=50))
        stored = self.db.get_image("img-1")
        self.assertEqual(stored.signed_url, pointer.url)
        self.assertEqual(stored.expire_time, pointer.expire_time)

    def test_storage_error_yields_none_and_leaves_record(self):
        self.storage.fail_presign = True
        with self.assertLogs("snapper.refresher", level="ERROR"):
            self.assertIsNone(self.refresher.refresh("img-1", EIGHT_HOURS))
        self.assertIsNone(self.db.get_image("img-1").signed_url)

    def test_persist_failure_still_returns_pointer(self):
        db = MagicMock()
        db.update_image_pointer.side_effect = RuntimeError("pool exhausted")
        refresher = PointerRefresher(db, self.storage, clock=lambda: NOW)

        with self.assertLogs("snapper.refresher", level="ERROR"):
            pointer = refresher.refresh("img-1", EIGHT_HOURS)
        self.assertIsNotNone(pointer)

    def test_concurrent_refreshes_leave_a_valid_pointer(self):
        real_now = datetime.now(timezone.utc)
        refresher = PointerRefresher(self.db, self.storage)
        results = []
        barrier = threading.Barrier(2)

        def run():
            barrier.wait()
            results.append(refresher.refresh("img-1", EIGHT_HOURS))

        threads = [threading.Thread(target=run) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stored = self.db.get_image("img-1")
        self.assertIn(stored.signed_url, [pointer.url for pointer in results])
        self.assertGreater(stored.expire_time, real_now)


class PointerResolverTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.storage = InMemoryStorageClient()
        self.refresher = PointerRefresher(self.db, self.storage, clock=lambda: NOW)
        self.dispatcher = RecordingDispatcher()
        self.resolver = PointerResolver(
            self.refresher, self.dispatcher, validity=EIGHT_HOURS
        )

    def _image(self, **fields):
        return self.db.add_image(
            ImageRecord(id="img-1", group_id=1, filename="a.jpg", **fields)
        )

    def test_absent_pointer_is_generated_inline(self):
        url, expire_time = self.resolver.resolve(self._image())
        self.assertIsNotNone(url)
        self.assertEqual(self.db.get_image("img-1").signed_url, url)
        self.assertEqual(self.dispatcher.submitted, [])

    def test_pointer_without_expiry_is_treated_as_expired(self):
        url, _ = self.resolver.resolve(self._image(signed_url="https://old"))
        self.assertNotEqual(url, "https://old")

    def test_expired_pointer_is_replaced(self):
        image = self._image(signed_url="https://old", expire_time=NOW - timedelta(seconds=1))
        url, expire_time = self.resolver.resolve(image)
        self.assertNotEqual(url, "https://old")
        self.assertGreater(expire_time, NOW)

    def test_near_expiry_pointer_is_dispatched(self):
        image = self._image(signed_url="https://cur", expire_time=NOW + timedelta(minutes=14))
        url, _ = self.resolver.resolve(image)
        self.assertEqual(url, "https://cur")
        self.assertEqual(self.dispatcher.submitted, [("img-1", EIGHT_HOURS)])
        self.assertEqual(self.storage.presign_calls, [])

    def test_fresh_pointer_is_reused(self):
        image = self._image(signed_url="https://cur", expire_time=NOW + timedelta(hours=1))
        self.assertEqual(self.resolver.resolve(image), ("https://cur", NOW + timedelta(hours=1)))
        self.assertEqual(self.dispatcher.submitted, [])

    def test_failed_refresh_keeps_stale_pointer(self):
        self.storage.fail_presign = True
        stale = NOW - timedelta(minutes=1)
        image = self._image(signed_url="https://old", expire_time=stale)
        with self.assertLogs("snapper.refresher", level="ERROR"):
            self.assertEqual(self.resolver.resolve(image), ("https://old", stale))


class DispatcherTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.storage = InMemoryStorageClient()
        self.refresher = PointerRefresher(self.db, self.storage)
        self.db.add_image(ImageRecord(id="img-1", group_id=1, filename="a.jpg"))

    def test_executor_dispatcher_refreshes_off_thread(self):
        dispatcher = ExecutorRefreshDispatcher(self.refresher, max_workers=1)
        dispatcher.submit("img-1", EIGHT_HOURS)
        dispatcher.shutdown(wait=True)
        self.assertIsNotNone(self.db.get_image("img-1").signed_url)

    def test_executor_dispatcher_logs_failures(self):
        refresher = MagicMock()
        refresher.refresh.side_effect = RuntimeError("boom")
        dispatcher = ExecutorRefreshDispatcher(refresher, max_workers=1)
        with self.assertLogs("snapper.refresher", level="ERROR"):
            dispatcher.submit("img-1", EIGHT_HOURS)
            dispatcher.shutdown(wait=True)

    def test_queue_dispatcher_queues_each_image_once(self):
        queue = InMemoryRefreshQueue()
        dispatcher = QueueRefreshDispatcher(queue)
        dispatcher.submit("img-1", EIGHT_HOURS)
        dispatcher.submit("img-1", EIGHT_HOURS)

        self.assertEqual(
            [json.loads(item) for item in queue.items],
            [{"image_id": "img-1", "validity_seconds": 28800}],
        )
        self.assertEqual(queue.dequeue(), RefreshJob("img-1", EIGHT_HOURS))

    def test_queue_dispatcher_swallows_queue_errors(self):
        queue = MagicMock()
        queue.enqueue.side_effect = ConnectionError("redis down")
        with self.assertLogs("snapper.refresher", level="ERROR"):
            QueueRefreshDispatcher(queue).submit("img-1", EIGHT_HOURS)


if __name__ == "__main__":
    unittest.main()
