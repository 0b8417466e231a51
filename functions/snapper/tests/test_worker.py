import unittest
from datetime import timedelta

from snapper.db import ImageRecord, InMemoryDbClient
from snapper.queue import InMemoryRefreshQueue, RefreshJob
from snapper.refresher import PointerRefresher
from snapper.storage import InMemoryStorageClient
from snapper.worker import process_next


class WorkerTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.storage = InMemoryStorageClient()
        self.queue = InMemoryRefreshQueue()
        self.refresher = PointerRefresher(self.db, self.storage)
        self.db.add_image(ImageRecord(id="img-1", group_id=1, filename="a.jpg"))

    def _process(self):
        return process_next(
            refresher=self.refresher, queue=self.queue, block=False
        )

    def test_process_next_refreshes_queued_image(self):
        self.queue.enqueue(RefreshJob("img-1", timedelta(hours=24)))

        self.assertTrue(self._process())
        image = self.db.get_image("img-1")
        self.assertIsNotNone(image.signed_url)
        self.assertIsNotNone(image.expire_time)
        self.assertEqual(self.storage.presign_calls, [("compressed_img-1", 86400)])
        self.assertEqual(self.queue.items, [])

    def test_image_can_be_queued_again_once_taken(self):
        job = RefreshJob("img-1", timedelta(hours=8))
        self.assertTrue(self.queue.enqueue(job))
        self.assertFalse(self.queue.enqueue(job))

        self.assertTrue(self._process())
        self.assertTrue(self.queue.enqueue(job))

    def test_malformed_job_is_dropped(self):
        self.queue.items.append('{"validity_seconds": 60}')

        with self.assertLogs("snapper.queue", level="WARNING"):
            self.assertFalse(self._process())
        self.assertEqual(self.storage.presign_calls, [])
        self.assertEqual(self.queue.items, [])

    def test_empty_queue_returns_false(self):
        self.assertFalse(self._process())

    def test_failed_refresh_is_logged(self):
        self.storage.fail_presign = True
        self.queue.enqueue(RefreshJob("img-1", timedelta(hours=8)))

        with self.assertLogs("snapper.worker", level="WARNING"):
            self.assertTrue(self._process())
        self.assertIsNone(self.db.get_image("img-1").signed_url)


if __name__ == "__main__":
    unittest.main()
