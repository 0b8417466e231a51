import unittest
from datetime import datetime, timedelta, timezone

from snapper.db import ImageRecord, InMemoryDbClient
from snapper.errors import BadRequest
from snapper.listing import ImageLister, PageRequest, fetch_page
from snapper.queue import InMemoryRefreshQueue
from snapper.refresher import PointerRefresher, PointerResolver, QueueRefreshDispatcher
from snapper.storage import InMemoryStorageClient
from snapper.types import ImageView, SortKey

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FetchPageTests(unittest.TestCase):
    def setUp(self):
        self.rows = [f"row-{i}" for i in range(5)]
        self.calls = []

    def _fetch(self, limit, offset):
        self.calls.append((limit, offset))
        return self.rows[offset : offset + limit]

    def test_full_page_with_more(self):
        rows, has_more = fetch_page(self._fetch, PageRequest(1, page=0, page_size=2))
        self.assertEqual(rows, ["row-0", "row-1"])
        self.assertTrue(has_more)
        self.assertEqual(self.calls, [(3, 0)])

    def test_exact_last_page(self):
        self.rows = self.rows[:4]
        rows, has_more = fetch_page(self._fetch, PageRequest(1, page=1, page_size=2))
        self.assertEqual(rows, ["row-2", "row-3"])
        self.assertFalse(has_more)

    def test_page_past_the_end(self):
        rows, has_more = fetch_page(self._fetch, PageRequest(1, page=9, page_size=2))
        self.assertEqual(rows, [])
        self.assertFalse(has_more)

    def test_negative_page_rejected(self):
        with self.assertRaises(BadRequest):
            PageRequest(1, page=-1, page_size=10)


class ParseTests(unittest.TestCase):
    def test_sort_key(self):
        self.assertIs(SortKey.parse("filename"), SortKey.FILENAME)
        self.assertIs(SortKey.parse(None), SortKey.UPLOADED_AT)
        self.assertIs(SortKey.parse("", SortKey.DATE_TAKEN), SortKey.DATE_TAKEN)
        self.assertIs(SortKey.parse("size", SortKey.DATE_TAKEN), SortKey.UPLOADED_AT)
        self.assertFalse(SortKey.FILENAME.descending)
        self.assertTrue(SortKey.DATE_TAKEN.descending)

    def test_image_view(self):
        self.assertIs(ImageView.parse("bin"), ImageView.BIN)
        self.assertIs(ImageView.parse(None), ImageView.GALLERY)
        self.assertIs(ImageView.parse("trash"), ImageView.GALLERY)


class InMemorySortOrderTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        for image_id, filename, taken_days in (
            ("a", "b.jpg", 2),
            ("b", "a.jpg", None),
            ("c", "c.jpg", 1),
            ("d", "a.jpg", 1),
        ):
            self.db.add_image(
                ImageRecord(
                    id=image_id,
                    group_id=1,
                    filename=filename,
                    uploaded_at=BASE_TIME,
                    date_taken=(
                        BASE_TIME + timedelta(days=taken_days)
                        if taken_days is not None
                        else None
                    ),
                )
            )

    def _ids(self, sort):
        images = self.db.list_group_images(
            1, view=ImageView.GALLERY, sort=sort, limit=10, offset=0
        )
        return [image.id for image in images]

    def test_each_key_follows_its_direction_with_id_tie_break(self):
        self.assertEqual(self._ids(SortKey.FILENAME), ["b", "d", "a", "c"])
        self.assertEqual(self._ids(SortKey.DATE_TAKEN), ["a", "c", "d", "b"])
        self.assertEqual(self._ids(SortKey.UPLOADED_AT), ["a", "b", "c", "d"])


class ImageListerTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.storage = InMemoryStorageClient()
        self.queue = InMemoryRefreshQueue()
        refresher = PointerRefresher(self.db, self.storage)
        resolver = PointerResolver(
            refresher,
            QueueRefreshDispatcher(self.queue),
            validity=timedelta(hours=24),
        )
        self.lister = ImageLister(self.db, resolver)
        self.group = self.db.create_group("Family", access="public")
        for i in range(3):
            self.db.add_image(
                ImageRecord(
                    id=f"img-{i}",
                    group_id=self.group.id,
                    filename=f"{i}.jpg",
                    uploaded_at=BASE_TIME + timedelta(minutes=i),
                    thumb_byte=b"\x00",
                )
            )
        self.db.add_image(
            ImageRecord(
                id="hot-1",
                group_id=self.group.id,
                filename="hot.jpg",
                uploaded_at=BASE_TIME + timedelta(hours=1),
                status="hot",
            )
        )

    def test_group_page_signs_and_counts_hot(self):
        result = self.lister.list_group_images(
            PageRequest(self.group.id, page=0, page_size=2)
        )

        self.assertEqual([item.id for item in result.items], ["img-2", "img-1"])
        self.assertTrue(result.has_more)
        self.assertEqual(result.hot_images, 1)
        for item in result.items:
            self.assertTrue(item.compressed_location)
            self.assertEqual(
                self.db.get_image(item.id).signed_url, item.compressed_location
            )
            self.assertTrue(item.thumbnail_location.startswith("data:image/jpeg;base64,"))
        # Only the rows on the page are signed, not the look-ahead row.
        self.assertEqual(len(self.storage.presign_calls), 2)

    def test_album_page_has_no_hot_count(self):
        album = self.db.create_album(self.group.id, "Trip")
        self.db.add_image_to_album(album.id, "img-0", self.group.id)

        result = self.lister.list_album_images(
            PageRequest(self.group.id, page=0, page_size=5), album.id
        )
        self.assertEqual([item.id for item in result.items], ["img-0"])
        self.assertFalse(result.has_more)
        self.assertIsNone(result.hot_images)

    def test_similar_images(self):
        self.db.get_image("img-0").similar_image_id = "s1"
        self.db.get_image("img-2").similar_image_id = "s1"

        items = self.lister.list_similar_images(self.group.id, "s1", SortKey.FILENAME)
        self.assertEqual([item.id for item in items], ["img-0", "img-2"])
        self.assertTrue(all(item.compressed_location for item in items))


if __name__ == "__main__":
    unittest.main()
