import threading
import unittest

from linkcrawler.crawl_queue import InMemoryCrawlQueue
from linkcrawler.crawl_url import QueueEntry
from linkcrawler.url import Address


class TestInMemoryCrawlQueue(unittest.TestCase):
    def setUp(self):
        self.queue = InMemoryCrawlQueue()

    def test_add_assigns_sequential_ids(self):
        first = self.queue.add(QueueEntry.create("http://x.test/a"))
        second = self.queue.add(QueueEntry.create("http://x.test/b"))
        self.assertEqual(first.id, 0)
        self.assertEqual(second.id, 1)
        self.assertEqual(len(self.queue), 2)

    def test_add_is_idempotent_per_canonical_address(self):
        self.assertIsNotNone(self.queue.add(QueueEntry.create("http://x.test/a")))
        self.assertIsNone(self.queue.add(QueueEntry.create("http://x.test/a#section")))
        self.assertIsNone(self.queue.add(QueueEntry.create("http://x.test:80/a")))
        self.assertEqual(len(self.queue), 1)

    def test_dedup_survives_processing(self):
        entry = self.queue.add(QueueEntry.create("http://x.test/a"))
        self.queue.mark_processed(entry)
        self.assertTrue(self.queue.has(Address.parse("http://x.test/a")))
        self.assertIsNone(self.queue.add(QueueEntry.create("http://x.test/a")))

    def test_next_pending_does_not_remove(self):
        entry = self.queue.add(QueueEntry.create("http://x.test/a"))
        self.queue.add(QueueEntry.create("http://x.test/b"))
        self.assertEqual(self.queue.next_pending(), entry)
        self.assertEqual(self.queue.next_pending(), entry)

    def test_mark_processed_advances_pending(self):
        first = self.queue.add(QueueEntry.create("http://x.test/a"))
        second = self.queue.add(QueueEntry.create("http://x.test/b"))

        self.queue.mark_processed(first)
        self.queue.mark_processed(first)
        self.assertTrue(self.queue.is_processed(first))
        self.assertFalse(self.queue.is_processed(second))
        self.assertEqual(self.queue.next_pending(), second)

        self.queue.mark_processed(second)
        self.assertIsNone(self.queue.next_pending())
        self.assertFalse(self.queue.has_pending())

    def test_entries_added_later_become_pending(self):
        first = self.queue.add(QueueEntry.create("http://x.test/a"))
        self.queue.mark_processed(first)
        self.assertFalse(self.queue.has_pending())

        later = self.queue.add(QueueEntry.create("http://x.test/b", discovered_on=first.address))
        self.assertTrue(self.queue.has_pending())
        self.assertEqual(self.queue.next_pending(), later)
        self.assertEqual(later.discovered_on, first.address)

    def test_get_by_id(self):
        entry = self.queue.add(QueueEntry.create("http://x.test/a"))
        self.assertEqual(self.queue.get_by_id(entry.id), entry)
        self.assertIsNone(self.queue.get_by_id(99))

    def test_concurrent_adds_admit_each_address_once(self):
        urls = [f"http://x.test/page/{i}" for i in range(100)]
        admitted = []
        lock = threading.Lock()

        def add_all():
            for url in urls:
                entry = self.queue.add(QueueEntry.create(url))
                if entry is not None:
                    with lock:
                        admitted.append(entry)

        threads = [threading.Thread(target=add_all) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(self.queue), 100)
        self.assertEqual(len(admitted), 100)
        self.assertEqual(len({entry.id for entry in admitted}), 100)
        self.assertEqual({str(entry.address) for entry in admitted}, set(urls))


if __name__ == "__main__":
    unittest.main()
