import threading
import unittest

from stockledger.services.item_locks import ItemLockRegistry


class ItemLockRegistryTest(unittest.TestCase):
    def test_same_item_shares_one_lock(self):
        registry = ItemLockRegistry()
        self.assertIs(registry.lock_for(1), registry.lock_for(1))
        self.assertIsNot(registry.lock_for(1), registry.lock_for(2))
        self.assertEqual(len(registry), 2)

    def test_discard_forgets_idle_locks(self):
        registry = ItemLockRegistry()
        with registry.hold(7):
            self.assertIn(7, registry)
        registry.discard(7)
        self.assertNotIn(7, registry)
        self.assertEqual(len(registry), 0)

        registry.discard(99)
        self.assertEqual(len(registry), 0)

    def test_discard_keeps_a_held_lock(self):
        registry = ItemLockRegistry()
        holding = threading.Event()
        release = threading.Event()

        def worker():
            with registry.hold(3):
                holding.set()
                release.wait(timeout=5)

        thread = threading.Thread(target=worker)
        thread.start()
        try:
            self.assertTrue(holding.wait(timeout=5))
            registry.discard(3)
            self.assertIn(3, registry)
        finally:
            release.set()
            thread.join(timeout=5)

        registry.discard(3)
        self.assertNotIn(3, registry)


if __name__ == "__main__":
    unittest.main()
