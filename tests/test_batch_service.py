import unittest
from datetime import datetime, timedelta, timezone
from decimal import Decimal


from stockledger.core.errors import NotFoundError, ValidationError
from stockledger.database import Base, create_db_engine, make_session_factory
from stockledger.services.batch_service import create_batch, list_batches
from stockledger.services.category_service import create_category
from stockledger.services.item_service import create_item, create_item_details
from stockledger.services.user_service import create_user


class BatchServiceTest(unittest.TestCase):
    def setUp(self):
        self.engine = create_db_engine("sqlite:///:memory:")
        Base.metadata.create_all(bind=self.engine)
        self.db = make_session_factory(self.engine)()

        self.user = create_user(self.db, email="cafe@example.com")
        category = create_category(self.db, user_id=self.user.id, name="Dairy", color="blue")
        self.item = create_item(
            self.db,
            user_id=self.user.id,
            name="Milk",
            barcode="MILK-1",
            category_id=category.id,
        )
        create_item_details(
            self.db,
            item_id=self.item.id,
            package_type="carton",
            measure="litre",
            package_weight=12,
            storage_location="Chiller",
            stock_on_hand=4,
        )

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_first_batch_carries_stock_on_hand(self):
        first = create_batch(
            self.db, item_id=self.item.id, user_id=self.user.id, quantity=10, unit_price="2.50"
        )
        second = create_batch(
            self.db, item_id=self.item.id, user_id=self.user.id, quantity=10, unit_price="2.75"
        )

        self.assertTrue(first.is_first_transaction)
        self.assertEqual(first.batch.original_quantity, Decimal("14"))
        self.assertEqual(first.batch.remaining_quantity, Decimal("14"))
        self.assertEqual(first.package_type, "carton")

        self.assertFalse(second.is_first_transaction)
        self.assertEqual(second.batch.original_quantity, Decimal("10"))
        self.assertEqual(second.price, Decimal("2.75"))

    def test_list_batches_newest_first(self):
        start = datetime(2026, 3, 1, tzinfo=timezone.utc)
        for offset in range(3):
            create_batch(
                self.db,
                item_id=self.item.id,
                user_id=self.user.id,
                quantity=1 + offset,
                unit_price=1,
                created_at=start + timedelta(days=offset),
            )

        batches = list_batches(self.db, item_id=self.item.id, user_id=self.user.id)
        self.assertEqual([b.original_quantity for b in batches], [Decimal("3"), Decimal("2"), Decimal("5")])

    def test_list_batches_requires_user(self):
        with self.assertRaises(ValidationError):
            list_batches(self.db, item_id=self.item.id, user_id=None)

    def test_rejects_bad_input(self):
        cases = (
            dict(quantity=0, unit_price=1),
            dict(quantity=-3, unit_price=1),
            dict(quantity=2, unit_price=-1),
            dict(quantity=None, unit_price=1),
            dict(quantity="ten", unit_price=1),
            dict(quantity="1.00005", unit_price=1),
            dict(quantity=2, unit_price="1.23456"),
        )
        for case in cases:
            with self.subTest(case=case):
                with self.assertRaises(ValidationError):
                    create_batch(self.db, item_id=self.item.id, user_id=self.user.id, **case)
        self.assertEqual(list_batches(self.db, item_id=self.item.id, user_id=self.user.id), [])

    def test_item_of_another_user_is_not_found(self):
        other = create_user(self.db, email="someone@example.com")
        with self.assertRaises(NotFoundError):
            create_batch(self.db, item_id=self.item.id, user_id=other.id, quantity=1, unit_price=1)

    def test_item_without_details_is_not_found(self):
        bare = create_item(
            self.db,
            user_id=self.user.id,
            name="Cream",
            barcode="CREAM-1",
            category_id=self.item.category_id,
        )
        with self.assertRaises(NotFoundError):
            create_batch(self.db, item_id=bare.id, user_id=self.user.id, quantity=1, unit_price=1)


if __name__ == "__main__":
    unittest.main()
