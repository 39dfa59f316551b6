import unittest
from unittest import mock


from stockledger.config import Settings
from stockledger.core.errors import ConflictError, NotFoundError, ValidationError
from stockledger.database import Base, create_db_engine, make_session_factory
from stockledger.services.category_service import (
    create_category,
    delete_category,
    get_category_name,
    list_categories,
)
from stockledger.services.user_service import create_user


class CategoryServiceTest(unittest.TestCase):
    def setUp(self):
        self.engine = create_db_engine("sqlite:///:memory:")
        Base.metadata.create_all(bind=self.engine)
        self.db = make_session_factory(self.engine)()
        self.user = create_user(self.db, email="chef@example.com")

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_defaults_are_seeded_once(self):
        categories = list_categories(self.db, user_id=self.user.id)
        self.assertEqual(
            [(c.name, c.color, c.is_default) for c in categories],
            [("Meats", "violet", True), ("Seafoods", "blue", True), ("Vegetables", "green", True)],
        )
        self.assertEqual(len(list_categories(self.db, user_id=self.user.id)), 3)

    def test_defaults_can_be_disabled(self):
        settings = Settings(DEFAULT_CATEGORIES_ENABLED=False)
        with mock.patch("stockledger.services.category_service.get_settings", return_value=settings):
            self.assertEqual(list_categories(self.db, user_id=self.user.id), [])

    def test_create_category(self):
        category = create_category(self.db, user_id=self.user.id, name="Bakery", color="sandal")
        self.assertFalse(category.is_default)

        with self.assertRaises(ConflictError):
            create_category(self.db, user_id=self.user.id, name="Bakery", color="green")
        with self.assertRaises(ValidationError):
            create_category(self.db, user_id=self.user.id, name="Drinks", color="purple")
        with self.assertRaises(ValidationError):
            create_category(self.db, user_id=self.user.id, name="", color="green")

    def test_delete_category(self):
        defaults = list_categories(self.db, user_id=self.user.id)
        with self.assertRaises(ValidationError) as ctx:
            delete_category(self.db, user_id=self.user.id, category_id=defaults[0].id)
        self.assertEqual(ctx.exception.message, "Cannot delete default categories")

        custom = create_category(self.db, user_id=self.user.id, name="Frozen", color="blue")
        delete_category(self.db, user_id=self.user.id, category_id=custom.id)
        with self.assertRaises(NotFoundError):
            delete_category(self.db, user_id=self.user.id, category_id=custom.id)

    def test_category_name(self):
        custom = create_category(self.db, user_id=self.user.id, name="Herbs", color="green")
        self.assertEqual(get_category_name(self.db, category_id=custom.id), "Herbs")
        with self.assertRaises(NotFoundError):
            get_category_name(self.db, category_id=custom.id + 99)


if __name__ == "__main__":
    unittest.main()
