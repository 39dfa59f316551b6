from decimal import Decimal


PACKAGE_TYPES = ("loose", "carton", "bag")
WEIGHED_PACKAGE_TYPES = ("carton", "bag")

CATEGORY_COLORS = ("green", "violet", "blue", "sandal", "yellow")
DEFAULT_CATEGORIES = (
    ("Vegetables", "green"),
    ("Meats", "violet"),
    ("Seafoods", "blue"),
)

USER_PLANS = ("stock", "stock & cost")

FLOW_OPEN = "Open"
FLOW_IN = "In"
FLOW_OUT = "Out"

ZERO = Decimal("0")
QUANTITY_STEP = Decimal("1")
MONEY_STEP = Decimal("0.01")
STORAGE_STEP = Decimal("0.0001")
