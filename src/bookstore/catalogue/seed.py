"""Starter data for a bookstore with nothing persisted yet."""

from bookstore.catalogue.item import CatalogItem
from bookstore.identity.user import Admin

DEFAULT_ADMIN = ("admin", "admin123")

DEFAULT_CATEGORIES = ("IT", "History", "Classics", "Science", "Fiction")

# (id, title, author, price, category, stock, edition, cover, featured, discount)
DEFAULT_BOOKS = (
    ("B001", "Clean Code", "Robert Martin", 45.99, "IT", 20, "1st Edition", "clean_code.jpg", True, 0.15),
    ("B002", "Design Patterns", "Gang of Four", 55.50, "IT", 15, "1st Edition", "design_patterns.jpg", False, 0.10),
    ("B003", "Sapiens", "Yuval Harari", 30.00, "History", 25, "2nd Edition", "sapiens.jpg", True, 0.0),
    ("B004", "1984", "George Orwell", 20.00, "Classics", 30, "3rd Edition", "1984.jpg", False, 0.0),
    ("B005", "The Selfish Gene", "Richard Dawkins", 35.00, "Science", 18, "1st Edition", "selfish_gene.jpg", False, 0.20),
)


def seed_books():
    return [
        CatalogItem.create(
            item_id=item_id,
            title=title,
            author=author,
            base_price=price,
            category=category,
            stock=stock,
            edition=edition,
            cover_ref=cover,
            featured=featured,
            discount_fraction=discount,
        )
        for item_id, title, author, price, category, stock, edition, cover, featured, discount in DEFAULT_BOOKS
    ]


def seed(state):
    """Load the default admin, categories and books into an empty state."""
    username, password = DEFAULT_ADMIN
    state.users.register(Admin(username=username, password=password))
    for category in DEFAULT_CATEGORIES:
        state.ledger.add_category(category)
    for book in seed_books():
        state.ledger.add_item(book)
