"""Static sample data shared by the seed modules. Not a seed itself."""

FIRST_NAMES = [
    "Amira", "Ben", "Chloe", "Dawud", "Elena", "Farah", "George", "Hana", "Idris", "Julia",
    "Karim", "Lina", "Marcus", "Nadia", "Omar", "Priya", "Quentin", "Rania", "Samir", "Tess",
]

LAST_NAMES = [
    "Abbas", "Brooks", "Castillo", "Darwish", "Evans", "Farouk", "Gallagher", "Haddad",
    "Ibrahim", "Jensen", "Khalil", "Lopez", "Mansour", "Novak", "Okafor", "Price",
]

AUTHORS = [
    "Naguib Mahfouz", "Ursula K. Le Guin", "Toni Morrison", "Italo Calvino", "Chinua Achebe",
    "Radwa Ashour", "Haruki Murakami", "Jorge Luis Borges", "Octavia E. Butler", "Ghassan Kanafani",
    "Virginia Woolf", "Gabriel Garcia Marquez", "Tayeb Salih", "Kazuo Ishiguro", "Mary Shelley",
]

PUBLISHERS = [
    "Dar al-Shorouk", "Penguin Classics", "Vintage", "Faber & Faber", "Granta Books",
    "Saqi Books", "Tor Books", "Hachette Antoine",
]

# Subject tree: parent -> children
SUBJECTS = {
    "Fiction": ["Science Fiction", "Historical Fiction", "Mystery", "Romance"],
    "Non-fiction": ["History", "Biography", "Science"],
    "Science": ["Physics", "Biology"],
    "Poetry": [],
}

BOOKS = [
    ("Palace Walk", "en"),
    ("The Left Hand of Darkness", "en"),
    ("Beloved", "en"),
    ("Invisible Cities", "en"),
    ("Things Fall Apart", "en"),
    ("Granada", "ar"),
    ("Kafka on the Shore", "en"),
    ("Ficciones", "other"),
    ("Kindred", "en"),
    ("Men in the Sun", "ar"),
    ("Mrs Dalloway", "en"),
    ("One Hundred Years of Solitude", "other"),
    ("Season of Migration to the North", "ar"),
    ("The Remains of the Day", "en"),
    ("Frankenstein", "en"),
    ("The Dispossessed", "en"),
    ("Sugar Street", "ar"),
    ("The Garden of Forking Paths", "other"),
    ("Parable of the Sower", "en"),
    ("Never Let Me Go", "en"),
]

BINDINGS = ["Hardcover", "Paperback", "Ebook"]

LIBRARY_NAMES = [
    "Corner Shelf", "Riverside Reading Room", "Old Town Library", "Garden Book Exchange", "Harbour Books",
]

CITIES = ["Cairo", "Amman", "Lisbon", "Leeds", "Beirut", "Austin"]

SHELF_LOCATIONS = ["A1", "A2", "B1", "B2", "C1", "C2", "D1", "D2"]

CONDITIONS = ["New", "Good", "Worn", "Damaged"]

LOCKOUT_REASONS = [
    "Too many failed login attempts",
    "Suspicious activity",
    "Admin lockout",
    "Security breach",
]

OAUTH_PROVIDERS = ["google", "github", "facebook", "twitter"]

AUDIT_ACTIONS = [
    "login", "logout", "password_change", "profile_update", "role_assignment", "data_access", "failed_login",
]

USER_AGENTS = [
    "Mozilla/5.0 (X11; Linux x86_64) Firefox/128.0",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_5 like Mac OS X) Mobile/15E148",
    "bookshelf-mobile/1.4 (Android 14)",
]
