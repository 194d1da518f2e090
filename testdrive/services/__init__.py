"""Business rules for accounts, listings, test-drive requests and testimonials."""
