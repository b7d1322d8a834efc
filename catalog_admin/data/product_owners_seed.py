PRODUCT_OWNERS: list[dict] = [
    {"name": "Alice Johnson", "email": "alice.johnson@example.com", "phone": "+1-555-0101"},
    {"name": "Bob Smith", "email": "bob.smith@example.com", "phone": "+1-555-0102"},
    {"name": "Carol Williams", "email": "carol.williams@example.com", "phone": "+1-555-0103"},
    {"name": "David Brown", "email": "david.brown@example.com", "phone": "+1-555-0104"},
    {"name": "Eva Martinez", "email": "eva.martinez@example.com", "phone": "+1-555-0105"},
]
