"""Product price comparison: cached catalog client, price analytics and sample seeding."""
