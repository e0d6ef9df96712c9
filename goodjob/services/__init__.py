"""Services module - MongoDB models and the business logic built on them."""
