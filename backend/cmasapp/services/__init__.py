"""Services Layer — business rules between the API and the store."""
