"""Request-scoped helpers shared by the application and its handlers."""
