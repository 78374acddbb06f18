"""Dashboard statistics, analytics and performance metrics."""
