"""In-app notifications for ticket activity and announcements."""
