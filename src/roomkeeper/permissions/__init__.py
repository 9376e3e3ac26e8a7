"""Owner and moderator role membership."""
