"""Identity verification interfaces."""
