"""Domain enums and static catalogs shared by entities, services and API schemas."""
