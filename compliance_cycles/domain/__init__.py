"""Pure cycle calculation engine: enumeration, due dates and status."""
